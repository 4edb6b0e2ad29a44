"""
Logging Setup

Configures the root logger once at startup. A filter masks API keys and
bearer tokens so the Gemini key never reaches the console.
"""

import logging
import re
import sys
from typing import Any, Optional

LOG_FORMAT = (
    '%(asctime)s - %(name)s - %(levelname)s - '
    '[%(filename)s:%(lineno)d] - %(message)s'
)

# Field names whose values are always masked
SENSITIVE_FIELDS = {'api_key', 'apikey', 'token', 'secret', 'password', 'authorization', 'access_code'}

# Regex patterns for sensitive data in strings
SENSITIVE_PATTERNS = [
    (re.compile(r'(AIza[0-9A-Za-z\-_]{35})'), lambda m: f"***{m.group(1)[-4:]}"),  # Google API keys
    (re.compile(r'(Bearer\s+[a-zA-Z0-9\-._~+/]+=*)'), 'Bearer ***'),
]


def mask_sensitive_data(data: Any, mask_value: str = "***") -> Any:
    """
    Recursively redact sensitive values from dicts, lists and strings.

    Keys listed in SENSITIVE_FIELDS are replaced outright; strings are
    scrubbed with SENSITIVE_PATTERNS.
    """
    if isinstance(data, dict):
        masked = {}
        for key, value in data.items():
            if str(key).lower() in SENSITIVE_FIELDS:
                masked[key] = mask_value
            else:
                masked[key] = mask_sensitive_data(value, mask_value)
        return masked

    if isinstance(data, (list, tuple)):
        return type(data)(mask_sensitive_data(item, mask_value) for item in data)

    if isinstance(data, str):
        result = data
        for pattern, replacement in SENSITIVE_PATTERNS:
            result = pattern.sub(replacement, result)
        return result

    return data


class SensitiveDataFilter(logging.Filter):
    """Mask credentials in log records before any handler formats them."""

    def filter(self, record: logging.LogRecord) -> bool:
        if isinstance(record.msg, str):
            record.msg = mask_sensitive_data(record.msg)
        if record.args:
            if isinstance(record.args, dict):
                record.args = mask_sensitive_data(record.args)
            elif isinstance(record.args, tuple):
                record.args = tuple(
                    mask_sensitive_data(arg) if isinstance(arg, (dict, str)) else arg
                    for arg in record.args
                )
        return True


def setup_logging(level: str = "INFO", log_format: Optional[str] = None) -> logging.Logger:
    """
    Initialize the application-wide console logging.

    Args:
        level: Level name for the root logger (e.g. "INFO", "DEBUG")
        log_format: Optional custom formatting string

    Returns:
        The configured root logger
    """
    formatter = logging.Formatter(log_format or LOG_FORMAT, datefmt='%Y-%m-%d %H:%M:%S')

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    # Remove existing handlers to avoid duplicates on reload
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(SensitiveDataFilter())
    root_logger.addHandler(console_handler)

    return root_logger
