"""
ID Generator Utility

Generates prefixed alphanumeric IDs for log entries, runs and sessions.
Uses cryptographically secure random generation.
"""

import secrets
import string
import time


def generate_id(prefix: str, length: int = 10) -> str:
    """
    Generate a prefixed alphanumeric ID.

    Args:
        prefix: The prefix for the ID (e.g., "SES_", "RUN_")
        length: Length of the random part (default 10)

    Returns:
        A string like "SES_7xK9mN2pQ4"

    Examples:
        >>> generate_id("SES_")
        'SES_7xK9mN2pQ4'
        >>> generate_id("RUN_", 12)
        'RUN_3fR8tY5wL1Km'
    """
    chars = string.ascii_letters + string.digits  # a-z, A-Z, 0-9 (62 chars)
    random_part = ''.join(secrets.choice(chars) for _ in range(length))
    return f"{prefix}{random_part}"


def generate_log_id() -> str:
    """
    Time-ordered log entry ID: "LOG_<epoch ms>_<random>".

    The random tail breaks ties between entries created in the same millisecond.
    """
    return generate_id(f"LOG_{int(time.time() * 1000)}_", 6)


# Convenience functions for each entity type
def generate_session_id() -> str:
    return generate_id("SES_")


def generate_run_id() -> str:
    return generate_id("RUN_")
