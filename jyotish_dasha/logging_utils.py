"""
Logging Utilities

Helpers that keep birth data out of the logs. A birth datetime together
with a Moon longitude is enough to identify a person, so request payloads
are always sanitized before they are logged.
"""

import json
from typing import Any, Dict


# Keys that should never be logged
SENSITIVE_KEYS = {
    "password", "secret", "token", "api_key", "apikey", "auth",
    "authorization", "cookie", "session",
}

# Birth data that should be redacted
PII_KEYS = {
    "datetime", "birth", "name", "email", "latitude", "longitude",
}


def sanitize_dict(data: Dict[str, Any], redact_pii: bool = True) -> Dict[str, Any]:
    """
    Sanitize a dictionary by removing/redacting sensitive fields.

    Args:
        data: Dictionary to sanitize
        redact_pii: Whether to redact birth-data fields (default: True)

    Returns:
        Sanitized dictionary safe for logging

    Example:
        >>> sanitize_dict({"datetime": "1991-03-25T09:46:00", "depth": 3})
        {"datetime": "[REDACTED]", "depth": 3}
    """
    if not isinstance(data, dict):
        return data

    sanitized = {}
    for key, value in data.items():
        key_lower = key.lower()

        if any(sensitive in key_lower for sensitive in SENSITIVE_KEYS):
            continue

        if redact_pii and any(pii in key_lower for pii in PII_KEYS):
            sanitized[key] = "[REDACTED]"
            continue

        if isinstance(value, dict):
            sanitized[key] = sanitize_dict(value, redact_pii)
        elif isinstance(value, list):
            sanitized[key] = [
                sanitize_dict(item, redact_pii) if isinstance(item, dict) else item
                for item in value
            ]
        else:
            sanitized[key] = value

    return sanitized


def safe_str(value: Any, max_length: int = 200) -> str:
    """
    Convert any value to a safe string for logging.

    Args:
        value: Value to convert
        max_length: Maximum length (default: 200)

    Returns:
        Safe string representation, truncated if needed
    """
    if isinstance(value, dict):
        result = json.dumps(sanitize_dict(value), separators=(',', ':'), default=str)
    else:
        result = str(value)

    if len(result) > max_length:
        result = result[:max_length] + "..."

    return result
