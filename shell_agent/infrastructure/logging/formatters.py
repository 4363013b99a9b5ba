# File: shell_agent/infrastructure/logging/formatters.py
# Purpose: Redaction helpers shared by the log pipeline and the invocation logger
from typing import Any, Dict


class SensitiveDataFilter:
    """
    Filter to redact sensitive information from logs.
    Prevents accidental logging of passwords, API keys, tokens, etc.
    """

    SENSITIVE_KEYS = {
        "password",
        "passwd",
        "pwd",
        "secret",
        "api_key",
        "apikey",
        "token",
        "access_token",
        "refresh_token",
        "authorization",
        "credit_card",
        "private_key",
    }

    REDACTED = "***REDACTED***"

    @classmethod
    def redact(cls, data: Any) -> Any:
        """
        Recursively redact sensitive data from dictionaries and lists.

        Args:
            data: Data to redact (dict, list, or primitive)

        Returns:
            Data with sensitive fields redacted
        """
        if isinstance(data, dict):
            return {
                key: cls.REDACTED if cls._is_sensitive_key(key) else cls.redact(value)
                for key, value in data.items()
            }
        elif isinstance(data, (list, tuple)):
            return [cls.redact(item) for item in data]
        else:
            return data

    @classmethod
    def _is_sensitive_key(cls, key: Any) -> bool:
        """Check if a key name indicates sensitive data"""
        if not isinstance(key, str):
            return False
        key_lower = key.lower()
        return any(sensitive in key_lower for sensitive in cls.SENSITIVE_KEYS)


def redact_event(logger: Any, method_name: str, event_dict: Dict[str, Any]) -> Dict[str, Any]:
    """structlog processor applying SensitiveDataFilter to every event."""
    return SensitiveDataFilter.redact(event_dict)
