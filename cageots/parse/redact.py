"""Redaction module to mask credentials in outputs and logs."""
import re
from typing import Any, Dict

REDACTED = "[REDACTED]"

# Keys whose values never leave the process in clear
SECRET_KEYS = ("passwd", "password", "cookie", "set-cookie", "phpsessid")

_PATTERNS = [
    (r'(passwd|password)=([^&\s;]+)', r'\1=[REDACTED]'),
    (r'(["\']?(?:passwd|password)["\']?\s*[:=]\s*)["\']([^"\']*)["\']', r'\1"[REDACTED]"'),
    (r'(PrestaShop-[0-9a-f]+)=([^;,\s]+)', r'\1=[REDACTED]'),
    (r'(PHPSESSID)=([^;,\s]+)', r'\1=[REDACTED]'),
]

_EMAIL = re.compile(r'([A-Za-z0-9._%+-])[A-Za-z0-9._%+-]*@([A-Za-z0-9.-]+\.[A-Za-z]{2,})')


def mask_email(text: str) -> str:
    """Keep the first character and the domain of e-mail addresses."""
    return _EMAIL.sub(r'\1***@\2', text)


def redact_string(text: str) -> str:
    """Redact secrets from a string."""
    if not text:
        return text

    result = text
    for pattern, replacement in _PATTERNS:
        result = re.sub(pattern, replacement, result, flags=re.IGNORECASE)

    return mask_email(result)


def redact_dict(data: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively redact secrets from a dictionary."""
    if not isinstance(data, dict):
        return data

    redacted = {}
    for key, value in data.items():
        if str(key).lower() in SECRET_KEYS:
            redacted[key] = REDACTED
        else:
            redacted[key] = redact_json(value)
    return redacted


def redact_json(data: Any) -> Any:
    """Redact secrets from JSON-serializable data."""
    if isinstance(data, dict):
        return redact_dict(data)
    elif isinstance(data, list):
        return [redact_json(item) for item in data]
    elif isinstance(data, str):
        return redact_string(data)
    else:
        return data
