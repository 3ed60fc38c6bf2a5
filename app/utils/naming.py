"""
Application name derivation for the cloud platform.

App names may only contain lowercase letters, digits and hyphens, and are
limited to 32 characters.
"""
import re

MAX_APP_NAME_LENGTH = 32
MIN_APP_NAME_LENGTH = 3

_INVALID_CHARS = re.compile(r"[^a-z0-9-]")
_REPEATED_HYPHENS = re.compile(r"-+")


def derive_application_name(raw_name: str, fallback_id) -> str:
    """
    Turn an agent name into a platform-legal app name.

    Args:
        raw_name: User-facing agent name (may be empty or None)
        fallback_id: Agent id; its first 8 characters name the app when
            the sanitized name is shorter than 3 characters

    Returns:
        App name such as ``my-agent-2024`` or ``agent-1a2b3c4d``
    """
    name = (raw_name or "").lower()
    name = _INVALID_CHARS.sub("-", name)
    name = _REPEATED_HYPHENS.sub("-", name)
    name = name.strip("-")
    name = name[:MAX_APP_NAME_LENGTH]

    if len(name) < MIN_APP_NAME_LENGTH:
        return f"agent-{str(fallback_id)[:8]}"
    return name
