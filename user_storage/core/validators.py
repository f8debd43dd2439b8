"""Input validation helpers for user payloads."""
from __future__ import annotations

USERNAME_SPECIALS = {".", "-", "_", "@"}


def validate_username(raw: str) -> str:
    """Validate a username.

    Args:
        raw: Raw username input

    Returns:
        Trimmed username

    Raises:
        ValueError: If username is invalid
    """
    if not isinstance(raw, str):
        raise ValueError("Username must be a string")
    username = raw.strip()

    if not username:
        raise ValueError("Username is required")
    if len(username) > 255:
        raise ValueError("Username must not exceed 255 characters")
    if any(not (char.isalnum() or char in USERNAME_SPECIALS) for char in username):
        raise ValueError("Username contains invalid characters")
    return username


def validate_email(email: str) -> str:
    """Validate email address.

    Args:
        email: Email address to validate

    Returns:
        Trimmed email address

    Raises:
        ValueError: If email is invalid
    """
    if not isinstance(email, str):
        raise ValueError("Invalid email format")
    email = email.strip()
    if not email or "@" not in email:
        raise ValueError("Invalid email format")

    local, domain = email.rsplit("@", 1)
    if not local or not domain or "." not in domain:
        raise ValueError("Invalid email format")
    if len(email) > 254:
        raise ValueError("Email exceeds maximum length")

    return email


def validate_name(name: str, field: str) -> str:
    """Validate first/last name fields.

    Args:
        name: Name to validate
        field: Field name for error messages (e.g., "First name")

    Returns:
        Trimmed name

    Raises:
        ValueError: If name is invalid
    """
    if not isinstance(name, str):
        raise ValueError(f"{field} must be a string")
    name = name.strip()
    if not name:
        raise ValueError(f"{field} is required")
    if len(name) > 255:
        raise ValueError(f"{field} exceeds maximum length")

    if any(char in name for char in "<>\"'`;&|$"):
        raise ValueError(f"{field} contains invalid characters")

    return name
