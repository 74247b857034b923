"""
Form checks run before anything is sent to the service.

Each validator returns cleaned values (whitespace trimmed) or raises
ValidationError with a message that can be shown to the user as-is.
"""
from typing import Tuple

from .errors import ValidationError
from .schema import Registration

MIN_PASSWORD_LENGTH = 6


def validate_login(email: str, password: str) -> Tuple[str, str]:
    email = (email or "").strip()
    if not email:
        raise ValidationError("Please enter your email")
    if not password:
        raise ValidationError("Please enter your password")
    return email, password


def validate_registration(
    email: str,
    password: str,
    confirm_password: str,
    company_name: str,
) -> Registration:
    """
    Check the sign-up form.

    Rules, in order:
        - email present and contains "@"
        - password present and at least MIN_PASSWORD_LENGTH characters
        - password and confirmation match
        - company name present
    """
    email = (email or "").strip()
    company_name = (company_name or "").strip()
    password = password or ""

    if not email:
        raise ValidationError("Please enter your email")
    if "@" not in email:
        raise ValidationError("Please enter a valid email address")
    if not password.strip():
        raise ValidationError("Please enter a password")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(
            f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
        )
    if password != (confirm_password or ""):
        raise ValidationError("Passwords do not match")
    if not company_name:
        raise ValidationError("Please enter your company name")

    return Registration(email=email, password=password, company_name=company_name)


def validate_task_fields(
    title: str,
    description: str,
    require_description: bool = True,
) -> Tuple[str, str]:
    """Title is always required; the edit form also requires a description."""
    title = (title or "").strip()
    description = (description or "").strip()
    if not title:
        raise ValidationError("Please enter a task title")
    if require_description and not description:
        raise ValidationError("Please enter a task description")
    return title, description
