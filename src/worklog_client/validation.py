"""Client-side form checks, run before any request is made."""

import re

from .errors import ValidationError

# Login uses the stricter pattern; signup only wants something@something.tld.
# Word runs split only at single separators;
# the lookahead requires the domain to end in a 2-3 character ".tld" run.
LOGIN_EMAIL_RE = re.compile(r"^\w+(?:[.-]\w+)*@(?=[\w.-]*\.\w{2,3}$)\w+(?:[.-]\w+)*$")
SIGNUP_EMAIL_RE = re.compile(r"\S+@\S+\.\S+")

MIN_PASSWORD_LENGTH = 6


def _check_password(password: str, errors: dict[str, str], strip: bool = False) -> None:
    value = password.strip() if strip else password
    if not value:
        errors["password"] = "Password is required"
    elif len(password) < MIN_PASSWORD_LENGTH:
        errors["password"] = f"Password must be at least {MIN_PASSWORD_LENGTH} characters"


def validate_login(email: str, password: str) -> None:
    errors: dict[str, str] = {}

    if not email.strip():
        errors["email"] = "Email is required"
    elif not LOGIN_EMAIL_RE.match(email):
        errors["email"] = "Please enter a valid email"

    _check_password(password, errors)

    if errors:
        raise ValidationError(errors)


def validate_signup(first_name: str, last_name: str, email: str, password: str) -> None:
    errors: dict[str, str] = {}

    if not first_name.strip():
        errors["first_name"] = "First Name is required"
    if not last_name.strip():
        errors["last_name"] = "Last Name is required"
    if not email.strip():
        errors["email"] = "Email is required"
    elif not SIGNUP_EMAIL_RE.search(email):
        errors["email"] = "Enter a valid email"

    _check_password(password, errors, strip=True)

    if errors:
        raise ValidationError(errors)


def validate_title(title: str | None) -> None:
    if not (title or "").strip():
        raise ValidationError({"title": "Title is required"})
