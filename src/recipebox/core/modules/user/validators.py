from recipebox.errors import ValidationError

MIN_USERNAME_LENGTH = 3
MIN_PASSWORD_LENGTH = 6
MAX_PASSWORD_BYTES = 72  # bcrypt ignores (or rejects) anything longer


def validate_credentials_present(username: str | None, password: str | None) -> tuple[str, str]:
    """Return (username, password) or raise ValidationError if either is missing."""
    if not username or not password:
        raise ValidationError("Username and password are required")
    return username, password


def validate_signup(username: str | None, password: str | None) -> tuple[str, str]:
    """Validate sign-up credentials.

    Requirements:
    - Username of at least 3 characters
    - Password of at least 6 characters and at most 72 bytes in UTF-8

    Raises:
        ValidationError: If credentials don't meet requirements
    """
    username, password = validate_credentials_present(username, password)

    if len(username) < MIN_USERNAME_LENGTH:
        raise ValidationError(f"Username must be at least {MIN_USERNAME_LENGTH} characters long")

    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long")

    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes long")

    return username, password
