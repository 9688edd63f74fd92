"""Sign-up checks the client applies before talking to the server.

Stricter than the server's rules: the server only enforces minimum lengths.
"""

import re

from recipebox.core.modules.user.validators import validate_signup
from recipebox.errors import ValidationError

MIN_STRENGTH = 3
STRENGTH_LABELS = ("Too weak", "Weak", "Fair", "Good", "Strong")


def password_strength(password: str) -> int:
    """Score 0-4: one point each for length >= 8, an uppercase letter, a digit, a symbol."""
    score = 0
    if len(password) >= 8:
        score += 1
    if re.search(r"[A-Z]", password):
        score += 1
    if re.search(r"[0-9]", password):
        score += 1
    if re.search(r"[^A-Za-z0-9]", password):
        score += 1
    return score


def validate_signup_form(username: str, password: str, confirm_password: str) -> None:
    """Raise ValidationError unless the form would be accepted by the sign-up screen."""
    validate_signup(username, password)
    if password != confirm_password:
        raise ValidationError("Passwords do not match")
    if password_strength(password) < MIN_STRENGTH:
        raise ValidationError("Please choose a stronger password: min 8 chars, include uppercase, number and symbol.")
