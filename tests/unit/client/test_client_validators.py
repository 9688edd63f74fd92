import pytest

from recipebox.client.validators import MIN_STRENGTH, password_strength, validate_signup_form
from recipebox.errors import ValidationError


@pytest.mark.parametrize(
    ("password", "expected"),
    [
        ("", 0),
        ("abcdefgh", 1),
        ("Abcdefgh", 2),
        ("Abcdefg1", 3),
        ("Abcdef1!", 4),
        ("A1!", 3),
    ],
)
def test_password_strength(password, expected):
    assert password_strength(password) == expected


def test_strong_form_passes():
    validate_signup_form("alice", "Secret1!", "Secret1!")


def test_mismatched_confirmation():
    with pytest.raises(ValidationError, match="do not match"):
        validate_signup_form("alice", "Secret1!", "Secret2!")


def test_weak_password_rejected():
    assert password_strength("secret1") < MIN_STRENGTH
    with pytest.raises(ValidationError, match="stronger password"):
        validate_signup_form("alice", "secret1", "secret1")


def test_server_rules_apply_first():
    with pytest.raises(ValidationError, match="Username"):
        validate_signup_form("al", "Secret1!", "Secret1!")
