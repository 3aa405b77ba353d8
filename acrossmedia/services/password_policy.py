"""
Password strength policy for new admin accounts and the login input format check.
"""
import re
from dataclasses import dataclass, field

MIN_LENGTH = 8
MAX_LENGTH = 128

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")
USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 50

# Login only checks the shape of the password, any special character counts
LOGIN_PASSWORD_PATTERN = re.compile(r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d)(?=.*[\W_]).+$")

COMMON_PASSWORDS = {
    "password", "123456", "123456789", "qwerty", "abc123",
    "password123", "admin", "letmein", "welcome", "monkey",
}
SIMPLE_SEQUENCES = ("123", "abc", "qwe", "asd", "zxc")
REPEATING_CHAR = re.compile(r"(.)\1{2,}")

SUGGESTIONS = {
    "length": f"Use between {MIN_LENGTH} and {MAX_LENGTH} characters",
    "uppercase": "Add uppercase letters",
    "lowercase": "Add lowercase letters",
    "number": "Add numbers",
    "special": "Add special characters (@$!%*?&)",
    "no_common": "Avoid common passwords",
    "no_repeating": "Avoid repeating patterns",
}


@dataclass
class PasswordStrength:
    is_valid: bool
    strength: float
    checks: dict[str, bool]
    suggestions: list[str] = field(default_factory=list)


def is_common_password(password: str) -> bool:
    return password.lower() in COMMON_PASSWORDS


def has_repeating_patterns(password: str) -> bool:
    """3+ identical characters in a row, or a keyboard/alphabet run forwards or backwards."""
    if REPEATING_CHAR.search(password):
        return True
    lower = password.lower()
    return any(seq in lower or seq[::-1] in lower for seq in SIMPLE_SEQUENCES)


def validate_password_strength(password: str) -> PasswordStrength:
    checks = {
        "length": MIN_LENGTH <= len(password) <= MAX_LENGTH,
        "uppercase": bool(re.search(r"[A-Z]", password)),
        "lowercase": bool(re.search(r"[a-z]", password)),
        "number": bool(re.search(r"\d", password)),
        "special": bool(re.search(r"[@$!%*?&]", password)),
        "no_common": not is_common_password(password),
        "no_repeating": not has_repeating_patterns(password),
    }
    passed = sum(1 for ok in checks.values() if ok)
    return PasswordStrength(
        is_valid=all(checks.values()),
        strength=passed / len(checks),
        checks=checks,
        suggestions=[SUGGESTIONS[name] for name, ok in checks.items() if not ok],
    )


def validate_username(username: str) -> str:
    """Return the trimmed username or raise ValueError."""
    value = username.strip()
    if not USERNAME_MIN_LENGTH <= len(value) <= USERNAME_MAX_LENGTH:
        raise ValueError(
            f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
        )
    if not USERNAME_PATTERN.match(value):
        raise ValueError("Username can only contain letters, numbers, underscores, and hyphens")
    return value


def validate_login_password(password: str) -> str:
    if not MIN_LENGTH <= len(password) <= MAX_LENGTH:
        raise ValueError(f"Password must be between {MIN_LENGTH} and {MAX_LENGTH} characters")
    if not LOGIN_PASSWORD_PATTERN.match(password):
        raise ValueError(
            "Password must contain at least one uppercase letter, one lowercase letter, "
            "one number, and one special character."
        )
    return password
