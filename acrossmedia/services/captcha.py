"""Arithmetic CAPTCHA challenges for suspicious login attempts. Single use, 5 minute lifetime."""
import secrets
from dataclasses import dataclass

OPERATIONS = ("+", "-", "*")


@dataclass
class CaptchaChallenge:
    id: str
    question: str
    answer: str
    expires_at: float  # epoch seconds


def _randint(low: int, high: int) -> int:
    """Uniform integer in [low, high) from the OS CSPRNG."""
    return low + secrets.randbelow(high - low)


def generate_captcha_challenge(now: float, ttl_seconds: int) -> CaptchaChallenge:
    operation = OPERATIONS[secrets.randbelow(len(OPERATIONS))]
    if operation == "+":
        a, b = _randint(1, 50), _randint(1, 50)
        answer = a + b
    elif operation == "-":
        a = _randint(10, 100)
        b = _randint(1, a)
        answer = a - b
    else:
        a, b = _randint(2, 12), _randint(2, 12)
        answer = a * b
    return CaptchaChallenge(
        id=secrets.token_hex(16),
        question=f"{a} {operation} {b} = ?",
        answer=str(answer),
        expires_at=now + ttl_seconds,
    )


def answers_match(expected: str, given: str | None) -> bool:
    if given is None:
        return False
    return secrets.compare_digest(expected.strip().encode(), str(given).strip().encode())
