"""
Login defenses, applied in this order by the login route:

1. fixed-window rate limit per IP + user agent (successful logins are not counted)
2. progressive delay per IP + user agent
3. account lockout per username after repeated failures
4. anomaly detection: rapid attempts from one client require a CAPTCHA
"""
import hashlib
import math
from dataclasses import dataclass
from fastapi import Request, status

from acrossmedia.config import Settings, get_settings
from acrossmedia.errors import (
    ACCOUNT_LOCKED,
    CAPTCHA_INVALID,
    CAPTCHA_REQUIRED,
    RATE_LIMIT_EXCEEDED,
    ApiError,
)
from acrossmedia.services.captcha import CaptchaChallenge, answers_match, generate_captcha_challenge
from acrossmedia.services.security_events import client_ip, client_user_agent, log_security_event


@dataclass
class RateLimitState:
    limit: int
    count: int
    reset_at: float  # epoch seconds

    @property
    def remaining(self) -> int:
        return max(self.limit - self.count, 0)

    @property
    def exceeded(self) -> bool:
        return self.count > self.limit

    def headers(self, now: float) -> dict[str, str]:
        return {
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(max(math.ceil(self.reset_at - now), 0)),
        }


def client_key(ip: str, user_agent: str) -> str:
    """Stable, bounded-length key for an IP + user agent pair."""
    return hashlib.sha256(f"{ip}:{user_agent}".encode()).hexdigest()[:32]


def progressive_delay_ms(count: int, delay_after: int, delay_ms: int, max_delay_ms: int) -> int:
    """No delay for the first `delay_after` requests, then +delay_ms per request, capped."""
    if count <= delay_after:
        return 0
    return min((count - delay_after) * delay_ms, max_delay_ms)


class LoginGuard:
    def __init__(self, store, settings: Settings | None = None):
        self.store = store
        self.settings = settings or get_settings()

    def now(self) -> float:
        return self.store.now()

    # ---------- Rate limit & slow down ----------

    async def hit_rate_limit(self, key: str, request: Request | None = None) -> RateLimitState:
        s = self.settings
        count, reset_at = await self.store.incr(f"login:rate:{key}", s.login_rate_limit_window_seconds)
        state = RateLimitState(limit=s.login_rate_limit_max, count=count, reset_at=reset_at)
        if state.exceeded:
            window_minutes = s.login_rate_limit_window_seconds // 60
            log_security_event("RATE_LIMIT_EXCEEDED", {"count": count}, request)
            headers = state.headers(self.now())
            headers["Retry-After"] = headers["RateLimit-Reset"]
            raise ApiError(
                status.HTTP_429_TOO_MANY_REQUESTS,
                f"Too many login attempts from this IP, please try again after {window_minutes} minutes.",
                RATE_LIMIT_EXCEEDED,
                headers=headers,
            )
        return state

    async def release_rate_limit(self, key: str) -> None:
        """Successful logins do not count against the window."""
        await self.store.decr(f"login:rate:{key}")

    async def slow_down_ms(self, key: str) -> int:
        s = self.settings
        count, _ = await self.store.incr(f"login:slow:{key}", s.login_rate_limit_window_seconds)
        return progressive_delay_ms(count, s.slowdown_delay_after, s.slowdown_delay_ms, s.slowdown_max_delay_ms)

    # ---------- Account lockout ----------

    @staticmethod
    def _lockout_key(username: str) -> str:
        return f"login:lockout:{username.lower()}"

    async def check_lockout(self, username: str) -> None:
        """Raise 423 while the account is locked; forget an expired lockout."""
        key = self._lockout_key(username)
        data = await self.store.get_json(key)
        if not data or not data.get("locked_until"):
            return
        now = self.now()
        if now < data["locked_until"]:
            minutes = math.ceil((data["locked_until"] - now) / 60)
            raise ApiError(
                status.HTTP_423_LOCKED,
                "Account temporarily locked due to multiple failed login attempts. "
                f"Try again in {minutes} minutes.",
                ACCOUNT_LOCKED,
            )
        await self.store.delete(key)

    async def register_failure(self, username: str, request: Request | None = None) -> int:
        """Count a failed login. Returns the attempt count; the limit-th failure locks the account."""
        s = self.settings
        key = self._lockout_key(username)
        now = self.now()
        data = await self.store.get_json(key) or {"attempts": 0, "first_attempt": now}
        data["attempts"] += 1
        data["last_attempt"] = now
        if data["attempts"] >= s.lockout_max_failed_attempts:
            data["locked_until"] = now + s.lockout_duration_seconds
            log_security_event(
                "ACCOUNT_LOCKED",
                {"username": username, "attempts": data["attempts"]},
                request,
            )
        await self.store.set_json(key, data, s.lockout_duration_seconds)
        return data["attempts"]

    async def clear_failures(self, username: str) -> None:
        await self.store.delete(self._lockout_key(username))

    # ---------- Anomaly detection & CAPTCHA ----------

    async def record_attempt(self, key: str, request: Request | None = None) -> bool:
        """Record a login attempt; True when there were more than N attempts inside the window."""
        s = self.settings
        now = self.now()
        history = await self.store.push_timestamp(
            f"login:pattern:{key}", now, s.anomaly_history_size, s.anomaly_retention_seconds
        )
        recent = [t for t in history if now - t < s.anomaly_window_seconds]
        suspicious = len(recent) > s.anomaly_max_attempts
        if suspicious:
            log_security_event("SUSPICIOUS_LOGIN_PATTERN", {"recent_attempts": len(recent)}, request)
        return suspicious

    async def issue_captcha(self) -> CaptchaChallenge:
        ttl = self.settings.captcha_ttl_seconds
        challenge = generate_captcha_challenge(self.now(), ttl)
        await self.store.set_json(
            f"captcha:{challenge.id}",
            {"answer": challenge.answer, "expires_at": challenge.expires_at},
            ttl,
        )
        return challenge

    async def verify_captcha(self, captcha_id: str, answer: str | None) -> bool:
        """One attempt per challenge: the challenge is consumed whether or not the answer is right."""
        data = await self.store.pop_json(f"captcha:{captcha_id}")
        if not data or self.now() >= data["expires_at"]:
            return False
        return answers_match(data["answer"], answer)

    async def require_captcha(
        self,
        captcha_id: str | None,
        answer: str | None,
        request: Request | None = None,
    ) -> None:
        if not captcha_id or answer is None:
            raise ApiError(
                status.HTTP_400_BAD_REQUEST,
                "Please complete the security challenge.",
                CAPTCHA_REQUIRED,
            )
        if not await self.verify_captcha(captcha_id, answer):
            log_security_event("CAPTCHA_FAILED", {"captcha_id": captcha_id}, request)
            raise ApiError(
                status.HTTP_400_BAD_REQUEST,
                "Security challenge answer is incorrect or expired. Please try a new one.",
                CAPTCHA_INVALID,
            )


def request_client_key(request: Request) -> str:
    return client_key(client_ip(request), client_user_agent(request))
