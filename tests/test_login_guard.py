import asyncio

import pytest

from acrossmedia.errors import (
    ACCOUNT_LOCKED,
    CAPTCHA_INVALID,
    CAPTCHA_REQUIRED,
    RATE_LIMIT_EXCEEDED,
    ApiError,
)
from acrossmedia.services.login_guard import LoginGuard, client_key, progressive_delay_ms


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def guard(store, settings):
    return LoginGuard(store, settings)


def test_client_key_is_stable_and_bounded():
    assert client_key("1.2.3.4", "ua") == client_key("1.2.3.4", "ua")
    assert client_key("1.2.3.4", "ua") != client_key("1.2.3.4", "other")
    assert len(client_key("1.2.3.4", "x" * 1000)) == 32


@pytest.mark.parametrize(
    "count, expected",
    [(1, 0), (10, 0), (11, 500), (12, 1000), (30, 10000), (50, 20000), (500, 20000)],
)
def test_progressive_delay(count, expected):
    assert progressive_delay_ms(count, delay_after=10, delay_ms=500, max_delay_ms=20000) == expected


def test_rate_limit_allows_five_then_rejects(guard):
    for i in range(5):
        state = run(guard.hit_rate_limit("client"))
        assert state.remaining == 4 - i
    with pytest.raises(ApiError) as exc:
        run(guard.hit_rate_limit("client"))
    assert exc.value.status_code == 429
    assert exc.value.error_type == RATE_LIMIT_EXCEEDED
    assert exc.value.headers["Retry-After"] == "900"


def test_rate_limit_window_expires(guard, clock):
    for _ in range(5):
        run(guard.hit_rate_limit("client"))
    clock.advance(15 * 60)
    assert run(guard.hit_rate_limit("client")).count == 1


def test_released_hits_do_not_count(guard):
    for _ in range(10):
        run(guard.hit_rate_limit("client"))
        run(guard.release_rate_limit("client"))
    assert run(guard.hit_rate_limit("client")).count == 1


def test_rate_limit_headers(guard, clock):
    state = run(guard.hit_rate_limit("client"))
    clock.advance(100)
    assert state.headers(clock.t) == {
        "RateLimit-Limit": "5",
        "RateLimit-Remaining": "4",
        "RateLimit-Reset": "800",
    }


def test_slow_down_starts_after_ten_requests(guard):
    delays = [run(guard.slow_down_ms("client")) for _ in range(12)]
    assert delays[:10] == [0] * 10
    assert delays[10:] == [500, 1000]


def test_fifth_failure_locks_account(guard):
    for attempt in range(1, 5):
        assert run(guard.register_failure("Editor")) == attempt
        run(guard.check_lockout("editor"))
    run(guard.register_failure("editor"))
    with pytest.raises(ApiError) as exc:
        run(guard.check_lockout("EDITOR"))
    assert exc.value.status_code == 423
    assert exc.value.error_type == ACCOUNT_LOCKED
    assert "30 minutes" in exc.value.detail


def test_lockout_minutes_round_up_and_expire(guard, clock):
    for _ in range(5):
        run(guard.register_failure("editor"))
    clock.advance(29 * 60 + 30)
    with pytest.raises(ApiError) as exc:
        run(guard.check_lockout("editor"))
    assert "1 minutes" in exc.value.detail
    clock.advance(30)
    run(guard.check_lockout("editor"))
    assert run(guard.register_failure("editor")) == 1


def test_clear_failures_resets_counter(guard):
    for _ in range(4):
        run(guard.register_failure("editor"))
    run(guard.clear_failures("editor"))
    assert run(guard.register_failure("editor")) == 1


def test_fourth_rapid_attempt_is_suspicious(guard, clock):
    results = []
    for _ in range(4):
        results.append(run(guard.record_attempt("client")))
        clock.advance(5)
    assert results == [False, False, False, True]


def test_spaced_attempts_are_not_suspicious(guard, clock):
    for _ in range(6):
        assert run(guard.record_attempt("client")) is False
        clock.advance(11)


def test_captcha_is_single_use(guard):
    challenge = run(guard.issue_captcha())
    assert run(guard.verify_captcha(challenge.id, challenge.answer)) is True
    assert run(guard.verify_captcha(challenge.id, challenge.answer)) is False


def test_wrong_answer_consumes_challenge(guard):
    challenge = run(guard.issue_captcha())
    wrong = str(int(challenge.answer) + 1)
    assert run(guard.verify_captcha(challenge.id, wrong)) is False
    assert run(guard.verify_captcha(challenge.id, challenge.answer)) is False


def test_captcha_expires_after_five_minutes(guard, clock):
    challenge = run(guard.issue_captcha())
    clock.advance(300)
    assert run(guard.verify_captcha(challenge.id, challenge.answer)) is False


def test_require_captcha_errors(guard):
    with pytest.raises(ApiError) as exc:
        run(guard.require_captcha(None, None))
    assert exc.value.error_type == CAPTCHA_REQUIRED
    with pytest.raises(ApiError) as exc:
        run(guard.require_captcha("unknown", "3"))
    assert exc.value.error_type == CAPTCHA_INVALID
    assert exc.value.status_code == 400
