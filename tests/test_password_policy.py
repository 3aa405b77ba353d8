import pytest

from acrossmedia.services.password_policy import (
    has_repeating_patterns,
    validate_login_password,
    validate_password_strength,
    validate_username,
)


def test_strong_password_passes_every_check():
    result = validate_password_strength("Med1a!Portal")
    assert result.is_valid
    assert result.strength == 1.0
    assert result.suggestions == []


@pytest.mark.parametrize(
    "password, failed",
    [
        ("Sh0rt!", "length"),
        ("med1a!portal", "uppercase"),
        ("MED1A!PORTAL", "lowercase"),
        ("Media!Portal", "number"),
        ("Med1aPortal9", "special"),
        ("Paaass1!word", "no_repeating"),
        ("Qwe7!Rtyuiop", "no_repeating"),
    ],
)
def test_weak_password_reports_failed_check(password, failed):
    result = validate_password_strength(password)
    assert not result.is_valid
    assert result.checks[failed] is False
    assert result.suggestions


def test_common_password_is_rejected_case_insensitively():
    result = validate_password_strength("PASSWORD")
    assert result.checks["no_common"] is False


def test_sequences_are_detected_backwards():
    assert has_repeating_patterns("xx321yy")
    assert has_repeating_patterns("zcbaq")
    assert not has_repeating_patterns("Med1a!Portal")


def test_username_rules():
    assert validate_username("  news_desk-2 ") == "news_desk-2"
    with pytest.raises(ValueError):
        validate_username("ab")
    with pytest.raises(ValueError):
        validate_username("x" * 51)
    with pytest.raises(ValueError):
        validate_username("bad name")


def test_login_password_shape():
    assert validate_login_password("Aa1#aaaa") == "Aa1#aaaa"
    with pytest.raises(ValueError):
        validate_login_password("Aa1#")
    with pytest.raises(ValueError):
        validate_login_password("alllowercase1!")
