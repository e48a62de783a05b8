"""Tests for technical key generation."""

from prompt_ledger.ledger.technical_key import generate_technical_key


def test_key_uses_email_username() -> None:
    assert generate_technical_key("abc123", 4, "maija.meikalainen@retta.fi") == "maija.meikalainen_v4"


def test_key_falls_back_to_author_id_prefix() -> None:
    assert generate_technical_key("0123456789abcdef", 2) == "user_01234567_v2"


def test_key_ignores_malformed_email() -> None:
    assert generate_technical_key("SYSTEM", 1, "not-an-email") == "user_SYSTEM_v1"
    assert generate_technical_key("SYSTEM", 1, "@retta.fi") == "user_SYSTEM_v1"
