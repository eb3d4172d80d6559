"""Tests for credential fixtures."""

import re

from uiflow.core.fixtures import TOKEN_LENGTH, generate_credentials, random_token


def test_random_token_is_base36() -> None:
    """Test tokens are eight lowercase base-36 characters."""
    token = random_token()
    assert len(token) == TOKEN_LENGTH
    assert re.fullmatch(r"[a-z0-9]+", token)


def test_tokens_do_not_repeat() -> None:
    """Test tokens are unique across many draws."""
    assert len({random_token() for _ in range(200)}) == 200


def test_generate_credentials() -> None:
    """Test generated credentials follow the prefix and email domain."""
    credentials = generate_credentials("smoke", "s3cret-pass", "example.org")

    assert re.fullmatch(rf"smoke_[a-z0-9]{{{TOKEN_LENGTH}}}", credentials.username)
    assert credentials.password == "s3cret-pass"
    assert credentials.email == f"{credentials.username}@example.org"


def test_repr_hides_password() -> None:
    """Test the credentials repr never shows the password."""
    credentials = generate_credentials(password="hunter2hunter2")
    assert "hunter2hunter2" not in repr(credentials)
    assert credentials.username in repr(credentials)
