"""Credential fixtures shared by the cases of a serial chain."""

from __future__ import annotations

import secrets
import string
from dataclasses import dataclass

TOKEN_ALPHABET = string.ascii_lowercase + string.digits
TOKEN_LENGTH = 8


def random_token(length: int = TOKEN_LENGTH) -> str:
    """Base-36 token, unlikely to collide across runs."""
    return "".join(secrets.choice(TOKEN_ALPHABET) for _ in range(length))


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str
    email: str

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, email={self.email!r})"


def generate_credentials(
    prefix: str = "e2e",
    password: str = "testpassword123",
    email_domain: str = "test.local",
) -> Credentials:
    username = f"{prefix}_{random_token()}"
    return Credentials(username=username, password=password, email=f"{username}@{email_domain}")
