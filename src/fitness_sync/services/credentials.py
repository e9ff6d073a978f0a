"""Caller identity and bearer credential supply."""

from dataclasses import dataclass
from typing import Protocol


class CredentialProvider(Protocol):
    """Supplies the account key and bearer credential for remote calls."""

    def owner_key(self) -> str:
        """Return the account identifier that owns the collections."""

    def credential(self) -> str:
        """Return the bearer credential for the remote source."""


@dataclass
class StaticCredentialProvider(CredentialProvider):
    """Credential provider with fixed values, updated on sign-in.

    An empty account is the signed-out state; collections then use their
    unscoped storage key.
    """

    account: str = ""
    token: str = ""

    def owner_key(self) -> str:
        """Return the account identifier."""
        return self.account

    def credential(self) -> str:
        """Return the bearer token."""
        return self.token

    def sign_in(self, account: str, token: str) -> None:
        """Switch to another account."""
        self.account = account
        self.token = token
