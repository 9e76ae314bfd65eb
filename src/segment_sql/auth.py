"""API key credential store and bearer token checks."""

from __future__ import annotations

import hmac
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass

from segment_sql.config import Settings
from segment_sql.errors import AuthenticationError

logger = logging.getLogger(__name__)

BEARER_PREFIX = "Bearer "


@dataclass(frozen=True)
class Credential:
    """An accepted API key, identified without exposing the secret."""

    key_id: str


def _key_id(token: str) -> str:
    return f"key-...{token[-4:]}" if len(token) > 8 else "key-***"


class CredentialStore(ABC):
    @abstractmethod
    def lookup(self, token: str) -> Credential | None:
        """Return the credential for a token, or None if it is unknown."""


class InMemoryCredentialStore(CredentialStore):
    """Immutable set of API keys supplied at construction time."""

    def __init__(self, keys: Iterable[str]) -> None:
        self._keys = frozenset(key for key in keys if key)

    def __len__(self) -> int:
        return len(self._keys)

    def lookup(self, token: str) -> Credential | None:
        for key in self._keys:
            if hmac.compare_digest(key.encode(), token.encode()):
                return Credential(key_id=_key_id(key))
        return None


def credential_store_from_settings(settings: Settings) -> InMemoryCredentialStore:
    return InMemoryCredentialStore(settings.api_keys)


def authenticate(authorization: str | None, store: CredentialStore) -> Credential:
    """Check an Authorization header value against the store."""
    if not authorization:
        raise AuthenticationError("Missing Authorization header.")
    if not authorization.startswith(BEARER_PREFIX):
        raise AuthenticationError("Authorization header must use the Bearer scheme.")

    token = authorization[len(BEARER_PREFIX):].strip()
    credential = store.lookup(token) if token else None
    if credential is None:
        logger.warning("Rejected request with unknown API key")
        raise AuthenticationError("Invalid API key.")
    return credential
