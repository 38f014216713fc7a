"""Persistence of the single credential record on top of a secret store."""

from __future__ import annotations

import json
import logging
from typing import Optional

from .contracts import SecretStoreLike
from .models import Credential

TOKEN_KEY = "google_token"


class TokenStore:
    """Reads, fully replaces, and clears one credential record."""

    def __init__(
        self,
        secret_store: SecretStoreLike,
        *,
        key: str = TOKEN_KEY,
        logger: Optional[logging.Logger] = None,
    ):
        self._secret_store = secret_store
        self._key = key
        self._logger = logger or logging.getLogger("auth.token_store")

    def load(self) -> Optional[Credential]:
        raw = self._secret_store.get(self._key)
        if raw is None:
            return None
        try:
            payload = json.loads(raw.decode("utf-8"))
            if not isinstance(payload, dict):
                raise ValueError("credential record must be a JSON object")
            return Credential.from_payload(payload)
        except (UnicodeDecodeError, ValueError) as error:
            self._logger.warning("Ignoring unreadable credential record: %s", error)
            return None

    def save(self, credential: Credential) -> None:
        data = json.dumps(credential.to_payload(), separators=(",", ":"))
        self._secret_store.put(self._key, data.encode("utf-8"))

    def clear(self) -> None:
        self._secret_store.delete(self._key)
