"""PKCE (Proof Key for Code Exchange) verifier and challenge generation."""

from __future__ import annotations

import base64
import hashlib
import secrets
from dataclasses import dataclass

VERIFIER_ENTROPY_BYTES = 32
CHALLENGE_METHOD = "S256"


@dataclass(frozen=True)
class PKCEPair:
    verifier: str
    challenge: str


def generate_pkce_pair() -> PKCEPair:
    """Generate a fresh verifier and its S256 challenge."""
    verifier = _urlsafe_b64(secrets.token_bytes(VERIFIER_ENTROPY_BYTES))
    return PKCEPair(verifier=verifier, challenge=code_challenge_for(verifier))


def code_challenge_for(verifier: str) -> str:
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return _urlsafe_b64(digest)


def _urlsafe_b64(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")
