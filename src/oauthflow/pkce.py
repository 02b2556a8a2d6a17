"""State and PKCE (:rfc:`7636`) parameter generation.

Every value is drawn from :mod:`secrets` and encoded as base64url without
padding. Only the ``S256`` challenge method is supported.
"""

from __future__ import annotations

import base64
import hashlib
import secrets

from oauthflow.models import SessionSecrets

_RANDOM_BYTES = 32


def _b64url(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def generate_state() -> str:
    """Return an unguessable, URL-safe ``state`` value (256 bits of entropy)."""
    return _b64url(secrets.token_bytes(_RANDOM_BYTES))


def generate_code_verifier() -> str:
    """Return a PKCE ``code_verifier`` (43 characters from the unreserved set)."""
    return _b64url(secrets.token_bytes(_RANDOM_BYTES))


def derive_code_challenge(verifier: str) -> str:
    """Derive the ``S256`` code challenge for *verifier*.

    Args:
        verifier: A code verifier made of ASCII characters.

    Returns:
        ``BASE64URL(SHA256(ASCII(verifier)))`` without padding.

    Raises:
        ValueError: If *verifier* contains non-ASCII characters.
    """
    try:
        raw = verifier.encode("ascii")
    except UnicodeEncodeError as exc:
        raise ValueError("code_verifier must contain only ASCII characters") from exc
    return _b64url(hashlib.sha256(raw).digest())


def create_session_secrets(pkce_enabled: bool) -> SessionSecrets:
    """Generate the secrets for one authorization attempt.

    Args:
        pkce_enabled: Whether to include a verifier/challenge pair.

    Returns:
        A fresh :class:`~oauthflow.models.SessionSecrets`.
    """
    if not pkce_enabled:
        return SessionSecrets(state=generate_state())
    verifier = generate_code_verifier()
    return SessionSecrets(
        state=generate_state(),
        code_verifier=verifier,
        code_challenge=derive_code_challenge(verifier),
    )
