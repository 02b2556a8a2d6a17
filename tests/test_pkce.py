"""Tests for oauthflow.pkce -- state and PKCE parameter generation."""

from __future__ import annotations

import re

import pytest

from oauthflow.pkce import (
    create_session_secrets,
    derive_code_challenge,
    generate_code_verifier,
    generate_state,
)

_UNRESERVED = re.compile(r"^[A-Za-z0-9_-]+$")


class TestGeneration:
    def test_state_is_url_safe_without_padding(self) -> None:
        state = generate_state()
        assert len(state) == 43
        assert _UNRESERVED.match(state)

    def test_verifier_length_within_rfc_bounds(self) -> None:
        verifier = generate_code_verifier()
        assert 43 <= len(verifier) <= 128
        assert _UNRESERVED.match(verifier)

    def test_values_are_unique(self) -> None:
        assert len({generate_state() for _ in range(50)}) == 50


class TestCodeChallenge:
    def test_rfc7636_appendix_b_vector(self) -> None:
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        assert derive_code_challenge(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"

    def test_non_ascii_verifier_rejected(self) -> None:
        with pytest.raises(ValueError, match="ASCII"):
            derive_code_challenge("vérifier")


class TestSessionSecrets:
    def test_without_pkce(self) -> None:
        secrets = create_session_secrets(pkce_enabled=False)
        assert secrets.state
        assert secrets.code_verifier is None
        assert secrets.code_challenge is None
        assert not secrets.pkce_enabled

    def test_with_pkce_challenge_matches_verifier(self) -> None:
        secrets = create_session_secrets(pkce_enabled=True)
        assert secrets.pkce_enabled
        assert secrets.code_challenge == derive_code_challenge(secrets.code_verifier or "")

    def test_each_attempt_is_fresh(self) -> None:
        first = create_session_secrets(True)
        second = create_session_secrets(True)
        assert first.state != second.state
        assert first.code_verifier != second.code_verifier

    def test_repr_hides_state_and_verifier(self) -> None:
        secrets = create_session_secrets(True)
        text = repr(secrets)
        assert secrets.state not in text
        assert (secrets.code_verifier or "") not in text
