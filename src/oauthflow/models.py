"""Canonical Pydantic models shared across all oauthflow modules.

The models fall into three groups:

**Configuration** -- :class:`FlowConfig`, the immutable input to every
grant strategy.

**Per-attempt security parameters** -- :class:`SessionSecrets`, generated
fresh for each authorization-code attempt by :mod:`oauthflow.pkce`.

**Protocol results** -- :class:`CallbackSuccess` / :class:`CallbackFailure`
(together :data:`CallbackOutcome`) produced by the redirect callback, and
:class:`TokenResponse` / :class:`OAuthErrorResponse` parsed from the token
endpoint.

Secret-bearing fields are excluded from ``repr()`` (or masked, in the case of
:class:`TokenResponse`) so that models can be logged safely.
"""

from __future__ import annotations

from typing import Any, ClassVar, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, model_validator

REDACTED = "*******************"
"""Placeholder shown instead of a sensitive value."""


# --- Configuration ---


class FlowConfig(BaseModel):
    """Configuration for a single token-acquisition attempt.

    Each grant strategy requires a different subset of fields; see
    :meth:`oauthflow.flows.base.OAuthFlow.validate_config`.

    Example::

        FlowConfig(
            client_id="c1",
            client_secret="s1",
            token_endpoint="https://idp.example.com/token",
        )
    """

    model_config = ConfigDict(frozen=True)

    client_id: Optional[str] = None
    client_secret: Optional[str] = Field(default=None, repr=False)
    redirect_uri: Optional[str] = None
    authorization_endpoint: Optional[str] = None
    token_endpoint: Optional[str] = None
    refresh_token: Optional[str] = Field(default=None, repr=False)
    pkce_enabled: bool = Field(
        default=False, description="Send an S256 PKCE challenge with the authorization request"
    )
    scopes: list[str] = Field(default_factory=list)
    callback_timeout: float = Field(
        default=60.0, gt=0, description="Seconds to wait for the redirect callback"
    )
    request_timeout: float = Field(
        default=30.0, gt=0, description="Seconds allowed for the token request"
    )
    verify_ssl: bool = True


# --- Per-attempt secrets ---


class SessionSecrets(BaseModel):
    """Random correlation values for one authorization attempt.

    ``code_verifier`` and ``code_challenge`` are either both present (PKCE
    enabled) or both absent.
    """

    model_config = ConfigDict(frozen=True)

    state: str = Field(repr=False)
    code_verifier: Optional[str] = Field(default=None, repr=False)
    code_challenge: Optional[str] = None

    @model_validator(mode="after")
    def _pkce_pair_complete(self) -> SessionSecrets:
        if (self.code_verifier is None) != (self.code_challenge is None):
            raise ValueError("code_verifier and code_challenge must be set together")
        return self

    @property
    def pkce_enabled(self) -> bool:
        return self.code_verifier is not None


# --- Callback outcome ---


class CallbackSuccess(BaseModel):
    """The authorization server redirected back with an authorization code."""

    model_config = ConfigDict(frozen=True)

    authorization_code: str = Field(repr=False)
    returned_state: Optional[str] = Field(default=None, repr=False)

    @property
    def is_success(self) -> bool:
        return True


class CallbackFailure(BaseModel):
    """The redirect callback reported or implied a failed authorization."""

    model_config = ConfigDict(frozen=True)

    error_code: str
    error_description: Optional[str] = None

    @property
    def is_success(self) -> bool:
        return False

    @property
    def error_text(self) -> str:
        return f"error:{self.error_code} Description:{self.error_description}"


CallbackOutcome = Union[CallbackSuccess, CallbackFailure]


# --- Token endpoint payloads ---


class TokenResponse(BaseModel):
    """Successful token endpoint response.

    Only ``access_token`` is required. Numeric values in string fields (some
    providers send ``issued_at`` or ``id`` as numbers) are kept as strings,
    and ``expires_in`` may be fractional. Fields the provider sends beyond the
    declared ones are preserved in ``model_extra``. ``repr()``, ``str()``
    and :meth:`redacted` mask every value named in :attr:`SENSITIVE_FIELDS`.
    """

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)

    SENSITIVE_FIELDS: ClassVar[frozenset[str]] = frozenset(
        {"access_token", "refresh_token", "signature", "id_token"}
    )

    access_token: str
    refresh_token: Optional[str] = None
    token_type: Optional[str] = None
    scope: Optional[str] = None
    expires_in: Optional[Union[int, float]] = None
    id_token: Optional[str] = None
    # Salesforce-style metadata
    instance_url: Optional[str] = None
    id: Optional[str] = None
    issued_at: Optional[str] = None
    signature: Optional[str] = None

    def __repr_args__(self) -> Any:
        for name, value in super().__repr_args__():
            if name in self.SENSITIVE_FIELDS and value is not None:
                yield name, REDACTED
            else:
                yield name, value

    def redacted(self) -> dict[str, Any]:
        """Return the response as a dict with sensitive values masked."""
        data = self.model_dump(exclude_none=True)
        for name in self.SENSITIVE_FIELDS:
            if name in data:
                data[name] = REDACTED
        return data


class OAuthErrorResponse(BaseModel):
    """Error body returned by the token endpoint (:rfc:`6749` section 5.2)."""

    model_config = ConfigDict(extra="ignore")

    error: str
    error_description: Optional[str] = None
    error_uri: Optional[str] = None
