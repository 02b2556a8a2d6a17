"""Authorization endpoint URL construction."""

from __future__ import annotations

from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from oauthflow.exceptions import InvalidURIError
from oauthflow.models import FlowConfig, SessionSecrets

RESPONSE_TYPE = "code"
CODE_CHALLENGE_METHOD = "S256"


def build_authorization_url(config: FlowConfig, secrets: SessionSecrets) -> str:
    """Compose the URL the user's browser is sent to.

    Query parameters are appended in a fixed order: ``response_type``,
    ``client_id``, ``redirect_uri``, ``state``, then ``scope`` when scopes are
    configured and ``code_challenge`` / ``code_challenge_method`` when PKCE is
    enabled. Parameters already present on the endpoint are kept first.

    Args:
        config: Flow configuration providing the endpoint, client id and
            redirect URI.
        secrets: The attempt's state and optional PKCE challenge.

    Returns:
        The fully formed authorization URL.

    Raises:
        InvalidURIError: If the authorization endpoint is not an absolute
            ``http`` or ``https`` URI.
    """
    endpoint = (config.authorization_endpoint or "").strip()
    try:
        parts = urlsplit(endpoint)
    except ValueError as exc:
        raise InvalidURIError(f"Invalid authorization endpoint '{endpoint}': {exc}") from exc
    if parts.scheme not in ("http", "https") or not parts.netloc:
        raise InvalidURIError(
            f"Invalid authorization endpoint '{endpoint}': expected an absolute http(s) URI"
        )

    params: list[tuple[str, str]] = parse_qsl(parts.query, keep_blank_values=True)
    params += [
        ("response_type", RESPONSE_TYPE),
        ("client_id", config.client_id or ""),
        ("redirect_uri", config.redirect_uri or ""),
        ("state", secrets.state),
    ]
    if config.scopes:
        params.append(("scope", " ".join(config.scopes)))
    if secrets.code_challenge is not None:
        params.append(("code_challenge", secrets.code_challenge))
        params.append(("code_challenge_method", CODE_CHALLENGE_METHOD))

    return urlunsplit(
        (parts.scheme, parts.netloc, parts.path, urlencode(params), "")
    )
