"""OAuth2 Client Credentials grant (:rfc:`6749` section 4.4).

Server-to-server flow: the client authenticates with HTTP Basic auth and the
body carries only the grant type (plus ``scope`` when configured).
"""

from __future__ import annotations

import logging
from typing import Optional

from oauthflow.exchange import TokenExchanger
from oauthflow.flows.base import (
    AUTHORIZATION_HEADER,
    OAuthFlow,
    basic_auth_header,
    encode_form,
    ensure_valid,
    form_headers,
    missing_fields,
    scope_pair,
)
from oauthflow.models import FlowConfig, TokenResponse

logger = logging.getLogger(__name__)

_REQUIRED = ("client_id", "client_secret", "token_endpoint")


class ClientCredentialsFlow(OAuthFlow):
    """Exchange a client id and secret for an access token.

    Args:
        exchanger: Performs the token request. Defaults to a
            :class:`~oauthflow.exchange.TokenExchanger` over httpx.
    """

    def __init__(self, exchanger: Optional[TokenExchanger] = None) -> None:
        self._exchanger = exchanger or TokenExchanger()

    @property
    def grant_type(self) -> str:
        return "client_credentials"

    def get_token(self, config: FlowConfig) -> TokenResponse:
        """POST ``grant_type=client_credentials`` with Basic client authentication."""
        config = ensure_valid(self, config)
        logger.debug("Requesting client_credentials token from %s", config.token_endpoint)
        assert config.token_endpoint is not None  # ensure_valid guarantees this
        return self._exchanger.exchange(
            config.token_endpoint,
            self.build_headers(config),
            self.build_body(config),
            timeout=config.request_timeout,
            verify_ssl=config.verify_ssl,
        )

    def validate_config(self, config: Optional[FlowConfig]) -> list[str]:
        return missing_fields(config, _REQUIRED, self.grant_type)

    def build_body(self, config: FlowConfig) -> str:
        return encode_form([("grant_type", self.grant_type)] + scope_pair(config))

    def build_headers(self, config: FlowConfig) -> dict[str, str]:
        headers = form_headers()
        headers[AUTHORIZATION_HEADER] = basic_auth_header(config.client_id, config.client_secret)
        return headers
