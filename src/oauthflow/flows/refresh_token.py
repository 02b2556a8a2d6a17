"""OAuth2 Refresh Token grant (:rfc:`6749` section 6)."""

from __future__ import annotations

import logging
from typing import Optional

from oauthflow.exchange import TokenExchanger
from oauthflow.flows.base import (
    OAuthFlow,
    encode_form,
    ensure_valid,
    form_headers,
    is_blank,
    missing_fields,
    scope_pair,
)
from oauthflow.models import FlowConfig, TokenResponse

logger = logging.getLogger(__name__)

_REQUIRED = ("client_id", "refresh_token", "token_endpoint")


class RefreshTokenFlow(OAuthFlow):
    """Trade a refresh token for a new access token.

    The client secret, when configured, travels in the request body; no
    ``Authorization`` header is sent.
    """

    def __init__(self, exchanger: Optional[TokenExchanger] = None) -> None:
        self._exchanger = exchanger or TokenExchanger()

    @property
    def grant_type(self) -> str:
        return "refresh_token"

    def get_token(self, config: FlowConfig) -> TokenResponse:
        config = ensure_valid(self, config)
        logger.debug("Refreshing access token at %s", config.token_endpoint)
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
        pairs = [
            ("grant_type", self.grant_type),
            ("refresh_token", config.refresh_token or ""),
            ("client_id", config.client_id or ""),
        ]
        if not is_blank(config.client_secret):
            pairs.append(("client_secret", config.client_secret or ""))
        return encode_form(pairs + scope_pair(config))

    def build_headers(self, config: FlowConfig) -> dict[str, str]:
        return form_headers()
