"""OAuth2 Authorization Code grant with a local browser redirect.

:class:`AuthorizationCodeFlow` performs :rfc:`6749` section 4.1, optionally
hardened with PKCE (:rfc:`7636`):

1. Generates a fresh ``state`` (and PKCE pair when enabled).
2. Starts a :class:`~oauthflow.callback.CallbackListener` on the redirect URI.
3. Opens the authorization URL in the user's browser (best effort).
4. Waits for the redirect; any failure outcome aborts the flow.
5. Exchanges the authorization code at the token endpoint.

The listener is always stopped before the token exchange or the error
propagates. An instance drives one attempt at a time and is not meant to be
shared between threads.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from oauthflow.authorize import build_authorization_url
from oauthflow.browser import launch_browser
from oauthflow.callback.listener import CallbackListener
from oauthflow.exceptions import AuthorizationError, OAuthFlowError
from oauthflow.exchange import TokenExchanger
from oauthflow.flows.base import (
    OAuthFlow,
    encode_form,
    ensure_valid,
    form_headers,
    is_blank,
    missing_fields,
)
from oauthflow.models import CallbackSuccess, FlowConfig, SessionSecrets, TokenResponse
from oauthflow.pkce import create_session_secrets

logger = logging.getLogger(__name__)

_REQUIRED = ("client_id", "redirect_uri", "authorization_endpoint", "token_endpoint")


class AuthorizationCodeFlow(OAuthFlow):
    """Interactive authorization through the user's browser.

    Args:
        exchanger: Performs the token request.
        browser: Opens a URL; returns ``False`` when no browser could be
            launched. Defaults to :func:`~oauthflow.browser.launch_browser`.
        on_authorization_url: Called with the authorization URL before the
            browser is launched, so callers can display it.
    """

    def __init__(
        self,
        exchanger: Optional[TokenExchanger] = None,
        browser: Callable[[str], bool] = launch_browser,
        on_authorization_url: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._exchanger = exchanger or TokenExchanger()
        self._browser = browser
        self._on_authorization_url = on_authorization_url
        self._secrets: Optional[SessionSecrets] = None
        self._callback: Optional[CallbackSuccess] = None

    @property
    def grant_type(self) -> str:
        return "authorization_code"

    def get_token(self, config: FlowConfig) -> TokenResponse:
        """Run the browser authorization and exchange the resulting code.

        Raises:
            ConfigurationError: If required fields are missing or an
                endpoint/redirect URI is malformed.
            CallbackServerError: If the redirect URI cannot be listened on.
            CallbackTimeoutError: If the browser never came back.
            AuthorizationError: If the callback reported a failure, including
                a state mismatch.
            OAuthProtocolError: If the token endpoint rejected the code.
            ConnectionError_: If the token endpoint cannot be reached.
        """
        config = ensure_valid(self, config)
        assert config.redirect_uri is not None and config.token_endpoint is not None

        self._secrets = create_session_secrets(config.pkce_enabled)
        self._callback = None
        authorization_url = build_authorization_url(config, self._secrets)
        listener = CallbackListener(config.redirect_uri, expected_state=self._secrets.state)

        try:
            listener.start()
            if self._on_authorization_url is not None:
                self._on_authorization_url(authorization_url)
            if not self._browser(authorization_url):
                logger.warning(
                    "Could not open a browser; open this URL to continue: %s",
                    authorization_url,
                )
            outcome = listener.wait_for_callback(config.callback_timeout)
        finally:
            listener.stop()

        if not isinstance(outcome, CallbackSuccess):
            raise AuthorizationError(outcome.error_code, outcome.error_description)
        self._callback = outcome

        logger.debug("Exchanging authorization code at %s", config.token_endpoint)
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
        """Build the code exchange body for the current attempt.

        Raises:
            OAuthFlowError: If no authorization code has been received yet.
        """
        if self._callback is None or self._secrets is None:
            raise OAuthFlowError("No authorization code available; authorize first")

        pairs = [
            ("grant_type", self.grant_type),
            ("code", self._callback.authorization_code),
            ("client_id", config.client_id or ""),
            ("redirect_uri", config.redirect_uri or ""),
        ]
        if not is_blank(config.client_secret):
            pairs.append(("client_secret", config.client_secret or ""))
        if config.pkce_enabled and self._secrets.code_verifier is not None:
            pairs.append(("code_verifier", self._secrets.code_verifier))
        return encode_form(pairs)

    def build_headers(self, config: FlowConfig) -> dict[str, str]:
        return form_headers()
