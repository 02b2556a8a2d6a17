"""Flow manager -- registry and dispatcher for grant strategies.

:class:`FlowManager` maps ``grant_type`` strings to
:class:`~oauthflow.flows.base.OAuthFlow` instances. Most callers use
:func:`create_default_manager`, which registers all three built-in grants
around a single shared :class:`~oauthflow.exchange.TokenExchanger`.
"""

from __future__ import annotations

from typing import Callable, Optional

from oauthflow.exceptions import ConfigurationError
from oauthflow.exchange import TokenExchanger
from oauthflow.flows.base import OAuthFlow
from oauthflow.models import FlowConfig, TokenResponse


class FlowManager:
    """Registry of grant strategies keyed by :attr:`~OAuthFlow.grant_type`.

    Example::

        manager = FlowManager()
        manager.register(ClientCredentialsFlow())
        token = manager.get_token("client_credentials", config)
    """

    def __init__(self) -> None:
        self._flows: dict[str, OAuthFlow] = {}

    def register(self, flow: OAuthFlow) -> None:
        """Register *flow*, replacing any flow with the same grant type."""
        self._flows[flow.grant_type] = flow

    def get_flow(self, grant_type: str) -> OAuthFlow:
        """Return the flow registered for *grant_type*.

        Raises:
            ConfigurationError: If no flow is registered for it.
        """
        flow = self._flows.get(grant_type)
        if flow is None:
            available = ", ".join(sorted(self._flows)) or "(none)"
            raise ConfigurationError(
                f"Unsupported grant type '{grant_type}'. Available grant types: {available}"
            )
        return flow

    def get_token(self, grant_type: str, config: FlowConfig) -> TokenResponse:
        """Acquire a token with the flow registered for *grant_type*."""
        return self.get_flow(grant_type).get_token(config)

    def list_grant_types(self) -> list[str]:
        return sorted(self._flows)


def create_default_manager(
    exchanger: Optional[TokenExchanger] = None,
    on_authorization_url: Optional[Callable[[str], None]] = None,
) -> FlowManager:
    """Create a :class:`FlowManager` with every built-in grant registered.

    - ``authorization_code`` -- browser redirect with optional PKCE.
    - ``client_credentials`` -- client id and secret via HTTP Basic auth.
    - ``refresh_token`` -- refresh token exchange.

    Args:
        exchanger: Shared token exchanger; a default one is created if omitted.
        on_authorization_url: Forwarded to
            :class:`~oauthflow.flows.authorization_code.AuthorizationCodeFlow`.
    """
    from oauthflow.flows.authorization_code import AuthorizationCodeFlow
    from oauthflow.flows.client_credentials import ClientCredentialsFlow
    from oauthflow.flows.refresh_token import RefreshTokenFlow

    exchanger = exchanger or TokenExchanger()
    manager = FlowManager()
    manager.register(ClientCredentialsFlow(exchanger))
    manager.register(RefreshTokenFlow(exchanger))
    manager.register(
        AuthorizationCodeFlow(exchanger, on_authorization_url=on_authorization_url)
    )
    return manager
