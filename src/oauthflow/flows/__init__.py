"""Grant strategies for acquiring OAuth 2.0 access tokens.

- :class:`OAuthFlow` -- the interface every grant implements.
- :class:`ClientCredentialsFlow`, :class:`RefreshTokenFlow`,
  :class:`AuthorizationCodeFlow` -- the built-in grants.
- :class:`FlowManager` / :func:`create_default_manager` -- lookup by
  ``grant_type``.

Typical usage::

    from oauthflow.flows import create_default_manager

    token = create_default_manager().get_token("client_credentials", config)
"""

from oauthflow.flows.authorization_code import AuthorizationCodeFlow
from oauthflow.flows.base import OAuthFlow, basic_auth_header
from oauthflow.flows.client_credentials import ClientCredentialsFlow
from oauthflow.flows.manager import FlowManager, create_default_manager
from oauthflow.flows.refresh_token import RefreshTokenFlow

__all__ = [
    "AuthorizationCodeFlow",
    "ClientCredentialsFlow",
    "FlowManager",
    "OAuthFlow",
    "RefreshTokenFlow",
    "basic_auth_header",
    "create_default_manager",
]
