"""Token commands -- acquire an access token from the command line.

Provides ``oauthflow token <grant>``, ``oauthflow grants`` and
``oauthflow profiles``. Settings come from a profile or config file,
``OAUTHFLOW_*`` environment variables and the flags below (highest
precedence). Secrets are passed as *sources*
(``env:VAR``, ``file:/path``, ``prompt``) so they never appear in the
process list.

Typical usage::

    oauthflow token client_credentials --profile ci --json
    oauthflow token authorization_code --profile dev --pkce
"""

from __future__ import annotations

import enum
from pathlib import Path
from typing import Optional

import typer

from oauthflow.exceptions import ConfigurationError, OAuthFlowError
from oauthflow.output import error, format_response, info, print_data, success, suggest


class GrantType(str, enum.Enum):
    """Grant types accepted on the command line."""

    client_credentials = "client_credentials"
    refresh_token = "refresh_token"
    authorization_code = "authorization_code"


def _announce_authorization_url(url: str) -> None:
    info("Opening your browser to authorize. If it does not open, visit:")
    info(url)


def token_command(
    ctx: typer.Context,
    grant: GrantType = typer.Argument(help="Grant type to use."),
    profile: Optional[str] = typer.Option(
        None, "--profile", "-p", help="Profile name under the config directory."
    ),
    config_file: Optional[Path] = typer.Option(
        None, "--config", "-c", help="JSON or YAML config file (overrides --profile)."
    ),
    client_id: Optional[str] = typer.Option(None, "--client-id", help="OAuth client id."),
    client_secret_source: Optional[str] = typer.Option(
        None, "--client-secret-source", help="Client secret source: env:VAR, file:/path, prompt."
    ),
    refresh_token_source: Optional[str] = typer.Option(
        None, "--refresh-token-source", help="Refresh token source: env:VAR, file:/path, prompt."
    ),
    token_endpoint: Optional[str] = typer.Option(None, "--token-endpoint", help="Token endpoint URL."),
    authorization_endpoint: Optional[str] = typer.Option(
        None, "--authorization-endpoint", help="Authorization endpoint URL."
    ),
    redirect_uri: Optional[str] = typer.Option(
        None, "--redirect-uri", help="Local redirect URI, e.g. http://127.0.0.1:8765/callback."
    ),
    pkce: Optional[bool] = typer.Option(
        None, "--pkce/--no-pkce", help="Use a PKCE challenge (authorization_code only)."
    ),
    scope: Optional[list[str]] = typer.Option(
        None, "--scope", "-s", help="Scope to request; repeat for several."
    ),
    timeout: Optional[float] = typer.Option(
        None, "--timeout", help="Seconds to wait for the browser callback."
    ),
    show_secrets: bool = typer.Option(
        False, "--show-secrets", help="Print tokens unmasked."
    ),
    access_token_only: bool = typer.Option(
        False, "--access-token-only", help="Print only the raw access token."
    ),
) -> None:
    """Acquire an access token using GRANT.

    Raises:
        typer.Exit: With the error's exit code when configuration, the
            authorization step, or the token request fails.
    """
    from oauthflow.config import resolve_flow_config
    from oauthflow.flows import create_default_manager

    overrides = {
        "client_id": client_id,
        "client_secret_source": client_secret_source,
        "refresh_token_source": refresh_token_source,
        "token_endpoint": token_endpoint,
        "authorization_endpoint": authorization_endpoint,
        "redirect_uri": redirect_uri,
        "pkce_enabled": pkce,
        "scopes": scope or None,
        "callback_timeout": timeout,
    }

    try:
        config = resolve_flow_config(
            profile=profile or (ctx.obj or {}).get("profile"),
            config_file=config_file,
            overrides=overrides,
        )
        manager = create_default_manager(on_authorization_url=_announce_authorization_url)
        token = manager.get_token(grant.value, config)
    except OAuthFlowError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None

    if access_token_only:
        print_data(token.access_token)
        return

    format_response(token.model_dump(exclude_none=True) if show_secrets else token.redacted())
    success(f"Obtained {token.token_type or 'access'} token via {grant.value}.")


def grants_command() -> None:
    """List the supported grant types."""
    from oauthflow.flows import create_default_manager

    for grant_type in create_default_manager().list_grant_types():
        print_data(grant_type)


def profiles_command() -> None:
    """List configured profiles with their client id and token endpoint.

    Profiles that fail to load are shown with an ``error`` status.
    """
    from oauthflow.config import get_profiles_dir, list_profiles, load_profile

    profiles = list_profiles()
    if not profiles:
        info("No profiles configured.")
        suggest(f"Create one: {get_profiles_dir()}/<name>.yaml")
        return

    for name in profiles:
        try:
            settings = load_profile(name)
        except ConfigurationError:
            print_data(f"{name}\terror\t-")
            continue
        client_id = settings.get("client_id") or "-"
        endpoint = settings.get("token_endpoint") or "-"
        print_data(f"{name}\t{client_id}\t{endpoint}")
