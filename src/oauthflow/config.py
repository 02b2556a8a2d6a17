"""Configuration loading with XDG paths, credential sources, and precedence.

This module turns the places a :class:`~oauthflow.models.FlowConfig` can come
from into one validated, immutable object:

* **Directory layout** -- XDG Base Directory compliant on Linux/BSD,
  ``~/.oauthflow/`` on macOS and Windows. See :func:`get_config_dir` and
  :func:`get_data_dir`.
* **Profiles** -- one JSON or YAML file per authorization server in
  ``<config_dir>/profiles/``. See :func:`load_profile`.
* **Credential sources** -- secrets are referenced, not stored, via
  ``client_secret_source`` / ``refresh_token_source`` keys resolved by
  :func:`resolve_credential`.
* **Precedence** -- :func:`resolve_flow_config` merges explicit overrides,
  ``OAUTHFLOW_*`` environment variables, a config file or profile, and the
  model defaults.
"""

from __future__ import annotations

import getpass
import json
import os
import platform
import sys
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import ValidationError

from oauthflow.exceptions import ConfigurationError
from oauthflow.models import FlowConfig

_APP_NAME = "oauthflow"
_ENV_PREFIX = "OAUTHFLOW_"
_PROFILE_SUFFIXES = (".json", ".yaml", ".yml")

_SOURCE_KEYS = {
    "client_secret_source": "client_secret",
    "refresh_token_source": "refresh_token",
}

_ENV_FIELDS = (
    "client_id",
    "client_secret",
    "redirect_uri",
    "authorization_endpoint",
    "token_endpoint",
    "refresh_token",
    "pkce_enabled",
    "scopes",
    "callback_timeout",
    "request_timeout",
    "verify_ssl",
)


# --- XDG path resolution ---


def _is_xdg_platform() -> bool:
    """Return True if the platform follows the XDG Base Directory layout (Linux/FreeBSD)."""
    return platform.system() == "Linux" or platform.system().endswith("BSD")


def _fallback_base_dir() -> Path:
    return Path.home() / f".{_APP_NAME}"


def _xdg_base(env_var: str, default_segments: tuple[str, ...]) -> Path:
    env_value = os.environ.get(env_var, "")
    if env_value:
        return Path(env_value)
    base = Path.home()
    for seg in default_segments:
        base = base / seg
    return base


def get_config_dir() -> Path:
    """Return the configuration directory, creating it if necessary.

    On Linux/BSD: ``$XDG_CONFIG_HOME/oauthflow/`` (default
    ``~/.config/oauthflow/``). On macOS/Windows: ``~/.oauthflow/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_CONFIG_HOME", (".config",)) / _APP_NAME
    else:
        path = _fallback_base_dir()
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_data_dir() -> Path:
    """Return the data directory (crash logs), creating it if necessary.

    On Linux/BSD: ``$XDG_DATA_HOME/oauthflow/`` (default
    ``~/.local/share/oauthflow/``). On macOS/Windows: ``~/.oauthflow/logs/``.
    """
    if _is_xdg_platform():
        path = _xdg_base("XDG_DATA_HOME", (".local", "share")) / _APP_NAME
    else:
        path = _fallback_base_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_profiles_dir() -> Path:
    """Return ``<config_dir>/profiles/``, creating it if necessary."""
    path = get_config_dir() / "profiles"
    path.mkdir(parents=True, exist_ok=True)
    return path


# --- Files and profiles ---


def load_config_file(path: Path) -> dict[str, Any]:
    """Read a JSON or YAML config file into a dict.

    The format is chosen by suffix: ``.yaml`` / ``.yml`` use YAML, anything
    else JSON.

    Raises:
        ConfigurationError: If the file is missing, unreadable, malformed, or
            does not contain a mapping.
    """
    if not path.is_file():
        raise ConfigurationError(f"Config file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() in (".yaml", ".yml"):
            data = yaml.safe_load(text)
        else:
            data = json.loads(text)
    except (OSError, json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Invalid config file at {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")
    return data


def list_profiles() -> list[str]:
    """Return the names of all profiles, sorted alphabetically."""
    return sorted(
        {p.stem for p in get_profiles_dir().iterdir() if p.is_file() and p.suffix in _PROFILE_SUFFIXES}
    )


def load_profile(name: str) -> dict[str, Any]:
    """Load the raw settings of profile *name*.

    Raises:
        ConfigurationError: If no ``<name>.json``, ``<name>.yaml`` or
            ``<name>.yml`` exists, or the file is invalid.
    """
    profiles_dir = get_profiles_dir()
    for suffix in _PROFILE_SUFFIXES:
        path = profiles_dir / f"{name}{suffix}"
        if path.is_file():
            return load_config_file(path)
    raise ConfigurationError(f"Profile '{name}' not found in {profiles_dir}")


# --- Credential source resolution ---


def resolve_credential(source: str) -> str:
    """Resolve a credential from its source descriptor.

    Supported formats:
        - ``"env:VAR_NAME"`` -- reads ``os.environ["VAR_NAME"]``
        - ``"file:/path/to/file"`` -- reads file content, stripped of whitespace
        - ``"prompt"`` -- prompts user interactively (requires a TTY)

    Raises:
        ConfigurationError: If the source can't be resolved.
    """
    if source.startswith("env:"):
        var_name = source[4:]
        value = os.environ.get(var_name)
        if value is None:
            raise ConfigurationError(
                f"Environment variable '{var_name}' is not set (source: {source})"
            )
        return value

    if source.startswith("file:"):
        path = Path(source[5:]).expanduser()
        if not path.is_file():
            raise ConfigurationError(f"Credential file not found: {path} (source: {source})")
        try:
            return path.read_text(encoding="utf-8").strip()
        except OSError as exc:
            raise ConfigurationError(f"Cannot read credential file {path}: {exc}") from exc

    if source == "prompt":
        if not sys.stdin.isatty():
            raise ConfigurationError(
                "Cannot prompt for credentials: stdin is not a TTY (source: prompt)"
            )
        return getpass.getpass("Enter credential: ")

    raise ConfigurationError(f"Unknown credential source format: {source}")


# --- Precedence resolution ---


def _env_settings() -> dict[str, Any]:
    """Collect ``OAUTHFLOW_<FIELD>`` environment variables."""
    settings: dict[str, Any] = {}
    for name in _ENV_FIELDS:
        value = os.environ.get(_ENV_PREFIX + name.upper())
        if value is None or value == "":
            continue
        if name == "scopes":
            settings[name] = value.split()
        else:
            settings[name] = value
    return settings


def _resolve_sources(settings: dict[str, Any]) -> dict[str, Any]:
    resolved = dict(settings)
    for source_key, field in _SOURCE_KEYS.items():
        source = resolved.pop(source_key, None)
        if source and not resolved.get(field):
            resolved[field] = resolve_credential(source)
    return resolved


def resolve_flow_config(
    profile: Optional[str] = None,
    config_file: Optional[Path] = None,
    overrides: Optional[dict[str, Any]] = None,
) -> FlowConfig:
    """Build a :class:`~oauthflow.models.FlowConfig` from every source.

    Precedence (high to low):
        1. *overrides* (typically CLI flags); ``None`` values are ignored
        2. ``OAUTHFLOW_*`` environment variables
        3. *config_file*, else the named *profile*
        4. Model defaults

    ``client_secret_source`` / ``refresh_token_source`` keys at any level are
    resolved with :func:`resolve_credential` unless a higher level supplies
    the value directly.

    Raises:
        ConfigurationError: If a file or profile is invalid, a credential
            source cannot be resolved, or the merged values fail validation.
    """
    settings: dict[str, Any] = {}
    if config_file is not None:
        settings.update(load_config_file(config_file))
    elif profile is not None:
        settings.update(load_profile(profile))

    for layer in (_env_settings(), {k: v for k, v in (overrides or {}).items() if v is not None}):
        for source_key, field in _SOURCE_KEYS.items():
            # A direct value at a higher level beats a source from a lower one.
            if field in layer:
                settings.pop(source_key, None)
            if source_key in layer:
                settings.pop(field, None)
        settings.update(layer)

    settings = _resolve_sources(settings)
    try:
        return FlowConfig.model_validate(settings)
    except ValidationError as exc:
        # Input values are left out of the message; they may be secrets.
        problems = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}" for err in exc.errors()
        ]
        raise ConfigurationError(
            "Invalid OAuth configuration: " + "; ".join(problems), problems=problems
        ) from exc
