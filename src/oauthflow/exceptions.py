"""Exception hierarchy for oauthflow.

All exceptions inherit from :class:`OAuthFlowError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`oauthflow.exit_codes`.
The CLI entry point in :func:`oauthflow.app.main` catches ``OAuthFlowError``
and exits with the appropriate code; library callers catch the specific
subclasses.

Subclass hierarchy::

    OAuthFlowError            (exit 1)
    +-- ConfigurationError    (exit 2)
    |   +-- InvalidURIError   (exit 2)
    +-- OAuthProtocolError    (exit 3)
    |   +-- AuthorizationError (exit 3)
    +-- ConnectionError_      (exit 6)
    +-- CallbackTimeoutError  (exit 7)
    +-- CallbackServerError   (exit 1)
"""

from __future__ import annotations

from typing import Optional

from oauthflow.exit_codes import (
    EXIT_CALLBACK_TIMEOUT,
    EXIT_CONFIG_ERROR,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_OAUTH_ERROR,
)


class OAuthFlowError(Exception):
    """Base exception for all oauthflow errors.

    Args:
        message: Human-readable error description.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigurationError(OAuthFlowError):
    """Raised when required configuration is missing, blank, or unreadable.

    Always raised before any socket is bound or any request is sent.

    Args:
        message: Human-readable error description.
        problems: The individual validation messages, if any.
    """

    exit_code = EXIT_CONFIG_ERROR

    def __init__(self, message: str, problems: Optional[list[str]] = None):
        super().__init__(message)
        self.problems = list(problems or [])


class InvalidURIError(ConfigurationError):
    """Raised when an endpoint or redirect URI cannot be composed or parsed."""


class OAuthProtocolError(OAuthFlowError):
    """Structured OAuth error carrying the ``error`` code and its description.

    Args:
        error: Machine-readable OAuth error code (e.g. ``invalid_grant``).
        error_description: Human-readable description, when the server sent one.
    """

    exit_code = EXIT_OAUTH_ERROR

    def __init__(self, error: str, error_description: Optional[str] = None):
        self.error = error
        self.error_description = error_description
        message = f"OAuth error '{error}'"
        if error_description:
            message += f": {error_description}"
        super().__init__(message)


class AuthorizationError(OAuthProtocolError):
    """Raised when the redirect callback reports a failed authorization.

    Covers a state mismatch, the user denying access, and a callback whose
    query string could not be interpreted.
    """

    def __init__(self, error: str, error_description: Optional[str] = None):
        super().__init__(error, error_description)
        self.args = (f"Authorization failed: {self.args[0]}",)


class ConnectionError_(OAuthFlowError):
    """Raised on network-level failures before a token response was received.

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class CallbackTimeoutError(OAuthFlowError, TimeoutError):
    """Raised when no redirect callback arrives within the allotted time."""

    exit_code = EXIT_CALLBACK_TIMEOUT


class CallbackServerError(OAuthFlowError):
    """Raised when the local callback listener cannot bind or is used out of order."""
