"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~oauthflow.exceptions.OAuthFlowError` subclass.
Shell wrappers can inspect the exit code to tell a rejected grant apart from
a network outage without parsing stderr.

Example::

    $ oauthflow token client_credentials --profile ci
    $ echo $?
    3   # EXIT_OAUTH_ERROR -- the token endpoint rejected the request
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_CONFIG_ERROR = 2
"""A required configuration field is missing, blank, or malformed."""

EXIT_OAUTH_ERROR = 3
"""The authorization server or the redirect callback reported an OAuth error."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_CALLBACK_TIMEOUT = 7
"""No authorization callback arrived before the timeout elapsed."""
