"""Redirect callback interpretation and browser-facing pages.

:class:`CallbackRequestHandler` turns the query string of one inbound
redirect request into a :data:`~oauthflow.models.CallbackOutcome`, writes it
into the listener's :class:`~oauthflow.callback.slot.CompletionSlot`, and
returns the HTML page the browser should display. It knows nothing about
sockets; :mod:`oauthflow.callback.listener` feeds it requests.

Validation order:

1. A missing or empty query string is an ``invalid_query_string`` failure.
2. When an expected state was configured, the ``state`` parameter must match
   it exactly, otherwise ``invalid_state``.
3. ``code`` present -> success.
4. ``error`` or ``error_description`` present -> the provider's failure.
5. Anything else -> ``invalid_query_string``.

Duplicate query keys resolve to their first occurrence.
"""

from __future__ import annotations

import hmac
import html
import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import parse_qsl

from oauthflow.callback.slot import CompletionSlot
from oauthflow.models import CallbackFailure, CallbackOutcome, CallbackSuccess

logger = logging.getLogger(__name__)

INVALID_QUERY_STRING = "invalid_query_string"
INVALID_STATE = "invalid_state"
UNKNOWN_ERROR = "unknown_error"

_PAGE_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<title>{title}</title>
<style>
body {{ font-family: Arial, sans-serif; text-align: center; padding: 50px; }}
h1 {{ color: {color}; }}
p {{ color: #666; }}
</style>
</head>
<body>
<h1>{title}</h1>
{paragraphs}
</body>
</html>
"""


@dataclass(frozen=True)
class CallbackResponse:
    """HTTP status and HTML body to send back to the browser."""

    status: int
    body: str


def render_success_page() -> str:
    """Return the confirmation page shown after a successful authorization."""
    return _render(
        "Authorization Successful",
        "#28a745",
        [
            "You have successfully authorized the application.",
            "You can close this window and return to the application.",
        ],
    )


def render_error_page(message: str) -> str:
    """Return the page shown when the authorization failed.

    Args:
        message: Description of the failure; HTML-escaped before rendering.
    """
    return _render(
        "Authorization Error",
        "#dc3545",
        [f"An error occurred during authorization: {message}"],
    )


def _render(title: str, color: str, paragraphs: list[str]) -> str:
    body = "\n".join(f"<p>{html.escape(p)}</p>" for p in paragraphs)
    return _PAGE_TEMPLATE.format(title=html.escape(title), color=color, paragraphs=body)


def parse_query(query: str) -> dict[str, str]:
    """Parse a query string, keeping blank values; first occurrence of a key wins."""
    params: dict[str, str] = {}
    for key, value in parse_qsl(query, keep_blank_values=True):
        params.setdefault(key, value)
    return params


def _states_match(expected: str, actual: Optional[str]) -> bool:
    if actual is None:
        return False
    return hmac.compare_digest(expected.encode("utf-8"), actual.encode("utf-8"))


class CallbackRequestHandler:
    """Interpret redirect callbacks and resolve a completion slot exactly once.

    Args:
        slot: The slot to resolve. This handler is its only writer.
        expected_state: The ``state`` generated for this attempt. ``None``
            disables state validation; the authorization-code flow always
            supplies a value.
    """

    def __init__(self, slot: CompletionSlot, expected_state: Optional[str] = None) -> None:
        self._slot = slot
        self._expected_state = expected_state

    def interpret(self, query: Optional[str]) -> CallbackOutcome:
        """Map a raw query string to an outcome without side effects."""
        if query is None or not query.strip():
            return CallbackFailure(
                error_code=INVALID_QUERY_STRING,
                error_description="No query parameters found",
            )

        params = parse_query(query)

        if self._expected_state is not None and not _states_match(
            self._expected_state, params.get("state")
        ):
            return CallbackFailure(
                error_code=INVALID_STATE, error_description="State parameter mismatch"
            )

        if "code" in params:
            return CallbackSuccess(
                authorization_code=params["code"], returned_state=params.get("state")
            )
        if "error" in params or "error_description" in params:
            return CallbackFailure(
                error_code=params.get("error") or UNKNOWN_ERROR,
                error_description=params.get("error_description"),
            )
        return CallbackFailure(
            error_code=INVALID_QUERY_STRING,
            error_description=f"Could not parse request query string: {query}",
        )

    def handle(self, query: Optional[str]) -> CallbackResponse:
        """Process one redirect request and return the response to send.

        The slot is written only if it is still empty. A repeated callback
        gets its own response but never replaces the first outcome.
        """
        outcome = self.interpret(query)

        if not self._slot.resolve(outcome):
            logger.warning("Ignoring repeated authorization callback; already completed")
            return CallbackResponse(
                400, render_error_page("This authorization request has already been completed.")
            )

        if isinstance(outcome, CallbackSuccess):
            logger.info("Authorization callback received an authorization code")
            return CallbackResponse(200, render_success_page())

        logger.info("Authorization callback failed: %s", outcome.error_code)
        return CallbackResponse(400, render_error_page(outcome.error_text))
