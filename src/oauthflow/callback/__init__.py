"""Local redirect callback handling for the authorization-code flow.

- :class:`CallbackListener` -- binds the redirect URI and waits for the
  browser to come back.
- :class:`CallbackRequestHandler` -- validates the callback query string and
  resolves the outcome.
- :class:`CompletionSlot` -- the one-shot handoff between the two.
"""

from oauthflow.callback.handler import CallbackRequestHandler, CallbackResponse
from oauthflow.callback.listener import CallbackListener, ListenerState, parse_redirect_uri
from oauthflow.callback.slot import CompletionSlot

__all__ = [
    "CallbackListener",
    "CallbackRequestHandler",
    "CallbackResponse",
    "CompletionSlot",
    "ListenerState",
    "parse_redirect_uri",
]
