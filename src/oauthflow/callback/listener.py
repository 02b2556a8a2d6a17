"""Short-lived local HTTP listener for the authorization redirect.

:class:`CallbackListener` binds the host, port and path of the configured
redirect URI, serves requests on one daemon worker thread, and hands the
first meaningful callback to the waiting caller through a
:class:`~oauthflow.callback.slot.CompletionSlot`.

Lifecycle::

    CREATED --start()--> LISTENING --callback--> RESOLVED
                                   --timeout---> TIMED_OUT
    (any) --stop()--> STOPPED

Typical usage::

    with CallbackListener("http://127.0.0.1:8765/callback", expected_state=state) as listener:
        launch_browser(authorization_url)
        outcome = listener.wait_for_callback(timeout=60)

The caller owns shutdown: a timeout does not stop the listener, so
:meth:`CallbackListener.stop` (or the context manager) must always run.
"""

from __future__ import annotations

import enum
import logging
import socket
import socketserver
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Optional
from urllib.parse import urlsplit

from oauthflow.callback.handler import CallbackRequestHandler
from oauthflow.callback.slot import CompletionSlot
from oauthflow.exceptions import CallbackServerError, CallbackTimeoutError, InvalidURIError
from oauthflow.models import CallbackOutcome

logger = logging.getLogger(__name__)

DEFAULT_SHUTDOWN_GRACE = 2.0
"""Seconds :meth:`CallbackListener.stop` waits for an in-flight request."""

REQUEST_READ_TIMEOUT = 1.0
"""Seconds a connection may stay silent before it is dropped.

The server handles one connection at a time, so an idle browser preconnect
holds back the real callback for at most this long. Kept below
:data:`DEFAULT_SHUTDOWN_GRACE`.
"""

_NOT_FOUND_PAGE = "<!DOCTYPE html><html><body><h1>Not Found</h1></body></html>"


class ListenerState(str, enum.Enum):
    """Lifecycle states of a :class:`CallbackListener`."""

    CREATED = "created"
    LISTENING = "listening"
    RESOLVED = "resolved"
    TIMED_OUT = "timed_out"
    STOPPED = "stopped"


def parse_redirect_uri(redirect_uri: str) -> tuple[str, int, str]:
    """Split a redirect URI into the ``(host, port, path)`` to listen on.

    Args:
        redirect_uri: An absolute ``http`` URI such as
            ``http://127.0.0.1:8765/callback``.

    Returns:
        The host, the port (80 when omitted), and the path (``/`` when
        omitted).

    Raises:
        InvalidURIError: If the URI is not an absolute ``http`` URI with a
            host and a valid port.
    """
    try:
        parts = urlsplit(redirect_uri.strip())
        port = parts.port
    except ValueError as exc:
        raise InvalidURIError(f"Invalid redirect URI '{redirect_uri}': {exc}") from exc
    if parts.scheme != "http" or not parts.hostname:
        raise InvalidURIError(
            f"Invalid redirect URI '{redirect_uri}': the local listener needs an "
            "absolute http:// URI with a host"
        )
    return parts.hostname, port if port is not None else 80, parts.path or "/"


class _RedirectRequestHandler(BaseHTTPRequestHandler):
    """Routes GET requests on the redirect path to the callback handler."""

    server: _CallbackHTTPServer
    timeout = REQUEST_READ_TIMEOUT

    def do_GET(self) -> None:
        parts = urlsplit(self.path)
        if parts.path != self.server.callback_path:
            # favicon probes and the like never touch the slot
            self._send(404, _NOT_FOUND_PAGE)
            return
        response = self.server.callback_handler.handle(parts.query or None)
        self._send(response.status, response.body)

    def _send(self, status: int, body: str) -> None:
        payload = body.encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "text/html; charset=utf-8")
        self.send_header("Content-Length", str(len(payload)))
        self.send_header("Cache-Control", "no-store")
        self.end_headers()
        self.wfile.write(payload)

    def log_message(self, format: str, *args: Any) -> None:
        # Request lines carry the authorization code; never log them.
        pass


class _CallbackHTTPServer(HTTPServer):
    """Single-threaded HTTP server bound to one redirect path."""

    def __init__(
        self,
        address: tuple[str, int],
        callback_path: str,
        callback_handler: CallbackRequestHandler,
    ) -> None:
        self.callback_path = callback_path
        self.callback_handler = callback_handler
        if ":" in address[0]:
            self.address_family = socket.AF_INET6
        super().__init__(address, _RedirectRequestHandler)

    def server_bind(self) -> None:
        # HTTPServer.server_bind does a reverse DNS lookup we don't need.
        socketserver.TCPServer.server_bind(self)
        host, port = self.server_address[:2]
        self.server_name = str(host)
        self.server_port = port


class CallbackListener:
    """Single-use local endpoint that waits for the authorization redirect.

    Args:
        redirect_uri: The redirect URI registered with the authorization
            server; its host, port and path are served.
        expected_state: The ``state`` the callback must echo back. ``None``
            disables the check.
        shutdown_grace: Seconds :meth:`stop` waits for an in-flight request
            before closing the socket.

    Raises:
        InvalidURIError: If *redirect_uri* cannot be served locally.
    """

    def __init__(
        self,
        redirect_uri: str,
        expected_state: Optional[str] = None,
        shutdown_grace: float = DEFAULT_SHUTDOWN_GRACE,
    ) -> None:
        self._host, self._port, self._path = parse_redirect_uri(redirect_uri)
        self._slot = CompletionSlot()
        self._handler = CallbackRequestHandler(self._slot, expected_state)
        self._shutdown_grace = shutdown_grace
        self._lock = threading.Lock()
        self._state = ListenerState.CREATED
        self._server: Optional[_CallbackHTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------ #
    # Properties
    # ------------------------------------------------------------------ #

    @property
    def state(self) -> ListenerState:
        return self._state

    @property
    def host(self) -> str:
        return self._host

    @property
    def port(self) -> int:
        """The bound port once listening, else the port from the redirect URI."""
        if self._server is not None:
            return self._server.server_address[1]
        return self._port

    @property
    def path(self) -> str:
        return self._path

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def start(self) -> None:
        """Bind the socket and start accepting requests on a worker thread.

        Raises:
            CallbackServerError: If the listener was already started or
                stopped, or the address cannot be bound.
        """
        with self._lock:
            if self._state is not ListenerState.CREATED:
                raise CallbackServerError(
                    f"Callback listener cannot start from state '{self._state.value}'"
                )
            try:
                server = _CallbackHTTPServer((self._host, self._port), self._path, self._handler)
            except OSError as exc:
                raise CallbackServerError(
                    f"Cannot listen for the OAuth callback on {self._host}:{self._port}: {exc}"
                ) from exc
            self._server = server
            self._thread = threading.Thread(
                target=server.serve_forever,
                kwargs={"poll_interval": 0.1},
                name="oauthflow-callback",
                daemon=True,
            )
            self._thread.start()
            self._state = ListenerState.LISTENING
        logger.debug("Listening for OAuth callback on %s:%s%s", self._host, self.port, self._path)

    def wait_for_callback(self, timeout: float) -> CallbackOutcome:
        """Block until the redirect callback arrives or *timeout* elapses.

        Args:
            timeout: Maximum number of seconds to wait.

        Returns:
            The :data:`~oauthflow.models.CallbackOutcome` written by the
            first callback request.

        Raises:
            CallbackTimeoutError: If no callback arrived in time. The
                listener keeps running until :meth:`stop` is called.
            CallbackServerError: If the listener was never started, or was
                stopped before any callback arrived.
        """
        with self._lock:
            state = self._state
        if state is ListenerState.CREATED:
            raise CallbackServerError("Callback listener has not been started")
        if state is ListenerState.STOPPED and not self._slot.is_resolved:
            raise CallbackServerError("Callback listener was stopped before a callback arrived")

        outcome = self._slot.wait(timeout)

        with self._lock:
            if outcome is None:
                if self._state is ListenerState.LISTENING:
                    self._state = ListenerState.TIMED_OUT
                raise CallbackTimeoutError(
                    f"No authorization callback received within {timeout:g} seconds"
                )
            if self._state in (ListenerState.LISTENING, ListenerState.TIMED_OUT):
                self._state = ListenerState.RESOLVED
        return outcome

    def stop(self) -> None:
        """Release the socket and the worker thread. Idempotent and thread-safe.

        Waits up to ``shutdown_grace`` seconds for an in-flight request to
        finish, then closes the listening socket regardless.
        """
        with self._lock:
            if self._state is ListenerState.STOPPED:
                return
            self._state = ListenerState.STOPPED
            server, thread = self._server, self._thread

        if server is None:
            return

        if thread is not None and thread.is_alive():
            # shutdown() blocks until serve_forever returns, so run it aside.
            threading.Thread(target=server.shutdown, daemon=True).start()
            thread.join(self._shutdown_grace)
            if thread.is_alive():
                logger.warning(
                    "Callback listener did not finish within %.1fs; closing socket",
                    self._shutdown_grace,
                )
        server.server_close()
        logger.debug("Callback listener on %s:%s stopped", self._host, self.port)

    def __enter__(self) -> CallbackListener:
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()
