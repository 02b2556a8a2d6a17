"""HTTP transport used to reach the token endpoint.

:class:`Transport` is the narrow contract the
:class:`~oauthflow.exchange.TokenExchanger` depends on: POST a form body,
get back a status code and raw bytes. :class:`HttpxTransport` implements it
with :mod:`httpx`; tests inject an :class:`httpx.MockTransport` or their own
:class:`Transport`.

Implementations raise the underlying library's errors (``httpx.HTTPError``,
``OSError``) when no response could be obtained; the exchanger maps those to
:class:`~oauthflow.exceptions.ConnectionError_`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

import httpx


@dataclass(frozen=True)
class TransportResponse:
    """Raw response from the token endpoint."""

    status_code: int
    content: bytes

    @property
    def is_successful(self) -> bool:
        return 200 <= self.status_code < 300


class Transport(ABC):
    """Sends a single request to the token endpoint."""

    @abstractmethod
    def post(
        self,
        endpoint: str,
        headers: dict[str, str],
        body: str,
        timeout: Optional[float] = None,
        verify_ssl: Optional[bool] = None,
    ) -> TransportResponse:
        """POST *body* to *endpoint* and return the raw response.

        Args:
            timeout: Request timeout in seconds; ``None`` keeps the
                transport's default.
            verify_ssl: Whether to verify TLS certificates; ``None`` keeps
                the transport's default.

        Raises:
            httpx.HTTPError: If the request could not be completed.
            OSError: On lower-level I/O failures.
        """
        ...


class HttpxTransport(Transport):
    """:class:`Transport` backed by :class:`httpx.Client`.

    Args:
        timeout: Request timeout in seconds.
        verify_ssl: Verify the server's TLS certificate.
        proxy: Optional proxy URL.
        transport: Optional :class:`httpx.BaseTransport` override, e.g. an
            :class:`httpx.MockTransport` in tests.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        verify_ssl: bool = True,
        proxy: Optional[str] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._timeout = timeout
        self._verify_ssl = verify_ssl
        self._proxy = proxy
        self._transport = transport

    def post(
        self,
        endpoint: str,
        headers: dict[str, str],
        body: str,
        timeout: Optional[float] = None,
        verify_ssl: Optional[bool] = None,
    ) -> TransportResponse:
        with httpx.Client(
            timeout=self._timeout if timeout is None else timeout,
            verify=self._verify_ssl if verify_ssl is None else verify_ssl,
            proxy=self._proxy,
            transport=self._transport,
            follow_redirects=False,
        ) as client:
            response = client.post(endpoint, headers=headers, content=body.encode("utf-8"))
            return TransportResponse(status_code=response.status_code, content=response.content)
