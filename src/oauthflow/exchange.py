"""Token endpoint exchange shared by every grant strategy.

:class:`TokenExchanger` sends one prebuilt token request through a
:class:`~oauthflow.transport.Transport` and turns the result into either a
:class:`~oauthflow.models.TokenResponse` or an exception:

- 2xx -> parsed token response (``access_token`` required).
- non-2xx -> :class:`~oauthflow.exceptions.OAuthProtocolError` built from the
  ``error`` / ``error_description`` body.
- no response at all -> :class:`~oauthflow.exceptions.ConnectionError_`.

There is exactly one attempt per call.
"""

from __future__ import annotations

import logging
from typing import Optional

import httpx
from pydantic import ValidationError

from oauthflow.exceptions import ConnectionError_, OAuthProtocolError
from oauthflow.models import OAuthErrorResponse, TokenResponse
from oauthflow.transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)

INVALID_TOKEN_RESPONSE = "invalid_token_response"

_EXCERPT_LIMIT = 200


class TokenSerializer:
    """Stateless JSON decoder for token endpoint payloads."""

    def parse_token(self, content: bytes) -> TokenResponse:
        """Decode a success body.

        Raises:
            pydantic.ValidationError: If the body is not a JSON object with
                an ``access_token``.
        """
        return TokenResponse.model_validate_json(content)

    def parse_error(self, content: bytes) -> OAuthErrorResponse:
        """Decode an error body.

        Raises:
            pydantic.ValidationError: If the body is not a JSON object with
                an ``error`` field.
        """
        return OAuthErrorResponse.model_validate_json(content)


def _excerpt(content: bytes) -> str:
    text = content.decode("utf-8", errors="replace").strip()
    if len(text) > _EXCERPT_LIMIT:
        return text[:_EXCERPT_LIMIT] + "..."
    return text


class TokenExchanger:
    """Performs the POST to the token endpoint and interprets the response.

    Args:
        transport: The transport to send requests with. Defaults to an
            :class:`~oauthflow.transport.HttpxTransport`.
        serializer: Decoder for response bodies. Defaults to a new
            :class:`TokenSerializer`.
    """

    def __init__(
        self,
        transport: Optional[Transport] = None,
        serializer: Optional[TokenSerializer] = None,
    ) -> None:
        self._transport = transport or HttpxTransport()
        self._serializer = serializer or TokenSerializer()

    def exchange(
        self,
        endpoint: str,
        headers: dict[str, str],
        body: str,
        timeout: Optional[float] = None,
        verify_ssl: Optional[bool] = None,
    ) -> TokenResponse:
        """Send a token request and return the parsed response.

        Args:
            endpoint: Token endpoint URL.
            headers: Request headers (content type, accept, optional auth).
            body: URL-encoded form body.
            timeout: Request timeout in seconds; ``None`` uses the
                transport default.
            verify_ssl: TLS certificate verification; ``None`` uses the
                transport default.

        Returns:
            The parsed :class:`~oauthflow.models.TokenResponse`.

        Raises:
            OAuthProtocolError: If the endpoint answered with an error, or a
                success body that is not a valid token response.
            ConnectionError_: If no response was received.
        """
        try:
            response = self._transport.post(
                endpoint, headers, body, timeout=timeout, verify_ssl=verify_ssl
            )
        except ConnectionError_:
            raise
        except (httpx.HTTPError, OSError) as exc:
            raise ConnectionError_(
                f"Error establishing token request connection to {endpoint}: {exc}"
            ) from exc

        logger.debug("Token endpoint %s answered HTTP %s", endpoint, response.status_code)

        if response.is_successful:
            try:
                return self._serializer.parse_token(response.content)
            except ValidationError as exc:
                raise OAuthProtocolError(
                    INVALID_TOKEN_RESPONSE,
                    f"Token endpoint returned HTTP {response.status_code} without a "
                    f"valid token response ({exc.error_count()} validation error(s))",
                ) from exc

        try:
            error = self._serializer.parse_error(response.content)
        except ValidationError as exc:
            raise OAuthProtocolError(
                f"http_{response.status_code}", _excerpt(response.content) or None
            ) from exc
        logger.info("Token endpoint rejected the request: %s", error.error)
        raise OAuthProtocolError(error.error, error.error_description)
