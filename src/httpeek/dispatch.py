"""Build and send the single HTTP request of an invocation."""

from __future__ import annotations

from typing import Dict, Optional

import httpx

from . import __version__
from .body import encode_body
from .config import ClientConfig
from .errors import TransportError
from .logging import get_logger, redact_mapping
from .models import Method, RequestDescriptor


JSON_CONTENT_TYPE = "application/json"
USER_AGENT = f"httpeek/{__version__}"

logger = get_logger("httpeek.dispatch")


def build_client(config: ClientConfig, transport: Optional[httpx.BaseTransport] = None) -> httpx.Client:
    """Return an ``httpx.Client`` configured for one request."""

    return httpx.Client(
        headers={"User-Agent": USER_AGENT},
        timeout=config.timeout,
        follow_redirects=config.follow_redirects,
        transport=transport,
    )


def build_request(client: httpx.Client, descriptor: RequestDescriptor) -> httpx.Request:
    """Translate ``descriptor`` into an ``httpx.Request`` without sending it."""

    if descriptor.method is Method.POST:
        body = encode_body(descriptor.body)
        return client.build_request(
            descriptor.method.value,
            descriptor.url,
            content=body.to_bytes(),
            headers={"Content-Type": JSON_CONTENT_TYPE},
        )
    return client.build_request(descriptor.method.value, descriptor.url)


def send_request(client: httpx.Client, descriptor: RequestDescriptor) -> httpx.Response:
    """Send exactly one request and return the response with its body unread.

    The caller owns the returned response and must close it.
    """

    request = build_request(client, descriptor)
    headers: Dict[str, str] = dict(request.headers.items())
    logger.debug(
        "Sending request",
        extra={
            "method": request.method,
            "url": str(request.url),
            "headers": redact_mapping(headers),
            "body_bytes": len(request.content),
        },
    )
    try:
        response = client.send(request, stream=True)
    except httpx.RequestError as exc:
        logger.debug("Request failed", extra={"url": str(request.url), "error": repr(exc)})
        raise TransportError(f"{request.method} {request.url} failed: {str(exc) or type(exc).__name__}") from exc
    logger.debug(
        "Received response",
        extra={"status_code": response.status_code, "http_version": response.http_version},
    )
    return response
