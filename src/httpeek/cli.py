"""Command-line entry point: ``httpeek get|post -u URL [-b k=v,...]``."""

from __future__ import annotations

import argparse
import ipaddress
import re
import sys
from typing import Iterable, NoReturn, Optional, Tuple

import httpx

from . import __version__
from .body import parse_body_items
from .config import DEFAULT_THEME, DEFAULT_TIMEOUT, LOG_FORMATS, LOG_LEVELS, ClientConfig
from .dispatch import build_client, send_request
from .errors import HttpeekError, InvalidUrlError, UsageError
from .highlight import HighlightService
from .logging import configure_logging, get_logger
from .models import Method, RequestDescriptor
from .render import ResponseRenderer


SUPPORTED_SCHEMES = ("http", "https")
MAX_PORT = 65535

# RFC 3986 reg-name without percent-encoding.
_REG_NAME_RE = re.compile(r"^[A-Za-z0-9\-._~!$&'()*+,;=]+$")

logger = get_logger("httpeek.cli")


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises :class:`UsageError` instead of exiting."""

    def error(self, message: str) -> NoReturn:
        raise UsageError(f"{self.prog}: {message}")


def parse_url(value: str) -> str:
    """Validate ``value`` as an absolute http(s) URL and return it normalized."""

    try:
        url = httpx.URL(value)
    except httpx.InvalidURL as exc:
        raise InvalidUrlError(value, str(exc)) from exc
    if not url.scheme:
        raise InvalidUrlError(value, "not an absolute URL")
    if url.scheme not in SUPPORTED_SCHEMES:
        raise InvalidUrlError(value, f"unsupported scheme {url.scheme!r}")
    if not url.host:
        raise InvalidUrlError(value, "missing host")
    if not _is_valid_host(url.raw_host.decode("ascii")):
        raise InvalidUrlError(value, f"invalid host {url.host!r}")
    if url.port is not None and not 0 < url.port <= MAX_PORT:
        raise InvalidUrlError(value, f"port {url.port} out of range")
    return str(url)


def _is_valid_host(host: str) -> bool:
    if ":" in host:
        try:
            ipaddress.IPv6Address(host.strip("[]"))
        except ValueError:
            return False
        return True
    return _REG_NAME_RE.match(host) is not None


def _build_parser() -> argparse.ArgumentParser:
    parser = _ArgumentParser(
        prog="httpeek",
        description=(
            "Send a single GET or POST request and print the status line, headers "
            "and body with syntax highlighting for JSON and HTML. Examples: "
            "`httpeek get -u https://httpbin.org/get`, "
            "`httpeek post -u https://httpbin.org/post -b name=joe,age=5`."
        ),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "--timeout",
        type=float,
        default=DEFAULT_TIMEOUT,
        help=f"Request timeout in seconds (default: {DEFAULT_TIMEOUT:g}).",
    )
    parser.add_argument(
        "--theme",
        default=DEFAULT_THEME,
        help=f"Pygments style used to highlight bodies (default: {DEFAULT_THEME}).",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="WARNING",
        help="Diagnostics written to stderr (default: WARNING).",
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default="plain",
        help="Log line format (default: plain).",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    get = subparsers.add_parser(
        "get",
        help="Send a GET request",
        description="Sends a GET request to URL and prints the response.",
    )
    get.add_argument("-u", "--url", required=True, help="Absolute http(s) URL")
    get.set_defaults(method=Method.GET, body=[])

    post = subparsers.add_parser(
        "post",
        help="Send a POST request with a JSON body",
        description=(
            "Sends a POST request whose body is a JSON object built from key=value "
            "items. Values are always sent as strings; a repeated key keeps its "
            "last value."
        ),
    )
    post.add_argument("-u", "--url", required=True, help="Absolute http(s) URL")
    post.add_argument(
        "-b",
        "--body",
        action="append",
        default=[],
        metavar="KEY=VALUE[,KEY=VALUE...]",
        help="Comma-separated body items; may be repeated.",
    )
    post.set_defaults(method=Method.POST)

    return parser


def parse_args(argv: Optional[Iterable[str]] = None) -> Tuple[RequestDescriptor, ClientConfig]:
    """Validate command-line tokens into a request and its runtime options."""

    parser = _build_parser()
    args = parser.parse_args(args=None if argv is None else list(argv))

    try:
        config = ClientConfig(
            timeout=args.timeout,
            theme=args.theme,
            log_level=args.log_level,
            log_format=args.log_format,
        )
    except ValueError as exc:
        raise UsageError(str(exc)) from exc

    descriptor = RequestDescriptor(
        method=args.method,
        url=parse_url(args.url),
        body=tuple(parse_body_items(args.body)),
    )
    return descriptor, config


def run(
    descriptor: RequestDescriptor,
    config: ClientConfig,
    transport: Optional[httpx.BaseTransport] = None,
) -> None:
    """Send ``descriptor`` and render the response to stdout."""

    renderer = ResponseRenderer(HighlightService(config.theme))
    with build_client(config, transport=transport) as client:
        response = send_request(client, descriptor)
        try:
            renderer.render(response)
        finally:
            response.close()


def main(argv: Optional[Iterable[str]] = None) -> None:
    try:
        descriptor, config = parse_args(argv)
        configure_logging(config)
        logger.debug("Loaded config", extra=config.logging_dict())
        logger.debug("Parsed request", extra={"method": descriptor.method.value, "url": descriptor.url})
        run(descriptor, config)
    except HttpeekError as exc:
        sys.stderr.write(f"Error: {exc}\n")
        sys.exit(exc.exit_code)


if __name__ == "__main__":
    main()
