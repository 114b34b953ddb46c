"""Turn an HTTP response into terminal output.

Output order is fixed: status line, headers in the order received, a blank
line, then the body. The body is buffered and the highlighting grammar is
resolved before anything is printed, so a response that cannot be rendered
produces no partial output.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional, Tuple

import httpx
from rich.console import Console
from rich.text import Text

from .errors import BodyReadError
from .highlight import HighlightService
from .logging import get_logger


logger = get_logger("httpeek.render")

# Media type essence -> highlighter language. Anything missing renders plain.
RENDER_TABLE: Mapping[str, str] = {
    "text/html": "html",
    "application/json": "json",
}

_TOKEN = r"[!#$%&'*+.^_`|~0-9A-Za-z-]+"
_ESSENCE_RE = re.compile(rf"^({_TOKEN})/({_TOKEN})$")
_PARAM_RE = re.compile(rf'^({_TOKEN})=({_TOKEN}|"(?:[^"\\]|\\.)*")$')


@dataclass(frozen=True)
class MediaType:
    """A parsed ``Content-Type`` value."""

    type: str
    subtype: str
    parameters: Tuple[Tuple[str, str], ...] = ()

    @property
    def essence(self) -> str:
        return f"{self.type}/{self.subtype}"

    def __str__(self) -> str:
        params = "".join(f"; {name}={value}" for name, value in self.parameters)
        return f"{self.essence}{params}"


def parse_media_type(value: str) -> Optional[MediaType]:
    """Parse ``value`` as a media type, returning ``None`` when malformed."""

    essence, *raw_params = value.split(";")
    match = _ESSENCE_RE.match(essence.strip())
    if match is None:
        return None
    parameters: List[Tuple[str, str]] = []
    for raw in raw_params:
        raw = raw.strip()
        if not raw:
            continue
        param = _PARAM_RE.match(raw)
        if param is None:
            return None
        name, param_value = param.groups()
        if param_value.startswith('"'):
            param_value = re.sub(r"\\(.)", r"\1", param_value[1:-1])
        parameters.append((name.lower(), param_value))
    return MediaType(
        type=match.group(1).lower(),
        subtype=match.group(2).lower(),
        parameters=tuple(parameters),
    )


@dataclass(frozen=True)
class RenderDecision:
    """How to print a body: highlighted as ``language``, or plain when ``None``."""

    language: Optional[str] = None

    @property
    def is_plain(self) -> bool:
        return self.language is None


PLAIN = RenderDecision()


def decide_rendering(
    content_type: Optional[MediaType],
    table: Mapping[str, str] = RENDER_TABLE,
) -> RenderDecision:
    if content_type is None:
        return PLAIN
    language = table.get(content_type.essence)
    if language is None:
        return PLAIN
    return RenderDecision(language=language)


def decode_header_value(raw: bytes) -> Optional[str]:
    """Decode a header value as ASCII, or ``None`` if it contains other bytes."""

    try:
        return raw.decode("ascii")
    except UnicodeDecodeError:
        return None


@dataclass
class ResponseSummary:
    """Everything the renderer prints for one response."""

    http_version: str
    status_code: int
    reason_phrase: str
    headers: List[Tuple[str, str]] = field(default_factory=list)
    content_type: Optional[MediaType] = None
    body_text: str = ""

    @property
    def status_text(self) -> str:
        return f"{self.status_code} {self.reason_phrase}".rstrip()

    @property
    def status_line(self) -> str:
        return f"{self.http_version} {self.status_text}"


def summarize(response: httpx.Response) -> ResponseSummary:
    """Buffer the body of ``response`` and collect what will be rendered."""

    try:
        response.read()
    except (httpx.HTTPError, httpx.StreamError) as exc:
        raise BodyReadError(f"Failed to read response body: {str(exc) or type(exc).__name__}") from exc

    headers: List[Tuple[str, str]] = []
    content_type: Optional[MediaType] = None
    seen_content_type = False
    for raw_name, raw_value in response.headers.raw:
        name = raw_name.decode("latin-1")
        text = decode_header_value(raw_value)
        headers.append((name, text if text is not None else raw_value.decode("latin-1")))
        if seen_content_type or name.lower() != "content-type":
            continue
        seen_content_type = True
        if text is None:
            logger.warning("Ignoring non-ASCII Content-Type header", extra={"value": repr(raw_value)})
            continue
        content_type = parse_media_type(text)
        if content_type is None:
            logger.warning("Ignoring unparseable Content-Type header", extra={"value": text})

    return ResponseSummary(
        http_version=response.http_version,
        status_code=response.status_code,
        reason_phrase=response.reason_phrase,
        headers=headers,
        content_type=content_type,
        body_text=response.text,
    )


def _status_style(status_code: int) -> str:
    if status_code >= 400:
        return "bold red"
    if status_code >= 300:
        return "bold yellow"
    if status_code >= 200:
        return "bold green"
    return "bold cyan"


class ResponseRenderer:
    """Print a response's status, headers and body to a console."""

    def __init__(self, highlighter: HighlightService, console: Optional[Console] = None) -> None:
        self.highlighter = highlighter
        self.console = console or Console(highlight=False, soft_wrap=True, legacy_windows=False)

    def render(self, response: httpx.Response) -> ResponseSummary:
        summary = summarize(response)
        decision = decide_rendering(summary.content_type)
        logger.debug(
            "Rendering response",
            extra={
                "status_line": summary.status_line,
                "content_type": str(summary.content_type) if summary.content_type else None,
                "language": decision.language,
            },
        )
        body: Iterable[str]
        if decision.is_plain:
            body = (summary.body_text,)
        else:
            body = self.highlighter.highlight_lines(summary.body_text, decision.language)

        self.print_status(summary)
        self.print_headers(summary)
        self.console.print()
        self.print_body(body)
        return summary

    def print_status(self, summary: ResponseSummary) -> None:
        line = Text.assemble(
            (summary.http_version, "white"),
            " ",
            (summary.status_text, _status_style(summary.status_code)),
        )
        self.console.print(line)

    def print_headers(self, summary: ResponseSummary) -> None:
        for name, value in summary.headers:
            self.console.print(Text.assemble((f"{name}: ", "yellow"), (value, "blue")))

    def print_body(self, fragments: Iterable[str]) -> None:
        out = self.console.file
        for fragment in fragments:
            out.write(fragment)
            out.flush()
