"""Request-side data model."""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Tuple


class Method(str, enum.Enum):
    """HTTP methods supported by the CLI."""

    GET = "GET"
    POST = "POST"


@dataclass(frozen=True)
class KeyValuePair:
    """One ``key=value`` body field supplied on the command line."""

    key: str
    value: str


@dataclass(frozen=True)
class RequestDescriptor:
    """Validated description of the single request to send."""

    method: Method
    url: str
    body: Tuple[KeyValuePair, ...] = ()
