"""Parsing and JSON encoding of ``key=value`` request bodies."""

from __future__ import annotations

import json
from typing import Dict, Iterable, Iterator, List, Mapping

from .errors import InvalidBodyPairError
from .models import KeyValuePair


ITEM_DELIMITER = ","


def parse_kv_pair(token: str) -> KeyValuePair:
    """Split ``token`` on its first ``=`` into a :class:`KeyValuePair`."""

    key, sep, value = token.partition("=")
    if not sep:
        raise InvalidBodyPairError(token, "expected key=value")
    if not key:
        raise InvalidBodyPairError(token, "no key found")
    return KeyValuePair(key=key, value=value)


def parse_body_items(values: Iterable[str]) -> List[KeyValuePair]:
    """Parse every comma-delimited item from repeated ``-b`` options, in order."""

    pairs: List[KeyValuePair] = []
    for value in values:
        if value == "":
            continue
        for token in value.split(ITEM_DELIMITER):
            pairs.append(parse_kv_pair(token))
    return pairs


class EncodedBody(Mapping[str, str]):
    """Flat string-to-string mapping sent as a JSON object."""

    def __init__(self, fields: Mapping[str, str]) -> None:
        self._fields: Dict[str, str] = dict(fields)

    def __getitem__(self, key: str) -> str:
        return self._fields[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __repr__(self) -> str:
        return f"EncodedBody({self._fields!r})"

    def to_json(self) -> str:
        return json.dumps(self._fields, ensure_ascii=False, separators=(",", ":"))

    def to_bytes(self) -> bytes:
        return self.to_json().encode("utf-8")


def encode_body(pairs: Iterable[KeyValuePair]) -> EncodedBody:
    """Collapse ``pairs`` into an :class:`EncodedBody`; later keys overwrite earlier ones."""

    fields: Dict[str, str] = {}
    for pair in pairs:
        fields[pair.key] = pair.value
    return EncodedBody(fields)
