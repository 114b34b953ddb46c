"""Terminal syntax highlighting backed by pygments.

A :class:`HighlightService` owns the theme and a cache of grammars. It is
constructed once per invocation and handed to the renderer, which keeps it
swappable for a fake in tests.
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Iterator, List, Tuple

import pygments
from pygments.formatters.terminal256 import TerminalTrueColorFormatter
from pygments.lexer import Lexer
from pygments.lexers import get_lexer_by_name
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from .config import DEFAULT_THEME
from .errors import HighlightEngineError
from .logging import get_logger


Token = Tuple[Any, str]

logger = get_logger("httpeek.highlight")


class HighlightService:
    """Highlight text as a named language using a fixed theme."""

    def __init__(self, theme: str = DEFAULT_THEME) -> None:
        try:
            style = get_style_by_name(theme)
        except ClassNotFound as exc:
            raise HighlightEngineError(f"Unknown highlight theme: {theme}") from exc
        self.theme = theme
        self._formatter = TerminalTrueColorFormatter(style=style)
        self._lexers: Dict[str, Lexer] = {}

    def lexer_for(self, language: str) -> Lexer:
        lexer = self._lexers.get(language)
        if lexer is None:
            try:
                # Keep the input untouched: no newline stripping or appending.
                lexer = get_lexer_by_name(language, stripnl=False, ensurenl=False)
            except ClassNotFound as exc:
                raise HighlightEngineError(f"No grammar available for language: {language}") from exc
            self._lexers[language] = lexer
        return lexer

    def highlight_lines(self, text: str, language: str) -> Iterator[str]:
        """Return a one-pass iterator of ANSI-colored lines of ``text``.

        The grammar is resolved immediately so a missing language fails before
        any output is produced. Each yielded fragment keeps its original line
        ending; the last fragment has none if ``text`` does not end with one.
        """

        lexer = self.lexer_for(language)
        logger.debug("Highlighting body", extra={"language": language, "theme": self.theme})
        tokens = ((ttype, value) for _, ttype, value in lexer.get_tokens_unprocessed(text))
        return self._format_lines(tokens)

    def _format_lines(self, tokens: Iterable[Token]) -> Iterator[str]:
        for line in _split_lines(tokens):
            yield pygments.format(line, self._formatter)


def _split_lines(tokens: Iterable[Token]) -> Iterator[List[Token]]:
    """Regroup a token stream so every group ends at a newline."""

    line: List[Token] = []
    for ttype, value in tokens:
        parts = value.split("\n")
        for part in parts[:-1]:
            line.append((ttype, part + "\n"))
            yield line
            line = []
        if parts[-1]:
            line.append((ttype, parts[-1]))
    if line:
        yield line
