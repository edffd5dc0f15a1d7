"""Syntax highlighting — a process-wide, read-only catalog of Pygments lexers.

Building the catalog imports every lexer Pygments ships, so it is done once
at startup and then shared by all requests.  Output uses CSS classes only
(no inline colours) so the front end can switch between light and dark
themes.
"""

from __future__ import annotations

from functools import lru_cache
from types import MappingProxyType
from typing import Mapping

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexer import Lexer
from pygments.lexers import find_lexer_class_for_filename, get_all_lexers
from pygments.lexers.diff import DiffLexer
from pygments.lexers.special import TextLexer

# Patterns like ``*.py`` — anything with further wildcards is skipped.
_WILDCARDS = frozenset("*?[")

EMPTY_FILE_HTML = '<div class="highlight"><pre></pre></div>\n'


@lru_cache(maxsize=1)
def _extension_index() -> dict[str, type[Lexer]]:
    index: dict[str, type[Lexer]] = {}
    for _name, _aliases, patterns, _mimetypes in get_all_lexers():
        for pattern in patterns:
            if not pattern.startswith("*."):
                continue
            extension = pattern[2:]
            if not extension or _WILDCARDS.intersection(extension) or extension in index:
                continue
            lexer_cls = find_lexer_class_for_filename(f"file.{extension}")
            if lexer_cls is not None:
                index[extension] = lexer_cls
    return index


class _AnchoredHtmlFormatter(HtmlFormatter):
    """Prefixes every formatted source line with a ``#L<n>`` anchor.

    Pygments closes open spans at each line end, so an anchor never lands
    inside a token that spans several lines.
    """

    def wrap(self, source):
        yield 0, "<pre>"
        n = 0
        for is_line, line in source:
            if is_line:
                n += 1
                line = f"<a href='#L{n}' id='L{n}' class='line'>{n}</a>{line}"
            yield is_line, line
        yield 0, "</pre>"


class SyntaxCatalog:
    """Maps file extensions to lexer classes and renders highlighted HTML."""

    def __init__(self, by_extension: Mapping[str, type[Lexer]] | None = None) -> None:
        self._by_extension = MappingProxyType(
            dict(by_extension) if by_extension is not None else _extension_index()
        )

    def __len__(self) -> int:
        return len(self._by_extension)

    def lexer_for(self, filename: str) -> Lexer:
        """Select a lexer by extension, falling back to plain text."""
        _stem, dot, extension = filename.rpartition(".")
        lexer_cls = None
        if dot:
            lexer_cls = self._by_extension.get(extension) or self._by_extension.get(
                extension.lower()
            )
        if lexer_cls is None:
            return TextLexer(stripnl=False, ensurenl=True)
        return lexer_cls(stripnl=False, ensurenl=True)

    def render_file(self, text: str, filename: str) -> str:
        """Highlight *text* and prefix every line with a ``#L<n>`` anchor."""
        if not text:
            return EMPTY_FILE_HTML
        return highlight(text, self.lexer_for(filename), _AnchoredHtmlFormatter())

    def render_diff(self, patch: str) -> str:
        """Highlight unified-patch text with the generic diff lexer."""
        formatter = HtmlFormatter(cssclass="diff")
        return highlight(patch, DiffLexer(stripnl=False, ensurenl=True), formatter)
