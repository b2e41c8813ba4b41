"""Abstract base import extractor with shared comment stripping."""

from __future__ import annotations

import abc
import re
from typing import Iterable

from code_deps.models import Language

_CHAR_LITERAL_RE = re.compile(r"'(?:\\.[^'\n]*|[^\\'\n])'")


class BaseExtractor(abc.ABC):
    """Turns one file's text into an ordered, de-duplicated list of import specifiers.

    Extractors hold no per-scan state, so a single instance can serve
    concurrent file reads.
    """

    language: Language

    @abc.abstractmethod
    def extract(self, source: str, path: str = "") -> list[str]:
        """Return import specifiers in order of first appearance."""

    @staticmethod
    def _ordered_unique(found: Iterable[tuple[int, str]]) -> list[str]:
        """Sort ``(offset, specifier)`` pairs by offset and drop repeats."""
        return list(dict.fromkeys(spec for _, spec in sorted(found, key=lambda f: f[0]) if spec))

    @staticmethod
    def _strip_comments(
        source: str,
        quotes: str = "'\"`",
        multiline: str = "`",
        char_literals: bool = False,
    ) -> str:
        """Blank out ``//`` and ``/* */`` comments, aware of string literals.

        Offsets and newlines are preserved so match positions stay comparable.

        String detection is a heuristic. A quote listed in ``quotes`` opens a
        string; unless it is also in ``multiline`` the string ends at the next
        newline even when unterminated, so a stray quote (a JSX apostrophe, a
        quote inside a regex literal) only hides comments on its own line.
        With ``char_literals`` set, ``'x'`` and ``'\\n'`` style literals are
        copied verbatim so a quote character inside them opens nothing.
        """
        out: list[str] = []
        in_line_comment = False
        in_block_comment = False
        quote: str | None = None
        length = len(source)
        pos = 0

        while pos < length:
            ch = source[pos]
            next_ch = source[pos + 1] if pos + 1 < length else ""

            if in_line_comment:
                if ch == "\n":
                    in_line_comment = False
                    out.append(ch)
                else:
                    out.append(" ")
            elif in_block_comment:
                if ch == "*" and next_ch == "/":
                    in_block_comment = False
                    out.append("  ")
                    pos += 1
                else:
                    out.append("\n" if ch == "\n" else " ")
            elif quote is not None:
                out.append(ch)
                if ch == "\\" and next_ch:
                    out.append(next_ch)
                    pos += 1
                elif ch == quote or (ch == "\n" and quote not in multiline):
                    quote = None
            else:
                literal = _CHAR_LITERAL_RE.match(source, pos) if char_literals and ch == "'" else None
                if literal:
                    out.append(literal.group())
                    pos = literal.end()
                    continue
                if ch == "/" and next_ch == "/":
                    in_line_comment = True
                    out.append("  ")
                    pos += 1
                elif ch == "/" and next_ch == "*":
                    in_block_comment = True
                    out.append("  ")
                    pos += 1
                else:
                    if ch in quotes:
                        quote = ch
                    out.append(ch)

            pos += 1

        return "".join(out)
