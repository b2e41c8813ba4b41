"""Go import extractor: single-line and block ``import`` forms."""

from __future__ import annotations

import re

from code_deps.extractor.base import BaseExtractor
from code_deps.models import Language

_SINGLE_RE = re.compile(r'^[ \t]*import[ \t]+(?:[\w.]+[ \t]+)?"([^"]+)"', re.MULTILINE)
_BLOCK_RE = re.compile(r"\bimport\s*\(([^)]*)\)")
_QUOTED_RE = re.compile(r'"([^"]+)"')


class GoExtractor(BaseExtractor):
    language = Language.GO

    def extract(self, source: str, path: str = "") -> list[str]:
        stripped = self._strip_comments(source, quotes='"`', multiline="`", char_literals=True)
        found: list[tuple[int, str]] = []

        for m in _SINGLE_RE.finditer(stripped):
            found.append((m.start(1), m.group(1)))

        for block in _BLOCK_RE.finditer(stripped):
            base = block.start(1)
            for m in _QUOTED_RE.finditer(block.group(1)):
                found.append((base + m.start(1), m.group(1)))

        return self._ordered_unique(found)
