"""Rust extractor: ``use`` paths (leading segment only) and ``mod`` declarations."""

from __future__ import annotations

import re

from code_deps.extractor.base import BaseExtractor
from code_deps.models import Language

_USE_RE = re.compile(r"\buse\s+(?:::)?([\w:]+)")
_MOD_RE = re.compile(r"^[ \t]*(?:pub(?:\([^)]*\))?[ \t]+)?mod[ \t]+(\w+)[ \t]*;", re.MULTILINE)


class RustExtractor(BaseExtractor):
    language = Language.RUST

    def extract(self, source: str, path: str = "") -> list[str]:
        stripped = self._strip_comments(source, quotes='"', multiline='"', char_literals=True)
        found: list[tuple[int, str]] = []

        for m in _USE_RE.finditer(stripped):
            found.append((m.start(1), m.group(1).split("::")[0]))

        # `mod foo;` pulls in foo.rs / foo/mod.rs next to the declaring file
        for m in _MOD_RE.finditer(stripped):
            found.append((m.start(1), f"./{m.group(1)}"))

        return self._ordered_unique(found)
