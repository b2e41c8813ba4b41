"""JavaScript/TypeScript import extractor (ES modules + CommonJS)."""

from __future__ import annotations

import re

from code_deps.extractor.base import BaseExtractor
from code_deps.models import Language

_SPEC = r"""['"]([^'"]+)['"]"""

_IMPORT_PATTERNS: tuple[re.Pattern[str], ...] = (
    # import x from '...' / import { a } from '...' / import type T from '...'
    re.compile(r"\bimport\s+(?:type\s+)?[\w*\s{},$]+\sfrom\s*" + _SPEC),
    # import '...'
    re.compile(r"\bimport\s*" + _SPEC),
    # import('...')
    re.compile(r"\bimport\s*\(\s*" + _SPEC + r"\s*\)"),
    # export { a, b } from '...'
    re.compile(r"\bexport\s*(?:type\s+)?\{[^}]*\}\s*from\s*" + _SPEC),
    # export * from '...' / export * as ns from '...'
    re.compile(r"\bexport\s*\*\s*(?:as\s+[\w$]+\s*)?from\s*" + _SPEC),
    # require('...')
    re.compile(r"\brequire\s*\(\s*" + _SPEC + r"\s*\)"),
)


class JsExtractor(BaseExtractor):

    def __init__(self, language: Language = Language.JAVASCRIPT):
        self.language = language

    def extract(self, source: str, path: str = "") -> list[str]:
        stripped = self._strip_comments(source)
        found: list[tuple[int, str]] = []
        for pattern in _IMPORT_PATTERNS:
            for m in pattern.finditer(stripped):
                found.append((m.start(1), m.group(1).strip()))
        return self._ordered_unique(found)
