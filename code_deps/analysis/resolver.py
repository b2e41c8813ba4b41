"""Resolve relative import specifiers to known project files."""

from __future__ import annotations

import posixpath
from typing import Collection

from code_deps.errors import UnresolvedReferenceError
from code_deps.extractor import is_relative
from code_deps.paths import is_within_root
from code_deps.scanner.language_map import LanguageSpec


class Resolver:
    """Maps ``(specifier, importing file)`` to a canonical path in ``known_files``.

    Paths are project-relative with forward slashes. A specifier that already
    has an extension is tried as-is; otherwise each language extension is tried
    in order, then the language's index file inside the base directory.
    """

    def __init__(self, known_files: Collection[str], spec: LanguageSpec):
        self.known_files = known_files
        self.spec = spec

    def candidates(self, specifier: str, from_file: str) -> list[str]:
        spec = specifier.strip()
        if not is_relative(spec):
            return []

        base = posixpath.normpath(posixpath.join(posixpath.dirname(from_file), spec))
        if base == ".":
            # the project root itself can only resolve to its index file
            return [self.spec.index_file]
        if not is_within_root(base):
            return []

        if posixpath.splitext(base)[1]:
            return [base]
        out = [f"{base}{ext}" for ext in self.spec.extensions]
        out.append(f"{base}/{self.spec.index_file}")
        return out

    def resolve(self, specifier: str, from_file: str) -> str:
        for candidate in self.candidates(specifier, from_file):
            if candidate in self.known_files:
                return candidate
        raise UnresolvedReferenceError(specifier, from_file)

    def resolve_or_none(self, specifier: str, from_file: str) -> str | None:
        try:
            return self.resolve(specifier, from_file)
        except UnresolvedReferenceError:
            return None
