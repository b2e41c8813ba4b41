"""Scanner entry point."""

from __future__ import annotations

from pathlib import Path

from code_deps.models import Language
from code_deps.scanner.base import DEFAULT_SKIP_DIRS, SourceScanner
from code_deps.scanner.language_map import LANGUAGE_SPECS, LanguageSpec, spec_for


def scan_sources(
    root: Path,
    src_dirs: list[str],
    language: Language,
    pattern: str = "**/*",
    ignore: list[str] | None = None,
    skip_dirs: list[str] | None = None,
) -> dict[str, Path]:
    """Return the known-file set: project-relative path -> absolute path."""
    scanner = SourceScanner(
        extensions=spec_for(language).extensions,
        pattern=pattern,
        ignore=ignore,
        skip_dirs=skip_dirs,
    )
    return scanner.scan(root, src_dirs)


__all__ = [
    "DEFAULT_SKIP_DIRS",
    "LANGUAGE_SPECS",
    "LanguageSpec",
    "SourceScanner",
    "scan_sources",
    "spec_for",
]
