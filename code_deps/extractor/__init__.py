"""Extractor registry."""

from __future__ import annotations

from code_deps.extractor.base import BaseExtractor
from code_deps.extractor.go_extractor import GoExtractor
from code_deps.extractor.js_extractor import JsExtractor
from code_deps.extractor.python_extractor import PythonExtractor
from code_deps.extractor.rust_extractor import RustExtractor
from code_deps.models import Language

_EXTRACTORS: dict[Language, BaseExtractor] = {
    Language.JAVASCRIPT: JsExtractor(Language.JAVASCRIPT),
    Language.TYPESCRIPT: JsExtractor(Language.TYPESCRIPT),
    Language.PYTHON: PythonExtractor(),
    Language.GO: GoExtractor(),
    Language.RUST: RustExtractor(),
}


def get_extractor(language: Language) -> BaseExtractor:
    extractor = _EXTRACTORS.get(language)
    if extractor is None:
        raise ValueError(f"No extractor for language: {language}")
    return extractor


def extract_imports(source: str, language: Language, path: str = "") -> list[str]:
    """Extract import specifiers from one file's text."""
    return get_extractor(language).extract(source, path)


def is_relative(specifier: str) -> bool:
    """Only relative specifiers can map to a project file."""
    return specifier.startswith(".")


__all__ = [
    "BaseExtractor",
    "GoExtractor",
    "JsExtractor",
    "PythonExtractor",
    "RustExtractor",
    "extract_imports",
    "get_extractor",
    "is_relative",
]
