"""Per-language file extensions and package index names."""

from __future__ import annotations

from dataclasses import dataclass

from code_deps.models import Language


@dataclass(frozen=True)
class LanguageSpec:
    extensions: tuple[str, ...]  # resolution priority order
    index_file: str  # file a bare directory import resolves to


LANGUAGE_SPECS: dict[Language, LanguageSpec] = {
    Language.JAVASCRIPT: LanguageSpec((".js", ".mjs", ".cjs", ".jsx"), "index.js"),
    Language.TYPESCRIPT: LanguageSpec((".ts", ".tsx", ".mts", ".cts"), "index.ts"),
    Language.PYTHON: LanguageSpec((".py",), "__init__.py"),
    Language.GO: LanguageSpec((".go",), "index.go"),
    Language.RUST: LanguageSpec((".rs",), "mod.rs"),
}

# Marker file -> language, first match wins
LANGUAGE_MARKERS: tuple[tuple[str, Language], ...] = (
    ("package.json", Language.JAVASCRIPT),
    ("tsconfig.json", Language.TYPESCRIPT),
    ("pyproject.toml", Language.PYTHON),
    ("setup.py", Language.PYTHON),
    ("requirements.txt", Language.PYTHON),
    ("go.mod", Language.GO),
    ("Cargo.toml", Language.RUST),
)


def spec_for(language: Language) -> LanguageSpec:
    return LANGUAGE_SPECS[language]
