"""Project configuration: source roots, globs, cache location, directory rules."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path

from code_deps.errors import ConfigurationError
from code_deps.models import Language
from code_deps.paths import normalize_rel
from code_deps.scanner.language_map import LANGUAGE_MARKERS

logger = logging.getLogger(__name__)

CONFIG_FILE = ".code-deps.json"
DEFAULT_CACHE_DIR = ".code-deps"

GRAPH_FILE = ".dep-graph.json"
TEST_MAP_FILE = ".test-map.json"
TEST_RESULT_FILE = ".test-result.json"
FIX_PLAN_FILE = ".fix-plan.json"

_KIND_NAMES = {dict: "an object", list: "a list", str: "a string"}


@dataclass
class SourceConfig:
    dirs: list[str] = field(default_factory=list)
    pattern: str = "**/*"
    ignore: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class DirectoryRule:
    path: str
    priority: str | None = None
    test_focus: tuple[str, ...] | None = None


@dataclass
class ProjectConfig:
    root: Path
    name: str = ""
    language: Language | None = None
    src: SourceConfig = field(default_factory=SourceConfig)
    cache: str = DEFAULT_CACHE_DIR
    concurrency: int = 8
    directory_rules: dict[str, DirectoryRule] = field(default_factory=dict)

    @property
    def cache_dir(self) -> Path:
        cache = Path(self.cache or DEFAULT_CACHE_DIR)
        return cache if cache.is_absolute() else self.root / cache

    def artifact_path(self, name: str) -> Path:
        return self.cache_dir / name

    @property
    def graph_path(self) -> Path:
        return self.artifact_path(GRAPH_FILE)

    @property
    def test_map_path(self) -> Path:
        return self.artifact_path(TEST_MAP_FILE)

    @property
    def test_result_path(self) -> Path:
        return self.artifact_path(TEST_RESULT_FILE)

    @property
    def fix_plan_path(self) -> Path:
        return self.artifact_path(FIX_PLAN_FILE)

    def validate_for_build(self) -> None:
        missing: list[str] = []
        if not self.src.dirs:
            missing.append("src.dirs")
        if not self.src.pattern:
            missing.append("src.pattern")
        if missing:
            raise ConfigurationError(
                f"Missing required config field(s): {', '.join(missing)} in {self.root / CONFIG_FILE}"
            )
        if self.language is None:
            choices = ", ".join(lang.value for lang in Language)
            raise ConfigurationError(
                f"Unsupported or undetected language. Set \"language\" to one of: {choices}"
            )


def find_project_root(start: Path | None = None) -> Path:
    """Walk up from ``start`` to the first directory with a config file or ``.git``."""
    current = (start or Path.cwd()).resolve()
    for candidate in (current, *current.parents):
        if (candidate / CONFIG_FILE).is_file() or (candidate / ".git").exists():
            return candidate
    return current


def detect_language(root: Path) -> Language | None:
    for marker, language in LANGUAGE_MARKERS:
        if (root / marker).exists():
            return language
    return None


def parse_language(value: str | None) -> Language | None:
    if not value:
        return None
    try:
        return Language(str(value).lower())
    except ValueError:
        return None


def load_config(root: Path | None = None) -> ProjectConfig:
    """Load ``.code-deps.json`` from the project root, falling back to defaults."""
    root = Path(root).resolve() if root else find_project_root()
    path = root / CONFIG_FILE

    raw: dict = {}
    if path.is_file():
        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Cannot read {path}: {e}") from e
        if not isinstance(raw, dict):
            raise ConfigurationError(f"{path} must contain a JSON object")
    else:
        logger.debug("No %s in %s, using defaults", CONFIG_FILE, root)

    return config_from_dict(root, raw)


def _typed(value, kind: type, name: str, default):
    if value is None:
        return default
    if not isinstance(value, kind):
        raise ConfigurationError(
            f"Config field {name!r} must be {_KIND_NAMES[kind]}, got {type(value).__name__}"
        )
    return value


def _string_list(value, name: str) -> list[str]:
    items = _typed(value, list, name, [])
    if not all(isinstance(item, str) for item in items):
        raise ConfigurationError(f"Config field {name!r} must be a list of strings")
    return list(items)


def config_from_dict(root: Path, raw: dict) -> ProjectConfig:
    src_raw = _typed(raw.get("src"), dict, "src", {})
    src = SourceConfig(
        dirs=[normalize_rel(d) for d in _string_list(src_raw.get("dirs"), "src.dirs")],
        pattern=_typed(src_raw.get("pattern"), str, "src.pattern", "**/*"),
        ignore=_string_list(src_raw.get("ignore"), "src.ignore"),
    )

    language = parse_language(raw.get("language")) or detect_language(root)

    rules: dict[str, DirectoryRule] = {}
    for key, rule in _typed(raw.get("directoryRules"), dict, "directoryRules", {}).items():
        rel = normalize_rel(key)
        if rel == "." or not isinstance(rule, dict):
            continue
        focus = rule.get("testFocus")
        rules[rel] = DirectoryRule(
            path=rel,
            priority=str(rule["priority"]) if rule.get("priority") else None,
            test_focus=tuple(focus) if isinstance(focus, list) else None,
        )

    try:
        concurrency = max(1, int(raw.get("concurrency") or 8))
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Invalid concurrency: {raw.get('concurrency')!r}") from e

    return ProjectConfig(
        root=root,
        name=_typed(raw.get("name"), str, "name", "") or root.name,
        language=language,
        src=src,
        cache=_typed(raw.get("cache"), str, "cache", "") or DEFAULT_CACHE_DIR,
        concurrency=concurrency,
        directory_rules=rules,
    )


def match_directory_rule(file: str, rules: dict[str, DirectoryRule]) -> DirectoryRule | None:
    """Longest directory prefix rule that contains ``file``."""
    rel = normalize_rel(file)
    best: DirectoryRule | None = None
    for key, rule in rules.items():
        if rel == key or rel.startswith(key + "/"):
            if best is None or len(key) > len(best.path):
                best = rule
    return best
