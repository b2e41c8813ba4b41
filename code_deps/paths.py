"""Path normalization and glob matching shared by the scanner and analyzers."""

from __future__ import annotations

import functools
import os
import posixpath
import re
from pathlib import Path
from typing import Iterable


def to_posix(p: str) -> str:
    return str(p).replace("\\", "/")


def normalize_rel(p: str) -> str:
    """Canonical project-relative form: forward slashes, no ``./``, no trailing ``/``.

    Returns ``"."`` for empty input.
    """
    raw = to_posix(p or "").strip()
    if not raw:
        return "."
    normalized = posixpath.normpath(raw)
    return normalized.rstrip("/") or "."


def is_within_root(rel: str) -> bool:
    if not rel or rel == "." or posixpath.isabs(rel):
        return False
    return rel != ".." and not rel.startswith("../")


def to_project_rel(root: Path | str, p: str) -> str | None:
    """Convert an absolute or relative input into a safe project-relative key."""
    raw = str(p or "").strip()
    if not raw:
        return None
    if os.path.isabs(raw):
        raw = os.path.relpath(raw, str(root))
    rel = normalize_rel(raw)
    return rel if is_within_root(rel) else None


def module_name(rel_path: str) -> str:
    """First path segment, or ``(root)`` for top-level files."""
    p = normalize_rel(rel_path)
    head, sep, _ = p.partition("/")
    if not sep:
        return "(root)"
    return head or "(root)"


def unique_sorted(items: Iterable[str]) -> list[str]:
    return sorted({i for i in items if i})


def split_comma_list(values: Iterable[str]) -> list[str]:
    out: list[str] = []
    for value in values:
        out.extend(part.strip() for part in str(value).split(",") if part.strip())
    return out


# ── Globs ────────────────────────────────────────────────────


@functools.lru_cache(maxsize=256)
def _glob_regex(pattern: str) -> re.Pattern[str]:
    parts: list[str] = []
    i = 0
    while i < len(pattern):
        if pattern.startswith("**/", i):
            parts.append("(?:.*/)?")
            i += 3
        elif pattern.startswith("**", i):
            parts.append(".*")
            i += 2
        elif pattern[i] == "*":
            parts.append("[^/]*")
            i += 1
        elif pattern[i] == "?":
            parts.append("[^/]")
            i += 1
        else:
            parts.append(re.escape(pattern[i]))
            i += 1
    return re.compile("^" + "".join(parts) + "$")


def _clean_pattern(pattern: str) -> str:
    if not pattern:
        return ""
    cleaned = re.sub(r"^(?:\./)+", "", to_posix(pattern).strip())
    return cleaned.lstrip("/").rstrip("/")


def matches_pattern(pattern: str, path: str) -> bool:
    """Match ``path`` against a glob.

    ``*`` stays within one segment, ``**`` crosses segments and ``**/`` may
    match zero directories. Patterns without ``/`` match the basename only,
    and ``dir/**`` also matches ``dir`` itself.
    """
    pat = _clean_pattern(pattern)
    if not pat:
        return False
    rel = normalize_rel(path)

    if pat.endswith("/**"):
        prefix = pat[:-3]
        if rel == prefix or rel.startswith(prefix + "/"):
            return True

    target = rel if "/" in pat else posixpath.basename(rel)
    return bool(_glob_regex(pat).match(target))


def matches_any(patterns: Iterable[str], path: str) -> bool:
    return any(matches_pattern(p, path) for p in patterns if p)
