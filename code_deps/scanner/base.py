"""Source scanner: enumerates the known-file set for one project."""

from __future__ import annotations

import fnmatch
import logging
from pathlib import Path

from code_deps.paths import is_within_root, matches_any, matches_pattern, normalize_rel, to_posix

logger = logging.getLogger(__name__)

DEFAULT_SKIP_DIRS: tuple[str, ...] = (
    "node_modules", ".git", "dist", "build", ".next", "__pycache__",
    "venv", ".venv", "target", "vendor", ".cache", "coverage",
    ".turbo", ".nuxt", ".output", "out", ".project-index", ".code-deps",
    "*.egg-info",
)


class SourceScanner:
    """Walks source roots and returns canonical project-relative paths.

    Directories are pruned by name (``skip_dirs``, fnmatch-style) and by the
    ignore globs; files must carry one of ``extensions``, match ``pattern``
    relative to their source dir, and match no ignore glob.
    """

    def __init__(
        self,
        extensions: tuple[str, ...],
        pattern: str = "**/*",
        ignore: list[str] | None = None,
        skip_dirs: list[str] | None = None,
    ):
        self.extensions = tuple(ext.lower() for ext in extensions)
        self.pattern = pattern or "**/*"
        self.ignore = list(ignore or [])
        self.skip_dirs = list(skip_dirs) if skip_dirs is not None else list(DEFAULT_SKIP_DIRS)

    def scan(self, root: Path, src_dirs: list[str]) -> dict[str, Path]:
        """Scan every source dir under ``root``. Keys are sorted project-relative paths."""
        root = root.resolve()
        found: dict[str, Path] = {}
        for src_dir in src_dirs:
            rel_dir = normalize_rel(src_dir)
            if rel_dir != "." and not is_within_root(rel_dir):
                logger.warning("Source directory outside project root: %s", src_dir)
                continue
            # not resolved: keys stay relative to root even through a symlinked src dir
            src_abs = root if rel_dir == "." else root / rel_dir
            if not src_abs.is_dir():
                logger.warning("Source directory not found: %s", src_abs)
                continue
            for path in self.scan_directory(src_abs):
                rel = to_posix(str(path.relative_to(root)))
                found.setdefault(rel, path)
        return dict(sorted(found.items()))

    def scan_directory(self, directory: Path) -> list[Path]:
        """Iteratively walk one source dir."""
        results: list[Path] = []
        stack: list[Path] = [directory]
        while stack:
            current = stack.pop()
            try:
                entries = sorted(current.iterdir())
            except OSError as e:
                logger.warning("Cannot read directory %s: %s", current, e)
                continue

            for entry in entries:
                rel = to_posix(str(entry.relative_to(directory)))
                if entry.is_dir():
                    # symlinked dirs are never followed, so link loops cannot re-enter the tree
                    if entry.is_symlink():
                        logger.debug("Not following symlinked directory %s", entry)
                        continue
                    if self._should_skip(entry.name) or matches_any(self.ignore, rel):
                        continue
                    stack.append(entry)
                elif entry.is_file() and self._should_include(entry, rel):
                    results.append(entry)
        return sorted(results)

    def _should_include(self, path: Path, rel: str) -> bool:
        if path.suffix.lower() not in self.extensions:
            return False
        if not matches_pattern(self.pattern, rel):
            return False
        return not matches_any(self.ignore, rel)

    def _should_skip(self, name: str) -> bool:
        return any(fnmatch.fnmatch(name, pattern) for pattern in self.skip_dirs)
