"""Dependency graph builder: scans sources, resolves imports, detects cycles."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from code_deps.analysis.cycles import detect_cycles
from code_deps.analysis.resolver import Resolver
from code_deps.errors import ExtractionError, FileAccessError, UnresolvedReferenceError
from code_deps.extractor import extract_imports, is_relative
from code_deps.models import DependencyGraph, FileNode, GraphStats, Language
from code_deps.scanner import scan_sources, spec_for

logger = logging.getLogger(__name__)


@dataclass
class BuildResult:
    graph: DependencyGraph
    warnings: list[str] = field(default_factory=list)


class DependencyGraphBuilder:
    """Build a file-level dependency graph for one project.

    Reading and extracting run on a bounded thread pool; resolution and
    graph assembly are sequential. Files that cannot be read or parsed are
    left out of the graph entirely.
    """

    def __init__(self, language: Language, concurrency: int = 8):
        self.language = language
        self.concurrency = max(1, concurrency)
        self.spec = spec_for(language)

    def build_project(
        self,
        root: Path,
        src_dirs: list[str],
        pattern: str = "**/*",
        ignore: list[str] | None = None,
        skip_dirs: list[str] | None = None,
    ) -> BuildResult:
        """Scan ``src_dirs`` under ``root`` and build the graph."""
        known = scan_sources(root, src_dirs, self.language, pattern, ignore, skip_dirs)
        logger.info("Scanned %d %s file(s) under %s", len(known), self.language.value, root)
        return self.build(known, root_path=str(root))

    def build(self, files: dict[str, Path], root_path: str = ".") -> BuildResult:
        """Build from an already-scanned known-file set (relative path -> absolute path)."""
        warnings: list[str] = []

        # Step 1: read + extract every file
        specifiers: dict[str, list[str]] = {}
        with ThreadPoolExecutor(max_workers=self.concurrency) as pool:
            for rel, specs, error in pool.map(self._load, files.items()):
                if error is not None:
                    logger.warning("Skipping %s", error)
                    warnings.append(str(error))
                    continue
                specifiers[rel] = specs

        # Step 2: resolve against the files that loaded successfully
        resolver = Resolver(specifiers, self.spec)
        forward: dict[str, list[str]] = {}
        for rel in sorted(specifiers):
            targets: dict[str, None] = {}
            for spec in specifiers[rel]:
                if not is_relative(spec):
                    continue
                try:
                    target = resolver.resolve(spec, rel)
                except UnresolvedReferenceError as e:
                    logger.debug("%s", e)
                    continue
                # a package __init__ reaching its own package is not an edge
                if target != rel:
                    targets[target] = None
            forward[rel] = list(targets)

        # Step 3: reverse edges
        reverse: dict[str, set[str]] = {rel: set() for rel in forward}
        for rel, targets in forward.items():
            for target in targets:
                reverse[target].add(rel)

        cycles = detect_cycles(forward)
        nodes = {
            rel: FileNode(path=rel, imports=frozenset(targets), imported_by=frozenset(reverse[rel]))
            for rel, targets in forward.items()
        }
        stats = GraphStats(
            total_files=len(nodes),
            total_edges=sum(len(n.imports) for n in nodes.values()),
            cycle_count=len(cycles),
        )

        graph = DependencyGraph(
            generated_at=datetime.now(timezone.utc),
            root_path=root_path,
            target_language=self.language,
            files=nodes,
            cycles=tuple(cycles),
            stats=stats,
        )
        logger.info(
            "Built dependency graph: %d files, %d edges, %d cycles",
            stats.total_files, stats.total_edges, stats.cycle_count,
        )
        return BuildResult(graph=graph, warnings=warnings)

    def _load(self, entry: tuple[str, Path]) -> tuple[str, list[str], Exception | None]:
        rel, path = entry
        try:
            source = self._read_source(rel, path)
            return rel, extract_imports(source, self.language, rel), None
        except (FileAccessError, ExtractionError) as e:
            return rel, [], e

    @staticmethod
    def _read_source(rel: str, path: Path) -> str:
        try:
            return path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise FileAccessError(rel, e.strerror or str(e)) from e
