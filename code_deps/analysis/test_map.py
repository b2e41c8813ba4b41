"""Source <-> test mapping, produced externally and consumed opportunistically."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

from code_deps.paths import is_within_root, normalize_rel, unique_sorted


def _as_paths(value) -> tuple[str, ...]:
    if isinstance(value, str):
        values = [value]
    elif isinstance(value, (list, tuple)):
        values = [v for v in value if isinstance(v, str)]
    else:
        return ()
    return tuple(p for p in (normalize_rel(v) for v in values if v) if is_within_root(p))


@dataclass(frozen=True)
class TestMap:
    __test__ = False  # not a pytest class

    src_to_test: dict[str, tuple[str, ...]] = field(default_factory=dict)
    test_to_src: dict[str, tuple[str, ...]] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict) -> TestMap:
        def table(raw) -> dict[str, tuple[str, ...]]:
            if not isinstance(raw, dict):
                return {}
            out: dict[str, tuple[str, ...]] = {}
            for key, value in raw.items():
                paths = _as_paths(value)
                if paths:
                    out[normalize_rel(key)] = paths
            return out

        return cls(
            src_to_test=table(data.get("srcToTest")),
            test_to_src=table(data.get("testToSrc")),
        )

    def source_for(self, test_file: str) -> str | None:
        """The single source file a test is mapped to."""
        sources = self.test_to_src.get(normalize_rel(test_file))
        return sources[0] if sources else None

    def tests_for(self, files: Iterable[str]) -> list[str]:
        """Translate a file set into tests to rerun.

        Mapped sources contribute their tests; files that are tests themselves
        are kept as-is.
        """
        out: set[str] = set()
        for file in files:
            rel = normalize_rel(file)
            if rel == ".":
                continue
            mapped = self.src_to_test.get(rel)
            if mapped:
                out.update(mapped)
                continue
            if rel in self.test_to_src:
                out.add(rel)
        return unique_sorted(out)
