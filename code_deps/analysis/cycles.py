"""Cycle detection over forward import edges."""

from __future__ import annotations

from typing import Iterable, Iterator, Mapping

from code_deps.models import Cycle

_WHITE, _GRAY, _BLACK = 0, 1, 2


def cycle_key(files: Iterable[str]) -> str:
    return "|".join(sorted(files))


def detect_cycles(edges: Mapping[str, Iterable[str]]) -> list[Cycle]:
    """Three-color DFS, nodes and neighbors in sorted order.

    A back edge into a gray node yields the DFS-stack slice from that node
    to the current one. Cycles with the same node set are reported once.
    """
    adjacency: dict[str, list[str]] = {node: sorted(targets) for node, targets in edges.items()}
    color: dict[str, int] = dict.fromkeys(adjacency, _WHITE)
    seen: set[str] = set()
    cycles: list[Cycle] = []

    for start in sorted(adjacency):
        if color[start] != _WHITE:
            continue

        path: list[str] = [start]
        position: dict[str, int] = {start: 0}
        frames: list[Iterator[str]] = [iter(adjacency[start])]
        color[start] = _GRAY

        while frames:
            for neighbor in frames[-1]:
                state = color.get(neighbor, _WHITE)
                if state == _WHITE:
                    color[neighbor] = _GRAY
                    position[neighbor] = len(path)
                    path.append(neighbor)
                    frames.append(iter(adjacency.get(neighbor, ())))
                    break
                if state == _GRAY:
                    members = tuple(path[position[neighbor]:])
                    key = cycle_key(members)
                    if key not in seen:
                        seen.add(key)
                        cycles.append(Cycle(members))
            else:
                frames.pop()
                done = path.pop()
                del position[done]
                color[done] = _BLACK

    return cycles
