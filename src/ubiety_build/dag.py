# dag.py
from __future__ import annotations

import heapq
from typing import Dict, Iterable, List, Set, Tuple

from .errors import CycleError, GraphError, UnknownTargetError
from .model import Target


def build_graph(targets: Iterable[Target]) -> Tuple[Dict[str, Target], Dict[str, int]]:
    """
    Index targets by name and validate the registry.

    Requires:
      - target.name: str (unique)
      - every name in depends_on / before / after refers to a known target

    Returns (by_name, declaration index per name).
    """
    targets = list(targets)
    names = [t.name for t in targets]
    if len(set(names)) != len(names):
        dupes = sorted({n for n in names if names.count(n) > 1})
        raise GraphError(
            f"Duplicate target names found: {dupes}",
            details={"duplicates": ", ".join(dupes)},
        )

    by_name: Dict[str, Target] = {t.name: t for t in targets}
    index: Dict[str, int] = {t.name: i for i, t in enumerate(targets)}

    for t in targets:
        for ref in t.references():
            if ref not in by_name:
                raise UnknownTargetError(ref, by_name, referenced_by=t.name)

    return by_name, index


def resolve_names(by_name: Dict[str, Target], requested: Iterable[str]) -> List[str]:
    """Map requested names onto declared ones (case-insensitive)."""
    folded = {n.lower(): n for n in by_name}
    out: List[str] = []
    for name in requested:
        real = name if name in by_name else folded.get(name.lower())
        if real is None:
            raise UnknownTargetError(name, by_name)
        if real not in out:
            out.append(real)
    return out


def closure(by_name: Dict[str, Target], roots: Iterable[str]) -> Set[str]:
    """
    Every target reachable from roots through depends_on edges.
    Raises CycleError as soon as a depends_on cycle is walked into.
    """
    seen: Set[str] = set()
    path: List[str] = []
    on_path: Set[str] = set()

    def visit(name: str) -> None:
        if name in on_path:
            start = path.index(name)
            raise CycleError(path[start:] + [name])
        if name in seen:
            return
        on_path.add(name)
        path.append(name)
        for dep in by_name[name].depends_on:
            visit(dep)
        path.pop()
        on_path.discard(name)
        seen.add(name)

    for root in roots:
        visit(root)
    return seen


def ordering_edges(by_name: Dict[str, Target], members: Set[str]) -> Dict[str, Set[str]]:
    """
    Edges (u -> v: u runs before v) among members.

    Hard edges come from depends_on; soft edges from before/after only
    count when both ends are already members.
    """
    adj: Dict[str, Set[str]] = {n: set() for n in members}
    for name in members:
        t = by_name[name]
        for dep in t.depends_on:
            adj[dep].add(name)
        for nxt in t.before:
            if nxt in members:
                adj[name].add(nxt)
        for prev in t.after:
            if prev in members:
                adj[prev].add(name)
    return adj


def find_cycle(adj: Dict[str, Set[str]], nodes: Iterable[str], index: Dict[str, int]) -> List[str]:
    """Return one cycle among nodes as [a, b, ..., a]; visits in declaration order."""
    nodes = sorted(nodes, key=index.__getitem__)
    allowed = set(nodes)
    done: Set[str] = set()

    for start in nodes:
        if start in done:
            continue
        path: List[str] = [start]
        on_path = {start}
        stack = [iter(sorted(adj[start] & allowed, key=index.__getitem__))]
        while stack:
            nxt = next(stack[-1], None)
            if nxt is None:
                stack.pop()
                finished = path.pop()
                on_path.discard(finished)
                done.add(finished)
                continue
            if nxt in on_path:
                return path[path.index(nxt):] + [nxt]
            if nxt in done:
                continue
            path.append(nxt)
            on_path.add(nxt)
            stack.append(iter(sorted(adj[nxt] & allowed, key=index.__getitem__)))

    raise ValueError("no cycle found")


def topo_order(adj: Dict[str, Set[str]], index: Dict[str, int]) -> List[str]:
    """
    Kahn's algorithm; among ready targets the earliest declared goes first.
    """
    indeg: Dict[str, int] = {n: 0 for n in adj}
    for node in adj:
        for child in adj[node]:
            indeg[child] += 1

    ready = [(index[n], n) for n, d in indeg.items() if d == 0]
    heapq.heapify(ready)

    order: List[str] = []
    while ready:
        _, node = heapq.heappop(ready)
        order.append(node)
        for child in adj[node]:
            indeg[child] -= 1
            if indeg[child] == 0:
                heapq.heappush(ready, (index[child], child))

    if len(order) != len(adj):
        stuck = [n for n, d in indeg.items() if d > 0]
        raise CycleError(find_cycle(adj, stuck, index))

    return order


def build_plan(targets: Iterable[Target], requested: Iterable[str]) -> List[Target]:
    """
    Ordered execution plan for the requested targets.

    Graph errors (unknown names, cycles) surface here, before anything runs.
    """
    by_name, index = build_graph(targets)
    roots = resolve_names(by_name, requested)
    if not roots:
        raise GraphError("No target requested")

    members = closure(by_name, roots)
    adj = ordering_edges(by_name, members)
    return [by_name[n] for n in topo_order(adj, index)]
