"""Circular-reference detection over conditional rules.

The dependency graph is a NetworkX DiGraph whose nodes are field ids and
whose edges point from a field to every field its showWhen, hideWhen, or
disableWhen rule references (A -> B reads "A depends on B"). Rules name
their target by field *name*; a name that matches no field adds no edge.

Detection walks the graph depth-first from every field, cloning the
visited set per branch so that two independent paths through a shared
ancestor are never mistaken for a cycle.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

import networkx as nx

from formctl.domain.models import FieldDefinition

type _Graph = nx.DiGraph


@dataclass(frozen=True)
class DeleteCheck:
    """Whether a field can be removed without orphaning rules that point at it."""

    safe: bool
    dependents: list[str] = field(default_factory=list)


def build_dependency_graph(fields: Sequence[FieldDefinition]) -> _Graph:
    """Build the "depends on" graph for *fields*.

    Every field is a node (isolated fields included). Edge attribute
    ``kinds`` lists the rule keys that produced the edge.
    """
    g: _Graph = nx.DiGraph()
    ids_by_name: dict[str, str] = {}
    for f in fields:
        g.add_node(f.id, name=f.name, label=f.label)
        ids_by_name.setdefault(f.name, f.id)

    for f in fields:
        for kind, rule in f.rules().items():
            target = ids_by_name.get(rule.field)
            if target is None:
                continue
            if g.has_edge(f.id, target):
                g.edges[f.id, target]["kinds"].append(kind.value)
            else:
                g.add_edge(f.id, target, kinds=[kind.value])
    return g


def _find_cycle(g: _Graph, node: str, visited: frozenset[str], path: list[str]) -> list[str] | None:
    """Depth-first search for a cycle reachable from *node* along *path*.

    *visited* is immutable, so each branch extends its own copy.
    """
    if node in visited:
        return path[path.index(node) :]

    branch_visited = visited | {node}
    path.append(node)
    for target in sorted(g.successors(node)):
        cycle = _find_cycle(g, target, branch_visited, path)
        if cycle is not None:
            return cycle
    path.pop()
    return None


def detect_circular_references(fields: Sequence[FieldDefinition]) -> list[list[str]]:
    """Return each distinct circular chain of field ids.

    A chain lists the ids in dependency order starting from the first
    field on the cycle. Chains covering the same set of fields are
    reported once, regardless of where the walk entered them.
    """
    g = build_dependency_graph(fields)
    chains: list[list[str]] = []
    seen: set[frozenset[str]] = set()

    for f in fields:
        cycle = _find_cycle(g, f.id, frozenset(), [])
        if cycle is None:
            continue
        key = frozenset(cycle)
        if key in seen:
            continue
        seen.add(key)
        chains.append(cycle)
    return chains


def would_create_circle(
    field_id: str, target_field_id: str, fields: Sequence[FieldDefinition]
) -> bool:
    """Would a new rule on *field_id* referencing *target_field_id* close a cycle?

    True iff the target's dependency closure (the target itself included)
    already contains *field_id*.
    """
    g = build_dependency_graph(fields)
    if target_field_id not in g or field_id not in g:
        return False
    return nx.has_path(g, target_field_id, field_id)


def get_dependencies(field_id: str, fields: Sequence[FieldDefinition]) -> list[str]:
    """Ids of every field *field_id* depends on, transitively, in field order."""
    g = build_dependency_graph(fields)
    if field_id not in g:
        return []
    reachable = nx.descendants(g, field_id)
    return [f.id for f in fields if f.id in reachable]


def can_safely_delete(field_id: str, fields: Sequence[FieldDefinition]) -> DeleteCheck:
    """Check whether other fields' rules reference *field_id* directly."""
    g = build_dependency_graph(fields)
    if field_id not in g:
        return DeleteCheck(safe=True)
    direct = set(g.predecessors(field_id)) - {field_id}
    dependents = [f.id for f in fields if f.id in direct]
    return DeleteCheck(safe=not dependents, dependents=dependents)


def format_circular_error(chain: Sequence[str], fields: Sequence[FieldDefinition]) -> str:
    """Human-readable description of a circular chain."""
    by_id = {f.id: f for f in fields}
    names = []
    for field_id in chain:
        f = by_id.get(field_id)
        names.append((f.label or f.name) if f else field_id)
    return f"Circular reference detected: {' → '.join(names)}"
