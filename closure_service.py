"""
Read-only closure queries over a built research graph.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Set

from normalize_service import as_number
from research_model import ResearchNode


@dataclass
class Closure:
    order: List[str] = field(default_factory=list)
    keys: Set[str] = field(default_factory=set)


def dependency_order(graph: Mapping[str, ResearchNode], target: str) -> Closure:
    """Transitive prerequisites of `target` in dependency order, target last.

    Iterative post-order DFS over `requires` with separate visited and
    in-progress sets. Revisiting an in-progress key is a no-op, so cycles
    produce a partial order instead of an error. Unknown target -> empty.
    """
    closure = Closure()
    if target not in graph:
        return closure

    visited: Set[str] = set()
    in_progress: Set[str] = {target}
    # (key, iterator over its prerequisites)
    stack = [(target, iter(graph[target].requires))]
    while stack:
        key, pending = stack[-1]
        descended = False
        for required_key in pending:
            if required_key in visited or required_key in in_progress or required_key not in graph:
                continue
            in_progress.add(required_key)
            stack.append((required_key, iter(graph[required_key].requires)))
            descended = True
            break
        if descended:
            continue
        stack.pop()
        in_progress.discard(key)
        visited.add(key)
        closure.order.append(key)

    closure.keys = visited
    return closure


def sum_costs(graph: Mapping[str, ResearchNode], order: Iterable[str]) -> Dict[str, float]:
    """Per-resource totals over the nodes in `order`; resources keep first-appearance order."""
    totals: Dict[str, float] = {}
    for key in order:
        node = graph.get(key)
        if node is None:
            continue
        for cost in node.costs:
            if not cost.resource:
                continue
            amount = as_number(cost.count)
            if amount is None:
                continue
            totals[cost.resource] = totals.get(cost.resource, 0.0) + amount
    return totals


def closure_payload(graph: Mapping[str, ResearchNode], target: str) -> Dict[str, Any]:
    closure = dependency_order(graph, target)
    return {
        "target": target,
        "order": closure.order,
        "keys": sorted(closure.keys),
        "costs": sum_costs(graph, closure.order),
    }
