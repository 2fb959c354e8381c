"""
Research graph construction.

build_graph() turns normalized research nodes plus an optional lookup table
into one keyed graph:

  1. seed a copy of every node (duplicate keys merge)
  2. attach lookup text (names, descriptions, hints, resource names)
  3. resolve reward blueprints to display keys
  4. derive `unlocks` from `requires`
  5. hand categories down to uncategorized descendants
  6. synthesize one node per distinct reward blueprint

Every step is best-effort: a missing lookup entry or an unrecognized
blueprint leaves a field unset and never aborts the build.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Sequence, Set, Tuple

from blueprint_service import blueprint_to_description_key, blueprint_to_display_key, classify_blueprint
from constants import DESCRIPTION_SEGMENT, NAME_SEGMENT, RESOURCE_NAME_TEMPLATE, SYNTHETIC_REWARD_PREFIX
from lookup_service import Lookup, lookup_text
from research_model import ResearchNode, ResolvedReward

Graph = Dict[str, ResearchNode]


class ResearchInputError(ValueError):
    pass


def _append_unique(target: List[str], value: str) -> None:
    if value not in target:
        target.append(value)


def seed_graph(nodes: Sequence[ResearchNode]) -> Graph:
    graph: Graph = {}
    for node in nodes:
        if not isinstance(node, ResearchNode):
            raise ResearchInputError(f"Expected ResearchNode records, got {type(node).__name__}")
        existing = graph.get(node.key)
        if existing is None:
            graph[node.key] = node.copy()
        else:
            existing.merge(node)
    return graph


def attach_lookup_data(graph: Graph, lookup: Lookup) -> None:
    for node in graph.values():
        name = lookup_text(lookup, node.key)
        if name:
            node.name = name
        category_name = lookup_text(lookup, node.category)
        if category_name:
            node.category_name = category_name
        if NAME_SEGMENT in node.key:
            description = lookup_text(lookup, node.key.replace(NAME_SEGMENT, DESCRIPTION_SEGMENT))
            if description:
                node.description = description
        hint = lookup_text(lookup, node.requirement_hint_key)
        if hint:
            node.requirement_hint = hint
        for cost in node.costs:
            resource_name = lookup_text(lookup, RESOURCE_NAME_TEMPLATE.format(base=cost.resource))
            if resource_name:
                cost.resource_name = resource_name


def resolve_reward(blueprint_id: str, lookup: Optional[Lookup]) -> ResolvedReward:
    # kind comes from the first path segment alone, resolved or not
    reward = ResolvedReward(id=blueprint_id, kind=classify_blueprint(blueprint_id))
    key = blueprint_to_display_key(blueprint_id, lookup)
    if key is None:
        return reward
    reward.key = key
    reward.name = lookup_text(lookup, key)
    reward.description = lookup_text(lookup, blueprint_to_description_key(blueprint_id, lookup))
    return reward


def resolve_rewards(graph: Graph, lookup: Lookup) -> None:
    for node in graph.values():
        if not node.rewards:
            continue
        resolved: List[ResolvedReward] = []
        for blueprint_id in node.rewards:
            reward = resolve_reward(blueprint_id, lookup)
            reward.visible = node.rewards_visibility.get(blueprint_id)
            resolved.append(reward)
        node.rewards_resolved = resolved


def link_reverse_edges(graph: Graph) -> None:
    for node in graph.values():
        for required_key in node.requires:
            dependency = graph.get(required_key)
            if dependency is not None:
                _append_unique(dependency.unlocks, node.key)


def _nearest_category(graph: Graph, start: str, memo: Dict[str, Optional[str]]) -> Optional[str]:
    """Depth-first search over `requires` for the first categorized ancestor.

    A key already on the current path is a dead end. Misses are memoized
    only when no such dead end was hit below them, so a later search from
    another entry point can still succeed.
    """
    on_path: Set[str] = set()

    def settled(key: str) -> Optional[Tuple[Optional[str], bool]]:
        # (category, complete) when known without descending, else None
        if key in memo:
            return memo[key], True
        node = graph.get(key)
        if node is None:
            return None, True
        if node.category:
            memo[key] = node.category
            return node.category, True
        if key in on_path:
            return None, False
        return None

    outcome = settled(start)
    if outcome is not None:
        return outcome[0]

    on_path.add(start)
    # frames: [key, pending requirements, complete so far]
    stack: List[List[Any]] = [[start, iter(graph[start].requires), True]]
    while stack:
        frame = stack[-1]
        descended = False
        found: Optional[str] = None
        for required_key in frame[1]:
            outcome = settled(required_key)
            if outcome is None:
                on_path.add(required_key)
                stack.append([required_key, iter(graph[required_key].requires), True])
                descended = True
                break
            category, complete = outcome
            if category:
                found = category
                break
            frame[2] = frame[2] and complete
        if descended:
            continue
        if found:
            for key, _, _ in stack:
                memo[key] = found
            return found
        stack.pop()
        on_path.discard(frame[0])
        if frame[2]:
            memo[frame[0]] = None
        if stack:
            stack[-1][2] = stack[-1][2] and frame[2]
    return None


def propagate_categories(
    graph: Graph,
    lookup: Optional[Lookup] = None,
    cache: Optional[Dict[str, Optional[str]]] = None,
) -> None:
    """Give each uncategorized node the category of its nearest categorized ancestor.

    `cache` memoizes resolved categories per key for the duration of one call
    chain; pass a fresh dict (or None) per build.
    """
    memo: Dict[str, Optional[str]] = {} if cache is None else cache

    for node in graph.values():
        if node.category:
            continue
        category = _nearest_category(graph, node.key, memo)
        if category:
            node.category = category
            category_name = lookup_text(lookup, category)
            if category_name:
                node.category_name = category_name


def _reward_owners(graph: Graph) -> Dict[str, List[str]]:
    owners: Dict[str, List[str]] = {}
    for node in graph.values():
        for blueprint_id in node.rewards:
            _append_unique(owners.setdefault(blueprint_id, []), node.key)
    return owners


def add_synthetic_reward_nodes(graph: Graph, lookup: Optional[Lookup] = None) -> List[str]:
    """Create or extend one node per distinct reward blueprint; returns the reward node keys."""
    reward_keys: List[str] = []
    for blueprint_id, owners in _reward_owners(graph).items():
        reward = resolve_reward(blueprint_id, lookup)
        reward_key = reward.key or f"{SYNTHETIC_REWARD_PREFIX}{blueprint_id}"

        existing = graph.get(reward_key)
        if existing is not None and not existing.is_synthetic:
            # display keys and research keys share a namespace; never fold a reward into research
            logging.warning(
                "Reward %s resolves to research key %s; namespacing reward node", blueprint_id, reward_key
            )
            reward_key = f"{SYNTHETIC_REWARD_PREFIX}{reward_key}"
            existing = graph.get(reward_key)

        if existing is None:
            graph[reward_key] = ResearchNode(
                key=reward_key,
                name=reward.name,
                description=reward.description,
                kind=reward.kind,
                requires=list(owners),
                rewarded_by=list(owners),
            )
        else:
            for owner in owners:
                _append_unique(existing.requires, owner)
                _append_unique(existing.rewarded_by, owner)

        for owner in owners:
            owner_node = graph.get(owner)
            if owner_node is not None:
                _append_unique(owner_node.unlocks, reward_key)
        _append_unique(reward_keys, reward_key)
    return reward_keys


def build_graph(nodes: Sequence[ResearchNode], lookup: Optional[Mapping[str, str]] = None) -> Graph:
    if not isinstance(nodes, (list, tuple)):
        raise ResearchInputError(f"Research nodes must be a list, got {type(nodes).__name__}")

    graph = seed_graph(nodes)
    if lookup:
        attach_lookup_data(graph, lookup)
        resolve_rewards(graph, lookup)
    link_reverse_edges(graph)
    propagate_categories(graph, lookup, {})
    reward_keys = add_synthetic_reward_nodes(graph, lookup)

    logging.info(
        "Built research graph: %d research nodes, %d reward nodes, %d roots",
        len(graph) - len(reward_keys),
        len(reward_keys),
        sum(1 for n in graph.values() if n.is_root),
    )
    return graph


# ---------------------------------------------------------------------------
# Read-side helpers
# ---------------------------------------------------------------------------

def graph_stats(graph: Graph, node_count: Optional[int] = None) -> Dict[str, int]:
    """`nodes` counts normalized research records (synthesized rewards excluded); `roots` counts empty `requires`."""
    if node_count is None:
        node_count = sum(1 for n in graph.values() if not n.is_synthetic)
    return {
        "nodes": node_count,
        "roots": sum(1 for n in graph.values() if n.is_root),
    }


def build_graph_payload(nodes: Sequence[ResearchNode], lookup: Optional[Lookup] = None) -> Dict[str, Any]:
    graph = build_graph(nodes, lookup)
    return graph_to_payload(graph, node_count=len(nodes))


def graph_to_payload(graph: Graph, node_count: Optional[int] = None) -> Dict[str, Any]:
    return {
        "stats": graph_stats(graph, node_count),
        "nodes": {key: node.to_dict() for key, node in graph.items()},
    }


def display_name(node: ResearchNode) -> str:
    if node.name:
        return node.name
    last = node.key.split("/")[-1] or node.key
    return last.replace("_", " ")


def derive_categories(graph: Graph) -> List[Dict[str, str]]:
    """Distinct categories with their display text, sorted by display text."""
    seen: Dict[str, str] = {}
    for node in graph.values():
        if node.category and node.category not in seen:
            seen[node.category] = node.category_name or node.category
    return [
        {"id": category_id, "name": name}
        for category_id, name in sorted(seen.items(), key=lambda item: item[1].lower())
    ]
