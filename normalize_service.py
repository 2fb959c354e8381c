"""
Research record normalization.

Raw research documents change shape between data revisions: field names
switch case and singular/plural form, lists collapse to a single object
when they hold one entry, and numbers arrive as text. Everything here
accepts that spread of shapes and emits ResearchNode records; malformed
entries are dropped one at a time.
"""

import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from research_model import Cost, Position, ResearchNode

KEY_FIELDS = ("research_name", "researchName", "key", "id")
POSITION_FIELDS = ("position", "pos")
REQUIREMENT_FIELDS = ("requirements", "requirement", "requires")
REQUIREMENT_WRAPPERS = ("ResearchNodeRequirements", "ResearchNodeRequirement")
COST_FIELDS = ("research_costs", "research_cost", "costs", "cost")
COST_WRAPPERS = ("ResearchCosts", "ResearchCost")
AWARD_FIELDS = ("research_awards", "research_award", "awards", "award", "rewards", "reward")
AWARD_WRAPPERS = ("ResearchAwards", "ResearchAward")
VISIBILITY_FIELDS = ("is_visible", "visible", "visibility")
HINT_FIELDS = ("requirement_tooltip", "requirement_tooltip_key")

TRUTHY_TEXT = {"1", "true", "yes", "on", "y", "visible"}
FALSY_TEXT = {"0", "false", "no", "off", "n", "hidden"}


def _field(raw: Any, *names: str) -> Any:
    """First present field among `names`, matched case-insensitively."""
    if not isinstance(raw, dict):
        return None
    for name in names:
        if name in raw and raw[name] is not None:
            return raw[name]
    folded = {str(k).lower(): v for k, v in raw.items()}
    for name in names:
        value = folded.get(name.lower())
        if value is not None:
            return value
    return None


def _to_list(value: Any) -> List[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _unwrap(container: Any, wrappers: Iterable[str]) -> List[Any]:
    """Entries of a list field that may be nested one level under a wrapper key."""
    if isinstance(container, dict):
        inner = _field(container, *wrappers)
        if inner is not None:
            return _to_list(inner)
    return _to_list(container)


def _text(value: Any) -> Optional[str]:
    if not isinstance(value, str):
        return None
    value = value.strip()
    return value or None


def as_number(value: Any) -> Optional[float]:
    """Lenient numeric parse: numbers pass through, numeric text is parsed, anything else is None."""
    if isinstance(value, bool) or value is None:
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip())
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def as_visibility(value: Any) -> Optional[bool]:
    """Tri-state flag: True, False, or None when unspecified or unreadable."""
    if value is None:
        return None
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value != 0
    if isinstance(value, str):
        text = value.strip().lower()
        if text in TRUTHY_TEXT:
            return True
        if text in FALSY_TEXT:
            return False
    return None


def _normalize_position(raw: Any) -> Optional[Position]:
    if not isinstance(raw, dict):
        return None
    x = as_number(_field(raw, "x"))
    y = as_number(_field(raw, "y"))
    if x is None and y is None:
        return None
    return Position(x=x, y=y)


def _normalize_requires(raw: Any) -> List[str]:
    requires: List[str] = []
    for entry in _unwrap(raw, REQUIREMENT_WRAPPERS):
        key = _text(entry) if isinstance(entry, str) else _text(_field(entry, *KEY_FIELDS))
        if key and key not in requires:
            requires.append(key)
    return requires


def _normalize_costs(raw: Any) -> List[Cost]:
    costs: List[Cost] = []
    for entry in _unwrap(raw, COST_WRAPPERS):
        resource = _text(_field(entry, "resource", "resource_name", "id"))
        count = as_number(_field(entry, "count", "amount", "value"))
        if resource and count is not None:
            costs.append(Cost(resource=resource, count=count))
    return costs


def _normalize_awards(raw: Any) -> Dict[str, Optional[bool]]:
    # dict keeps first-seen order and folds duplicates
    awards: Dict[str, Optional[bool]] = {}
    for entry in _unwrap(raw, AWARD_WRAPPERS):
        if isinstance(entry, str):
            blueprint, visible = _text(entry), None
        else:
            blueprint = _text(_field(entry, "blueprint", "id"))
            visible = as_visibility(_field(entry, *VISIBILITY_FIELDS))
        if not blueprint:
            continue
        if blueprint not in awards or visible is not None:
            awards[blueprint] = visible
    return awards


def normalize_record(raw: Any, category: Optional[str] = None) -> Optional[ResearchNode]:
    """Canonical node for one raw record, or None when the record carries no key."""
    if not isinstance(raw, dict):
        return None
    key = _text(_field(raw, *KEY_FIELDS))
    if not key:
        return None

    awards = _normalize_awards(_field(raw, *AWARD_FIELDS))
    return ResearchNode(
        key=key,
        category=_text(_field(raw, "category")) or category,
        icon=_text(_field(raw, "icon")),
        position=_normalize_position(_field(raw, *POSITION_FIELDS)),
        costs=_normalize_costs(_field(raw, *COST_FIELDS)),
        rewards=list(awards.keys()),
        rewards_visibility=awards,
        requires=_normalize_requires(_field(raw, *REQUIREMENT_FIELDS)),
        requirement_hint_key=_text(_field(raw, *HINT_FIELDS)),
    )


def normalize_records(records: Iterable[Any], category: Optional[str] = None) -> List[ResearchNode]:
    nodes: List[ResearchNode] = []
    for raw in records:
        node = normalize_record(raw, category)
        if node is not None:
            nodes.append(node)
    return nodes


def extract_research_records(document: Any) -> List[ResearchNode]:
    """Walk Research -> categories -> ResearchTree[] -> nodes -> ResearchNode[].

    Every level is optional, so a bare list of trees or a single tree object
    is accepted too. Tree-level `category` is handed down to its nodes.
    """
    root = _field(document, "Research")
    if root is None:
        root = document
    categories = _field(root, "categories")
    if categories is None:
        categories = root
    trees = _field(categories, "ResearchTrees", "ResearchTree")
    if trees is None:
        trees = categories

    nodes: List[ResearchNode] = []
    for tree in _to_list(trees):
        if not isinstance(tree, dict):
            logging.warning("Skipping research tree entry of type %s", type(tree).__name__)
            continue
        category = _text(_field(tree, "category"))
        tree_nodes = _field(tree, "nodes")
        if tree_nodes is None:
            tree_nodes = tree
        raw_nodes = _unwrap(tree_nodes, ("ResearchNodes", "ResearchNode"))
        nodes.extend(normalize_records(raw_nodes, category))
    return nodes
