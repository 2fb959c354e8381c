"""
Blueprint identifier resolution.

Reward identifiers look like `buildings/production/furnace_lvl_2` or
`items/weapons/flamer_item`: the first segment names the kind, the last
one is the base name, possibly carrying a level, tier or variant suffix.
Resolution maps an identifier onto a display key that exists in the
lookup table, trying the naming fixups in a fixed order.
"""

import re
from typing import Any, Callable, List, Optional, Tuple

from constants import (
    BLUEPRINT_KIND_BY_PREFIX,
    DISPLAY_TEMPLATES,
    ITEM_TIER_QUALIFIERS,
    WEAPON_SYNONYMS,
    RewardKind,
)
from lookup_service import Lookup

_LEVEL_SUFFIX_RE = re.compile(r"_lvl_\d+$", re.IGNORECASE)
_TIER_ITEM_SUFFIX_RE = re.compile(r"_(?:%s)_item$" % "|".join(ITEM_TIER_QUALIFIERS), re.IGNORECASE)
_ITEM_SUFFIX_RE = re.compile(r"_item$", re.IGNORECASE)
_VARIANT_SUFFIX_RE = re.compile(r"_[a-z0-9]{1,2}$", re.IGNORECASE)


def strip_level_suffix(name: str) -> str:
    return _LEVEL_SUFFIX_RE.sub("", name)


def strip_item_tier_suffix(name: str) -> str:
    return _ITEM_SUFFIX_RE.sub("", _TIER_ITEM_SUFFIX_RE.sub("", name))


def strip_variant_suffix(name: str) -> str:
    return _VARIANT_SUFFIX_RE.sub("", name)


def weapon_synonym(name: str) -> str:
    return WEAPON_SYNONYMS.get(name, name)


def _split_blueprint(blueprint_id: Any) -> Optional[Tuple[str, str]]:
    if not isinstance(blueprint_id, str):
        return None
    parts = blueprint_id.split("/")
    if len(parts) < 2 or not parts[-1]:
        return None
    return parts[0], parts[-1]


def classify_blueprint(blueprint_id: Any) -> Optional[RewardKind]:
    """Kind from the first path segment alone; independent of lookup hits."""
    if not isinstance(blueprint_id, str):
        return None
    return BLUEPRINT_KIND_BY_PREFIX.get(blueprint_id.split("/")[0])


def _base_candidates(kind: RewardKind, last: str) -> List[str]:
    if kind == RewardKind.BUILDING:
        base = strip_level_suffix(last)
        candidates = [base]
        variantless = strip_variant_suffix(base)
        if variantless and variantless != base:
            candidates.append(variantless)
        return candidates
    if kind == RewardKind.WEAPON:
        return [weapon_synonym(strip_item_tier_suffix(last))]
    return [last]


def _resolve(
    blueprint_id: Any,
    lookup: Optional[Lookup],
    pick_template: Callable[[Tuple[str, Optional[str]]], Optional[str]],
) -> Optional[str]:
    if not lookup:
        return None
    split = _split_blueprint(blueprint_id)
    if split is None:
        return None
    top, last = split
    kind = BLUEPRINT_KIND_BY_PREFIX.get(top)
    if kind is None:
        return None
    template = pick_template(DISPLAY_TEMPLATES[kind])
    if template is None:
        return None
    for base in _base_candidates(kind, last):
        key = template.format(base=base)
        if lookup.get(key):
            return key
    return None


def blueprint_to_display_key(blueprint_id: Any, lookup: Optional[Lookup]) -> Optional[str]:
    return _resolve(blueprint_id, lookup, lambda templates: templates[0])


def blueprint_to_description_key(blueprint_id: Any, lookup: Optional[Lookup]) -> Optional[str]:
    return _resolve(blueprint_id, lookup, lambda templates: templates[1])
