"""
Canonical shared constants for the research graph service.

Blueprint kinds, display-key templates and the naming fixups used when
resolving reward identifiers live here so the resolver, the graph builder
and the tests agree on one source of truth.
"""

from enum import Enum
from typing import Dict, List, Optional, Tuple


# ---------------------------------------------------------------------------
# Reward kinds
# ---------------------------------------------------------------------------

class RewardKind(str, Enum):
    BUILDING = "building"
    WEAPON = "weapon"
    RESOURCE = "resource"


# First path segment of a blueprint id -> kind
BLUEPRINT_KIND_BY_PREFIX: Dict[str, RewardKind] = {
    "buildings": RewardKind.BUILDING,
    "items": RewardKind.WEAPON,
    "resources": RewardKind.RESOURCE,
}


# ---------------------------------------------------------------------------
# Display-key templates
# ---------------------------------------------------------------------------

BUILDING_NAME_TEMPLATE = "display/building_name/{base}"
BUILDING_DESCRIPTION_TEMPLATE = "display/building_description/{base}"
WEAPON_NAME_TEMPLATE = "display/weapon_name/{base}"
WEAPON_DESCRIPTION_TEMPLATE = "display/weapon_description/{base}"
RESOURCE_NAME_TEMPLATE = "display/resource_name/{base}"

# kind -> (name template, description template or None)
DISPLAY_TEMPLATES: Dict[RewardKind, Tuple[str, Optional[str]]] = {
    RewardKind.BUILDING: (BUILDING_NAME_TEMPLATE, BUILDING_DESCRIPTION_TEMPLATE),
    RewardKind.WEAPON: (WEAPON_NAME_TEMPLATE, WEAPON_DESCRIPTION_TEMPLATE),
    RewardKind.RESOURCE: (RESOURCE_NAME_TEMPLATE, None),
}


# ---------------------------------------------------------------------------
# Naming fixups
# ---------------------------------------------------------------------------

ITEM_TIER_QUALIFIERS: List[str] = ["advanced", "superior", "extreme"]

# Internal item name -> display name used by the lookup table
WEAPON_SYNONYMS: Dict[str, str] = {
    "flamer": "flamethrower",
}


# ---------------------------------------------------------------------------
# Synthesized nodes
# ---------------------------------------------------------------------------

SYNTHETIC_REWARD_PREFIX = "award:"

# Path segments swapped to derive a node's description key from its name key
NAME_SEGMENT = "/name/"
DESCRIPTION_SEGMENT = "/description/"
