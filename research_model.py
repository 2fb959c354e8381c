"""
Canonical research graph records.

Every raw research entry is converted into a ResearchNode at the
normalization boundary; nothing past that boundary sees raw shapes.
"""

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Optional

from constants import RewardKind


@dataclass
class Position:
    x: Optional[float] = None
    y: Optional[float] = None


@dataclass
class Cost:
    resource: str
    count: float
    resource_name: Optional[str] = None


@dataclass
class ResolvedReward:
    id: str
    key: Optional[str] = None
    name: Optional[str] = None
    description: Optional[str] = None
    kind: Optional[RewardKind] = None
    visible: Optional[bool] = None


@dataclass
class ResearchNode:
    key: str
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[str] = None
    category_name: Optional[str] = None
    icon: Optional[str] = None
    position: Optional[Position] = None
    costs: List[Cost] = field(default_factory=list)
    rewards: List[str] = field(default_factory=list)
    rewards_visibility: Dict[str, Optional[bool]] = field(default_factory=dict)
    requires: List[str] = field(default_factory=list)
    unlocks: List[str] = field(default_factory=list)
    rewards_resolved: List[ResolvedReward] = field(default_factory=list)
    rewarded_by: List[str] = field(default_factory=list)
    requirement_hint_key: Optional[str] = None
    requirement_hint: Optional[str] = None
    kind: Optional[RewardKind] = None

    @property
    def is_root(self) -> bool:
        return not self.requires

    @property
    def is_leaf(self) -> bool:
        return not self.unlocks

    @property
    def is_synthetic(self) -> bool:
        return bool(self.rewarded_by)

    def copy(self) -> "ResearchNode":
        """Deep enough copy for the builder: lists, dicts and nested records are fresh."""
        return replace(
            self,
            position=replace(self.position) if self.position else None,
            costs=[replace(c) for c in self.costs],
            rewards=list(self.rewards),
            rewards_visibility=dict(self.rewards_visibility),
            requires=list(self.requires),
            unlocks=list(self.unlocks),
            rewards_resolved=[replace(r) for r in self.rewards_resolved],
            rewarded_by=list(self.rewarded_by),
        )

    def merge(self, other: "ResearchNode") -> None:
        """Fold a second record with the same key into this one.

        Scalars from `other` win when set, list fields are unioned in order
        and costs are keyed by resource (later amount wins).
        """
        for attr in (
            "name",
            "description",
            "category",
            "category_name",
            "icon",
            "requirement_hint_key",
            "requirement_hint",
            "kind",
        ):
            value = getattr(other, attr)
            if value is not None:
                setattr(self, attr, value)
        if other.position is not None:
            self.position = replace(other.position)

        cost_by_resource = {c.resource: c for c in self.costs}
        for cost in other.costs:
            existing = cost_by_resource.get(cost.resource)
            if existing is None:
                fresh = replace(cost)
                self.costs.append(fresh)
                cost_by_resource[cost.resource] = fresh
            else:
                existing.count = cost.count
                if cost.resource_name is not None:
                    existing.resource_name = cost.resource_name

        for attr in ("rewards", "requires", "unlocks", "rewarded_by"):
            _extend_unique(getattr(self, attr), getattr(other, attr))
        for reward_id, visible in other.rewards_visibility.items():
            if visible is not None or reward_id not in self.rewards_visibility:
                self.rewards_visibility[reward_id] = visible

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready form; empty optional fields are omitted."""
        payload: Dict[str, Any] = {"key": self.key}
        for attr in (
            "name",
            "description",
            "category",
            "category_name",
            "icon",
            "requirement_hint_key",
            "requirement_hint",
        ):
            value = getattr(self, attr)
            if value is not None:
                payload[attr] = value
        if self.kind is not None:
            payload["kind"] = self.kind.value
        if self.position is not None:
            payload["position"] = asdict(self.position)
        if self.costs:
            payload["costs"] = [_drop_none(asdict(c)) for c in self.costs]
        if self.rewards:
            payload["rewards"] = list(self.rewards)
        if self.rewards_visibility:
            payload["rewards_visibility"] = dict(self.rewards_visibility)
        if self.rewards_resolved:
            payload["rewards_resolved"] = [_resolved_to_dict(r) for r in self.rewards_resolved]
        payload["requires"] = list(self.requires)
        payload["unlocks"] = list(self.unlocks)
        if self.rewarded_by:
            payload["rewarded_by"] = list(self.rewarded_by)
        return payload


def _extend_unique(target: List[str], values: List[str]) -> None:
    for value in values:
        if value not in target:
            target.append(value)


def _drop_none(raw: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in raw.items() if v is not None}


def _resolved_to_dict(reward: ResolvedReward) -> Dict[str, Any]:
    payload = _drop_none(asdict(reward))
    if reward.kind is not None:
        payload["kind"] = reward.kind.value
    return payload
