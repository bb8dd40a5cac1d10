"""
Permission decisions for multi-field updates.

An update can be allowed in full, allowed for a subset of the requested
fields, or denied. Call sites branch on the variant instead of
inspecting ad hoc result shapes.
"""

from dataclasses import dataclass, field
from typing import Any, ClassVar, Dict, FrozenSet, Mapping, Optional, Union


@dataclass(frozen=True)
class Allowed:
    """Every requested field may be written."""

    fields: FrozenSet[str] = field(default_factory=frozenset)

    allowed: ClassVar[bool] = True

    @property
    def allowed_fields(self) -> FrozenSet[str]:
        return self.fields

    @property
    def reason(self) -> Optional[str]:
        return None


@dataclass(frozen=True)
class AllowedSubset:
    """Only `fields` may be written; `denied_fields` were stripped for `reason`."""

    fields: FrozenSet[str]
    denied_fields: FrozenSet[str]
    reason: str

    allowed: ClassVar[bool] = True

    @property
    def allowed_fields(self) -> FrozenSet[str]:
        return self.fields


@dataclass(frozen=True)
class Denied:
    reason: str

    allowed: ClassVar[bool] = False

    @property
    def allowed_fields(self) -> FrozenSet[str]:
        return frozenset()


UpdateDecision = Union[Allowed, AllowedSubset, Denied]


def apply_decision(decision: UpdateDecision, updates: Mapping[str, Any]) -> Dict[str, Any]:
    """Keep only the update values the decision allows."""
    if not decision.allowed:
        return {}
    return {k: v for k, v in updates.items() if k in decision.allowed_fields}
