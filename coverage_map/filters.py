"""Selection criteria over the loaded provider records."""
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import TYPE_CHECKING, Iterable, List, Optional

if TYPE_CHECKING:
    from .records import ProviderRecord

ALL = "All"


def _criterion(value: Optional[str]) -> str:
    text = (value or "").strip()
    return text or ALL


@dataclass(frozen=True)
class FilterCriteria:
    partner: str = ALL
    role: str = ALL
    region: str = ALL

    def with_partner(self, partner: Optional[str]) -> "FilterCriteria":
        return replace(self, partner=_criterion(partner))

    def with_role(self, role: Optional[str]) -> "FilterCriteria":
        return replace(self, role=_criterion(role))

    def with_region(self, region: Optional[str]) -> "FilterCriteria":
        value = _criterion(region)
        return replace(self, region=value if value == ALL else value.upper())

    def matches(self, record: "ProviderRecord") -> bool:
        if not record.active:
            return False
        if self.partner != ALL and record.partner != self.partner:
            return False
        if self.role != ALL and record.role != self.role:
            return False
        if self.region != ALL and record.region != self.region:
            return False
        return True


def apply_filters(records: Iterable["ProviderRecord"], criteria: FilterCriteria) -> List["ProviderRecord"]:
    return [r for r in records if criteria.matches(r)]
