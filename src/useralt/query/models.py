"""Typed model of one alternative group as reported by a query."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

NO_CURRENT_VALUE = "none"


@dataclass(frozen=True, slots=True)
class Candidate:
    """One provider offered for a group, with its secondary link targets."""

    value: str
    priority: int
    secondary_values: Mapping[int, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "secondary_values", MappingProxyType(dict(self.secondary_values)))


@dataclass(frozen=True, slots=True)
class GroupReport:
    """Structured result of parsing one query report."""

    name: str
    primary_link: str
    slave_names: tuple[str, ...]
    slave_links: tuple[str, ...]
    status: str
    best_value: str
    current_value: str
    candidates: tuple[Candidate, ...]
    best_index: int | None = None
    current_index: int | None = None

    @property
    def is_manual(self) -> bool:
        return self.status == "manual"

    def as_dict(self) -> dict[str, Any]:
        """Return the report as plain nested data for rendering."""

        return {
            "name": self.name,
            "link": self.primary_link,
            "slaves": [
                {"name": slave_name, "link": slave_link}
                for slave_name, slave_link in zip(self.slave_names, self.slave_links)
            ],
            "status": self.status,
            "best": self.best_value,
            "value": self.current_value,
            "best_index": self.best_index,
            "current_index": self.current_index,
            "alternatives": [
                {
                    "value": candidate.value,
                    "priority": candidate.priority,
                    "slaves": {
                        self.slave_names[slave_index]: slave_value
                        for slave_index, slave_value in sorted(candidate.secondary_values.items())
                    },
                }
                for candidate in self.candidates
            ],
        }
