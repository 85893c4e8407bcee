from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Union

Stability = Literal["stable", "unstable"]


@dataclass(frozen=True)
class ClassMember:
    name: str
    type: str
    stable: bool
    mutable: bool = False


@dataclass(frozen=True)
class ClassRecord:
    name: str
    stability: Stability
    members: tuple[ClassMember, ...] = ()

    @property
    def is_stable(self) -> bool:
        return self.stability == "stable"

    @property
    def unstable_members(self) -> list[tuple[str, str]]:
        return [(m.name, m.type) for m in self.members if not m.stable]


@dataclass(frozen=True)
class ComposableRecord:
    name: str
    restartable: bool
    skippable: bool


ReportRecord = Union[ClassRecord, ComposableRecord]
