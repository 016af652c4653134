"""Actor roles that gate workflow actions."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class Role(Enum):
    """The five roles of the tooling procurement process."""
    APPROVER = "Approver"
    NPD = "NPD"
    MAINTENANCE = "Maintenance"
    SPARES = "Spares"
    INDENTOR = "Indentor"


@dataclass(frozen=True)
class Actor:
    """The person performing an action. Identity resolution is the host's job."""

    actor_id: str
    role: Role
    display_name: str = ""

    def __post_init__(self):
        if not self.actor_id:
            raise ValueError("actor_id must be non-empty")

    @property
    def label(self) -> str:
        return self.display_name or self.actor_id
