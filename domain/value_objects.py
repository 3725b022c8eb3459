from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ComplianceFlags:
    """Regulatory non-compliance categories raised at the first approval level."""

    is_against_fsm: bool = False  # Fleet Safety Manual
    is_against_mpr: bool = False  # Marine Personnel Regulations
    is_against_crewing_profile: bool = False

    def any(self) -> bool:
        return self.is_against_fsm or self.is_against_mpr or self.is_against_crewing_profile


@dataclass(frozen=True)
class RiskScore:
    value: float  # 0–100
    likelihood: int  # 1 (rare) – 5 (almost certain)
    consequence: int  # 1 (insignificant) – 5 (catastrophic)
    recommendations: str = ""
    regulatory_notes: str = ""


@dataclass(frozen=True)
class FieldChange:
    field: str
    before: Any
    after: Any


@dataclass(frozen=True)
class ChangeSet:
    fields: tuple[FieldChange, ...] = ()
    attachments_changed: bool = False
    attachment_notes: tuple[str, ...] = field(default_factory=tuple)

    @property
    def has_substantive_changes(self) -> bool:
        return bool(self.fields) or self.attachments_changed

    @property
    def changed_fields(self) -> list[str]:
        names = [c.field for c in self.fields]
        if self.attachments_changed:
            names.append("attachments")
        return names
