from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Mapping

from ..common.validators import split_csv_list
from ..core.constants import APP_NAME, DEFAULT_CURRENT_WEEK


@dataclass(frozen=True)
class SystemConfig:
    """Cấu hình hệ thống (sheet `Config`), dùng chung cho mọi phiên."""

    school_name: str = APP_NAME
    classes: tuple[str, ...] = ()
    reasons: tuple[str, ...] = ()
    current_week: int = DEFAULT_CURRENT_WEEK
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, row: Mapping[str, Any], *, default_school_name: str = APP_NAME) -> "SystemConfig":
        known = {"schoolName", "classes", "reasons", "currentWeek"}
        try:
            week = int(row.get("currentWeek") or DEFAULT_CURRENT_WEEK)
        except (TypeError, ValueError):
            week = DEFAULT_CURRENT_WEEK
        return cls(
            school_name=str(row.get("schoolName") or default_school_name),
            classes=tuple(split_csv_list(row.get("classes"))),
            reasons=tuple(split_csv_list(row.get("reasons"))),
            current_week=week,
            extra={k: v for k, v in row.items() if k not in known},
        )

    def merged(self, other: "SystemConfig | Mapping[str, Any] | None") -> "SystemConfig":
        """Overlay the non-empty values of `other` on top of this config."""
        if other is None:
            return self
        if not isinstance(other, SystemConfig):
            present = set(other.keys())
            other = SystemConfig.from_dict(other, default_school_name=self.school_name)
        else:
            present = {"schoolName", "classes", "reasons", "currentWeek"}

        extra = dict(self.extra)
        extra.update(other.extra)
        return replace(
            self,
            school_name=other.school_name if "schoolName" in present and other.school_name else self.school_name,
            classes=other.classes if other.classes else self.classes,
            reasons=other.reasons if other.reasons else self.reasons,
            current_week=other.current_week if "currentWeek" in present else self.current_week,
            extra=extra,
        )

    def to_dict(self) -> dict:
        out = dict(self.extra)
        out.update(
            {
                "schoolName": self.school_name,
                "classes": list(self.classes),
                "reasons": list(self.reasons),
                "currentWeek": self.current_week,
            }
        )
        return out
