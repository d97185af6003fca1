"""Scheduler configuration."""
from dataclasses import dataclass
from typing import Dict

from .rules import RULES


@dataclass
class SchedulerOptions:
    """Thresholds and toggles for one generation run."""

    # Weekly hours above which an overtime warning is emitted
    overtime_threshold_hours: float = RULES.overtime_threshold_hours

    # Minimum bartendingScale that counts as bartender-qualified
    bartending_threshold: int = RULES.bartender_threshold

    # 0 disables the rest check
    min_rest_between_shifts_hours: float = 0.0

    # Minimum aloneScale for shifts that are staffed alone at some point; 0 disables
    alone_threshold: int = 0

    def to_dict(self) -> Dict:
        """Serialize to the camelCase wire format."""
        return {
            "overtimeThresholdHours": self.overtime_threshold_hours,
            "bartendingThreshold": self.bartending_threshold,
            "minRestBetweenShiftsHours": self.min_rest_between_shifts_hours,
            "aloneThreshold": self.alone_threshold,
        }

    @classmethod
    def from_dict(cls, d: Dict) -> "SchedulerOptions":
        """Create from dictionary; unknown keys are ignored."""
        opts = cls()
        mapping = {
            "overtimeThresholdHours": ("overtime_threshold_hours", float),
            "bartendingThreshold": ("bartending_threshold", int),
            "minRestBetweenShiftsHours": ("min_rest_between_shifts_hours", float),
            "aloneThreshold": ("alone_threshold", int),
        }
        for key, value in (d or {}).items():
            if key in mapping and value is not None:
                attr, cast = mapping[key]
                setattr(opts, attr, cast(value))
        return opts
