"""
Pydantic Validated Models
=========================
Validation layer for configuration arriving at the request boundary.

Usage:
    from shiftrota.models.validated import ValidatedSchedulerOptions

    opts = ValidatedSchedulerOptions.model_validate({"bartendingThreshold": 4})
    options = opts.to_dataclass()
"""
from pydantic import BaseModel, ConfigDict, Field, field_validator

from .options import SchedulerOptions
from .rules import RULES


class ValidatedSchedulerOptions(BaseModel):
    """
    Pydantic-validated scheduler options.

    Accepts camelCase keys (the wire format) or field names. Converts to the
    dataclass SchedulerOptions used by the engine.
    """
    model_config = ConfigDict(populate_by_name=True, validate_assignment=True, extra="ignore")

    overtime_threshold_hours: float = Field(
        default=RULES.overtime_threshold_hours, ge=0, le=100,
        alias="overtimeThresholdHours",
        description="Weekly hours above which an overtime warning is raised",
    )
    bartending_threshold: int = Field(
        default=RULES.bartender_threshold, ge=0, le=5,
        alias="bartendingThreshold",
        description="Minimum bartendingScale counted as bartender-qualified",
    )
    min_rest_between_shifts_hours: float = Field(
        default=0.0, ge=0, le=24,
        alias="minRestBetweenShiftsHours",
    )
    alone_threshold: int = Field(
        default=0, ge=0, le=5,
        alias="aloneThreshold",
        description="Minimum aloneScale for shifts with time staffed alone",
    )

    @field_validator("overtime_threshold_hours")
    @classmethod
    def validate_overtime(cls, v: float) -> float:
        """Overtime below a single short shift makes every employee a warning."""
        if 0 < v < 1:
            raise ValueError("overtimeThresholdHours must be 0 or at least 1")
        return v

    def to_dataclass(self) -> SchedulerOptions:
        """Convert to the dataclass consumed by the engine."""
        return SchedulerOptions(
            overtime_threshold_hours=self.overtime_threshold_hours,
            bartending_threshold=self.bartending_threshold,
            min_rest_between_shifts_hours=self.min_rest_between_shifts_hours,
            alone_threshold=self.alone_threshold,
        )

    @classmethod
    def from_dataclass(cls, options: SchedulerOptions) -> "ValidatedSchedulerOptions":
        """Create from dataclass SchedulerOptions."""
        return cls(
            overtime_threshold_hours=options.overtime_threshold_hours,
            bartending_threshold=options.bartending_threshold,
            min_rest_between_shifts_hours=options.min_rest_between_shifts_hours,
            alone_threshold=options.alone_threshold,
        )
