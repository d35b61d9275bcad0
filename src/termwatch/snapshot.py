"""
Render-ready status record shared between the aggregator and the view.
"""

from dataclasses import dataclass, fields

from .core import PLACEHOLDER_HEART_RATE, PLACEHOLDER_LOADING, PLACEHOLDER_STEPS


@dataclass
class StatusSnapshot:
    """Current set of formatted values shown on screen."""

    time: str
    date: str
    battery_percent: str = PLACEHOLDER_LOADING
    step_count: str = PLACEHOLDER_STEPS
    heart_rate_bpm: str = PLACEHOLDER_HEART_RATE
    temperature_c: str = PLACEHOLDER_LOADING

    @classmethod
    def field_names(cls) -> tuple[str, ...]:
        """Names of the settable display fields."""
        return tuple(f.name for f in fields(cls))

    def set(self, field: str, value: str) -> None:
        """Replace one field.

        Args:
            field: Field name from field_names()
            value: Formatted display string

        Raises:
            KeyError: If field is not a snapshot field
        """
        if field not in self.field_names():
            raise KeyError(field)
        setattr(self, field, value)
