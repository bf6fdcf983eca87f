"""Obfuscation policy: categories, small-count modes, and numeric settings."""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field, PositiveFloat


class Below10Mode(str, Enum):
    """What to report for a non-zero count below 10."""

    ZERO = "zero"
    TEN = "ten"
    OBFUSCATE = "obfuscate"


class Category(str, Enum):
    """Kind of count a report group holds."""

    PATIENTS = "patients"
    DIAGNOSIS = "diagnosis"
    SPECIMEN = "specimen"
    UNKNOWN = "unknown"

    @classmethod
    def from_label(cls, label: object) -> "Category":
        """Parse a group label, returning ``UNKNOWN`` when nothing matches."""
        if not isinstance(label, str):
            return cls.UNKNOWN
        try:
            return cls(label)
        except ValueError:
            return cls.UNKNOWN


# Population counts and stratifier counts never share a noise draw.
POPULATION_BIN = 1
STRATIFIER_BIN = 2

DEFAULT_SENSITIVITIES: dict[Category, float] = {
    Category.PATIENTS: 1.0,
    Category.DIAGNOSIS: 3.0,
    Category.SPECIMEN: 20.0,
}


class ObfuscationPolicy(BaseModel):
    """Resolved numeric settings for count obfuscation."""

    epsilon: PositiveFloat = 0.1
    rounding_step: int = Field(default=10, ge=1)
    obfuscate_zero: bool = False
    below_10_mode: Below10Mode = Below10Mode.TEN
    sensitivities: dict[Category, PositiveFloat] = Field(
        default_factory=lambda: dict(DEFAULT_SENSITIVITIES)
    )

    def sensitivity_for(self, category: Category) -> float:
        """Return the sensitivity (delta) configured for *category*."""
        try:
            return self.sensitivities[category]
        except KeyError:
            raise ValueError(
                f"No sensitivity configured for category '{category.value}'"
            ) from None
