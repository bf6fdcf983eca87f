"""Differentially private obfuscation of counts in medical reports."""

from countguard.privacy.errors import (
    DeserializationError,
    DistributionCreationError,
    LaplaceError,
    RoundingStepError,
    RoundingStepZeroError,
    SerializationError,
)
from countguard.privacy.mechanism import round_to_step, sample_laplace
from countguard.privacy.obfuscator import obfuscate_counts, obfuscate_with_cache, privatize
from countguard.privacy.policy import Below10Mode, Category, ObfuscationPolicy
from countguard.reporting.measure_report import (
    DocumentObfuscator,
    obfuscate_document,
    obfuscate_json,
)
from countguard.workflow.cache import ObfuscationCache

__all__ = [
    "Below10Mode",
    "Category",
    "DeserializationError",
    "DistributionCreationError",
    "DocumentObfuscator",
    "LaplaceError",
    "ObfuscationCache",
    "ObfuscationPolicy",
    "RoundingStepError",
    "RoundingStepZeroError",
    "SerializationError",
    "obfuscate_counts",
    "obfuscate_document",
    "obfuscate_json",
    "obfuscate_with_cache",
    "privatize",
    "round_to_step",
    "sample_laplace",
]
