"""Exception types raised by the count obfuscation core."""
from __future__ import annotations


class LaplaceError(Exception):
    """Base class for all obfuscation errors."""


class DistributionCreationError(LaplaceError):
    """The Laplace distribution could not be created for the given scale."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Unable to create Laplace distribution: {reason}")


class RoundingStepError(LaplaceError):
    """The rounding step is not a positive integer."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Rounding step error: {reason}")


class RoundingStepZeroError(RoundingStepError):
    """A rounding step of zero was requested."""

    def __init__(self) -> None:
        super().__init__("rounding step zero not allowed")


class DeserializationError(LaplaceError):
    """A report could not be parsed into a document tree."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Deserialization error: {reason}")


class SerializationError(LaplaceError):
    """An obfuscated document tree could not be serialized."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"Serialization error: {reason}")
