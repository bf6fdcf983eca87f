"""Rewriting of counts inside report documents."""

from countguard.reporting.measure_report import (
    DocumentObfuscator,
    obfuscate_document,
    obfuscate_json,
)

__all__ = ["DocumentObfuscator", "obfuscate_document", "obfuscate_json"]
