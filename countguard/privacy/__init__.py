"""Noise mechanism, small-count policy, and single-value obfuscation."""
