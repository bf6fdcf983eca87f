"""
Test Suite for countguard

- Unit tests for the noise mechanism, cache, policy, and report rewriter
- Integration tests for multi-report obfuscation with a shared cache
"""
