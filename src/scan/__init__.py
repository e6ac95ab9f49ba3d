"""Scan handling.

This package debounces decoded payloads and resolves them against
the stored roster into timed result messages.
"""
