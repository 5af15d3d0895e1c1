"""
Input Validation

Schema errors raised by the input adapters and the config loader. Analysis
functions never raise these; degenerate data yields degenerate results.
"""

from typing import List


class ValidationError(Exception):
    """Raised when input or configuration validation fails."""

    def __init__(self, errors: List[str], warnings: List[str] = None):
        self.errors = errors
        self.warnings = warnings or []

        message = "Input validation failed:\n" + "\n".join(
            f"  ERROR: {e}" for e in errors
        )
        if warnings:
            message += "\n" + "\n".join(f"  WARNING: {w}" for w in warnings)

        super().__init__(message)
