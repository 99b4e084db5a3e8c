"""
Engine exceptions.

Degenerate input (empty text, no propositions) is never an error.
These are raised only for malformed records and detector failures.
"""


class InvalidInputError(ValueError):
    """A proposition or alignment record is malformed. The whole call is rejected."""


class AnalysisUnavailableError(RuntimeError):
    """A detector failed while analyzing text. Callers fall back to no feedback."""
