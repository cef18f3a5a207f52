"""
Exception types for data integrity problems.

All of them derive from ValueError so callers that only care about
"bad data" can catch a single type.
"""


class SchemaError(ValueError):
    """Raised when a required column is absent or has the wrong shape."""


class DomainError(ValueError):
    """Raised when a categorical value falls outside its declared label set."""


class WeightIntegrityError(ValueError):
    """Raised when survey weights are missing, zero or negative."""
