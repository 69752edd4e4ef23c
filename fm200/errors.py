"""
Error taxonomy for the sizing and costing pipeline.

Both engines fail fast and whole: no partial SizingResult or CostBreakdown
is ever returned. The routers translate these into HTTPException responses.
"""


class FM200Error(Exception):
    """Base class for all calculator errors."""


class InvalidInputError(FM200Error):
    """A RoomInput field violates its domain constraint."""

    def __init__(self, field: str, constraint: str, message: str = None):
        self.field = field
        self.constraint = constraint
        super().__init__(message or f"{field}: {constraint}")


class ConfigurationError(FM200Error):
    """Price table or exchange-rate table is missing a key or is malformed."""

    def __init__(self, key: str, reason: str = "missing required key"):
        self.key = key
        self.reason = reason
        super().__init__(f"{key}: {reason}")


class NumericDegeneracyError(FM200Error):
    """Specific vapor volume came out zero or negative."""
