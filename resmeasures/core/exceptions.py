"""
Exceptions shared across measures and the batch driver.
"""


class MeasureError(RuntimeError):
    """Raised inside a measure step; the measure turns it into a registered error."""


class ConfigError(ValueError):
    """Raised when an analysis YAML file is missing or malformed."""

    def __init__(self, message: str, field: str = ""):
        super().__init__(message)
        self.field = field


class AnalysisError(RuntimeError):
    """Raised when a batch analysis cannot be started."""
