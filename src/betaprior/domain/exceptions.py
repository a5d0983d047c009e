class InvalidRequest(ValueError):
    """Raised when a calibration request cannot be searched."""


class NonUniqueMinimumWarning(UserWarning):
    """Emitted when more than one candidate reaches the minimal deviation."""
