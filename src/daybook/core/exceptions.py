"""Error taxonomy for Daybook."""


class DaybookError(Exception):
    """Base class for all Daybook errors."""


class ValidationError(DaybookError, ValueError):
    """Input failed a length, format or range check. No state was changed."""


class DuplicateError(DaybookError, ValueError):
    """A uniqueness rule was violated. No state was changed."""


class LoadError(DaybookError):
    """Stored data could not be read or parsed."""


class SaveError(DaybookError):
    """Stored data could not be written.

    Attributes:
        key: Storage key whose write failed
    """

    def __init__(self, message: str, key: str = ""):
        super().__init__(message)
        self.key = key


class ExportError(DaybookError):
    """An export could not produce a shareable artifact."""
