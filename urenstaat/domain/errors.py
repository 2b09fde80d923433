"""
Error taxonomy.

Every failure names the offending field and value so the command line can
report it without further context.
"""

from typing import Any


class UrenstaatError(Exception):
    """Base class for all application errors."""


class NotFound(UrenstaatError):
    """A template or entry is absent when it is required."""

    def __init__(self, kind: str, key: Any):
        self.kind = kind
        self.key = key
        super().__init__(f"{kind} not found: {key}")


class DuplicateTemplate(UrenstaatError):
    def __init__(self, project: str):
        self.project = project
        super().__init__(f"Template already exists for project '{project}'")


class InvalidInput(UrenstaatError):
    """A value is outside its allowed range."""

    field = "value"

    def __init__(self, value: Any, reason: str):
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid {self.field} {value!r}: {reason}")


class InvalidHours(InvalidInput):
    field = "hours"


class InvalidWeek(InvalidInput):
    field = "ISO week"


class InvalidMonth(InvalidInput):
    field = "month"


class InvalidWeekday(InvalidInput):
    field = "weekday"


class InvalidProject(InvalidInput):
    field = "project"


class MissingAsset(UrenstaatError):
    """An image asset cannot be read or is not an image."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"Asset '{name}' unavailable: {reason}")


class ConfigurationError(UrenstaatError):
    def __init__(self, setting: str, reason: str):
        self.setting = setting
        self.reason = reason
        super().__init__(f"Configuration error for '{setting}': {reason}")


class StorageError(UrenstaatError):
    """I/O or transaction failure in the storage layer. The command was rolled back."""

    def __init__(self, operation: str, cause: Exception):
        self.operation = operation
        self.cause = cause
        super().__init__(f"Storage failure during {operation}: {cause}")
