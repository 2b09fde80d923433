"""Domain layer - Pure business entities and logic"""

from .models import Template, TimeEntry, WeekRow, WeekSheet, MonthRow, MonthMatrix, ExportMetadata
from .errors import (
    UrenstaatError,
    NotFound,
    DuplicateTemplate,
    InvalidInput,
    InvalidHours,
    InvalidWeek,
    InvalidMonth,
    InvalidWeekday,
    InvalidProject,
    MissingAsset,
    ConfigurationError,
    StorageError,
)

__all__ = [
    "Template", "TimeEntry", "WeekRow", "WeekSheet", "MonthRow", "MonthMatrix", "ExportMetadata",
    "UrenstaatError", "NotFound", "DuplicateTemplate", "InvalidInput", "InvalidHours",
    "InvalidWeek", "InvalidMonth", "InvalidWeekday", "InvalidProject", "MissingAsset",
    "ConfigurationError", "StorageError",
]
