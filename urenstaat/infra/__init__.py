"""Infrastructure layer - Database, configuration and assets"""

from .db import Base, DatabaseEngine, TemplateModel, TimeEntryModel, get_engine, init_db
from .assets import AssetSource, FileAssetSource, BytesAssetSource

__all__ = [
    "Base", "DatabaseEngine", "get_engine", "init_db", "TemplateModel", "TimeEntryModel",
    "AssetSource", "FileAssetSource", "BytesAssetSource",
]
