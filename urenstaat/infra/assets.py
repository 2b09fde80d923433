"""
Byte sources for the images embedded in the export.

The exporter only depends on the AssetSource protocol, so tests can hand it
bytes directly instead of files.
"""

from pathlib import Path
from typing import Protocol, runtime_checkable

from urenstaat.domain.errors import MissingAsset


@runtime_checkable
class AssetSource(Protocol):
    """Anything that can produce the raw bytes of an image"""

    name: str

    def read(self) -> bytes:
        """Return the asset bytes or raise MissingAsset"""
        ...


class FileAssetSource:
    """Reads an asset from disk. The file is never modified."""

    def __init__(self, path: Path):
        self.path = Path(path)
        self.name = self.path.name

    def read(self) -> bytes:
        try:
            return self.path.read_bytes()
        except OSError as e:
            raise MissingAsset(str(self.path), e.strerror or str(e)) from e


class BytesAssetSource:
    """Serves an asset held in memory"""

    def __init__(self, data: bytes, name: str = "image.png"):
        self.data = data
        self.name = name

    def read(self) -> bytes:
        if not self.data:
            raise MissingAsset(self.name, "empty image data")
        return self.data
