"""Data models for sizescope."""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Item(BaseModel):
    """A file or folder in a listing, with its size."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Entry name (last path component)")
    path: Path = Field(..., description="Path to the entry")
    is_directory: bool = Field(..., description="Whether the entry is a directory")
    size_bytes: int = Field(0, description="Total size in bytes")
    from_cache: bool = Field(False, description="Whether the size came from the signature cache")

    @property
    def source(self) -> str:
        """Label for where the size came from."""
        return "Cache" if self.from_cache else "Fresh"


class DirSignature(BaseModel):
    """Shallow signature of a directory (own mtime plus name/mtime of each child)."""

    model_config = ConfigDict(frozen=True)

    hash: int = Field(..., description="Unsigned 64-bit FNV-1a hash")


class CacheEntry(BaseModel):
    """Cached size of a directory, stamped with the signature it was computed under."""

    model_config = ConfigDict(frozen=True)

    size_bytes: int = Field(..., description="Total size in bytes")
    cached_at_millis: int = Field(..., description="Wall-clock time of the put, in milliseconds")
    signature: DirSignature = Field(..., description="Shallow signature at computation time")


class DeleteOutcome(str, Enum):
    """How a delete request ended."""

    TRASHED = "trashed"  # Moved to trash / recycle bin
    DELETED = "deleted"  # Permanently removed
    REFUSED = "refused"  # Trash unavailable or failed, permanent delete not allowed
    FAILED = "failed"  # Permanent delete raised


class DeleteResult(BaseModel):
    """Result of a delete operation."""

    path: str = Field(..., description="Path that was deleted")
    outcome: DeleteOutcome = Field(..., description="How the delete ended")
    trash_supported: bool = Field(False, description="Whether the platform offered a trash")
    error: Optional[str] = Field(None, description="Error message if trash or delete failed")

    @property
    def success(self) -> bool:
        """True if the path is gone (trashed or deleted)."""
        return self.outcome in (DeleteOutcome.TRASHED, DeleteOutcome.DELETED)
