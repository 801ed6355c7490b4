"""
Master image path derivation for FlexImage.

Each record stores exactly one master image. Its location is a pure
function of the storage configuration and the record's identity, so the
writer and every later reader always agree on where the file lives.

When date sharding is enabled and the record has a creation timestamp, the
master is nested under year/month/day directories to keep the number of
files per directory bounded:

    /data/img/2024/3/7/42.png

Classes:
    StorageConfig: Where a record type keeps its master images
    RecordIdentity: The parts of a record that determine its path
    MasterImagePath: Resolved directory and file path

Functions:
    resolve_master_image_path: Derive the MasterImagePath for a record
"""

from dataclasses import dataclass, asdict
from datetime import date
from pathlib import PurePosixPath
from typing import Any, Dict, Optional

from FI_Libs.constants import DEFAULT_USE_DATE_SHARDING, MASTER_IMAGE_EXTENSION


@dataclass(frozen=True)
class StorageConfig:
    """Storage settings for one record type.

    Attributes:
        root_directory: Directory that holds all master images of the type
        use_date_sharding: Nest masters under year/month/day of creation
    """
    root_directory: str
    use_date_sharding: bool = DEFAULT_USE_DATE_SHARDING

    def __post_init__(self):
        if not str(self.root_directory or "").strip():
            raise ValueError("root_directory cannot be empty")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StorageConfig":
        """Create from dictionary."""
        filtered = {k: v for k, v in data.items() if k in cls.__dataclass_fields__}
        return cls(**filtered)


@dataclass(frozen=True)
class RecordIdentity:
    """Identity of a host record.

    ``id`` is None until the host has persisted the record.
    ``created_timestamp`` may be a ``date`` or a ``datetime``.
    """
    id: Optional[int] = None
    created_timestamp: Optional[date] = None


@dataclass(frozen=True)
class MasterImagePath:
    directory: str
    file: str

    def __str__(self) -> str:
        return self.file


def _date_shard(timestamp: date) -> tuple:
    # No zero padding: 2024-03-07 shards to 2024/3/7
    return str(timestamp.year), str(timestamp.month), str(timestamp.day)


def resolve_master_image_path(config: StorageConfig, identity: RecordIdentity) -> MasterImagePath:
    """
    Derive where a record's master image lives.

    Args:
        config: Storage settings for the record type
        identity: Record id and optional creation timestamp

    Returns:
        MasterImagePath with the directory and the ``{id}.png`` file path.
        A record without an id still gets a path string, but it is not
        usable for I/O until the id is assigned.

    Example:
        >>> config = StorageConfig("/data/img", use_date_sharding=True)
        >>> identity = RecordIdentity(42, date(2024, 3, 7))
        >>> resolve_master_image_path(config, identity).file
        '/data/img/2024/3/7/42.png'
    """
    directory = PurePosixPath(config.root_directory)

    if config.use_date_sharding and identity.created_timestamp is not None:
        directory = directory.joinpath(*_date_shard(identity.created_timestamp))

    record_id = "" if identity.id is None else str(identity.id)
    file_path = directory / f"{record_id}{MASTER_IMAGE_EXTENSION}"

    return MasterImagePath(directory=str(directory), file=str(file_path))
