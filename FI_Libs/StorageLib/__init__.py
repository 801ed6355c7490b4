"""
StorageLib - Master image storage

This module derives where a record's master image lives and handles
staging, writing and deleting that file.
"""

from FI_Libs.StorageLib.path_resolver import (
    StorageConfig,
    RecordIdentity,
    MasterImagePath,
    resolve_master_image_path,
)
from FI_Libs.StorageLib.master_image_store import (
    PendingUpload,
    MasterImageStore,
    is_url,
)

__all__ = [
    "StorageConfig",
    "RecordIdentity",
    "MasterImagePath",
    "resolve_master_image_path",
    "PendingUpload",
    "MasterImageStore",
    "is_url",
]
