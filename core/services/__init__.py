# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .directory_service import DirectoryResolver
from .table_service import TableAccessor
from .row_store import RowStore, key_matches
from .cache_service import MemoryCache, RedisCache, cache_key
from .lock_service import BUSY, Busy, LockManager, RedisLockManager
from .archive_service import ArchiveLog
from .provisioning_service import ProvisioningService
from .upload_service import UploadService
from .rollover_service import RolloverService

__all__ = [
    "DirectoryResolver",
    "TableAccessor",
    "RowStore",
    "key_matches",
    "MemoryCache",
    "RedisCache",
    "cache_key",
    "BUSY",
    "Busy",
    "LockManager",
    "RedisLockManager",
    "ArchiveLog",
    "ProvisioningService",
    "UploadService",
    "RolloverService",
]
