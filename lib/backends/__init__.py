# =============================================================================
# lib/backends/ - Storage and Config Backends
# =============================================================================
# - protocols.py: ConfigStore / StorageBackend contracts
# - memory.py: in-process implementations (development and tests)
# - supabase.py: Supabase tables + storage bucket implementations
# =============================================================================

from lib.backends.protocols import ConfigStore, StorageBackend
from lib.backends.memory import MemoryBackend, MemoryConfigStore
from lib.backends.supabase import SupabaseBackend, SupabaseConfigStore

__all__ = [
    "ConfigStore",
    "StorageBackend",
    "MemoryBackend",
    "MemoryConfigStore",
    "SupabaseBackend",
    "SupabaseConfigStore",
]
