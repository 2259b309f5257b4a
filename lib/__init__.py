# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable building blocks:
# - backends/: ConfigStore and StorageBackend implementations
# - supabase_client.py: Singleton Supabase client
# - redis_client.py: Shared Redis connection
# - utils.py: Table naming and JSON helpers
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.utils import class_table_name, table_name, to_json

__all__ = [
    "class_table_name",
    "table_name",
    "to_json",
]
