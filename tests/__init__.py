# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the SchoolVault data store:
# - test_directory.py / test_tables.py / test_row_store.py: storage layers
# - test_cache.py / test_lock.py: advisory cache and critical sections
# - test_archive.py / test_rollover.py: deletes and academic-year rollover
# - test_api.py: Integration tests for the admin API endpoints
#
# Run tests with: pytest
# =============================================================================
