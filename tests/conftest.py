# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up environment variables before any imports
# - Wires every service onto the in-memory backends
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("STORAGE_BACKEND", "memory")
os.environ.setdefault("CACHE_BACKEND", "memory")
os.environ.setdefault("LOCK_BACKEND", "thread")
os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("DEFAULT_SESSION", "2024-25")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest

from core.datastore import Datastore
from core.services.directory_service import DirectoryResolver
from core.services.lock_service import LockManager
from core.services.row_store import RowStore
from core.services.table_service import TableAccessor
from lib.backends.memory import MemoryBackend, MemoryConfigStore


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def config_store():
    """Empty in-memory pointer store."""
    return MemoryConfigStore()


@pytest.fixture
def backend():
    """Empty in-memory storage backend."""
    return MemoryBackend()


@pytest.fixture
def resolver(config_store, backend):
    """Directory resolver with the default layout and session 2024-25."""
    return DirectoryResolver(
        config_store,
        backend,
        default_session="2024-25",
        root_name="Wisdom_Heritage_Cloud_ERP",
        session_prefix="Wisdom_Heritage_",
    )


@pytest.fixture
def accessor(backend):
    return TableAccessor(backend)


@pytest.fixture
def row_store(backend):
    return RowStore(backend)


@pytest.fixture
def datastore(config_store, backend):
    """Datastore on the in-memory backends with a short lock timeout."""
    return Datastore(config_store, backend, lock=LockManager(timeout_ms=200))


@pytest.fixture
def student_header():
    return ["Admission No", "Name", "Class", "Section"]


@pytest.fixture
def student_rows():
    """Three data rows of a students master table."""
    return [
        ["2024001", "Asha", "10", "A"],
        ["2024002", "Ravi", "10", "B"],
        ["2024003", "Meera", "9", "A"],
    ]
