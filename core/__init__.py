# =============================================================================
# core/ - Data-Store Core
# =============================================================================
# This package contains framework-agnostic business logic:
# - models/: Pydantic schemas (modules, directory handles, envelopes)
# - services/: Directory, tables, rows, cache, lock, archive, rollover
# - datastore.py: Wires the services onto one config store and backend
#
# Code in this package should NOT import from FastAPI routers.
# This keeps the logic testable and reusable.
# =============================================================================
