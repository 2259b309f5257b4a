# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the administrative web surface:
# - main.py: App entry point, middleware setup, error handlers
# - config.py: Environment variable loading and settings
# - exceptions.py: Exception classes and their JSON handlers
# - dependencies.py: Shared Datastore dependency
# - routers/: API endpoint definitions organized by feature
#
# The app layer is thin - it handles HTTP concerns and delegates
# business logic to the core/ package.
# =============================================================================
