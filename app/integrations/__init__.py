"""
Integrations module for connecting the diary app to external services.

Currently provides Chevereto, a self-hosted image hosting service, so images
can be uploaded through the backend instead of directly from the browser.

Architecture:
- app/models/integration.py: Provider identifiers and config key layout
- schemas.py: Pydantic schemas for API requests/responses and outcome types
- router.py: FastAPI endpoints (settings, connection test, upload relay)
- service.py: Settings validation/persistence and orchestration
- {provider}.py: Provider-specific protocol (chevereto)

Design Principles:
- Each user connects with their own domain and API key
- Settings live in the per-user config store; API keys are encrypted at rest
- Every provider failure is turned into a normalized outcome before it
  reaches the caller
"""

from app.models.integration import ConnectionSettingsField, IntegrationProvider

__all__ = [
    "ConnectionSettingsField",
    "IntegrationProvider",
]
