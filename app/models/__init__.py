# Import all models for easy access
from .integration import ConnectionSettingsField, IntegrationProvider
from .user_config import UserConfig

__all__ = [
    "ConnectionSettingsField",
    "IntegrationProvider",
    "UserConfig",
]
