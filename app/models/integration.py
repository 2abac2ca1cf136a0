"""
Integration identifiers and per-user config key layout.

Integration settings are not a table of their own: each field is a row in the
per-user config store (see app/models/user_config.py) under a key of the form
``"<integration>.<field>"``.
"""
from enum import Enum


class IntegrationProvider(str, Enum):
    """
    Supported integration providers.

    Each provider has a corresponding client module in app/integrations/{provider}.py
    """
    CHEVERETO = "chevereto"

    def config_key(self, field: str) -> str:
        """Namespaced config store key for one settings field."""
        return f"{self.value}.{field}"


class ConnectionSettingsField(str, Enum):
    """Fields of a per-user connection settings record."""
    ENABLED = "enabled"
    DOMAIN = "domain"
    API_KEY = "api_key"
    ALBUM_ID = "album_id"
