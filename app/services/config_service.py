"""
Per-user configuration store.

Typed get/set of settings scoped by user identity. Reads are single-row;
``set_batch`` writes all keys in one transaction so a settings record is never
left half-updated.
"""
import json
from typing import Any, Dict, Optional, Tuple

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from app.core.exceptions import ConfigStoreError
from app.core.logging_config import log_error, log_debug, log_warning
from app.core.time_utils import utc_now
from app.models.user_config import UserConfig


class ConfigService:
    """Service class for per-user key/value configuration."""

    def __init__(self, session: Session):
        self.session = session

    def _get_entry(self, user_id: str, key: str) -> Optional[UserConfig]:
        statement = select(UserConfig).where(
            UserConfig.user_id == user_id,
            UserConfig.key == key,
        )
        return self.session.exec(statement).first()

    def _get_value(self, user_id: str, key: str) -> Tuple[Any, bool]:
        try:
            entry = self._get_entry(user_id, key)
        except SQLAlchemyError as exc:
            log_error(exc, user_id=user_id, key=key)
            raise ConfigStoreError(f"Failed to read configuration key '{key}'") from exc

        if entry is None:
            return None, False
        try:
            return json.loads(entry.value), True
        except (json.JSONDecodeError, TypeError):
            log_warning("Ignoring undecodable config value", user_id=user_id, key=key)
            return None, False

    def get_bool(self, user_id: str, key: str) -> Tuple[bool, bool]:
        """Return ``(value, found)``. A stored non-boolean counts as not found."""
        value, found = self._get_value(user_id, key)
        if not found or not isinstance(value, bool):
            return False, False
        return value, True

    def get_string(self, user_id: str, key: str) -> Tuple[str, bool]:
        """Return ``(value, found)``. A stored non-string counts as not found."""
        value, found = self._get_value(user_id, key)
        if not found or not isinstance(value, str):
            return "", False
        return value, True

    def set_batch(self, user_id: str, values: Dict[str, Any]) -> None:
        """
        Write several keys for one user, all or nothing.

        Raises:
            ConfigStoreError: if any write fails; no key is changed in that case.
        """
        now = utc_now()
        try:
            for key, value in values.items():
                encoded = json.dumps(value)
                entry = self._get_entry(user_id, key)
                if entry is None:
                    entry = UserConfig(user_id=user_id, key=key, value=encoded, updated_at=now)
                else:
                    entry.value = encoded
                    entry.updated_at = now
                self.session.add(entry)
            self.session.commit()
        except (SQLAlchemyError, TypeError, ValueError) as exc:
            self.session.rollback()
            log_error(exc, user_id=user_id, keys=sorted(values))
            raise ConfigStoreError("Failed to save configuration") from exc

        log_debug("Saved config batch", user_id=user_id, keys=sorted(values))
