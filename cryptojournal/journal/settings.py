"""
Settings repository.

User preferences and the smart-withdrawal rule, one row each per owner.
Both are written with an upsert keyed on user_id; a missing row is a
new user, not an error.
"""

import logging
from decimal import Decimal
from typing import Optional

from cryptojournal.core.entities import SmartWithdrawalSettings, UserSettings
from cryptojournal.core.errors import GatewayError, RowNotFoundError, ValidationError
from cryptojournal.core.utils import parse_timestamp, to_decimal
from cryptojournal.store.base import SMART_WITHDRAWAL_SETTINGS, USER_SETTINGS, Gateway, Row

logger = logging.getLogger(__name__)

OWNER_COLUMN = "user_id"

THEMES = ("dark", "light")


def user_settings_to_row(settings: UserSettings) -> Row:
    return {
        "user_id": settings.owner_id,
        "starting_capital": str(settings.starting_capital),
        "notifications": settings.notifications,
        "email_updates": settings.email_updates,
        "auto_backup": settings.auto_backup,
        "theme": settings.theme,
    }


def row_to_user_settings(row: Row) -> UserSettings:
    defaults = UserSettings(owner_id=row["user_id"])
    return UserSettings(
        id=row.get("id"),
        owner_id=row["user_id"],
        starting_capital=to_decimal(row.get("starting_capital")) or defaults.starting_capital,
        notifications=bool(row.get("notifications", defaults.notifications)),
        email_updates=bool(row.get("email_updates", defaults.email_updates)),
        auto_backup=bool(row.get("auto_backup", defaults.auto_backup)),
        theme=row.get("theme") or defaults.theme,
        created_at=parse_timestamp(row.get("created_at")),
        updated_at=parse_timestamp(row.get("updated_at")),
    )


def withdrawal_settings_to_row(settings: SmartWithdrawalSettings) -> Row:
    return {
        "user_id": settings.owner_id,
        "enabled": settings.enabled,
        "reinvest_percentage": str(settings.reinvest_percentage),
    }


def row_to_withdrawal_settings(row: Row) -> SmartWithdrawalSettings:
    reinvest = to_decimal(row.get("reinvest_percentage"))
    return SmartWithdrawalSettings(
        id=row.get("id"),
        owner_id=row["user_id"],
        enabled=bool(row.get("enabled", False)),
        reinvest_percentage=reinvest if reinvest is not None else Decimal("50"),
        created_at=parse_timestamp(row.get("created_at")),
        updated_at=parse_timestamp(row.get("updated_at")),
    )


def validate_reinvest_percentage(value: Decimal) -> Decimal:
    """Reinvestment share must be within 0-100."""
    if value is None or not value.is_finite() or not (Decimal("0") <= value <= Decimal("100")):
        raise ValidationError("reinvest_percentage", "Must be between 0 and 100")
    return value


class SettingsRepository:
    """Read and upsert per-owner settings rows."""

    def __init__(self, gateway: Gateway):
        self.gateway = gateway

    def _fetch(self, table: str, owner_id: Optional[str]) -> Optional[Row]:
        if not owner_id:
            return None
        try:
            return self.gateway.select_one(table, {OWNER_COLUMN: owner_id})
        except RowNotFoundError:
            logger.info(f"No {table} row for {owner_id}; using defaults")
            return None
        except GatewayError as e:
            logger.error(f"Error fetching {table}: {e}")
            raise

    def _save(self, table: str, row: Row) -> Row:
        if not row.get(OWNER_COLUMN):
            raise ValidationError("owner_id", "Please sign in to save settings")
        try:
            stored = self.gateway.upsert(table, row, on_conflict=OWNER_COLUMN)
        except GatewayError as e:
            logger.error(f"Error saving {table}: {e}")
            raise
        logger.info(f"Saved {table} for {row[OWNER_COLUMN]}")
        return stored

    def get_user_settings(self, owner_id: Optional[str]) -> Optional[UserSettings]:
        """Stored preferences, or None for a new user."""
        row = self._fetch(USER_SETTINGS, owner_id)
        return row_to_user_settings(row) if row else None

    def load_user_settings(self, owner_id: str) -> UserSettings:
        """Stored preferences, or defaults for a new user."""
        return self.get_user_settings(owner_id) or UserSettings(owner_id=owner_id)

    def save_user_settings(self, settings: UserSettings) -> UserSettings:
        capital = settings.starting_capital
        if capital is None or not capital.is_finite() or capital < 0:
            raise ValidationError("starting_capital", "Must be zero or more")
        if settings.theme not in THEMES:
            raise ValidationError("theme", f"Must be one of: {', '.join(THEMES)}")
        stored = self._save(USER_SETTINGS, user_settings_to_row(settings))
        return row_to_user_settings(stored)

    def get_withdrawal_settings(self, owner_id: Optional[str]) -> Optional[SmartWithdrawalSettings]:
        """Stored withdrawal rule, or None when the user never saved one."""
        row = self._fetch(SMART_WITHDRAWAL_SETTINGS, owner_id)
        return row_to_withdrawal_settings(row) if row else None

    def load_withdrawal_settings(self, owner_id: str) -> SmartWithdrawalSettings:
        """Stored withdrawal rule, or the disabled/50% default."""
        return self.get_withdrawal_settings(owner_id) or SmartWithdrawalSettings(owner_id=owner_id)

    def save_withdrawal_settings(self, settings: SmartWithdrawalSettings) -> SmartWithdrawalSettings:
        validate_reinvest_percentage(settings.reinvest_percentage)
        stored = self._save(SMART_WITHDRAWAL_SETTINGS, withdrawal_settings_to_row(settings))
        return row_to_withdrawal_settings(stored)
