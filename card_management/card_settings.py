"""
Card Settings Module

Account-wide card preferences: default card per kind, security toggles,
notification and statement preferences, authentication toggles and global
daily/monthly limits. A user's first read creates and persists a zero-value
record; updates are field-level and only touch the fields supplied.
"""

from dataclasses import dataclass, field, fields
from typing import Dict, List, Any

from .storage import StorageInterface, StorageRecord
from .errors import InvalidInputError


@dataclass
class CardSettings(StorageRecord):
    """Per-user settings; id is the owning user ID"""
    user_id: str
    default_credit_card_id: str = ""
    default_debit_card_id: str = ""
    default_virtual_card_id: str = ""
    transaction_notifications_enabled: bool = False
    notification_preferences: List[str] = field(default_factory=list)
    transaction_amount_threshold: float = 0.0
    international_transaction_alerts: bool = False
    contactless_payments_enabled: bool = False
    international_usage_enabled: bool = False
    online_transactions_enabled: bool = False
    atm_withdrawals_enabled: bool = False
    default_daily_limit: float = 0.0
    default_monthly_limit: float = 0.0
    statement_delivery: str = ""
    statement_frequency: str = ""
    e_statement_enabled: bool = False
    biometric_authentication_enabled: bool = False
    two_factor_authentication_enabled: bool = False
    transaction_authentication_required: bool = False
    pin_for_contactless_enabled: bool = False


# Fields an update may touch; identity fields are fixed
UPDATABLE_FIELDS = frozenset(
    f.name for f in fields(CardSettings) if f.name not in ("id", "user_id")
)


class SettingsManager:
    """Reads and partially updates card settings"""

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.settings_table = "card_settings"

    def _load(self, user_id: str):
        data = self.storage.load(self.settings_table, user_id)
        if data is None:
            return None
        return CardSettings.from_dict(data)

    def save_settings(self, settings: CardSettings) -> CardSettings:
        """Store a full settings record"""
        self.storage.save(self.settings_table, settings.user_id, settings.to_dict())
        return settings

    def get_settings(self, user_id: str) -> CardSettings:
        """Get settings, creating and persisting a zero-value record on first read"""
        settings = self._load(user_id)
        if settings is None:
            settings = self.save_settings(CardSettings(id=user_id, user_id=user_id))
        return settings

    def update_settings(self, user_id: str, changes: Dict[str, Any]) -> CardSettings:
        """
        Apply a partial update as one atomic read-modify-write.

        Args:
            user_id: Owner of the settings
            changes: Field name to new value; None values are skipped

        Returns:
            The stored settings after the update

        Raises:
            InvalidInputError: a key is not an updatable settings field
        """
        unknown = set(changes) - UPDATABLE_FIELDS
        if unknown:
            raise InvalidInputError(f"Unknown settings fields: {', '.join(sorted(unknown))}")

        def apply(data):
            if data is None:
                settings = CardSettings(id=user_id, user_id=user_id)
            else:
                settings = CardSettings.from_dict(data)
            for name, value in changes.items():
                if value is not None:
                    setattr(settings, name, value)
            return settings.to_dict()

        return CardSettings.from_dict(self.storage.update(self.settings_table, user_id, apply))
