"""
Autopay Module

Automatic bill payment for credit cards. At most one live autopay exists per
card; enabling again replaces it with a new autopay ID.
"""

from datetime import datetime, timezone
from dataclasses import dataclass
from typing import Optional

from .storage import StorageInterface, StorageRecord
from .generators import generate_id
from .errors import NotFoundError


@dataclass
class Autopay(StorageRecord):
    """Autopay configuration attached to one credit card"""
    card_id: str
    amount_option: str
    linked_account_id: str
    user_id: str
    auto_pay_enabled: bool = False
    activation_date: Optional[datetime] = None

    datetime_fields = ("activation_date",)


class AutopayManager:
    """Autopay lifecycle, keyed by card ID"""

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.autopays_table = "autopays"

    def get(self, card_id: str) -> Optional[Autopay]:
        """Get the autopay for a card"""
        data = self.storage.load(self.autopays_table, card_id)
        if data is None:
            return None
        return Autopay.from_dict(data)

    def enable(self, card_id: str, user_id: str, amount_option: str,
               linked_account_id: str, auto_pay_enabled: bool = False) -> Autopay:
        """Create or replace the autopay for a card"""
        autopay = Autopay(
            id=generate_id(),
            card_id=card_id,
            amount_option=amount_option,
            linked_account_id=linked_account_id,
            user_id=user_id,
            auto_pay_enabled=auto_pay_enabled,
            activation_date=datetime.now(timezone.utc)
        )
        self.storage.save(self.autopays_table, card_id, autopay.to_dict())
        return autopay

    def update(self, card_id: str, amount_option: str, linked_account_id: str,
               auto_pay_enabled: bool = False) -> Autopay:
        """
        Update an existing autopay.

        The enabled flag can only be switched on here; a false value leaves
        it as it was.
        """
        def apply(data):
            if data is None:
                raise NotFoundError("Autopay not found")
            autopay = Autopay.from_dict(data)
            autopay.amount_option = amount_option
            autopay.linked_account_id = linked_account_id
            if auto_pay_enabled:
                autopay.auto_pay_enabled = True
            return autopay.to_dict()

        return Autopay.from_dict(self.storage.update(self.autopays_table, card_id, apply))

    def disable(self, card_id: str) -> bool:
        """Remove the autopay for a card"""
        return self.storage.delete(self.autopays_table, card_id)
