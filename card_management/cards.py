"""
Card Management Module

Credit, debit and virtual card records and the per-card operations the app
exposes. Credit and debit cards are seeded and only changed in place; virtual
cards are created, reissued and deleted by their owners at runtime.
"""

from datetime import datetime, timezone, timedelta
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Type

from .storage import StorageInterface, StorageRecord
from .generators import CardNumberGenerator, generate_id
from .errors import InvalidInputError, NotFoundError


class CardKind(Enum):
    """Card kinds, in the order ownership lookups probe them"""
    CREDIT = "credit"
    DEBIT = "debit"
    VIRTUAL = "virtual"


class VirtualCardStatus(Enum):
    """Virtual card lifecycle states"""
    ACTIVE = "Active"
    FROZEN = "Frozen"
    CANCELLED = "Cancelled"


# Expiry choices offered when creating a virtual card
EXPIRY_PERIOD_MONTHS = {
    "3 Months": 3,
    "6 Months": 6,
    "12 Months": 12,
}
DEFAULT_EXPIRY_MONTHS = 3


@dataclass
class Card(StorageRecord):
    """Fields shared by every card kind"""
    card_number: str
    cvv: str
    expiry_month: int
    expiry_year: int
    cardholder_name: str
    card_type: str
    user_id: str


@dataclass
class CreditCard(Card):
    rewards_points: int = 0
    available_credit: float = 0.0
    total_credit: float = 0.0
    outstanding_balance: float = 0.0


@dataclass
class DebitCard(Card):
    account_number: str = ""
    bank_name: str = ""
    account_balance: float = 0.0


@dataclass
class VirtualCard(Card):
    nickname: str = ""
    spending_limit: float = 0.0
    remaining_balance: float = 0.0
    created_at: Optional[datetime] = None
    status: str = VirtualCardStatus.ACTIVE.value
    linked_account_id: str = ""

    datetime_fields = ("created_at",)


@dataclass
class AddonCardRequest:
    """Receipt for an add-on card request"""
    request_id: str
    estimated_delivery_date: datetime


CARD_TABLES: Dict[CardKind, str] = {
    CardKind.CREDIT: "credit_cards",
    CardKind.DEBIT: "debit_cards",
    CardKind.VIRTUAL: "virtual_cards",
}

CARD_CLASSES: Dict[CardKind, Type[Card]] = {
    CardKind.CREDIT: CreditCard,
    CardKind.DEBIT: DebitCard,
    CardKind.VIRTUAL: VirtualCard,
}


def _add_months(moment: datetime, months: int) -> datetime:
    """Shift a datetime by whole months, clamping the day to the target month"""
    month_index = moment.month - 1 + months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = moment.day
    while True:
        try:
            return moment.replace(year=year, month=month, day=day)
        except ValueError:
            day -= 1


class CardManager:
    """
    Reads and mutates card records.

    Ownership is not checked here; callers go through the AuthorizationGate
    first. Mutations of a card that vanished in between raise NotFoundError.
    """

    def __init__(
        self,
        storage: StorageInterface,
        number_generator: Optional[CardNumberGenerator] = None,
        addon_delivery_days: int = 14
    ):
        self.storage = storage
        self.number_generator = number_generator or CardNumberGenerator()
        self.addon_delivery_days = addon_delivery_days

    def add_card(self, kind: CardKind, card: Card) -> Card:
        """Store a card of the given kind"""
        self.storage.save(CARD_TABLES[kind], card.id, card.to_dict())
        return card

    def get_card(self, kind: CardKind, card_id: str) -> Optional[Card]:
        """Get a card by kind and ID"""
        data = self.storage.load(CARD_TABLES[kind], card_id)
        if data is None:
            return None
        return CARD_CLASSES[kind].from_dict(data)

    def list_cards(self, kind: CardKind, user_id: str) -> List[Card]:
        """List all cards of one kind owned by a user"""
        records = self.storage.list_by_user(CARD_TABLES[kind], user_id)
        return [CARD_CLASSES[kind].from_dict(data) for data in records]

    def _require_virtual(self, card_id: str) -> VirtualCard:
        card = self.get_card(CardKind.VIRTUAL, card_id)
        if card is None:
            raise NotFoundError("Virtual card not found")
        return card

    def create_virtual_card(
        self,
        user_id: str,
        cardholder_name: str,
        nickname: str,
        spending_limit: float,
        card_type: str,
        linked_account_id: str,
        expiry_period: Optional[str] = None,
        custom_expiry_date: Optional[datetime] = None
    ) -> VirtualCard:
        """
        Issue a new virtual card.

        Args:
            user_id: Owner of the new card
            cardholder_name: Name printed on the card
            nickname: User-facing label
            spending_limit: Initial limit, also the initial remaining balance
            card_type: Network label (e.g. "Visa")
            linked_account_id: Funding account
            expiry_period: "3 Months", "6 Months" or "12 Months"; anything else means 3
            custom_expiry_date: Explicit expiry, overrides expiry_period

        Returns:
            The stored card, CVV unmasked
        """
        now = datetime.now(timezone.utc)
        if custom_expiry_date is not None:
            expiry = custom_expiry_date
        else:
            months = EXPIRY_PERIOD_MONTHS.get(expiry_period or "", DEFAULT_EXPIRY_MONTHS)
            expiry = _add_months(now, months)

        card = VirtualCard(
            id=generate_id(),
            card_number=self.number_generator.card_number(),
            cvv=self.number_generator.cvv(),
            expiry_month=expiry.month,
            expiry_year=expiry.year,
            cardholder_name=cardholder_name,
            card_type=card_type,
            user_id=user_id,
            nickname=nickname,
            spending_limit=spending_limit,
            remaining_balance=spending_limit,
            created_at=now,
            status=VirtualCardStatus.ACTIVE.value,
            linked_account_id=linked_account_id
        )
        self.add_card(CardKind.VIRTUAL, card)
        return card

    def rename_virtual_card(self, card_id: str, nickname: Optional[str]) -> VirtualCard:
        """Update the nickname; None leaves it unchanged"""
        card = self._require_virtual(card_id)
        if nickname is not None:
            card.nickname = nickname
        self.add_card(CardKind.VIRTUAL, card)
        return card

    def update_spending_limit(self, card_id: str, spending_limit: float) -> VirtualCard:
        """Set a new spending limit, rescaling the remaining balance to match"""
        if spending_limit < 0:
            raise InvalidInputError("Spending limit must not be negative")

        card = self._require_virtual(card_id)
        if card.spending_limit > 0:
            card.remaining_balance = (card.remaining_balance / card.spending_limit) * spending_limit
        card.spending_limit = spending_limit
        self.add_card(CardKind.VIRTUAL, card)
        return card

    def update_status(self, card_id: str, status: str) -> VirtualCard:
        """Set the virtual card status"""
        try:
            new_status = VirtualCardStatus(status)
        except ValueError:
            raise InvalidInputError("Invalid status. Must be Active, Frozen, or Cancelled")

        card = self._require_virtual(card_id)
        card.status = new_status.value
        self.add_card(CardKind.VIRTUAL, card)
        return card

    def regenerate_virtual_card(self, card_id: str) -> VirtualCard:
        """Reissue number and CVV, keeping expiry and everything else"""
        card = self._require_virtual(card_id)
        card.card_number = self.number_generator.card_number()
        card.cvv = self.number_generator.cvv()
        self.add_card(CardKind.VIRTUAL, card)
        return card

    def delete_virtual_card(self, card_id: str) -> bool:
        """Delete a virtual card"""
        return self.storage.delete(CARD_TABLES[CardKind.VIRTUAL], card_id)

    def validate_pin_change(self, new_pin: str, confirm_pin: str, terms_accepted: bool) -> None:
        """Check a PIN change request; PINs themselves are never stored"""
        if new_pin != confirm_pin:
            raise InvalidInputError("PINs do not match")
        if not terms_accepted:
            raise InvalidInputError("Terms must be accepted")

    def request_addon_card(self, card_id: str) -> AddonCardRequest:
        """Accept an add-on card request for a credit card"""
        if self.get_card(CardKind.CREDIT, card_id) is None:
            raise NotFoundError("Credit card not found")

        return AddonCardRequest(
            request_id=generate_id(),
            estimated_delivery_date=datetime.now(timezone.utc) + timedelta(days=self.addon_delivery_days)
        )
