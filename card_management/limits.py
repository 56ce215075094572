"""
Transaction Limits Module

Per-card domestic and international transaction limits. A card with nothing
stored reads as a fixed default structure; reads never write back, so
defaults and backfilled IDs only become durable through an explicit update.
"""

from dataclasses import dataclass, asdict
from typing import Dict, List, Optional, Any

from .storage import StorageInterface
from .generators import generate_id


ATM = "ATM Cash Withdrawal"
ONLINE = "Online"
POS = "Merchant Outlets (POS)"
CONTACTLESS = "Contactless"


@dataclass
class TransactionLimit:
    """One limit category for a card"""
    type: str
    is_enabled: bool = False
    current_limit: float = 0.0
    max_limit: float = 0.0
    can_set_limit: bool = False
    id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'TransactionLimit':
        return cls(**data)


@dataclass
class CardLimits:
    """Stored limits for one card; either half may be absent"""
    card_id: str
    domestic_limits: Optional[List[TransactionLimit]] = None
    international_limits: Optional[List[TransactionLimit]] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "card_id": self.card_id,
            "domestic_limits": _limits_to_dicts(self.domestic_limits),
            "international_limits": _limits_to_dicts(self.international_limits),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CardLimits':
        return cls(
            card_id=data["card_id"],
            domestic_limits=_limits_from_dicts(data.get("domestic_limits")),
            international_limits=_limits_from_dicts(data.get("international_limits")),
        )


def _limits_to_dicts(limits: Optional[List[TransactionLimit]]) -> Optional[List[Dict[str, Any]]]:
    if limits is None:
        return None
    return [limit.to_dict() for limit in limits]


def _limits_from_dicts(data: Optional[List[Dict[str, Any]]]) -> Optional[List[TransactionLimit]]:
    if data is None:
        return None
    return [TransactionLimit.from_dict(item) for item in data]


def default_domestic_limits() -> List[TransactionLimit]:
    return [
        TransactionLimit(type=ATM, is_enabled=True, current_limit=50000, max_limit=100000, can_set_limit=True),
        TransactionLimit(type=ONLINE, is_enabled=True, current_limit=200000, max_limit=500000, can_set_limit=True),
        TransactionLimit(type=POS, is_enabled=True, current_limit=150000, max_limit=300000, can_set_limit=True),
        TransactionLimit(type=CONTACTLESS, is_enabled=True, current_limit=5000, max_limit=10000, can_set_limit=True),
    ]


def default_international_limits() -> List[TransactionLimit]:
    return [
        TransactionLimit(type=ATM, is_enabled=False, current_limit=0, max_limit=50000, can_set_limit=True),
        TransactionLimit(type=ONLINE, is_enabled=True, current_limit=100000, max_limit=200000, can_set_limit=True),
        TransactionLimit(type=POS, is_enabled=False, current_limit=0, max_limit=100000, can_set_limit=True),
        TransactionLimit(type=CONTACTLESS, is_enabled=False, current_limit=0, max_limit=5000, can_set_limit=True),
    ]


class LimitsEngine:
    """
    Reads and updates card transaction limits.

    Ownership is checked by the caller (AuthorizationGate.check_any_card).
    """

    def __init__(self, storage: StorageInterface):
        self.storage = storage
        self.limits_table = "card_limits"

    def _load(self, card_id: str) -> Optional[CardLimits]:
        data = self.storage.load(self.limits_table, card_id)
        if data is None:
            return None
        return CardLimits.from_dict(data)

    def _save(self, limits: CardLimits) -> None:
        self.storage.save(self.limits_table, limits.card_id, limits.to_dict())

    @staticmethod
    def _fill_in(limits: Optional[List[TransactionLimit]]) -> Optional[List[TransactionLimit]]:
        """Backfill IDs and max limits for display; the list is a private copy"""
        if limits is None:
            return None
        for limit in limits:
            if not limit.id:
                limit.id = generate_id()
            if limit.max_limit == 0:
                limit.max_limit = limit.current_limit
            limit.can_set_limit = True
        return limits

    def get_limits(self, card_id: str) -> CardLimits:
        """
        Get the limits view for a card.

        Falls back to the default structure when nothing is stored. Synthesized
        values (defaults, IDs, max limits) are never persisted by a read.
        """
        limits = self._load(card_id)
        if limits is None:
            limits = CardLimits(
                card_id=card_id,
                domestic_limits=default_domestic_limits(),
                international_limits=default_international_limits(),
            )

        return CardLimits(
            card_id=card_id,
            domestic_limits=self._fill_in(limits.domestic_limits),
            international_limits=self._fill_in(limits.international_limits),
        )

    def _update_half(self, card_id: str, half: str, values: List[TransactionLimit]) -> CardLimits:
        """Replace one half of the stored record in a single store update"""
        def apply(data):
            limits = CardLimits.from_dict(data) if data is not None else CardLimits(card_id=card_id)
            setattr(limits, half, list(values))
            return limits.to_dict()

        return CardLimits.from_dict(self.storage.update(self.limits_table, card_id, apply))

    def update_domestic(self, card_id: str, domestic_limits: List[TransactionLimit]) -> CardLimits:
        """Replace the domestic half, keeping the international half as stored"""
        return self._update_half(card_id, "domestic_limits", domestic_limits)

    def update_international(self, card_id: str, international_limits: List[TransactionLimit]) -> CardLimits:
        """Replace the international half, keeping the domestic half as stored"""
        return self._update_half(card_id, "international_limits", international_limits)

    def replace_limits(
        self,
        card_id: str,
        domestic_limits: Optional[List[TransactionLimit]],
        international_limits: Optional[List[TransactionLimit]]
    ) -> CardLimits:
        """Overwrite the whole limits record for a card"""
        limits = CardLimits(
            card_id=card_id,
            domestic_limits=list(domestic_limits) if domestic_limits is not None else None,
            international_limits=list(international_limits) if international_limits is not None else None,
        )
        self._save(limits)
        return limits
