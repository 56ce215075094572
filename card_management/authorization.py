"""
Authorization Gate

Decides whether a resolved caller may act on a resource by comparing the
resource's owning user with the caller identity. Absence and foreign
ownership are distinct outcomes (404 vs 403 at the API boundary).
"""

from enum import Enum
from typing import Optional, Tuple

from .cards import CardKind, CardManager, Card
from .identity import Identity


class AccessDecision(Enum):
    """Outcome of an ownership check"""
    ALLOW = "allow"
    NOT_FOUND = "not_found"
    FORBIDDEN = "forbidden"


# Probe order for card IDs of unknown kind
CARD_PROBE_ORDER = (CardKind.CREDIT, CardKind.DEBIT, CardKind.VIRTUAL)


class AuthorizationGate:
    """Ownership checks for card-scoped operations"""

    def __init__(self, card_manager: CardManager):
        self.card_manager = card_manager

    @staticmethod
    def check(resource, identity: Identity) -> AccessDecision:
        """Check any resource carrying a user_id attribute"""
        if resource is None:
            return AccessDecision.NOT_FOUND
        if resource.user_id != identity.user_id:
            return AccessDecision.FORBIDDEN
        return AccessDecision.ALLOW

    def check_card(self, kind: CardKind, card_id: str,
                   identity: Identity) -> Tuple[AccessDecision, Optional[Card]]:
        """Look up a card of a known kind and check its owner"""
        card = self.card_manager.get_card(kind, card_id)
        return self.check(card, identity), card

    def check_any_card(self, card_id: str,
                       identity: Identity) -> Tuple[AccessDecision, Optional[Card]]:
        """
        Look up a card whose kind is unknown.

        Probes credit, then debit, then virtual and judges ownership by the
        first match.
        """
        for kind in CARD_PROBE_ORDER:
            card = self.card_manager.get_card(kind, card_id)
            if card is not None:
                return self.check(card, identity), card
        return AccessDecision.NOT_FOUND, None
