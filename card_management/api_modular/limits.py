"""
Card transaction limits endpoints

Card IDs here may name a credit, debit or virtual card.
"""

from fastapi import APIRouter, Depends

from .auth import CardSystem, get_card_system, get_current_identity, require_access
from .schemas import (
    ApiResponse, respond, LimitsView, LimitsUpdateRequest, TransactionLimitModel,
    DomesticLimitsView, InternationalLimitsView
)
from ..identity import Identity
from ..logging_config import get_logger, log_action


router = APIRouter()
logger = get_logger()

NOT_FOUND = "Card not found"


def _require_any_card(system: CardSystem, card_id: str, identity: Identity):
    decision, card = system.gate.check_any_card(card_id, identity)
    require_access(decision, NOT_FOUND)
    return card


@router.get("", response_model=ApiResponse[LimitsView], response_model_exclude_none=True)
def get_limits(
    card_id: str,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Get the card's limits, falling back to defaults"""
    _require_any_card(system, card_id, identity)

    limits = system.limits_engine.get_limits(card_id)
    return respond(LimitsView.from_limits(limits))


@router.put("/domestic", response_model=ApiResponse[DomesticLimitsView], response_model_exclude_none=True)
def update_domestic_limits(
    card_id: str,
    request: LimitsUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Replace the card's domestic limits"""
    _require_any_card(system, card_id, identity)

    limits = system.limits_engine.update_domestic(card_id, request.to_limits())

    log_action(
        logger, "info", "Domestic limits updated",
        user_id=identity.user_id, action="update_domestic_limits", card_id=card_id
    )
    return respond(
        DomesticLimitsView(
            card_id=card_id,
            domestic_limits=[TransactionLimitModel.from_limit(limit) for limit in limits.domestic_limits]
        ),
        "Domestic limits updated successfully"
    )


@router.put("/international", response_model=ApiResponse[InternationalLimitsView],
            response_model_exclude_none=True)
def update_international_limits(
    card_id: str,
    request: LimitsUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Replace the card's international limits"""
    _require_any_card(system, card_id, identity)

    limits = system.limits_engine.update_international(card_id, request.to_limits())

    log_action(
        logger, "info", "International limits updated",
        user_id=identity.user_id, action="update_international_limits", card_id=card_id
    )
    return respond(
        InternationalLimitsView(
            card_id=card_id,
            international_limits=[TransactionLimitModel.from_limit(limit) for limit in limits.international_limits]
        ),
        "International limits updated successfully"
    )
