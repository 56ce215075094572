"""
Debit card endpoints
"""

from fastapi import APIRouter, Depends

from .auth import CardSystem, get_card_system, get_current_identity, require_access
from .schemas import (
    ApiResponse, respond, DebitCardView, CardsView, LimitsRequest, CardLimitsUpdatedView,
    PINUpdateRequest
)
from ..cards import CardKind
from ..identity import Identity
from ..logging_config import get_logger, log_action


router = APIRouter()
logger = get_logger()

NOT_FOUND = "Debit card not found"


def _require_debit_card(system: CardSystem, card_id: str, identity: Identity):
    decision, card = system.gate.check_card(CardKind.DEBIT, card_id, identity)
    require_access(decision, NOT_FOUND)
    return card


@router.get("", response_model=ApiResponse[CardsView[DebitCardView]], response_model_exclude_none=True)
def list_debit_cards(
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """List the caller's debit cards"""
    cards = system.card_manager.list_cards(CardKind.DEBIT, identity.user_id)
    return respond(CardsView(cards=[DebitCardView.from_card(card) for card in cards]))


@router.get("/{card_id}", response_model=ApiResponse[DebitCardView], response_model_exclude_none=True)
def get_debit_card(
    card_id: str,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Get one debit card"""
    card = _require_debit_card(system, card_id, identity)
    return respond(DebitCardView.from_card(card))


@router.put("/{card_id}/limits", response_model=ApiResponse[CardLimitsUpdatedView],
            response_model_exclude_none=True)
def update_debit_card_limits(
    card_id: str,
    request: LimitsRequest,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Replace the card's domestic and international limits"""
    _require_debit_card(system, card_id, identity)

    system.limits_engine.replace_limits(card_id, request.domestic(), request.international())

    log_action(
        logger, "info", "Debit card limits updated",
        user_id=identity.user_id, action="update_limits", card_id=card_id, card_kind="debit"
    )
    return respond(
        CardLimitsUpdatedView(card_id=card_id, limits=request),
        "Debit card limits updated successfully"
    )


@router.post("/{card_id}/pin", response_model=ApiResponse[None], response_model_exclude_none=True)
def update_debit_card_pin(
    card_id: str,
    request: PINUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Validate a PIN change request"""
    _require_debit_card(system, card_id, identity)

    system.card_manager.validate_pin_change(request.new_pin, request.confirm_pin, request.terms_accepted)

    log_action(
        logger, "info", "PIN updated",
        user_id=identity.user_id, action="update_pin", card_id=card_id, card_kind="debit"
    )
    return respond(message="PIN updated successfully")
