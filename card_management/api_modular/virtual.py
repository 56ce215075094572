"""
Virtual card endpoints
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query

from .auth import CardSystem, get_card_system, get_current_identity, require_access
from .schemas import (
    ApiResponse, respond, VirtualCardView, CardsView, VirtualCardCreateRequest,
    VirtualCardUpdateRequest, SpendingLimitRequest, SpendingLimitView, StatusRequest,
    StatusView, RegeneratedCardView, TransactionsView
)
from ..cards import CardKind
from ..identity import Identity
from ..logging_config import get_logger, log_action


router = APIRouter()
logger = get_logger()

NOT_FOUND = "Virtual card not found"


def _require_virtual_card(system: CardSystem, card_id: str, identity: Identity):
    decision, card = system.gate.check_card(CardKind.VIRTUAL, card_id, identity)
    require_access(decision, NOT_FOUND)
    return card


@router.get("", response_model=ApiResponse[CardsView[VirtualCardView]], response_model_exclude_none=True)
def list_virtual_cards(
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """List the caller's virtual cards"""
    cards = system.card_manager.list_cards(CardKind.VIRTUAL, identity.user_id)
    return respond(CardsView(cards=[VirtualCardView.from_card(card) for card in cards]))


@router.post("", response_model=ApiResponse[VirtualCardView], response_model_exclude_none=True)
def create_virtual_card(
    request: VirtualCardCreateRequest,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Issue a new virtual card for the caller"""
    user = system.identity_manager.get_user(identity.user_id)
    cardholder_name = user.full_name if user else ""

    card = system.card_manager.create_virtual_card(
        user_id=identity.user_id,
        cardholder_name=cardholder_name,
        nickname=request.nickname,
        spending_limit=request.spending_limit,
        card_type=request.card_type,
        linked_account_id=request.linked_account_id,
        expiry_period=request.expiry_period,
        custom_expiry_date=request.custom_expiry_date
    )

    log_action(
        logger, "info", "Virtual card created",
        user_id=identity.user_id, action="create_virtual_card", card_id=card.id, card_kind="virtual"
    )
    return respond(VirtualCardView.from_card(card), "Virtual card created successfully")


@router.get("/{card_id}", response_model=ApiResponse[VirtualCardView], response_model_exclude_none=True)
def get_virtual_card(
    card_id: str,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Get one virtual card"""
    card = _require_virtual_card(system, card_id, identity)
    return respond(VirtualCardView.from_card(card))


@router.put("/{card_id}", response_model=ApiResponse[VirtualCardView], response_model_exclude_none=True)
def update_virtual_card(
    card_id: str,
    request: VirtualCardUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Rename a virtual card"""
    _require_virtual_card(system, card_id, identity)

    card = system.card_manager.rename_virtual_card(card_id, request.nickname)

    log_action(
        logger, "info", "Virtual card updated",
        user_id=identity.user_id, action="update_virtual_card", card_id=card_id, card_kind="virtual"
    )
    return respond(VirtualCardView.from_card(card), "Virtual card updated successfully")


@router.delete("/{card_id}", response_model=ApiResponse[None], response_model_exclude_none=True)
def delete_virtual_card(
    card_id: str,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Delete a virtual card"""
    _require_virtual_card(system, card_id, identity)

    system.card_manager.delete_virtual_card(card_id)

    log_action(
        logger, "info", "Virtual card deleted",
        user_id=identity.user_id, action="delete_virtual_card", card_id=card_id, card_kind="virtual"
    )
    return respond(message="Virtual card deleted successfully")


@router.put("/{card_id}/spending-limit", response_model=ApiResponse[SpendingLimitView],
            response_model_exclude_none=True)
def update_spending_limit(
    card_id: str,
    request: SpendingLimitRequest,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Change the spending limit, rescaling the remaining balance"""
    _require_virtual_card(system, card_id, identity)

    card = system.card_manager.update_spending_limit(card_id, request.spending_limit)

    log_action(
        logger, "info", "Spending limit updated",
        user_id=identity.user_id, action="update_spending_limit", card_id=card_id, card_kind="virtual",
        extra={"spending_limit": card.spending_limit}
    )
    return respond(
        SpendingLimitView(
            card_id=card_id,
            spending_limit=card.spending_limit,
            remaining_balance=card.remaining_balance
        ),
        "Spending limit updated successfully"
    )


@router.put("/{card_id}/status", response_model=ApiResponse[StatusView], response_model_exclude_none=True)
def update_status(
    card_id: str,
    request: StatusRequest,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Freeze, unfreeze or cancel a virtual card"""
    _require_virtual_card(system, card_id, identity)

    card = system.card_manager.update_status(card_id, request.status)

    log_action(
        logger, "info", "Card status updated",
        user_id=identity.user_id, action="update_status", card_id=card_id, card_kind="virtual",
        extra={"status": card.status}
    )
    return respond(StatusView(card_id=card_id, status=card.status), "Card status updated successfully")


@router.post("/{card_id}/regenerate", response_model=ApiResponse[RegeneratedCardView],
             response_model_exclude_none=True)
def regenerate_card(
    card_id: str,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Reissue the card number and CVV"""
    _require_virtual_card(system, card_id, identity)

    card = system.card_manager.regenerate_virtual_card(card_id)

    log_action(
        logger, "info", "Card number regenerated",
        user_id=identity.user_id, action="regenerate_card", card_id=card_id, card_kind="virtual"
    )
    # The only response that carries a real CVV
    return respond(
        RegeneratedCardView(
            card_id=card_id,
            new_card_number=card.card_number,
            new_cvv=card.cvv,
            expiry_month=card.expiry_month,
            expiry_year=card.expiry_year
        ),
        "Card number regenerated successfully"
    )


@router.get("/{card_id}/transactions", response_model=ApiResponse[TransactionsView],
            response_model_exclude_none=True)
def get_transactions(
    card_id: str,
    page: Optional[str] = None,
    limit: Optional[str] = None,
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Page through a virtual card's transactions"""
    _require_virtual_card(system, card_id, identity)

    result = system.transaction_log.list_for_card(
        card_id, page=page, limit=limit, start_date=start_date, end_date=end_date
    )
    return respond(TransactionsView.from_page(result))
