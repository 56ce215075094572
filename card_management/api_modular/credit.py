"""
Credit card endpoints
"""

from fastapi import APIRouter, Depends

from .auth import CardSystem, get_card_system, get_current_identity, require_access
from .schemas import (
    ApiResponse, respond, CreditCardView, CardsView, LimitsRequest, CardLimitsUpdatedView,
    AutopayRequest, AutopayView, PINUpdateRequest, AddonCardRequestBody, AddonCardView
)
from ..autopay import Autopay
from ..cards import CardKind
from ..errors import NotFoundError
from ..identity import Identity
from ..logging_config import get_logger, log_action


router = APIRouter()
logger = get_logger()

NOT_FOUND = "Credit card not found"


def _autopay_view(autopay: Autopay) -> AutopayView:
    return AutopayView(
        autopay_id=autopay.id,
        card_id=autopay.card_id,
        amount_option=autopay.amount_option,
        linked_account_id=autopay.linked_account_id,
        auto_pay_enabled=autopay.auto_pay_enabled,
        activation_date=autopay.activation_date
    )


def _require_credit_card(system: CardSystem, card_id: str, identity: Identity):
    decision, card = system.gate.check_card(CardKind.CREDIT, card_id, identity)
    require_access(decision, NOT_FOUND)
    return card


@router.get("", response_model=ApiResponse[CardsView[CreditCardView]], response_model_exclude_none=True)
def list_credit_cards(
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """List the caller's credit cards"""
    cards = system.card_manager.list_cards(CardKind.CREDIT, identity.user_id)
    return respond(CardsView(cards=[CreditCardView.from_card(card) for card in cards]))


@router.get("/{card_id}", response_model=ApiResponse[CreditCardView], response_model_exclude_none=True)
def get_credit_card(
    card_id: str,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Get one credit card"""
    card = _require_credit_card(system, card_id, identity)
    return respond(CreditCardView.from_card(card))


@router.put("/{card_id}/limits", response_model=ApiResponse[CardLimitsUpdatedView],
            response_model_exclude_none=True)
def update_credit_card_limits(
    card_id: str,
    request: LimitsRequest,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Replace the card's domestic and international limits"""
    _require_credit_card(system, card_id, identity)

    system.limits_engine.replace_limits(card_id, request.domestic(), request.international())

    log_action(
        logger, "info", "Card limits updated",
        user_id=identity.user_id, action="update_limits", card_id=card_id, card_kind="credit"
    )
    return respond(
        CardLimitsUpdatedView(card_id=card_id, limits=request),
        "Card limits updated successfully"
    )


@router.get("/{card_id}/autopay", response_model=ApiResponse[AutopayView], response_model_exclude_none=True)
def get_autopay(
    card_id: str,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Get the card's autopay"""
    _require_credit_card(system, card_id, identity)

    autopay = system.autopay_manager.get(card_id)
    if autopay is None:
        raise NotFoundError("Autopay not found")
    return respond(_autopay_view(autopay))


@router.post("/{card_id}/autopay", response_model=ApiResponse[AutopayView], response_model_exclude_none=True)
def enable_autopay(
    card_id: str,
    request: AutopayRequest,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Enable autopay, replacing any existing one"""
    _require_credit_card(system, card_id, identity)

    autopay = system.autopay_manager.enable(
        card_id=card_id,
        user_id=identity.user_id,
        amount_option=request.amount_option,
        linked_account_id=request.linked_account_id,
        auto_pay_enabled=request.auto_pay_enabled
    )

    log_action(
        logger, "info", "Autopay enabled",
        user_id=identity.user_id, action="enable_autopay", card_id=card_id, card_kind="credit",
        extra={"autopay_id": autopay.id}
    )
    return respond(_autopay_view(autopay), "Autopay enabled successfully")


@router.put("/{card_id}/autopay", response_model=ApiResponse[None], response_model_exclude_none=True)
def update_autopay(
    card_id: str,
    request: AutopayRequest,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Update an existing autopay"""
    _require_credit_card(system, card_id, identity)

    system.autopay_manager.update(
        card_id=card_id,
        amount_option=request.amount_option,
        linked_account_id=request.linked_account_id,
        auto_pay_enabled=request.auto_pay_enabled
    )

    log_action(
        logger, "info", "Autopay updated",
        user_id=identity.user_id, action="update_autopay", card_id=card_id, card_kind="credit"
    )
    return respond(message="Autopay settings updated successfully")


@router.delete("/{card_id}/autopay", response_model=ApiResponse[None], response_model_exclude_none=True)
def disable_autopay(
    card_id: str,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Disable autopay; succeeds whether or not one existed"""
    _require_credit_card(system, card_id, identity)

    system.autopay_manager.disable(card_id)

    log_action(
        logger, "info", "Autopay disabled",
        user_id=identity.user_id, action="disable_autopay", card_id=card_id, card_kind="credit"
    )
    return respond(message="Autopay disabled successfully")


@router.post("/{card_id}/pin", response_model=ApiResponse[None], response_model_exclude_none=True)
def update_credit_card_pin(
    card_id: str,
    request: PINUpdateRequest,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Validate a PIN change request"""
    _require_credit_card(system, card_id, identity)

    system.card_manager.validate_pin_change(request.new_pin, request.confirm_pin, request.terms_accepted)

    log_action(
        logger, "info", "PIN updated",
        user_id=identity.user_id, action="update_pin", card_id=card_id, card_kind="credit"
    )
    return respond(message="PIN updated successfully")


@router.post("/{card_id}/addon", response_model=ApiResponse[AddonCardView], response_model_exclude_none=True)
def request_addon_card(
    card_id: str,
    request: AddonCardRequestBody,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Submit an add-on card request"""
    _require_credit_card(system, card_id, identity)

    receipt = system.card_manager.request_addon_card(card_id)

    log_action(
        logger, "info", "Add-on card requested",
        user_id=identity.user_id, action="request_addon", card_id=card_id, card_kind="credit",
        extra={"request_id": receipt.request_id, "relationship": request.relationship}
    )
    return respond(
        AddonCardView(
            request_id=receipt.request_id,
            estimated_delivery_date=receipt.estimated_delivery_date
        ),
        "Add-on card request submitted successfully"
    )
