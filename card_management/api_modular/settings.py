"""
Card settings endpoints

Every update touches only the fields present in the request body.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from .auth import CardSystem, get_card_system, get_current_identity
from .schemas import (
    ApiResponse, respond, CardSettingsView, DefaultCardsRequest, SecuritySettingsRequest,
    GlobalLimitsRequest, NotificationSettingsRequest, StatementSettingsRequest,
    PINSettingsRequest, AuthenticationSettingsRequest
)
from ..identity import Identity
from ..logging_config import get_logger, log_action


router = APIRouter()
logger = get_logger()


def _apply(system: CardSystem, identity: Identity, request: BaseModel, action: str) -> None:
    changes = request.model_dump(exclude_none=True)
    system.settings_manager.update_settings(identity.user_id, changes)
    log_action(
        logger, "info", "Card settings updated",
        user_id=identity.user_id, action=action, resource="card_settings",
        extra={"fields": sorted(changes)}
    )


@router.get("", response_model=ApiResponse[CardSettingsView], response_model_exclude_none=True)
def get_settings(
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    """Get the caller's card settings"""
    settings = system.settings_manager.get_settings(identity.user_id)
    return respond(CardSettingsView.from_settings(settings))


@router.put("/default", response_model=ApiResponse[None], response_model_exclude_none=True)
def update_default_cards(
    request: DefaultCardsRequest,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    _apply(system, identity, request, "update_default_cards")
    return respond(message="Default cards updated successfully")


@router.put("/security", response_model=ApiResponse[None], response_model_exclude_none=True)
def update_security_settings(
    request: SecuritySettingsRequest,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    _apply(system, identity, request, "update_security_settings")
    return respond(message="Security settings updated successfully")


@router.put("/global-limits", response_model=ApiResponse[None], response_model_exclude_none=True)
def update_global_limits(
    request: GlobalLimitsRequest,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    _apply(system, identity, request, "update_global_limits")
    return respond(message="Global transaction limits updated successfully")


@router.put("/notifications", response_model=ApiResponse[None], response_model_exclude_none=True)
def update_notification_settings(
    request: NotificationSettingsRequest,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    _apply(system, identity, request, "update_notification_settings")
    return respond(message="Notification preferences updated successfully")


@router.put("/statement", response_model=ApiResponse[None], response_model_exclude_none=True)
def update_statement_settings(
    request: StatementSettingsRequest,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    _apply(system, identity, request, "update_statement_settings")
    return respond(message="Statement preferences updated successfully")


@router.put("/pin", response_model=ApiResponse[None], response_model_exclude_none=True)
def update_pin_settings(
    request: PINSettingsRequest,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    _apply(system, identity, request, "update_pin_settings")
    return respond(message="PIN preferences updated successfully")


@router.put("/authentication", response_model=ApiResponse[None], response_model_exclude_none=True)
def update_authentication_settings(
    request: AuthenticationSettingsRequest,
    identity: Identity = Depends(get_current_identity),
    system: CardSystem = Depends(get_card_system)
):
    _apply(system, identity, request, "update_authentication_settings")
    return respond(message="Authentication settings updated successfully")
