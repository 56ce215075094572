"""
Login endpoint
"""

from fastapi import APIRouter, Depends

from .auth import CardSystem, get_card_system
from .schemas import LoginRequest, LoginResponse
from ..errors import InvalidCredentialsError
from ..logging_config import get_logger, log_action


router = APIRouter()
logger = get_logger()


@router.post("/login", response_model=LoginResponse)
def login(
    request: LoginRequest,
    system: CardSystem = Depends(get_card_system)
):
    """Authenticate and return the user snapshot carrying a fresh token"""
    try:
        _, user = system.identity_manager.login(request.user_id, request.password)
    except InvalidCredentialsError:
        log_action(
            logger, "warning", "Authentication failed",
            action="login_failed", resource="auth",
            extra={"user_id": request.user_id}
        )
        raise

    log_action(
        logger, "info", "User authenticated successfully",
        user_id=user.id, action="login", resource="auth"
    )
    return LoginResponse.from_user(user)
