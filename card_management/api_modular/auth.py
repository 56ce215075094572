"""
Authentication and authorization dependencies
"""

from typing import Optional
from fastapi import Depends, Request
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..storage import StorageInterface, InMemoryStorage
from ..identity import Identity, IdentityManager
from ..cards import CardManager
from ..authorization import AccessDecision, AuthorizationGate
from ..limits import LimitsEngine
from ..card_settings import SettingsManager
from ..autopay import AutopayManager
from ..transactions import TransactionLog
from ..generators import CardNumberGenerator
from ..errors import ForbiddenError, NotFoundError, UnauthenticatedError
from ..config import CardAppConfig, get_config
from ..seed import seed_demo_data


class CardSystem:
    """Card management system with all components initialized"""

    def __init__(self, storage: Optional[StorageInterface] = None,
                 config: Optional[CardAppConfig] = None, seed: Optional[bool] = None):
        config = config or get_config()
        if seed is None:
            seed = config.seed_demo_data

        self.storage = storage or InMemoryStorage()

        self.identity_manager = IdentityManager(
            self.storage, token_expiry_hours=config.token_expiry_hours
        )
        self.card_manager = CardManager(
            self.storage,
            number_generator=CardNumberGenerator(config.virtual_card_prefix),
            addon_delivery_days=config.addon_delivery_days
        )
        self.gate = AuthorizationGate(self.card_manager)
        self.limits_engine = LimitsEngine(self.storage)
        self.settings_manager = SettingsManager(self.storage)
        self.autopay_manager = AutopayManager(self.storage)
        self.transaction_log = TransactionLog(
            self.storage,
            default_page=config.default_page,
            default_limit=config.default_page_size
        )

        if seed:
            seed_demo_data(self)


# Dependency to get the card system owned by the running app
def get_card_system(request: Request) -> CardSystem:
    return request.app.state.card_system


security = HTTPBearer(auto_error=False)


def get_current_identity(
    request: Request,
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    system: CardSystem = Depends(get_card_system)
) -> Identity:
    """Resolve the bearer token into the caller's identity"""
    if credentials is None:
        if request.headers.get("Authorization"):
            raise UnauthenticatedError("Invalid authorization header format")
        raise UnauthenticatedError("Authorization header required")

    return system.identity_manager.resolve(credentials.credentials)


def require_access(decision: AccessDecision, not_found_message: str) -> None:
    """Turn a gate decision into the matching API error"""
    if decision is AccessDecision.NOT_FOUND:
        raise NotFoundError(not_found_message)
    if decision is AccessDecision.FORBIDDEN:
        raise ForbiddenError("Access denied")
