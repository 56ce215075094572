"""
Pydantic schemas for API requests and responses

Wire names are camelCase; Python attributes stay snake_case. Every card view
masks the CVV on the way out.
"""

from datetime import datetime
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..cards import Card
from ..card_settings import CardSettings
from ..identity import User
from ..limits import TransactionLimit, CardLimits
from ..transactions import Transaction, TransactionPage


MASKED_CVV = "***"

T = TypeVar("T")


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ApiResponse(CamelModel, Generic[T]):
    """Standard response envelope"""
    success: bool = True
    message: Optional[str] = None
    data: Optional[T] = None


def respond(data=None, message: Optional[str] = None) -> ApiResponse:
    """Build a success envelope"""
    return ApiResponse(success=True, message=message, data=data)


# Auth schemas
class LoginRequest(CamelModel):
    user_id: str = Field(..., alias="userID")
    password: str


class LoginResponse(CamelModel):
    """User snapshot returned by a successful login"""
    user_id: str = Field(..., alias="userID")
    full_name: str
    email: str
    token: Optional[str] = None
    expiry_date: Optional[datetime] = None
    requires_pin: bool = Field(False, alias="requiresPIN")
    requires_otp: bool = Field(False, alias="requiresOTP")

    @classmethod
    def from_user(cls, user: User) -> 'LoginResponse':
        return cls(
            user_id=user.id,
            full_name=user.full_name,
            email=user.email,
            token=user.token,
            expiry_date=user.expiry_date,
            requires_pin=user.requires_pin,
            requires_otp=user.requires_otp
        )


# Card views
class CardView(CamelModel):
    id: str
    card_number: str
    cvv: str
    expiry_month: int
    expiry_year: int
    cardholder_name: str
    card_type: str

    @classmethod
    def from_card(cls, card: Card):
        """Copy the fields this view exposes and mask the CVV"""
        values = {name: getattr(card, name) for name in cls.model_fields}
        values["cvv"] = MASKED_CVV
        return cls(**values)


class CreditCardView(CardView):
    rewards_points: int
    available_credit: float
    total_credit: float
    outstanding_balance: float


class DebitCardView(CardView):
    account_number: str
    bank_name: str
    account_balance: float


class VirtualCardView(CardView):
    nickname: str
    spending_limit: float
    remaining_balance: float
    created_at: Optional[datetime] = None
    status: str
    linked_account_id: str


class CardsView(CamelModel, Generic[T]):
    cards: List[T]


# Limits schemas
class TransactionLimitModel(CamelModel):
    id: Optional[str] = None
    type: str
    is_enabled: bool = False
    current_limit: float = 0.0
    max_limit: float = 0.0
    can_set_limit: bool = False

    def to_limit(self) -> TransactionLimit:
        return TransactionLimit(
            id=self.id,
            type=self.type,
            is_enabled=self.is_enabled,
            current_limit=self.current_limit,
            max_limit=self.max_limit,
            can_set_limit=self.can_set_limit
        )

    @classmethod
    def from_limit(cls, limit: TransactionLimit) -> 'TransactionLimitModel':
        return cls(
            id=limit.id,
            type=limit.type,
            is_enabled=limit.is_enabled,
            current_limit=limit.current_limit,
            max_limit=limit.max_limit,
            can_set_limit=limit.can_set_limit
        )


def _to_limits(models: Optional[List[TransactionLimitModel]]) -> Optional[List[TransactionLimit]]:
    if models is None:
        return None
    return [model.to_limit() for model in models]


def _from_limits(limits: Optional[List[TransactionLimit]]) -> Optional[List[TransactionLimitModel]]:
    if limits is None:
        return None
    return [TransactionLimitModel.from_limit(limit) for limit in limits]


class LimitsRequest(CamelModel):
    """Full limits record, as sent to the credit/debit limits routes"""
    domestic_limits: Optional[List[TransactionLimitModel]] = None
    international_limits: Optional[List[TransactionLimitModel]] = None

    def domestic(self) -> Optional[List[TransactionLimit]]:
        return _to_limits(self.domestic_limits)

    def international(self) -> Optional[List[TransactionLimit]]:
        return _to_limits(self.international_limits)

    @classmethod
    def from_limits(cls, limits: CardLimits) -> 'LimitsRequest':
        return cls(
            domestic_limits=_from_limits(limits.domestic_limits),
            international_limits=_from_limits(limits.international_limits)
        )


class LimitsUpdateRequest(CamelModel):
    """One half of a limits record"""
    limits: List[TransactionLimitModel] = Field(default_factory=list)

    def to_limits(self) -> List[TransactionLimit]:
        return [model.to_limit() for model in self.limits]


class LimitsView(CamelModel):
    card_id: str
    domestic_limits: Optional[List[TransactionLimitModel]] = None
    international_limits: Optional[List[TransactionLimitModel]] = None

    @classmethod
    def from_limits(cls, limits: CardLimits) -> 'LimitsView':
        return cls(
            card_id=limits.card_id,
            domestic_limits=_from_limits(limits.domestic_limits),
            international_limits=_from_limits(limits.international_limits)
        )


class CardLimitsUpdatedView(CamelModel):
    card_id: str
    limits: LimitsRequest


class DomesticLimitsView(CamelModel):
    card_id: str
    domestic_limits: Optional[List[TransactionLimitModel]] = None


class InternationalLimitsView(CamelModel):
    card_id: str
    international_limits: Optional[List[TransactionLimitModel]] = None


# Credit/debit card operation schemas
class AutopayRequest(CamelModel):
    amount_option: str = ""
    linked_account_id: str = ""
    auto_pay_enabled: bool = False


class AutopayView(CamelModel):
    autopay_id: str
    card_id: str
    amount_option: str
    linked_account_id: str
    auto_pay_enabled: bool
    activation_date: Optional[datetime] = None


class PINUpdateRequest(CamelModel):
    new_pin: str = Field("", alias="newPIN")
    confirm_pin: str = Field("", alias="confirmPIN")
    terms_accepted: bool = False


class AddonCardRequestBody(CamelModel):
    customer_id: str = Field("", alias="customerID")
    name_on_card: str = ""
    date_of_birth: str = ""
    relationship: str = ""


class AddonCardView(CamelModel):
    request_id: str
    estimated_delivery_date: datetime


# Virtual card schemas
class VirtualCardCreateRequest(CamelModel):
    nickname: str = ""
    spending_limit: float = 0.0
    card_type: str = ""
    expiry_period: str = ""
    custom_expiry_date: Optional[datetime] = None
    linked_account_id: str = ""


class VirtualCardUpdateRequest(CamelModel):
    nickname: Optional[str] = None


class SpendingLimitRequest(CamelModel):
    spending_limit: float


class SpendingLimitView(CamelModel):
    card_id: str
    spending_limit: float
    remaining_balance: float


class StatusRequest(CamelModel):
    status: str


class StatusView(CamelModel):
    card_id: str
    status: str


class RegeneratedCardView(CamelModel):
    card_id: str
    new_card_number: str
    new_cvv: str = Field(..., alias="newCVV")
    expiry_month: int
    expiry_year: int


class TransactionView(CamelModel):
    id: str
    card_id: str
    amount: float
    merchant: str
    date: datetime
    status: str
    type: str

    @classmethod
    def from_transaction(cls, txn: Transaction) -> 'TransactionView':
        return cls(
            id=txn.id,
            card_id=txn.card_id,
            amount=txn.amount,
            merchant=txn.merchant,
            date=txn.date,
            status=txn.status,
            type=txn.type
        )


class PaginationView(CamelModel):
    page: int
    limit: int
    total: int
    total_pages: int


class TransactionsView(CamelModel):
    transactions: List[TransactionView]
    pagination: PaginationView

    @classmethod
    def from_page(cls, page: TransactionPage) -> 'TransactionsView':
        return cls(
            transactions=[TransactionView.from_transaction(txn) for txn in page.transactions],
            pagination=PaginationView(
                page=page.page,
                limit=page.limit,
                total=page.total,
                total_pages=page.total_pages
            )
        )


# Settings schemas
class CardSettingsView(CamelModel):
    default_credit_card_id: str
    default_debit_card_id: str
    default_virtual_card_id: str
    transaction_notifications_enabled: bool
    notification_preferences: List[str]
    transaction_amount_threshold: float
    international_transaction_alerts: bool
    contactless_payments_enabled: bool
    international_usage_enabled: bool
    online_transactions_enabled: bool
    atm_withdrawals_enabled: bool
    default_daily_limit: float
    default_monthly_limit: float
    statement_delivery: str
    statement_frequency: str
    e_statement_enabled: bool
    biometric_authentication_enabled: bool
    two_factor_authentication_enabled: bool
    transaction_authentication_required: bool
    pin_for_contactless_enabled: bool

    @classmethod
    def from_settings(cls, settings: CardSettings) -> 'CardSettingsView':
        return cls(**{name: getattr(settings, name) for name in cls.model_fields})


class DefaultCardsRequest(CamelModel):
    default_credit_card_id: Optional[str] = None
    default_debit_card_id: Optional[str] = None
    default_virtual_card_id: Optional[str] = None


class SecuritySettingsRequest(CamelModel):
    contactless_payments_enabled: Optional[bool] = None
    international_usage_enabled: Optional[bool] = None
    online_transactions_enabled: Optional[bool] = None
    atm_withdrawals_enabled: Optional[bool] = None


class GlobalLimitsRequest(CamelModel):
    default_daily_limit: Optional[float] = None
    default_monthly_limit: Optional[float] = None


class NotificationSettingsRequest(CamelModel):
    transaction_notifications_enabled: Optional[bool] = None
    notification_preferences: Optional[List[str]] = None
    transaction_amount_threshold: Optional[float] = None
    international_transaction_alerts: Optional[bool] = None


class StatementSettingsRequest(CamelModel):
    statement_delivery: Optional[str] = None
    statement_frequency: Optional[str] = None
    e_statement_enabled: Optional[bool] = None


class PINSettingsRequest(CamelModel):
    pin_for_contactless_enabled: Optional[bool] = None


class AuthenticationSettingsRequest(CamelModel):
    biometric_authentication_enabled: Optional[bool] = None
    two_factor_authentication_enabled: Optional[bool] = None
    transaction_authentication_required: Optional[bool] = None
