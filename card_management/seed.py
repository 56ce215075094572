"""
Demo Seed Data

Populates a fresh system with the demo user, two credit cards, a debit card,
a virtual card and the user's card settings.

Login with userID "testuser" / password "password123".
"""

from datetime import datetime, timezone

from .cards import CardKind, CreditCard, DebitCard, VirtualCard, VirtualCardStatus
from .card_settings import CardSettings
from .generators import generate_id


DEMO_USER_ID = "testuser"
DEMO_PASSWORD = "password123"
DEMO_FULL_NAME = "Bruce Wayne"


def seed_demo_data(system) -> None:
    """Seed the demo user and their cards into a CardSystem"""
    user = system.identity_manager.register_user(
        user_id=DEMO_USER_ID,
        password=DEMO_PASSWORD,
        full_name=DEMO_FULL_NAME,
        email="bruce.wayne@example.com"
    )

    credit_platinum = CreditCard(
        id=generate_id(),
        card_number="4532123456789012",
        cvv="***",
        expiry_month=12,
        expiry_year=2026,
        cardholder_name=user.full_name,
        card_type="Visa Platinum",
        user_id=user.id,
        rewards_points=5000,
        available_credit=500000.0,
        total_credit=1000000.0,
        outstanding_balance=0.0
    )
    credit_world = CreditCard(
        id=generate_id(),
        card_number="5412751234567890",
        cvv="***",
        expiry_month=6,
        expiry_year=2029,
        cardholder_name=user.full_name,
        card_type="Mastercard World",
        user_id=user.id,
        rewards_points=2500,
        available_credit=250000.0,
        total_credit=500000.0,
        outstanding_balance=0.0
    )
    debit = DebitCard(
        id=generate_id(),
        card_number="6529251234567890",
        cvv="***",
        expiry_month=10,
        expiry_year=2028,
        cardholder_name=user.full_name,
        card_type="Rupay",
        user_id=user.id,
        account_number="50123456789012",
        bank_name="HDFC Bank",
        account_balance=50000.0
    )
    virtual = VirtualCard(
        id=generate_id(),
        card_number="4532123456789012",
        cvv="***",
        expiry_month=3,
        expiry_year=2025,
        cardholder_name=user.full_name,
        card_type="Visa",
        user_id=user.id,
        nickname="Netflix Subscription",
        spending_limit=5000.0,
        remaining_balance=3200.0,
        created_at=datetime.now(timezone.utc),
        status=VirtualCardStatus.ACTIVE.value,
        linked_account_id="account-uuid"
    )

    system.card_manager.add_card(CardKind.CREDIT, credit_platinum)
    system.card_manager.add_card(CardKind.CREDIT, credit_world)
    system.card_manager.add_card(CardKind.DEBIT, debit)
    system.card_manager.add_card(CardKind.VIRTUAL, virtual)

    system.settings_manager.save_settings(CardSettings(
        id=user.id,
        user_id=user.id,
        default_credit_card_id=credit_platinum.id,
        default_debit_card_id=debit.id,
        default_virtual_card_id=virtual.id,
        transaction_notifications_enabled=True,
        notification_preferences=["Push Notification", "Email"],
        transaction_amount_threshold=1000.0,
        international_transaction_alerts=True,
        contactless_payments_enabled=True,
        international_usage_enabled=True,
        online_transactions_enabled=True,
        atm_withdrawals_enabled=True,
        default_daily_limit=50000.0,
        default_monthly_limit=200000.0,
        statement_delivery="Email",
        statement_frequency="Monthly",
        e_statement_enabled=True,
        biometric_authentication_enabled=True,
        two_factor_authentication_enabled=False,
        transaction_authentication_required=True,
        pin_for_contactless_enabled=False
    ))
