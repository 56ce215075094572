"""
Integration tests for the Card Management API
Tests end-to-end workflows using FastAPI TestClient
"""

import pytest
from datetime import datetime, timezone, timedelta
from fastapi.testclient import TestClient

from card_management.api_modular import create_app
from card_management.api_modular.auth import CardSystem
from card_management.cards import CardKind, CreditCard
from card_management.config import CardAppConfig
from card_management.seed import DEMO_USER_ID, DEMO_PASSWORD


@pytest.fixture
def system():
    """Fresh seeded system per test"""
    return CardSystem(config=CardAppConfig(), seed=True)


@pytest.fixture
def client(system):
    return TestClient(create_app(system=system))


@pytest.fixture
def auth_headers(client):
    r = client.post("/auth/login", json={"userID": DEMO_USER_ID, "password": DEMO_PASSWORD})
    assert r.status_code == 200
    return {"Authorization": f"Bearer {r.json()['token']}"}


@pytest.fixture
def other_user_card(system):
    """A credit card owned by a second user"""
    system.identity_manager.register_user("otheruser", "pw", "Other User", "other@example.com")
    return system.card_manager.add_card(CardKind.CREDIT, CreditCard(
        id="other-card", card_number="4532000000000000", cvv="999", expiry_month=1,
        expiry_year=2030, cardholder_name="Other User", card_type="Visa", user_id="otheruser"
    ))


def first_card_id(client, headers, kind):
    r = client.get(f"/api/cards/{kind}", headers=headers)
    return r.json()["data"]["cards"][0]["id"]


class TestHealthEndpoints:
    """Test basic health and root endpoints"""

    def test_health(self, client):
        r = client.get("/health")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"

    def test_root(self, client):
        r = client.get("/")
        assert r.status_code == 200
        assert "endpoints" in r.json()


class TestLogin:
    """Test login and bearer token handling"""

    def test_login_returns_user_snapshot(self, client):
        r = client.post("/auth/login", json={"userID": DEMO_USER_ID, "password": DEMO_PASSWORD})
        assert r.status_code == 200

        data = r.json()
        assert data["userID"] == DEMO_USER_ID
        assert data["fullName"] == "Bruce Wayne"
        assert data["token"]
        assert data["expiryDate"]
        assert data["requiresPIN"] is False
        assert data["requiresOTP"] is False
        assert "password" not in data

    def test_login_wrong_password(self, client):
        r = client.post("/auth/login", json={"userID": DEMO_USER_ID, "password": "nope"})
        assert r.status_code == 401
        assert r.json() == {"success": False, "message": "Invalid credentials"}

    def test_login_malformed_body(self, client):
        r = client.post("/auth/login", content="not json", headers={"Content-Type": "application/json"})
        assert r.status_code == 400
        assert r.json() == {"success": False, "message": "Invalid request body"}

    def test_missing_authorization_header(self, client):
        r = client.get("/api/cards/credit")
        assert r.status_code == 401
        assert r.json()["message"] == "Authorization header required"

    def test_malformed_authorization_header(self, client):
        r = client.get("/api/cards/credit", headers={"Authorization": "Token abc"})
        assert r.status_code == 401
        assert r.json()["message"] == "Invalid authorization header format"

    def test_unknown_token(self, client):
        r = client.get("/api/cards/credit", headers={"Authorization": "Bearer bogus"})
        assert r.status_code == 401
        assert r.json()["message"] == "Invalid or expired token"

    def test_relogin_invalidates_previous_token(self, client, auth_headers):
        client.post("/auth/login", json={"userID": DEMO_USER_ID, "password": DEMO_PASSWORD})

        r = client.get("/api/cards/credit", headers=auth_headers)
        assert r.status_code == 401


class TestCreditCards:
    """End-to-end credit card tests"""

    def test_list_masks_cvv(self, client, auth_headers):
        r = client.get("/api/cards/credit", headers=auth_headers)
        assert r.status_code == 200

        body = r.json()
        assert body["success"] is True
        cards = body["data"]["cards"]
        assert len(cards) == 2
        assert {card["cardType"] for card in cards} == {"Visa Platinum", "Mastercard World"}
        assert all(card["cvv"] == "***" for card in cards)
        assert {card["cardNumber"] for card in cards} == {"4532123456789012", "5412751234567890"}

    def test_get_card(self, client, auth_headers):
        card_id = first_card_id(client, auth_headers, "credit")

        r = client.get(f"/api/cards/credit/{card_id}", headers=auth_headers)
        assert r.status_code == 200
        assert r.json()["data"]["id"] == card_id
        assert r.json()["data"]["cvv"] == "***"

    def test_unknown_card(self, client, auth_headers):
        r = client.get("/api/cards/credit/missing", headers=auth_headers)
        assert r.status_code == 404
        assert r.json() == {"success": False, "message": "Credit card not found"}

    def test_other_users_card(self, client, auth_headers, other_user_card):
        r = client.get(f"/api/cards/credit/{other_user_card.id}", headers=auth_headers)
        assert r.status_code == 403
        assert r.json() == {"success": False, "message": "Access denied"}

    def test_update_limits(self, client, auth_headers):
        card_id = first_card_id(client, auth_headers, "credit")
        limits = {
            "domesticLimits": [
                {"type": "Online", "isEnabled": True, "currentLimit": 1000, "maxLimit": 5000, "canSetLimit": True}
            ]
        }

        r = client.put(f"/api/cards/credit/{card_id}/limits", json=limits, headers=auth_headers)
        assert r.status_code == 200
        assert r.json()["message"] == "Card limits updated successfully"
        assert r.json()["data"]["cardId"] == card_id

        r = client.get(f"/api/cards/{card_id}/limits", headers=auth_headers)
        data = r.json()["data"]
        assert [l["type"] for l in data["domesticLimits"]] == ["Online"]
        assert "internationalLimits" not in data

    def test_autopay_lifecycle(self, client, auth_headers):
        card_id = first_card_id(client, auth_headers, "credit")
        url = f"/api/cards/credit/{card_id}/autopay"

        r = client.put(url, json={"amountOption": "Total Due"}, headers=auth_headers)
        assert r.status_code == 404
        assert r.json()["message"] == "Autopay not found"

        r = client.post(url, json={
            "amountOption": "Minimum Due", "linkedAccountId": "acct-1", "autoPayEnabled": True
        }, headers=auth_headers)
        assert r.status_code == 200
        assert r.json()["message"] == "Autopay enabled successfully"
        autopay = r.json()["data"]
        assert autopay["autopayId"]
        assert autopay["cardId"] == card_id
        assert autopay["autoPayEnabled"] is True

        r = client.put(url, json={
            "amountOption": "Total Due", "linkedAccountId": "acct-2", "autoPayEnabled": False
        }, headers=auth_headers)
        assert r.status_code == 200
        assert r.json() == {"success": True, "message": "Autopay settings updated successfully"}

        r = client.get(url, headers=auth_headers)
        assert r.json()["data"]["amountOption"] == "Total Due"
        assert r.json()["data"]["autoPayEnabled"] is True

        r = client.delete(url, headers=auth_headers)
        assert r.status_code == 200
        assert r.json()["message"] == "Autopay disabled successfully"

        r = client.get(url, headers=auth_headers)
        assert r.status_code == 404

        r = client.post(url, json={"amountOption": "Minimum Due"}, headers=auth_headers)
        assert r.status_code == 200
        assert r.json()["data"]["autopayId"] != autopay["autopayId"]

    def test_pin_update(self, client, auth_headers):
        card_id = first_card_id(client, auth_headers, "credit")
        url = f"/api/cards/credit/{card_id}/pin"

        r = client.post(url, json={"newPIN": "1234", "confirmPIN": "4321", "termsAccepted": True},
                        headers=auth_headers)
        assert r.status_code == 400
        assert r.json()["message"] == "PINs do not match"

        r = client.post(url, json={"newPIN": "1234", "confirmPIN": "1234", "termsAccepted": False},
                        headers=auth_headers)
        assert r.status_code == 400
        assert r.json()["message"] == "Terms must be accepted"

        r = client.post(url, json={"newPIN": "1234", "confirmPIN": "1234", "termsAccepted": True},
                        headers=auth_headers)
        assert r.status_code == 200
        assert r.json()["message"] == "PIN updated successfully"

    def test_addon_request(self, client, auth_headers):
        card_id = first_card_id(client, auth_headers, "credit")

        r = client.post(f"/api/cards/credit/{card_id}/addon", json={
            "customerID": "c-1", "nameOnCard": "Alfred", "dateOfBirth": "1950-01-01",
            "relationship": "Parent"
        }, headers=auth_headers)
        assert r.status_code == 200
        assert r.json()["message"] == "Add-on card request submitted successfully"

        data = r.json()["data"]
        assert data["requestId"]
        delivery = datetime.fromisoformat(data["estimatedDeliveryDate"].replace("Z", "+00:00"))
        assert delivery > datetime.now(timezone.utc) + timedelta(days=13)


class TestDebitCards:
    """End-to-end debit card tests"""

    def test_list_and_get(self, client, auth_headers):
        r = client.get("/api/cards/debit", headers=auth_headers)
        cards = r.json()["data"]["cards"]
        assert len(cards) == 1
        assert cards[0]["bankName"] == "HDFC Bank"
        assert cards[0]["cvv"] == "***"

        r = client.get(f"/api/cards/debit/{cards[0]['id']}", headers=auth_headers)
        assert r.status_code == 200

    def test_unknown_card(self, client, auth_headers):
        r = client.get("/api/cards/debit/missing", headers=auth_headers)
        assert r.status_code == 404
        assert r.json()["message"] == "Debit card not found"

    def test_credit_card_is_not_a_debit_card(self, client, auth_headers):
        card_id = first_card_id(client, auth_headers, "credit")
        r = client.get(f"/api/cards/debit/{card_id}", headers=auth_headers)
        assert r.status_code == 404

    def test_update_limits(self, client, auth_headers):
        card_id = first_card_id(client, auth_headers, "debit")
        r = client.put(f"/api/cards/debit/{card_id}/limits", json={
            "internationalLimits": [{"type": "ATM Cash Withdrawal", "isEnabled": True, "currentLimit": 100}]
        }, headers=auth_headers)
        assert r.status_code == 200
        assert r.json()["message"] == "Debit card limits updated successfully"


class TestVirtualCards:
    """End-to-end virtual card tests"""

    def create_card(self, client, headers, **overrides):
        body = {
            "nickname": "Shopping",
            "spendingLimit": 5000,
            "cardType": "Visa",
            "expiryPeriod": "6 Months",
            "linkedAccountId": "acct-1",
        }
        body.update(overrides)
        r = client.post("/api/cards/virtual", json=body, headers=headers)
        assert r.status_code == 200
        return r.json()

    def test_create(self, client, auth_headers):
        body = self.create_card(client, auth_headers)

        assert body["message"] == "Virtual card created successfully"
        card = body["data"]
        assert card["cvv"] == "***"
        assert card["cardNumber"].startswith("4532")
        assert card["cardholderName"] == "Bruce Wayne"
        assert card["status"] == "Active"
        assert card["remainingBalance"] == 5000

        r = client.get("/api/cards/virtual", headers=auth_headers)
        assert len(r.json()["data"]["cards"]) == 2

    def test_create_with_custom_expiry(self, client, auth_headers):
        card = self.create_card(client, auth_headers, customExpiryDate="2031-07-15T00:00:00Z")["data"]
        assert (card["expiryMonth"], card["expiryYear"]) == (7, 2031)

    def test_rename(self, client, auth_headers):
        card_id = self.create_card(client, auth_headers)["data"]["id"]

        r = client.put(f"/api/cards/virtual/{card_id}", json={"nickname": "Travel"}, headers=auth_headers)
        assert r.status_code == 200
        assert r.json()["data"]["nickname"] == "Travel"

        r = client.put(f"/api/cards/virtual/{card_id}", json={}, headers=auth_headers)
        assert r.json()["data"]["nickname"] == "Travel"

    def test_spending_limit(self, client, auth_headers):
        card_id = self.create_card(client, auth_headers, spendingLimit=1000)["data"]["id"]

        r = client.put(f"/api/cards/virtual/{card_id}/spending-limit",
                       json={"spendingLimit": 2000}, headers=auth_headers)
        assert r.status_code == 200
        data = r.json()["data"]
        assert data == {"cardId": card_id, "spendingLimit": 2000, "remainingBalance": 2000}

    def test_status(self, client, auth_headers):
        card_id = self.create_card(client, auth_headers)["data"]["id"]
        url = f"/api/cards/virtual/{card_id}/status"

        r = client.put(url, json={"status": "Frozen"}, headers=auth_headers)
        assert r.status_code == 200
        assert r.json()["data"] == {"cardId": card_id, "status": "Frozen"}

        r = client.put(url, json={"status": "Paused"}, headers=auth_headers)
        assert r.status_code == 400
        assert r.json()["message"] == "Invalid status. Must be Active, Frozen, or Cancelled"

    def test_regenerate_reveals_new_cvv(self, client, auth_headers):
        card = self.create_card(client, auth_headers)["data"]

        r = client.post(f"/api/cards/virtual/{card['id']}/regenerate", headers=auth_headers)
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["cardId"] == card["id"]
        assert len(data["newCardNumber"]) == 16
        assert len(data["newCVV"]) == 3 and data["newCVV"].isdigit()
        assert (data["expiryMonth"], data["expiryYear"]) == (card["expiryMonth"], card["expiryYear"])

    def test_delete(self, client, auth_headers):
        card_id = self.create_card(client, auth_headers)["data"]["id"]

        r = client.delete(f"/api/cards/virtual/{card_id}", headers=auth_headers)
        assert r.status_code == 200
        assert r.json()["message"] == "Virtual card deleted successfully"

        r = client.get(f"/api/cards/virtual/{card_id}", headers=auth_headers)
        assert r.status_code == 404
        assert r.json()["message"] == "Virtual card not found"

    def test_transactions_pagination(self, client, auth_headers, system):
        card_id = self.create_card(client, auth_headers)["data"]["id"]
        start = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
        for i in range(45):
            system.transaction_log.record(card_id, 10.0, f"Merchant {i + 1}", start + timedelta(days=i))

        r = client.get(f"/api/cards/virtual/{card_id}/transactions?page=2&limit=20", headers=auth_headers)
        assert r.status_code == 200

        data = r.json()["data"]
        assert [t["merchant"] for t in data["transactions"]] == [f"Merchant {i}" for i in range(21, 41)]
        assert data["pagination"] == {"page": 2, "limit": 20, "total": 45, "totalPages": 3}

    def test_transactions_date_filter(self, client, auth_headers, system):
        card_id = self.create_card(client, auth_headers)["data"]["id"]
        start = datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
        for i in range(10):
            system.transaction_log.record(card_id, 10.0, f"Merchant {i + 1}", start + timedelta(days=i))

        r = client.get(
            f"/api/cards/virtual/{card_id}/transactions?startDate=2024-03-02&endDate=2024-03-04",
            headers=auth_headers
        )
        assert r.json()["data"]["pagination"]["total"] == 3


class TestCardLimits:
    """End-to-end limits tests for any card kind"""

    def test_default_limits(self, client, auth_headers):
        card_id = first_card_id(client, auth_headers, "debit")

        r = client.get(f"/api/cards/{card_id}/limits", headers=auth_headers)
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["cardId"] == card_id
        assert len(data["domesticLimits"]) == 4
        assert len(data["internationalLimits"]) == 4
        atm = data["domesticLimits"][0]
        assert atm.pop("id")
        assert atm == {
            "type": "ATM Cash Withdrawal", "isEnabled": True,
            "currentLimit": 50000, "maxLimit": 100000, "canSetLimit": True
        }

    def test_update_domestic_then_international(self, client, auth_headers):
        card_id = first_card_id(client, auth_headers, "virtual")

        r = client.put(f"/api/cards/{card_id}/limits/domestic", json={"limits": [
            {"type": "Online", "isEnabled": True, "currentLimit": 7000}
        ]}, headers=auth_headers)
        assert r.status_code == 200
        assert r.json()["message"] == "Domestic limits updated successfully"
        assert r.json()["data"]["domesticLimits"][0]["type"] == "Online"

        r = client.put(f"/api/cards/{card_id}/limits/international", json={"limits": [
            {"type": "ATM Cash Withdrawal", "isEnabled": False, "currentLimit": 0, "maxLimit": 100}
        ]}, headers=auth_headers)
        assert r.status_code == 200
        assert r.json()["message"] == "International limits updated successfully"

        data = client.get(f"/api/cards/{card_id}/limits", headers=auth_headers).json()["data"]
        assert data["domesticLimits"][0]["maxLimit"] == 7000
        assert data["internationalLimits"][0]["maxLimit"] == 100

    def test_unknown_card(self, client, auth_headers):
        r = client.get("/api/cards/missing/limits", headers=auth_headers)
        assert r.status_code == 404
        assert r.json()["message"] == "Card not found"

    def test_other_users_card(self, client, auth_headers, other_user_card):
        r = client.put(f"/api/cards/{other_user_card.id}/limits/domestic",
                       json={"limits": []}, headers=auth_headers)
        assert r.status_code == 403


class TestCardSettings:
    """End-to-end settings tests"""

    def test_seeded_settings(self, client, auth_headers):
        r = client.get("/api/cards/settings", headers=auth_headers)
        assert r.status_code == 200
        data = r.json()["data"]
        assert data["statementFrequency"] == "Monthly"
        assert data["notificationPreferences"] == ["Push Notification", "Email"]
        assert data["defaultCreditCardId"] == first_card_id(client, auth_headers, "credit")

    def test_partial_update(self, client, auth_headers):
        before = client.get("/api/cards/settings", headers=auth_headers).json()["data"]
        assert before["contactlessPaymentsEnabled"] is True

        r = client.put("/api/cards/settings/security", json={"contactlessPaymentsEnabled": False},
                       headers=auth_headers)
        assert r.status_code == 200
        assert r.json() == {"success": True, "message": "Security settings updated successfully"}

        after = client.get("/api/cards/settings", headers=auth_headers).json()["data"]
        assert after["contactlessPaymentsEnabled"] is False

        # Every other field keeps its prior value
        before.pop("contactlessPaymentsEnabled")
        after.pop("contactlessPaymentsEnabled")
        assert after == before

    @pytest.mark.parametrize("path,body,field,message", [
        ("/default", {"defaultDebitCardId": "d-9"}, "defaultDebitCardId", "Default cards updated successfully"),
        ("/global-limits", {"defaultDailyLimit": 1234}, "defaultDailyLimit",
         "Global transaction limits updated successfully"),
        ("/notifications", {"transactionAmountThreshold": 50}, "transactionAmountThreshold",
         "Notification preferences updated successfully"),
        ("/statement", {"statementDelivery": "Post"}, "statementDelivery",
         "Statement preferences updated successfully"),
        ("/pin", {"pinForContactlessEnabled": True}, "pinForContactlessEnabled",
         "PIN preferences updated successfully"),
        ("/authentication", {"twoFactorAuthenticationEnabled": True}, "twoFactorAuthenticationEnabled",
         "Authentication settings updated successfully"),
    ])
    def test_update_groups(self, client, auth_headers, path, body, field, message):
        r = client.put(f"/api/cards/settings{path}", json=body, headers=auth_headers)
        assert r.status_code == 200
        assert r.json()["message"] == message

        data = client.get("/api/cards/settings", headers=auth_headers).json()["data"]
        assert data[field] == body[field]

    def test_new_user_gets_zero_value_settings(self, client, system):
        system.identity_manager.register_user("newbie", "pw", "New User", "new@example.com")
        r = client.post("/auth/login", json={"userID": "newbie", "password": "pw"})
        headers = {"Authorization": f"Bearer {r.json()['token']}"}

        data = client.get("/api/cards/settings", headers=headers).json()["data"]
        assert data["defaultCreditCardId"] == ""
        assert data["contactlessPaymentsEnabled"] is False
        assert data["notificationPreferences"] == []
