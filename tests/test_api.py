"""
SelfEmploy Portal - API Integration Tests

Integration tests for REST API endpoints.
"""

from decimal import Decimal

import pytest
from httpx import AsyncClient

from app.models.admin_user import PermissionModule, PermissionType
from app.models.registration import RegistrationStatus


TEST_PASSWORD = "TestPassword123!"


class TestHealthEndpoint:
    """Test health check endpoint."""

    @pytest.mark.asyncio
    async def test_health_check(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestAuthAPI:
    """Test authentication API endpoints."""

    @pytest.mark.asyncio
    async def test_login(self, client: AsyncClient, local_admin):
        response = await client.post(
            "/api/v1/auth/login",
            json={"username": "local", "password": TEST_PASSWORD},
        )

        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["admin"]["role"] == "local_admin"

        me = await client.get(
            "/api/v1/auth/me",
            headers={"Authorization": f"Bearer {data['access_token']}"},
        )
        assert me.status_code == 200
        assert me.json()["admin"]["username"] == "local"

    @pytest.mark.asyncio
    async def test_login_wrong_password(self, client: AsyncClient, local_admin):
        response = await client.post(
            "/api/v1/auth/login",
            json={"username": "local", "password": "nope"},
        )
        assert response.status_code == 401
        assert response.json()["detail"]["code"] == "UNAUTHORIZED"

    @pytest.mark.asyncio
    async def test_me_resolves_permissions(self, client: AsyncClient, create_admin, auth_headers):
        admin = await create_admin(
            "scoped",
            grants=[(PermissionModule.ACCOUNTS, PermissionType.READ)],
        )
        response = await client.get("/api/v1/auth/me", headers=auth_headers(admin))

        assert response.status_code == 200
        data = response.json()
        assert data["effective"] == {
            "can_read": True,
            "can_write": False,
            "can_delete": False,
            "can_manage_admins": False,
        }
        assert data["modules"]["accounts"]["can_read"] is True
        assert data["modules"]["registrations"]["can_read"] is False
        assert data["visible_modules"] == ["accounts"]

    @pytest.mark.asyncio
    async def test_missing_token(self, client: AsyncClient):
        response = await client.get("/api/v1/registrations")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_deactivated_admin_token(self, client: AsyncClient, create_admin, auth_headers):
        admin = await create_admin("gone", is_active=False)
        response = await client.get("/api/v1/registrations", headers=auth_headers(admin))
        assert response.status_code == 403


class TestPublicAPI:
    """Public site endpoints."""

    @pytest.mark.asyncio
    async def test_catalogue(self, client: AsyncClient, paid_category, free_category, panchayath):
        categories = await client.get("/api/v1/public/categories")
        assert categories.status_code == 200
        assert categories.json()["total"] == 2

        panchayaths = await client.get("/api/v1/public/panchayaths")
        assert panchayaths.json()["panchayaths"][0]["name"] == "Kondotty"

    @pytest.mark.asyncio
    async def test_register_and_check_status(self, client: AsyncClient, paid_category, panchayath):
        payload = {
            "name": "Asha",
            "address": "Ward 4, Kondotty",
            "mobile_number": "9000000001",
            "ward": "4",
            "category_id": str(paid_category.id),
            "panchayath_id": str(panchayath.id),
        }
        response = await client.post("/api/v1/public/registrations", json=payload)

        assert response.status_code == 201
        data = response.json()
        assert data["status"] == "pending"
        assert Decimal(data["fee_paid"]) == Decimal("500")
        assert data["category"]["name"] == "Job Card"
        assert data["days_remaining"] == 14

        duplicate = await client.post("/api/v1/public/registrations", json=payload)
        assert duplicate.status_code == 409
        assert duplicate.json()["detail"]["code"] == "DUPLICATE_MOBILE"

        found = await client.get(
            "/api/v1/public/registrations/status",
            params={"mobile_number": "9000000001"},
        )
        assert found.json()["found"] is True
        assert found.json()["registration"]["customer_id"] == data["customer_id"]

    @pytest.mark.asyncio
    async def test_unknown_mobile_is_not_an_error(self, client: AsyncClient):
        response = await client.get(
            "/api/v1/public/registrations/status",
            params={"mobile_number": "9999999999"},
        )
        assert response.status_code == 200
        assert response.json() == {"found": False, "registration": None}

    @pytest.mark.asyncio
    async def test_self_confirm(self, client: AsyncClient, free_category, create_registration):
        reg = await create_registration(category=free_category, mobile_number="9000000001")

        response = await client.post(
            f"/api/v1/public/registrations/{reg.id}/confirm",
            json={"mobile_number": "9000000001"},
        )
        assert response.status_code == 200
        assert response.json()["status"] == "approved"
        assert response.json()["approved_by"] == "self"

    @pytest.mark.asyncio
    async def test_self_confirm_paid_category(self, client: AsyncClient, create_registration):
        reg = await create_registration(mobile_number="9000000001")

        response = await client.post(
            f"/api/v1/public/registrations/{reg.id}/confirm",
            json={"mobile_number": "9000000001"},
        )
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "INVALID_STATUS_TRANSITION"


class TestRegistrationsAPI:
    """Admin registration endpoints."""

    @pytest.mark.asyncio
    async def test_list_with_filter(
        self, client: AsyncClient, user_admin, auth_headers, create_registration
    ):
        await create_registration(name="Asha")
        await create_registration(name="Biju", status=RegistrationStatus.APPROVED)

        response = await client.get(
            "/api/v1/registrations",
            params={"status": "approved"},
            headers=auth_headers(user_admin),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 1
        assert data["registrations"][0]["name"] == "Biju"
        assert data["registrations"][0]["days_remaining"] is None

    @pytest.mark.asyncio
    async def test_status_change(self, client: AsyncClient, local_admin, auth_headers, create_registration):
        reg = await create_registration()

        response = await client.put(
            f"/api/v1/registrations/{reg.id}/status",
            json={"status": "approved"},
            headers=auth_headers(local_admin),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "approved"
        assert data["approved_by"] == "local"
        assert data["approved_date"] is not None

    @pytest.mark.asyncio
    async def test_read_only_admin_cannot_change_status(
        self, client: AsyncClient, user_admin, auth_headers, create_registration
    ):
        reg = await create_registration()

        response = await client.put(
            f"/api/v1/registrations/{reg.id}/status",
            json={"status": "approved"},
            headers=auth_headers(user_admin),
        )
        assert response.status_code == 403
        assert response.json()["detail"]["code"] == "INSUFFICIENT_PERMISSIONS"

    @pytest.mark.asyncio
    async def test_bulk_approve(self, client: AsyncClient, local_admin, auth_headers, create_registration):
        a = await create_registration()
        b = await create_registration()

        response = await client.post(
            "/api/v1/registrations/bulk-approve",
            json={"registration_ids": [str(a.id), str(b.id), "00000000-0000-0000-0000-000000000000"]},
            headers=auth_headers(local_admin),
        )
        assert response.status_code == 200
        data = response.json()
        assert data["succeeded"] == 2
        assert data["failed"] == 1
        assert data["outcomes"][2]["success"] is False

    @pytest.mark.asyncio
    async def test_delete_requires_delete_capability(
        self, client: AsyncClient, local_admin, super_admin, auth_headers, create_registration
    ):
        reg = await create_registration()

        denied = await client.delete(f"/api/v1/registrations/{reg.id}", headers=auth_headers(local_admin))
        assert denied.status_code == 403

        deleted = await client.delete(f"/api/v1/registrations/{reg.id}", headers=auth_headers(super_admin))
        assert deleted.status_code == 200

        missing = await client.get(f"/api/v1/registrations/{reg.id}", headers=auth_headers(super_admin))
        assert missing.status_code == 404
        assert missing.json()["detail"]["code"] == "REGISTRATION_NOT_FOUND"


class TestAccountsAPI:
    """Ledger endpoints."""

    @pytest.mark.asyncio
    async def test_transfer_and_balances(
        self, client: AsyncClient, local_admin, auth_headers, create_registration
    ):
        await create_registration(status=RegistrationStatus.APPROVED)
        headers = auth_headers(local_admin)

        transfer = await client.post(
            "/api/v1/accounts/transfers",
            json={"amount": "200", "remarks": "Weekly deposit"},
            headers=headers,
        )
        assert transfer.status_code == 201
        assert transfer.json()["created_by"] == "local"

        balances = (await client.get("/api/v1/accounts/balances", headers=headers)).json()
        assert Decimal(balances["cash_in_hand"]) == Decimal("300")
        assert Decimal(balances["cash_at_bank"]) == Decimal("200")

    @pytest.mark.asyncio
    async def test_overdraw_rejected(self, client: AsyncClient, local_admin, auth_headers, create_registration):
        await create_registration(status=RegistrationStatus.APPROVED)

        response = await client.post(
            "/api/v1/accounts/expenses",
            json={"amount": "10", "payment_method": "bank", "description": "Bank charges"},
            headers=auth_headers(local_admin),
        )
        assert response.status_code == 422
        assert response.json()["detail"]["code"] == "INSUFFICIENT_BALANCE"


class TestAdminUsersAPI:
    """Admin management and grant endpoints."""

    @pytest.mark.asyncio
    async def test_replace_and_read_grants(self, client: AsyncClient, super_admin, user_admin, auth_headers):
        headers = auth_headers(super_admin)
        url = f"/api/v1/admin-users/{user_admin.id}/permissions"

        saved = await client.put(
            url,
            json={"grants": [
                {"module": "reports", "permission_type": "read"},
                {"module": "accounts", "permission_type": "write"},
            ]},
            headers=headers,
        )
        assert saved.status_code == 200

        current = (await client.get(url, headers=headers)).json()
        assert current["grants"] == [
            {"module": "accounts", "permission_type": "write"},
            {"module": "reports", "permission_type": "read"},
        ]

        # The next request by that admin resolves the new grants
        me = (await client.get("/api/v1/auth/me", headers=auth_headers(user_admin))).json()
        assert me["visible_modules"] == ["accounts", "reports"]

    @pytest.mark.asyncio
    async def test_local_admin_cannot_manage_admins(
        self, client: AsyncClient, local_admin, user_admin, auth_headers
    ):
        response = await client.get(
            f"/api/v1/admin-users/{user_admin.id}/permissions",
            headers=auth_headers(local_admin),
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_create_admin(self, client: AsyncClient, super_admin, auth_headers):
        response = await client.post(
            "/api/v1/admin-users",
            json={"username": "clerk", "password": "clerk-pass", "role": "local_admin"},
            headers=auth_headers(super_admin),
        )
        assert response.status_code == 201
        assert response.json()["role"] == "local_admin"


class TestCatalogueAndReportsAPI:

    @pytest.mark.asyncio
    async def test_offer_above_actual_rejected(self, client: AsyncClient, local_admin, auth_headers):
        response = await client.post(
            "/api/v1/categories",
            json={"name": "Odd", "actual_fee": "100", "offer_fee": "150"},
            headers=auth_headers(local_admin),
        )
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_panchayath_report(
        self, client: AsyncClient, user_admin, auth_headers, panchayath, create_registration
    ):
        await create_registration(panchayath=panchayath, status=RegistrationStatus.APPROVED)

        response = await client.get("/api/v1/reports/panchayaths", headers=auth_headers(user_admin))
        assert response.status_code == 200
        data = response.json()
        assert data["panchayaths"][0]["name"] == "Kondotty"
        assert data["panchayaths"][0]["grade"] == "D"
        assert data["panchayaths"][0]["paid_registrations"] == 1
        assert data["panchayaths"][0]["free_registrations"] == 0
        assert data["grade_counts"]["D"] == 1

    @pytest.mark.asyncio
    async def test_report_range_must_be_ordered(self, client: AsyncClient, user_admin, auth_headers):
        response = await client.get(
            "/api/v1/reports/summary",
            params={"start_date": "2024-06-30", "end_date": "2024-06-01"},
            headers=auth_headers(user_admin),
        )
        assert response.status_code == 422
