"""API tests for /api/v1/admin: role gating and user management."""

import unittest
import uuid

from support import DEFAULT_PASSWORD, ApiTestCase, bearer, token_for


class AdminTestCase(ApiTestCase):
    def setUp(self) -> None:
        super().setUp()
        self.admin = self.create_user(email="root@example.com", role="ADMIN")
        self.customer = self.create_user(email="cus@example.com", role="CUSTOMER")
        self.organiser = self.create_user(email="org@example.com", role="ORGANISER")
        self.admin_headers = bearer(token_for(self.admin))


class TestAdminGate(AdminTestCase):
    def test_customer_is_forbidden(self) -> None:
        response = self.client.get("/api/v1/admin/users", headers=bearer(token_for(self.customer)))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(
            response.json(), {"message": "You do not have permission to access this resource"}
        )

    def test_organiser_is_forbidden_everywhere(self) -> None:
        headers = bearer(token_for(self.organiser))
        for method, path in (
            ("GET", "/api/v1/admin/users"),
            ("GET", f"/api/v1/admin/users/{self.customer.id}"),
            ("GET", "/api/v1/admin/dashboard"),
        ):
            with self.subTest(path=path):
                response = self.client.request(method, path, headers=headers)
                self.assertEqual(response.status_code, 403)

    def test_anonymous_is_unauthorized(self) -> None:
        response = self.client.get("/api/v1/admin/users")
        self.assertEqual(response.status_code, 401)
        self.assertEqual(response.json(), {"message": "Authorization token missing"})


class TestUserManagement(AdminTestCase):
    def test_list_users(self) -> None:
        response = self.client.get("/api/v1/admin/users", headers=self.admin_headers)
        self.assertEqual(response.status_code, 200)
        users = response.json()["users"]
        self.assertEqual(
            {u["email"] for u in users},
            {"root@example.com", "cus@example.com", "org@example.com"},
        )
        for u in users:
            self.assertNotIn("password_hash", u)

    def test_list_users_by_role(self) -> None:
        response = self.client.get(
            "/api/v1/admin/users", params={"role": "ORGANISER"}, headers=self.admin_headers
        )
        self.assertEqual([u["email"] for u in response.json()["users"]], ["org@example.com"])

    def test_list_users_rejects_unknown_role(self) -> None:
        response = self.client.get(
            "/api/v1/admin/users", params={"role": "ROOT"}, headers=self.admin_headers
        )
        self.assertEqual(response.status_code, 400)
        self.assertIn("role", response.json()["details"]["field_errors"])

    def test_get_user(self) -> None:
        response = self.client.get(
            f"/api/v1/admin/users/{self.customer.id}", headers=self.admin_headers
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["email"], "cus@example.com")

    def test_get_user_not_found_and_bad_id(self) -> None:
        missing = self.client.get(f"/api/v1/admin/users/{uuid.uuid4()}", headers=self.admin_headers)
        self.assertEqual(missing.status_code, 404)
        self.assertEqual(missing.json(), {"message": "User not found"})

        bad = self.client.get("/api/v1/admin/users/not-a-uuid", headers=self.admin_headers)
        self.assertEqual(bad.status_code, 400)
        self.assertIn("user_id", bad.json()["details"]["field_errors"])

    def test_deactivate_blocks_login(self) -> None:
        response = self.client.patch(
            f"/api/v1/admin/users/{self.customer.id}/toggle-status",
            json={"is_active": False},
            headers=self.admin_headers,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["message"], "User deactivated successfully")
        self.assertFalse(response.json()["user"]["is_active"])

        login = self.client.post(
            "/api/v1/auth/login", json={"email": "cus@example.com", "password": DEFAULT_PASSWORD}
        )
        self.assertEqual(login.status_code, 403)

        reactivated = self.client.patch(
            f"/api/v1/admin/users/{self.customer.id}/toggle-status",
            json={"is_active": True},
            headers=self.admin_headers,
        )
        self.assertEqual(reactivated.json()["message"], "User activated successfully")

    def test_change_role(self) -> None:
        response = self.client.patch(
            f"/api/v1/admin/users/{self.customer.id}/change-role",
            json={"new_role": "ORGANISER"},
            headers=self.admin_headers,
        )
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["user"]["role"], "ORGANISER")

        # Role decisions use the current row, so the existing token now carries the new role.
        me = self.client.get("/api/v1/auth/me", headers=bearer(token_for(self.customer)))
        self.assertEqual(me.json()["user"]["role"], "ORGANISER")

    def test_change_role_rules(self) -> None:
        own = self.client.patch(
            f"/api/v1/admin/users/{self.admin.id}/change-role",
            json={"new_role": "CUSTOMER"},
            headers=self.admin_headers,
        )
        self.assertEqual(own.status_code, 400)
        self.assertEqual(own.json(), {"message": "You cannot change your own role"})

        same = self.client.patch(
            f"/api/v1/admin/users/{self.organiser.id}/change-role",
            json={"new_role": "ORGANISER"},
            headers=self.admin_headers,
        )
        self.assertEqual(same.status_code, 400)
        self.assertEqual(same.json(), {"message": "User already has role ORGANISER"})

        invalid = self.client.patch(
            f"/api/v1/admin/users/{self.organiser.id}/change-role",
            json={"new_role": "SUPERUSER"},
            headers=self.admin_headers,
        )
        self.assertEqual(invalid.status_code, 400)
        self.assertIn("new_role", invalid.json()["details"]["field_errors"])

    def test_dashboard_counts(self) -> None:
        self.create_user(email="off@example.com", role="CUSTOMER", is_active=False)
        response = self.client.get("/api/v1/admin/dashboard", headers=self.admin_headers)
        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json()["users"],
            {
                "total": 4,
                "customers": 2,
                "organisers": 1,
                "admins": 1,
                "active": 3,
                "new_this_month": 4,
            },
        )


if __name__ == "__main__":
    unittest.main()
