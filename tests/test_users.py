"""
Unit tests for authentication and user management endpoints.
"""
from rentals.models import User


def get_auth_header(token: str) -> dict:
    """Helper function to create authorization header."""
    return {"Authorization": f"Bearer {token}"}


class TestLogin:
    """Tests for the login endpoint."""

    def test_login_hashed_password(self, client, admin_user):
        """Users created with a hashed password can log in."""
        response = client.post("/users/login", json={"email": "admin@example.com", "password": "adminpass123"})
        assert response.status_code == 200
        data = response.json()
        assert data["token_type"] == "bearer"
        assert data["access_token"]
        assert data["user"]["role"] == "admin"
        assert "password" not in data["user"]

    def test_login_plaintext_password(self, client, normal_user):
        """Records holding a plain password still log in."""
        response = client.post("/users/login", json={"email": "staff@example.com", "password": "normalpass123"})
        assert response.status_code == 200

    def test_login_wrong_password(self, client, normal_user):
        response = client.post("/users/login", json={"email": "staff@example.com", "password": "nope"})
        assert response.status_code == 401
        assert response.json()["detail"] == "Invalid email or password"

    def test_login_unknown_email(self, client):
        response = client.post("/users/login", json={"email": "ghost@example.com", "password": "x"})
        assert response.status_code == 401

    def test_login_missing_fields(self, client):
        response = client.post("/users/login", json={"email": "admin@example.com"})
        assert response.status_code == 422

    def test_invalid_token(self, client):
        response = client.get("/users/me", headers=get_auth_header("not-a-token"))
        assert response.status_code == 401


class TestCurrentUser:
    """Tests for /users/me."""

    def test_me(self, client, customer_token, riviera_group):
        response = client.get("/users/me", headers=get_auth_header(customer_token))
        assert response.status_code == 200
        data = response.json()
        assert data["email"] == "customer@example.com"
        assert data["group_ids"] == [riviera_group.id]
        assert "password" not in data


class TestUserManagement:
    """Tests for admin user management."""

    def test_admin_lists_users(self, client, admin_token, normal_user):
        response = client.get("/users/", headers=get_auth_header(admin_token))
        assert response.status_code == 200
        emails = {u["email"] for u in response.json()}
        assert emails == {"admin@example.com", "staff@example.com"}

    def test_normal_user_cannot_list_users(self, client, normal_token):
        response = client.get("/users/", headers=get_auth_header(normal_token))
        assert response.status_code == 403
        assert response.json()["detail"] == "Not enough permissions"

    def test_create_customer_and_login(self, client, admin_token, riviera_group):
        response = client.post(
            "/users/",
            headers=get_auth_header(admin_token),
            json={
                "email": "new@example.com",
                "password": "secret123",
                "role": "customer",
                "group_ids": [riviera_group.id],
            },
        )
        assert response.status_code == 200
        assert response.json()["group_ids"] == [riviera_group.id]

        login = client.post("/users/login", json={"email": "new@example.com", "password": "secret123"})
        assert login.status_code == 200

    def test_password_is_stored_hashed(self, client, admin_token, store):
        client.post(
            "/users/",
            headers=get_auth_header(admin_token),
            json={"email": "new@example.com", "password": "secret123", "role": "normal"},
        )
        stored = store.load().find_user_by_email("new@example.com")
        assert stored.password != "secret123"

    def test_duplicate_email(self, client, admin_token, normal_user):
        response = client.post(
            "/users/",
            headers=get_auth_header(admin_token),
            json={"email": "staff@example.com", "password": "x", "role": "normal"},
        )
        assert response.status_code == 400
        assert response.json()["detail"] == "Email already exists"

    def test_invalid_role(self, client, admin_token):
        response = client.post(
            "/users/",
            headers=get_auth_header(admin_token),
            json={"email": "x@example.com", "password": "x", "role": "superuser"},
        )
        assert response.status_code == 422

    def test_update_email_moves_direct_assignment(self, client, admin_token, customer_user, sample_properties):
        response = client.patch(
            f"/users/{customer_user.id}",
            headers=get_auth_header(admin_token),
            json={"email": "renamed@example.com"},
        )
        assert response.status_code == 200
        loft = client.get("/properties/p-loft", headers=get_auth_header(admin_token)).json()
        assert loft["groups"] == ["renamed@example.com"]

    def test_update_password(self, client, admin_token, normal_user):
        client.patch(
            f"/users/{normal_user.id}",
            headers=get_auth_header(admin_token),
            json={"password": "changed123"},
        )
        response = client.post("/users/login", json={"email": "staff@example.com", "password": "changed123"})
        assert response.status_code == 200

    def test_update_unknown_user(self, client, admin_token):
        response = client.patch("/users/missing", headers=get_auth_header(admin_token), json={"name": "X"})
        assert response.status_code == 404

    def test_delete_user_removes_bookings(self, client, admin_token, normal_user, sample_booking, store):
        response = client.delete(f"/users/{normal_user.id}", headers=get_auth_header(admin_token))
        assert response.status_code == 200
        document = store.load()
        assert document.find_user(normal_user.id) is None
        assert document.find_booking(sample_booking.id) is None

    def test_admin_cannot_delete_self(self, client, admin_token, admin_user):
        response = client.delete(f"/users/{admin_user.id}", headers=get_auth_header(admin_token))
        assert response.status_code == 400


class TestEmailCase:
    """Emails are matched without regard to case."""

    def test_mixed_case_email_logs_in(self, client, admin_token):
        response = client.post(
            "/users/",
            headers=get_auth_header(admin_token),
            json={"email": "Guest@Example.COM", "password": "secret123", "role": "customer"},
        )
        assert response.status_code == 200
        assert response.json()["email"] == "guest@example.com"

        for typed in ("Guest@Example.COM", "guest@example.com"):
            login = client.post("/users/login", json={"email": typed, "password": "secret123"})
            assert login.status_code == 200, typed

    def test_mixed_case_direct_tag(self, client, admin_token):
        client.post(
            "/users/",
            headers=get_auth_header(admin_token),
            json={"email": "Guest@Example.COM", "password": "secret123", "role": "customer"},
        )
        client.post(
            "/properties/",
            headers=get_auth_header(admin_token),
            json={"name": "Harbour Flat", "groups": ["Guest@Example.COM"]},
        )
        token = client.post(
            "/users/login", json={"email": "Guest@Example.COM", "password": "secret123"}
        ).json()["access_token"]
        response = client.get("/properties/", headers=get_auth_header(token))
        assert [p["name"] for p in response.json()] == ["Harbour Flat"]

    def test_duplicate_email_differing_in_case(self, client, admin_token, normal_user):
        response = client.post(
            "/users/",
            headers=get_auth_header(admin_token),
            json={"email": "STAFF@example.com", "password": "x", "role": "normal"},
        )
        assert response.status_code == 400

    def test_legacy_mixed_case_record_logs_in(self, client, store):
        with store.transaction() as document:
            document.users.append(User(id="u-legacy", email="Old@Example.com", password="oldpass", role="customer"))
        response = client.post("/users/login", json={"email": "old@example.com", "password": "oldpass"})
        assert response.status_code == 200
