from .utils import API, doctor_payload, register_doctor

test_login_data = {
    "email": "dr.smith@hospital.com",
    "password": "password123",
}


class TestRegistration:
    """Test doctor registration."""

    def test_register_doctor_success(self, client):
        """Test successful registration."""
        response = client.post(
            f"{API}/auth/register",
            json=doctor_payload("dr.smith@hospital.com", "Dr. Smith"),
        )
        assert response.status_code == 201

        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Doctor registered successfully"
        assert body["token"]
        assert body["data"]["email"] == "dr.smith@hospital.com"
        assert body["data"]["role"] == "doctor"
        assert body["data"]["isActive"] is True
        assert "password" not in body["data"]
        assert "passwordHash" not in body["data"]

    def test_register_lowercases_email(self, client):
        response = client.post(
            f"{API}/auth/register",
            json=doctor_payload("Dr.Smith@Hospital.COM"),
        )
        assert response.status_code == 201
        assert response.json()["data"]["email"] == "dr.smith@hospital.com"

    def test_register_duplicate_email(self, client):
        """Test registration with an email already in use, in any case."""
        register_doctor(client, "dr.smith@hospital.com")

        response = client.post(
            f"{API}/auth/register",
            json=doctor_payload("DR.SMITH@hospital.com"),
        )
        assert response.status_code == 400
        assert response.json() == {
            "success": False,
            "message": "Doctor with this email already exists",
        }

    def test_register_duplicate_license(self, client):
        client.post(
            f"{API}/auth/register",
            json=doctor_payload("a@hospital.com", licenseNumber="LIC-1"),
        )
        response = client.post(
            f"{API}/auth/register",
            json=doctor_payload("b@hospital.com", licenseNumber="LIC-1"),
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Doctor with this license number already exists"

    def test_register_short_password(self, client):
        """Test registration with a password below the minimum length."""
        response = client.post(
            f"{API}/auth/register",
            json=doctor_payload("dr.smith@hospital.com", password="abc"),
        )
        assert response.status_code == 400

        body = response.json()
        assert body["success"] is False
        assert body["message"] == "Validation failed"
        assert {"field": "password", "message": "Password must be at least 6 characters"} in body["errors"]

    def test_register_reports_every_missing_field(self, client):
        response = client.post(f"{API}/auth/register", json={})
        assert response.status_code == 400

        errors = {e["field"]: e["message"] for e in response.json()["errors"]}
        assert errors["name"] == "Name is required"
        assert errors["email"] == "Please provide a valid email"
        assert errors["specialization"] == "Specialization is required"
        assert errors["licenseNumber"] == "License number is required"
        assert errors["phone"] == "Phone number is required"

    def test_register_invalid_role(self, client):
        response = client.post(
            f"{API}/auth/register",
            json=doctor_payload("dr.smith@hospital.com", role="nurse"),
        )
        assert response.status_code == 400
        assert response.json()["errors"][0]["message"] == "Role must be doctor or admin"

    def test_register_admin(self, client):
        response = client.post(
            f"{API}/auth/register",
            json=doctor_payload("admin@hospital.com", role="admin"),
        )
        assert response.status_code == 201
        assert response.json()["data"]["role"] == "admin"


class TestLogin:
    """Test doctor login."""

    def test_login_success(self, client):
        """Test successful login."""
        register_doctor(client, "dr.smith@hospital.com")

        response = client.post(f"{API}/auth/login", json=test_login_data)
        assert response.status_code == 200

        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Login successful"
        assert body["token"]
        assert body["data"]["email"] == "dr.smith@hospital.com"

    def test_login_email_is_case_insensitive(self, client):
        register_doctor(client, "dr.smith@hospital.com")

        response = client.post(
            f"{API}/auth/login",
            json={**test_login_data, "email": "DR.SMITH@HOSPITAL.COM"},
        )
        assert response.status_code == 200

    def test_login_wrong_password(self, client):
        """Test login with wrong password."""
        register_doctor(client, "dr.smith@hospital.com")

        response = client.post(
            f"{API}/auth/login",
            json={**test_login_data, "password": "WrongPassword"},
        )
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_login_unknown_email(self, client):
        """Unknown email and wrong password are indistinguishable."""
        response = client.post(f"{API}/auth/login", json=test_login_data)
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_login_missing_password(self, client):
        response = client.post(f"{API}/auth/login", json={"email": "dr.smith@hospital.com"})
        assert response.status_code == 400
        assert response.json()["errors"] == [{"field": "password", "message": "Password is required"}]


class TestCurrentUser:
    """Test token-protected profile routes."""

    def test_get_current_user(self, client):
        """Test getting current user info."""
        doctor_id, headers = register_doctor(client, "dr.smith@hospital.com", "Dr. Smith")

        response = client.get(f"{API}/auth/me", headers=headers)
        assert response.status_code == 200

        data = response.json()["data"]
        assert data["id"] == doctor_id
        assert data["name"] == "Dr. Smith"
        assert data["specialization"] == "General"

    def test_missing_token(self, client):
        response = client.get(f"{API}/auth/me")
        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "message": "Not authorized to access this route",
        }

    def test_invalid_token(self, client):
        """Test with invalid token."""
        response = client.get(
            f"{API}/auth/me",
            headers={"Authorization": "Bearer invalid_token"},
        )
        assert response.status_code == 401

    def test_logout(self, client):
        _, headers = register_doctor(client, "dr.smith@hospital.com")

        response = client.post(f"{API}/auth/logout", headers=headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Logout successful"


class TestAccountStatus:
    """Test admin activation and deactivation of doctor accounts."""

    def test_deactivated_doctor_is_rejected(self, client):
        _, admin_headers = register_doctor(client, "admin@hospital.com", role="admin")
        doctor_id, doctor_headers = register_doctor(client, "dr.smith@hospital.com")

        response = client.patch(
            f"{API}/auth/doctors/{doctor_id}/status?isActive=false",
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["isActive"] is False

        # The existing token stops working
        response = client.get(f"{API}/auth/me", headers=doctor_headers)
        assert response.status_code == 401
        assert response.json()["message"] == "Account is inactive"

        response = client.post(f"{API}/auth/login", json=test_login_data)
        assert response.status_code == 401
        assert response.json()["message"] == "Account is inactive"

    def test_reactivated_doctor_can_log_in(self, client):
        _, admin_headers = register_doctor(client, "admin@hospital.com", role="admin")
        doctor_id, _ = register_doctor(client, "dr.smith@hospital.com")

        client.patch(f"{API}/auth/doctors/{doctor_id}/status?isActive=false", headers=admin_headers)
        client.patch(f"{API}/auth/doctors/{doctor_id}/status?isActive=true", headers=admin_headers)

        response = client.post(f"{API}/auth/login", json=test_login_data)
        assert response.status_code == 200

    def test_doctor_cannot_change_status(self, client):
        doctor_id, headers = register_doctor(client, "dr.smith@hospital.com")

        response = client.patch(
            f"{API}/auth/doctors/{doctor_id}/status?isActive=false",
            headers=headers,
        )
        assert response.status_code == 403
        assert response.json()["message"] == "User role doctor is not authorized to access this route"

    def test_status_of_unknown_doctor(self, client):
        _, admin_headers = register_doctor(client, "admin@hospital.com", role="admin")

        response = client.patch(
            f"{API}/auth/doctors/9999/status?isActive=false",
            headers=admin_headers,
        )
        assert response.status_code == 404
        assert response.json()["message"] == "Doctor not found"


class TestRateLimit:
    def test_requests_over_limit_are_rejected(self, client, monkeypatch):
        from clinic_api.core.config import settings

        monkeypatch.setattr(settings, "RATE_LIMIT_REQUESTS", 2)

        for _ in range(2):
            assert client.post(f"{API}/auth/login", json=test_login_data).status_code == 401

        response = client.post(f"{API}/auth/login", json=test_login_data)
        assert response.status_code == 429
        assert response.json()["message"] == "Too many requests from this IP, please try again later."

    def test_redis_outage_does_not_block_requests(self, client):
        from redis.exceptions import ConnectionError

        from clinic_api.core.database import get_redis
        from clinic_api.main import app

        class UnreachableRedis:
            def incr(self, key):
                raise ConnectionError("Connection refused")

            def expire(self, key, seconds):
                raise ConnectionError("Connection refused")

        app.dependency_overrides[get_redis] = lambda: UnreachableRedis()

        response = client.post(f"{API}/auth/login", json=test_login_data)
        assert response.status_code == 401
        assert response.json()["message"] == "Invalid credentials"

    def test_health_is_not_limited(self, client, monkeypatch):
        from clinic_api.core.config import settings

        monkeypatch.setattr(settings, "RATE_LIMIT_REQUESTS", 1)

        for _ in range(3):
            assert client.get("/health").status_code == 200


class TestErrorEnvelope:
    def test_unknown_route(self, client):
        response = client.get(f"{API}/nothing-here")
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Route not found"}

    def test_malformed_id(self, client):
        _, headers = register_doctor(client, "dr.smith@hospital.com")

        response = client.get(f"{API}/patients/not-an-id", headers=headers)
        assert response.status_code == 400
        assert response.json()["errors"][0]["message"] == "Invalid ID format"
