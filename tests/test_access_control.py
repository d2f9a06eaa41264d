from datetime import datetime, timedelta

import pytest
from jose import jwt

from clinic_api.core.config import settings
from clinic_api.core.security import (
    AccountInactiveError,
    AuthenticationError,
    AuthorizationError,
    UserRole,
    create_access_token,
    create_doctor_token,
    get_password_hash,
)
from clinic_api.models import Doctor
from clinic_api.services.access_control import AccessControl, PractitionerIdentity

from .utils import API, book, create_medical_record, create_patient, register_doctor

doctor_identity = PractitionerIdentity(id=1, email="a@hospital.com", name="Dr. A", role=UserRole.DOCTOR)
admin_identity = PractitionerIdentity(id=2, email="b@hospital.com", name="Dr. B", role=UserRole.ADMIN)


@pytest.fixture
def stored_doctor(db_session):
    doctor = Doctor(
        name="Dr. Stored",
        email="stored@hospital.com",
        password_hash=get_password_hash("password123"),
        specialization="Cardiology",
        license_number="LIC-STORED",
        phone="+1000000000",
    )
    db_session.add(doctor)
    db_session.commit()
    return doctor


class TestAuthenticate:
    def test_valid_token(self, db_session, stored_doctor):
        token = create_doctor_token(stored_doctor.id, stored_doctor.role)

        identity = AccessControl(db_session).authenticate(token)
        assert identity.id == stored_doctor.id
        assert identity.email == "stored@hospital.com"
        assert identity.role == UserRole.DOCTOR
        assert not identity.is_admin

    @pytest.mark.parametrize("token", [None, "", "not-a-jwt"])
    def test_missing_or_malformed_token(self, db_session, token):
        with pytest.raises(AuthenticationError) as exc_info:
            AccessControl(db_session).authenticate(token)
        assert exc_info.value.status_code == 401

    def test_expired_token(self, db_session, stored_doctor):
        token = create_access_token(
            {"sub": str(stored_doctor.id), "role": "doctor"},
            expires_delta=timedelta(seconds=-1),
        )
        with pytest.raises(AuthenticationError):
            AccessControl(db_session).authenticate(token)

    def test_token_signed_with_untrusted_key(self, db_session, stored_doctor):
        token = jwt.encode(
            {
                "sub": str(stored_doctor.id),
                "role": "doctor",
                "exp": datetime.utcnow() + timedelta(hours=1),
                "token_type": "access",
            },
            "other-secret",
            algorithm=settings.ALGORITHM,
        )
        with pytest.raises(AuthenticationError):
            AccessControl(db_session).authenticate(token)

    def test_non_access_token(self, db_session, stored_doctor):
        token = jwt.encode(
            {
                "sub": str(stored_doctor.id),
                "role": "doctor",
                "exp": datetime.utcnow() + timedelta(hours=1),
                "token_type": "refresh",
            },
            settings.SECRET_KEY,
            algorithm=settings.ALGORITHM,
        )
        with pytest.raises(AuthenticationError):
            AccessControl(db_session).authenticate(token)

    def test_token_for_deleted_doctor(self, db_session):
        token = create_doctor_token(4242, UserRole.DOCTOR)
        with pytest.raises(AuthenticationError):
            AccessControl(db_session).authenticate(token)

    def test_inactive_doctor(self, db_session, stored_doctor):
        stored_doctor.is_active = False
        db_session.commit()

        with pytest.raises(AccountInactiveError) as exc_info:
            AccessControl(db_session).authenticate(
                create_doctor_token(stored_doctor.id, stored_doctor.role)
            )
        assert exc_info.value.detail == "Account is inactive"


class TestAuthorize:
    def test_no_role_required(self):
        AccessControl.authorize(doctor_identity)

    def test_role_held(self):
        AccessControl.authorize(doctor_identity, UserRole.DOCTOR)

    def test_admin_satisfies_any_role(self):
        AccessControl.authorize(admin_identity, UserRole.DOCTOR)
        AccessControl.authorize(admin_identity, UserRole.ADMIN)

    def test_role_missing(self):
        with pytest.raises(AuthorizationError) as exc_info:
            AccessControl.authorize(doctor_identity, UserRole.ADMIN)
        assert exc_info.value.status_code == 403
        assert exc_info.value.detail == "User role doctor is not authorized to access this route"

    def test_owner_may_modify(self):
        AccessControl.authorize_ownership(doctor_identity, owner_id=1)

    def test_admin_may_modify_any(self):
        AccessControl.authorize_ownership(admin_identity, owner_id=1)

    def test_non_owner_is_forbidden(self):
        with pytest.raises(AuthorizationError):
            AccessControl.authorize_ownership(doctor_identity, owner_id=99)


class TestRecordOwnership:
    """Ownership and role gates through the API."""

    def test_only_owner_or_admin_updates_record(self, client):
        _, owner_headers = register_doctor(client, "owner@hospital.com", "Dr. Owner")
        _, other_headers = register_doctor(client, "other@hospital.com", "Dr. Other")
        _, admin_headers = register_doctor(client, "admin@hospital.com", "Dr. Admin", role="admin")
        patient_id = create_patient(client, owner_headers)
        record_id = create_medical_record(client, owner_headers, patient_id)

        response = client.put(
            f"{API}/medical-records/{record_id}",
            json={"diagnosis": "Migraine"},
            headers=other_headers,
        )
        assert response.status_code == 403
        assert response.json() == {
            "success": False,
            "message": "Not authorized to update this medical record",
        }

        response = client.put(
            f"{API}/medical-records/{record_id}",
            json={"diagnosis": "Migraine"},
            headers=owner_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["diagnosis"] == "Migraine"

        response = client.put(
            f"{API}/medical-records/{record_id}",
            json={"notes": "Reviewed"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["data"]["notes"] == "Reviewed"

    def test_update_unknown_record(self, client):
        _, headers = register_doctor(client, "owner@hospital.com")

        response = client.put(
            f"{API}/medical-records/9999",
            json={"diagnosis": "Migraine"},
            headers=headers,
        )
        assert response.status_code == 404

    def test_only_admin_deletes_record(self, client):
        _, owner_headers = register_doctor(client, "owner@hospital.com")
        _, admin_headers = register_doctor(client, "admin@hospital.com", role="admin")
        patient_id = create_patient(client, owner_headers)
        record_id = create_medical_record(client, owner_headers, patient_id)

        # Even the owner may not delete
        response = client.delete(f"{API}/medical-records/{record_id}", headers=owner_headers)
        assert response.status_code == 403

        response = client.delete(f"{API}/medical-records/{record_id}", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["message"] == "Medical record deleted successfully"

        response = client.get(f"{API}/medical-records/{record_id}", headers=admin_headers)
        assert response.status_code == 404

    def test_role_checked_before_lookup(self, client):
        _, headers = register_doctor(client, "owner@hospital.com")

        response = client.delete(f"{API}/medical-records/9999", headers=headers)
        assert response.status_code == 403

    @pytest.mark.parametrize("method,path", [
        ("get", "/patients"),
        ("get", "/appointments"),
        ("get", "/medical-records"),
        ("get", "/medical-records/patient/1/history"),
        ("get", "/appointments/doctor/1/schedule"),
    ])
    def test_protected_routes_require_token(self, client, method, path):
        response = getattr(client, method)(f"{API}{path}")
        assert response.status_code == 401
        assert response.json()["success"] is False


class TestClinicWorkflow:
    def test_booking_flow(self, client):
        """Register, add a patient, book, hit a conflict, cancel, rebook, then read the agenda."""
        doctor_id, headers = register_doctor(client, "dr.smith@hospital.com", "Dr. Smith")

        response = client.post(
            f"{API}/auth/login",
            json={"email": "dr.smith@hospital.com", "password": "password123"},
        )
        headers = {"Authorization": f"Bearer {response.json()['token']}"}

        patient_id = create_patient(client, headers)

        first = book(client, headers, patient_id, doctor_id)
        assert first.status_code == 201
        first_id = first.json()["data"]["id"]

        assert book(client, headers, patient_id, doctor_id).status_code == 400

        response = client.put(
            f"{API}/appointments/{first_id}",
            json={"status": "cancelled"},
            headers=headers,
        )
        assert response.status_code == 200

        assert book(client, headers, patient_id, doctor_id).status_code == 201

        response = client.get(f"{API}/appointments/doctor/{doctor_id}/schedule", headers=headers)
        statuses = [a["status"] for a in response.json()["data"]["appointments"]]
        assert sorted(statuses) == ["cancelled", "scheduled"]
