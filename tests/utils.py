"""Request helpers shared by the API tests."""
from itertools import count

API = "/api/v1"

_license_numbers = count(1000)

patient_data = {
    "firstName": "Jane",
    "lastName": "Doe",
    "dateOfBirth": "1990-05-15",
    "gender": "female",
    "phone": "+1234567890",
    "emergencyContact": {
        "name": "John Doe",
        "phone": "+0987654321",
    },
}


def doctor_payload(email, name="Dr. Test", role=None, **overrides):
    payload = {
        "name": name,
        "email": email,
        "password": "password123",
        "specialization": "General",
        "licenseNumber": f"LIC{next(_license_numbers)}",
        "phone": "+1111111111",
    }
    if role:
        payload["role"] = role
    payload.update(overrides)
    return payload


def register_doctor(client, email, name="Dr. Test", role=None):
    """Register a doctor and return ``(id, auth headers)``."""
    response = client.post(f"{API}/auth/register", json=doctor_payload(email, name, role))
    assert response.status_code == 201, response.text
    body = response.json()
    return body["data"]["id"], {"Authorization": f"Bearer {body['token']}"}


def create_patient(client, headers, **overrides):
    response = client.post(f"{API}/patients", json={**patient_data, **overrides}, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]["id"]


def book(client, headers, patient_id, doctor_id, date="2025-12-01", time="10:00", **overrides):
    payload = {
        "patient": patient_id,
        "doctor": doctor_id,
        "appointmentDate": date,
        "appointmentTime": time,
        "duration": 30,
        "reason": "Regular checkup",
    }
    payload.update(overrides)
    return client.post(f"{API}/appointments", json=payload, headers=headers)


def create_medical_record(client, headers, patient_id, **overrides):
    payload = {
        "patient": patient_id,
        "chiefComplaint": "Headache",
        "diagnosis": "Tension headache",
    }
    payload.update(overrides)
    response = client.post(f"{API}/medical-records", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()["data"]["id"]
