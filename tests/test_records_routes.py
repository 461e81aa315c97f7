from datetime import datetime, timezone

from clinic.schemas.users import Role
from clinic.services.billing import purchase_records

from conftest import login, make_user


def create_patient(client, headers, phone="05321234567", **extra):
    payload = {"full_name": "Hasan Demir", "phone": phone}
    payload.update(extra)
    response = client.post("/api/patients", headers=headers, json=payload)
    assert response.status_code == 201, response.text
    return response.json()


def create_therapist(client, headers, username="fzt.ece"):
    user = make_user(username, Role.THERAPIST)
    response = client.post(
        "/api/therapists",
        headers=headers,
        json={"user_id": user.id, "title": "Fizyoterapist"},
    )
    assert response.status_code == 201, response.text
    return response.json()


def create_package(client, headers, price=450000):
    response = client.post(
        "/api/packages",
        headers=headers,
        json={"name": "10 Seans", "session_count": 10, "price": price},
    )
    assert response.status_code == 201, response.text
    return response.json()


def test_patient_crud_and_unique_phone(client, admin_headers):
    patient = create_patient(client, admin_headers, phone="0532 123-45 67")
    assert patient["phone"] == "05321234567"

    duplicate = client.post(
        "/api/patients",
        headers=admin_headers,
        json={"full_name": "Başka", "phone": "05321234567"},
    )
    assert duplicate.status_code == 409

    updated = client.patch(
        f"/api/patients/{patient['id']}",
        headers=admin_headers,
        json={"notes": "Bel fıtığı"},
    )
    assert updated.json()["notes"] == "Bel fıtığı"
    assert client.get("/api/patients", headers=admin_headers).json()[0]["id"] == patient["id"]
    assert client.delete(
        f"/api/patients/{patient['id']}", headers=admin_headers
    ).status_code == 200
    assert client.get(
        f"/api/patients/{patient['id']}", headers=admin_headers
    ).status_code == 404


def test_therapist_requires_therapist_user(client, admin_headers):
    receptionist = make_user("front", Role.RECEPTIONIST)
    response = client.post(
        "/api/therapists",
        headers=admin_headers,
        json={"user_id": receptionist.id, "title": "Fizyoterapist"},
    )
    assert response.status_code == 400

    therapist = create_therapist(client, admin_headers)
    again = client.post(
        "/api/therapists",
        headers=admin_headers,
        json={"user_id": therapist["user_id"], "title": "Uzman"},
    )
    assert again.status_code == 409


def test_packages_public_reads(client, admin_headers):
    active = create_package(client, admin_headers)
    inactive = client.post(
        "/api/packages",
        headers=admin_headers,
        json={"name": "Eski", "session_count": 5, "price": 0, "is_active": False},
    ).json()

    assert {p["id"] for p in client.get("/api/packages").json()} == {
        active["id"],
        inactive["id"],
    }
    assert [p["id"] for p in client.get("/api/packages/active").json()] == [active["id"]]
    assert client.get(f"/api/packages/{active['id']}").status_code == 200
    assert client.post(
        "/api/packages", json={"name": "X", "session_count": 1, "price": 1}
    ).status_code == 401
    assert client.post(
        "/api/packages",
        headers=admin_headers,
        json={"name": "X", "session_count": 0, "price": 1},
    ).status_code == 422


def test_purchase_defaults_and_invoice(client, admin_headers):
    patient = create_patient(client, admin_headers)
    package = create_package(client, admin_headers, price=300000)

    response = client.post(
        "/api/purchases",
        headers=admin_headers,
        json={"patient_id": patient["id"], "package_id": package["id"]},
    )

    assert response.status_code == 201
    purchase = response.json()
    assert purchase["amount"] == 300000
    assert purchase["status"] == "PENDING"
    assert purchase["invoice_number"].startswith("INV-")
    year, number = purchase["invoice_number"][4:].split("-")
    assert len(year) == 4 and len(number) == 4

    paid = client.patch(
        f"/api/purchases/{purchase['id']}",
        headers=admin_headers,
        json={"status": "PAID"},
    )
    assert paid.json()["status"] == "PAID"

    by_patient = client.get(
        f"/api/purchases/patient/{patient['id']}", headers=admin_headers
    ).json()
    assert [p["id"] for p in by_patient] == [purchase["id"]]

    blocked = client.delete(f"/api/packages/{package['id']}", headers=admin_headers)
    assert blocked.status_code == 400


def test_invoice_numbers_follow_a_yearly_sequence(client, admin_headers):
    patient = create_patient(client, admin_headers)
    package = create_package(client, admin_headers)
    prefix = f"INV-{datetime.now(timezone.utc).year}-"

    def buy():
        response = client.post(
            "/api/purchases",
            headers=admin_headers,
            json={"patient_id": patient["id"], "package_id": package["id"]},
        )
        assert response.status_code == 201, response.text
        return response.json()["invoice_number"]

    assert buy() == f"{prefix}0001"
    assert buy() == f"{prefix}0002"

    purchase_records.create(
        patient_id=patient["id"],
        package_id=package["id"],
        amount=1,
        status="PAID",
        invoice_number=f"{prefix}9999",
    )
    assert buy() == f"{prefix}10000"
    assert buy() == f"{prefix}10001"


def test_purchase_rejects_unknown_references(client, admin_headers):
    package = create_package(client, admin_headers)

    response = client.post(
        "/api/purchases",
        headers=admin_headers,
        json={"patient_id": 404, "package_id": package["id"]},
    )

    assert response.status_code == 400


def test_treatment_plans_and_session_notes(client, admin_headers):
    patient = create_patient(client, admin_headers)
    therapist = create_therapist(client, admin_headers)

    plan = client.post(
        "/api/treatment-plans",
        headers=admin_headers,
        json={
            "patient_id": patient["id"],
            "therapist_id": therapist["id"],
            "name": "Diz rehabilitasyonu",
            "total_sessions": 10,
        },
    )
    assert plan.status_code == 201
    plan_id = plan.json()["id"]

    too_many = client.patch(
        f"/api/treatment-plans/{plan_id}",
        headers=admin_headers,
        json={"completed_sessions": 11},
    )
    assert too_many.status_code == 400
    progressed = client.patch(
        f"/api/treatment-plans/{plan_id}",
        headers=admin_headers,
        json={"completed_sessions": 3},
    )
    assert progressed.json()["completed_sessions"] == 3

    filtered = client.get(
        "/api/treatment-plans",
        headers=admin_headers,
        params={"patient_id": patient["id"] + 1},
    ).json()
    assert filtered == []

    appointment = client.post(
        "/api/appointments",
        json={
            "name": "Hasan Demir",
            "phone": "05321234567",
            "service": "Fizik Tedavi",
            "date": "2024-06-01",
            "time": "10:00",
        },
    ).json()
    note = client.post(
        "/api/session-notes",
        headers=admin_headers,
        json={
            "appointment_id": appointment["id"],
            "therapist_id": therapist["id"],
            "note_text": "Ağrı azaldı",
            "pain_scale": 4,
        },
    )
    assert note.status_code == 201
    assert client.post(
        "/api/session-notes",
        headers=admin_headers,
        json={"appointment_id": 999, "therapist_id": therapist["id"], "note_text": "x"},
    ).status_code == 400
    assert client.post(
        "/api/session-notes",
        headers=admin_headers,
        json={
            "appointment_id": appointment["id"],
            "therapist_id": therapist["id"],
            "note_text": "x",
            "pain_scale": 11,
        },
    ).status_code == 422

    notes = client.get(
        "/api/session-notes",
        headers=admin_headers,
        params={"appointment_id": appointment["id"]},
    ).json()
    assert [n["id"] for n in notes] == [note.json()["id"]]


def test_therapist_portal(client, admin_headers):
    patient = create_patient(client, admin_headers)
    other = create_patient(client, admin_headers, phone="05329990000")
    therapist = create_therapist(client, admin_headers, username="fzt.can")
    client.post(
        "/api/treatment-plans",
        headers=admin_headers,
        json={
            "patient_id": patient["id"],
            "therapist_id": therapist["id"],
            "name": "Omuz",
            "total_sessions": 6,
        },
    )
    appointment = client.post(
        "/api/appointments",
        json={
            "name": "Hasan Demir",
            "phone": "05321234567",
            "service": "Fizik Tedavi",
            "date": "2024-06-01",
            "time": "10:00",
        },
    ).json()
    client.patch(
        f"/api/appointments/{appointment['id']}",
        headers=admin_headers,
        json={"therapist_id": therapist["id"]},
    )

    headers = login(client, "fzt.can")
    patients = client.get("/api/therapist/patients", headers=headers).json()
    assert [p["id"] for p in patients] == [patient["id"]]
    assert other["id"] not in {p["id"] for p in patients}

    appointments = client.get("/api/therapist/appointments", headers=headers).json()
    assert [a["id"] for a in appointments] == [appointment["id"]]

    note = client.post(
        "/api/therapist/session-notes",
        headers=headers,
        json={"appointment_id": appointment["id"], "therapist_id": 999, "note_text": "İyi"},
    )
    assert note.status_code == 201
    assert note.json()["therapist_id"] == therapist["id"]
    notes = client.get("/api/therapist/session-notes", headers=headers).json()
    assert len(notes) == 1

    assert client.get("/api/patient/profile", headers=headers).status_code == 403


def test_therapist_without_profile(client):
    make_user("fzt.yeni", Role.THERAPIST)
    headers = login(client, "fzt.yeni")

    response = client.get("/api/therapist/appointments", headers=headers)

    assert response.status_code == 404


def test_sms_settings_single_active_and_masked(client, admin_headers):
    first = client.post(
        "/api/admin/sms-settings",
        headers=admin_headers,
        json={
            "account_sid": "AC123",
            "auth_token": "supersecrettoken",
            "phone_number": "+15550001111",
        },
    )
    assert first.status_code == 201
    assert first.json()["auth_token"] == "************oken"

    second = client.post(
        "/api/admin/sms-settings",
        headers=admin_headers,
        json={
            "account_sid": "AC456",
            "auth_token": "anothertoken",
            "phone_number": "+15550002222",
        },
    ).json()

    settings = client.get("/api/admin/sms-settings", headers=admin_headers).json()
    active = [s["id"] for s in settings if s["is_active"]]
    assert active == [second["id"]]

    client.patch(
        f"/api/admin/sms-settings/{first.json()['id']}",
        headers=admin_headers,
        json={"is_active": True},
    )
    settings = client.get("/api/admin/sms-settings", headers=admin_headers).json()
    assert [s["id"] for s in settings if s["is_active"]] == [first.json()["id"]]

    assert client.delete(
        f"/api/admin/sms-settings/{second['id']}", headers=admin_headers
    ).status_code == 200
    assert client.patch(
        f"/api/admin/sms-settings/{second['id']}",
        headers=admin_headers,
        json={"is_active": True},
    ).status_code == 404


def test_dashboard_stats(client, admin_headers):
    patient = create_patient(client, admin_headers)
    package = create_package(client, admin_headers, price=100000)
    client.post(
        "/api/purchases",
        headers=admin_headers,
        json={"patient_id": patient["id"], "package_id": package["id"], "status": "PAID"},
    )
    client.post(
        "/api/appointments",
        json={
            "name": "Hasan Demir",
            "phone": "05321234567",
            "service": "Fizik Tedavi",
            "date": "2024-06-01",
            "time": "10:00",
        },
    )
    client.post(
        "/api/contact",
        json={"name": "Zeynep", "phone": "05329998877", "message": "Merhaba"},
    )

    stats = client.get("/api/admin/stats", headers=admin_headers).json()

    assert stats["appointments_by_status"]["pending"] == 1
    assert stats["appointments_by_status"]["approved"] == 0
    assert stats["patients"] == 1
    assert stats["contact_messages"] == 1
    assert stats["paid_revenue"] == 100000


def book(client, phone, name="Hasan Demir"):
    response = client.post(
        "/api/appointments",
        json={
            "name": name,
            "phone": phone,
            "service": "Fizik Tedavi",
            "date": "2024-06-01",
            "time": "10:00",
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def otp_login(client, sender, phone):
    client.post("/api/auth/otp/request", json={"phone": phone})
    response = client.post(
        "/api/auth/otp/verify", json={"phone": phone, "code": sender.last_code}
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['access_token']}"}


def test_patient_portal_lists_only_own_records(client, admin_headers, sender):
    booked_before_registration = book(client, "0532 123 45 67")
    patient = create_patient(client, admin_headers)
    other = create_patient(client, admin_headers, phone="05329990000")
    booked_after_registration = book(client, "05321234567")
    booked_by_relative = book(client, "05440001122", name="Zeynep Demir")
    client.patch(
        f"/api/appointments/{booked_by_relative['id']}",
        headers=admin_headers,
        json={"patient_id": patient["id"]},
    )
    book(client, "05329990000", name="Başka Hasta")

    therapist = create_therapist(client, admin_headers)
    package = create_package(client, admin_headers)
    plans = {}
    purchases = {}
    for owner in (patient, other):
        plans[owner["id"]] = client.post(
            "/api/treatment-plans",
            headers=admin_headers,
            json={
                "patient_id": owner["id"],
                "therapist_id": therapist["id"],
                "name": "Bel",
                "total_sessions": 8,
            },
        ).json()
        purchases[owner["id"]] = client.post(
            "/api/purchases",
            headers=admin_headers,
            json={"patient_id": owner["id"], "package_id": package["id"]},
        ).json()

    headers = otp_login(client, sender, "05321234567")

    appointments = client.get("/api/patient/appointments", headers=headers)
    assert appointments.status_code == 200
    assert {a["id"] for a in appointments.json()} == {
        booked_before_registration["id"],
        booked_after_registration["id"],
        booked_by_relative["id"],
    }

    own_plans = client.get("/api/patient/treatment-plans", headers=headers).json()
    assert [p["id"] for p in own_plans] == [plans[patient["id"]]["id"]]

    own_purchases = client.get("/api/patient/purchases", headers=headers).json()
    assert [p["id"] for p in own_purchases] == [purchases[patient["id"]]["id"]]

    assert client.get("/api/patients", headers=headers).status_code == 403
