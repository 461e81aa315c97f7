from clinic.services.patients import patient_records


def booking(**overrides):
    payload = {
        "name": "Mehmet Kaya",
        "phone": "0532 111 22 33",
        "service": "Manuel Terapi",
        "date": "2024-05-10",
        "time": "14:30",
    }
    payload.update(overrides)
    return payload


def test_public_appointment_defaults_to_pending(client):
    response = client.post("/api/appointments", json=booking())

    assert response.status_code == 201
    body = response.json()
    assert body["status"] == "pending"
    assert body["patient_id"] is None


def test_public_appointment_links_known_patient(client):
    patient = patient_records.create(full_name="Mehmet Kaya", phone="05321112233")

    response = client.post("/api/appointments", json=booking(phone="05321112233"))

    assert response.json()["patient_id"] == patient.id


def test_appointment_validation(client):
    assert client.post("/api/appointments", json=booking(date="10/05/2024")).status_code == 422
    assert client.post("/api/appointments", json=booking(name="M")).status_code == 422


def test_appointment_staff_workflow(client, admin_headers):
    appointment_id = client.post("/api/appointments", json=booking()).json()["id"]

    assert client.get("/api/appointments").status_code == 401
    listed = client.get("/api/appointments", headers=admin_headers).json()
    assert [a["id"] for a in listed] == [appointment_id]

    approved = client.patch(
        f"/api/appointments/{appointment_id}/status",
        headers=admin_headers,
        json={"status": "approved"},
    )
    assert approved.json()["status"] == "approved"
    invalid = client.patch(
        f"/api/appointments/{appointment_id}/status",
        headers=admin_headers,
        json={"status": "lost"},
    )
    assert invalid.status_code == 422

    filtered = client.get(
        "/api/appointments", headers=admin_headers, params={"status": "pending"}
    ).json()
    assert filtered == []

    bad_ref = client.patch(
        f"/api/appointments/{appointment_id}",
        headers=admin_headers,
        json={"therapist_id": 999},
    )
    assert bad_ref.status_code == 400

    assert client.delete(
        f"/api/appointments/{appointment_id}", headers=admin_headers
    ).status_code == 200
    assert client.get(
        f"/api/appointments/{appointment_id}", headers=admin_headers
    ).status_code == 404


def test_contact_messages(client, admin_headers):
    created = client.post(
        "/api/contact",
        json={"name": "Zeynep", "phone": "05329998877", "message": "Merhaba"},
    )
    assert created.status_code == 201

    assert client.get("/api/contact").status_code == 401
    messages = client.get("/api/contact", headers=admin_headers).json()
    assert len(messages) == 1

    message_id = messages[0]["id"]
    assert client.delete(
        f"/api/contact/{message_id}", headers=admin_headers
    ).status_code == 200


def test_blog_posts_newest_first(client, admin_headers):
    for title, published in (
        ("Eski yazı", "2023-01-01T10:00:00Z"),
        ("Yeni yazı", "2024-01-01T10:00:00Z"),
    ):
        response = client.post(
            "/api/blog",
            headers=admin_headers,
            json={
                "title": title,
                "excerpt": "Özet",
                "content": "İçerik",
                "category": "Rehabilitasyon",
                "published_at": published,
            },
        )
        assert response.status_code == 201
        assert response.json()["read_time"] == "5 dakika"

    posts = client.get("/api/blog").json()
    assert [p["title"] for p in posts] == ["Yeni yazı", "Eski yazı"]

    post_id = posts[0]["id"]
    updated = client.patch(
        f"/api/blog/{post_id}", headers=admin_headers, json={"category": "Spor"}
    )
    assert updated.json()["category"] == "Spor"
    assert updated.json()["title"] == "Yeni yazı"
    assert client.get(f"/api/blog/{post_id}").status_code == 200
    assert client.delete(f"/api/blog/{post_id}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/blog/{post_id}").status_code == 404


def test_testimonial_moderation(client, admin_headers):
    created = client.post(
        "/api/testimonials",
        headers=admin_headers,
        json={"name": "Ali", "review": "Çok memnun kaldım, teşekkürler."},
    )
    assert created.status_code == 201
    assert created.json()["rating"] == 5
    assert created.json()["approved"] is False
    assert client.get("/api/testimonials/approved").json() == []

    testimonial_id = created.json()["id"]
    client.patch(
        f"/api/testimonials/{testimonial_id}",
        headers=admin_headers,
        json={"approved": True},
    )
    approved = client.get("/api/testimonials/approved").json()
    assert [t["id"] for t in approved] == [testimonial_id]

    too_short = client.post(
        "/api/testimonials",
        headers=admin_headers,
        json={"name": "Ali", "review": "kısa", "rating": 6},
    )
    assert too_short.status_code == 422
