from datetime import date, timedelta

import pytest

from conftest import future_day


def test_create_appointment_is_pending(client, booking, service):
    response = client.post("/api/appointments", json=booking)

    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["appointmentId"] == body["data"]["id"]
    assert body["data"]["status"] == "pending"
    assert body["data"]["payment_status"] == "pending"
    # sem total informado, usa o preço do serviço
    assert body["data"]["total_amount"] == service.price
    assert body["data"]["appointment_time"] == "10:00:00"


def test_create_appointment_keeps_notes_and_amount(client, booking):
    booking.update(notes="Low fade please", total_amount=300)

    data = client.post("/api/appointments", json=booking).json()["data"]

    assert data["notes"] == "Low fade please"
    assert data["total_amount"] == 300


def test_create_appointment_missing_fields(client, booking):
    del booking["barber_id"]

    response = client.post("/api/appointments", json=booking)

    assert response.status_code == 400


@pytest.mark.parametrize("field", ["user_id", "barber_id", "service_id"])
def test_create_appointment_unknown_reference(client, booking, field):
    booking[field] = 999

    assert client.post("/api/appointments", json=booking).status_code == 404


def test_create_appointment_in_the_past(client, booking):
    booking["appointment_date"] = (date.today() - timedelta(days=1)).isoformat()

    response = client.post("/api/appointments", json=booking)

    assert response.status_code == 400
    assert response.json()["detail"] == "Please select a date from today onwards"


@pytest.mark.parametrize("value", ["08:59", "18:00", "23:30"])
def test_create_appointment_outside_business_hours(client, booking, value):
    booking["appointment_time"] = value

    response = client.post("/api/appointments", json=booking)

    assert response.status_code == 400
    assert response.json()["detail"] == "Please select a time between 9:00 AM and 5:59 PM"


@pytest.mark.parametrize("value", ["09:00", "17:59"])
def test_create_appointment_business_hours_edges(client, booking, value):
    booking["appointment_time"] = value

    assert client.post("/api/appointments", json=booking).status_code == 201


def test_double_booking_same_slot_rejected(client, booking, other_customer):
    assert client.post("/api/appointments", json=booking).status_code == 201

    booking["user_id"] = other_customer.id
    response = client.post("/api/appointments", json=booking)

    assert response.status_code == 409
    assert response.json()["detail"] == "This barber is already booked for the selected time"


def test_double_booking_overlapping_duration(client, booking, services):
    # 10:00 + 50min ocupa até 10:50
    booking["service_id"] = services[0].id
    assert client.post("/api/appointments", json=booking).status_code == 201

    booking["service_id"] = services[2].id
    booking["appointment_time"] = "10:30"
    assert client.post("/api/appointments", json=booking).status_code == 409

    booking["appointment_time"] = "10:50"
    assert client.post("/api/appointments", json=booking).status_code == 201


def test_same_slot_with_other_barber_allowed(client, booking, barbers):
    assert client.post("/api/appointments", json=booking).status_code == 201

    booking["barber_id"] = barbers[1].id
    assert client.post("/api/appointments", json=booking).status_code == 201


def test_cancelled_slot_can_be_rebooked(client, booking, appointment):
    client.put(f"/api/appointments/{appointment['id']}/cancel")

    assert client.post("/api/appointments", json=booking).status_code == 201


def test_list_all_appointments_with_names(client, booking, customer, barber, service):
    client.post("/api/appointments", json=booking)
    later = dict(booking, appointment_date=future_day(10))
    client.post("/api/appointments", json=later)

    response = client.get("/api/appointments")

    assert response.status_code == 200
    data = response.json()["data"]
    assert [a["appointment_date"] for a in data] == [future_day(10), future_day()]
    assert data[0]["user_name"] == customer.name
    assert data[0]["barber_name"] == barber.name
    assert data[0]["service_name"] == service.name
    assert data[0]["service_price"] == service.price


def test_list_appointments_filtered_by_status(client, appointment):
    assert len(client.get("/api/appointments?status=pending").json()["data"]) == 1
    assert client.get("/api/appointments?status=confirmed").json()["data"] == []
    assert client.get("/api/appointments?status=bogus").status_code == 400


def test_user_history_only_contains_own_appointments(client, booking, customer, other_customer):
    client.post("/api/appointments", json=booking)
    client.post("/api/appointments", json=dict(booking, user_id=other_customer.id, appointment_time="15:00"))

    data = client.get(f"/api/appointments/user/{customer.id}").json()["data"]

    assert len(data) == 1
    assert data[0]["user_id"] == customer.id


def test_get_appointment(client, appointment):
    response = client.get(f"/api/appointments/{appointment['id']}")

    assert response.status_code == 200
    assert response.json()["data"]["id"] == appointment["id"]
    assert client.get("/api/appointments/999").status_code == 404


@pytest.mark.parametrize("status", ["confirmed", "completed", "cancelled", "pending"])
def test_update_status(client, appointment, status):
    response = client.put(f"/api/appointments/{appointment['id']}/status", json={"status": status})

    assert response.status_code == 200
    assert response.json()["data"]["status"] == status


@pytest.mark.parametrize("body", [{"status": "approved"}, {"status": ""}, {}])
def test_update_status_invalid_value(client, appointment, body):
    response = client.put(f"/api/appointments/{appointment['id']}/status", json=body)

    assert response.status_code == 400
    assert response.json()["detail"] == "Valid status is required"


def test_reactivate_cancelled_blocked_when_slot_taken(client, booking, appointment, other_customer):
    client.put(f"/api/appointments/{appointment['id']}/cancel")
    assert client.post(
        "/api/appointments", json=dict(booking, user_id=other_customer.id)
    ).status_code == 201

    response = client.put(f"/api/appointments/{appointment['id']}/status", json={"status": "confirmed"})

    assert response.status_code == 409
    assert client.get(f"/api/appointments/{appointment['id']}").json()["data"]["status"] == "cancelled"


def test_reactivate_cancelled_when_slot_free(client, appointment):
    client.put(f"/api/appointments/{appointment['id']}/cancel")

    response = client.put(f"/api/appointments/{appointment['id']}/status", json={"status": "pending"})

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "pending"


def test_update_status_not_found(client):
    response = client.put("/api/appointments/999/status", json={"status": "confirmed"})

    assert response.status_code == 404


def test_cancel_appointment(client, appointment):
    response = client.put(f"/api/appointments/{appointment['id']}/cancel")

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "cancelled"
    # não apaga: continua no histórico
    assert client.get(f"/api/appointments/{appointment['id']}").json()["data"]["status"] == "cancelled"


def test_cancel_twice_is_noop(client, appointment):
    client.put(f"/api/appointments/{appointment['id']}/cancel")

    response = client.put(f"/api/appointments/{appointment['id']}/cancel")

    assert response.status_code == 200
    assert response.json()["data"]["status"] == "cancelled"


def test_cancel_not_found(client):
    response = client.put("/api/appointments/999/cancel")

    assert response.status_code == 404
    assert response.json()["detail"] == "Appointment not found"


def test_cancel_completed_rejected(client, appointment):
    client.put(f"/api/appointments/{appointment['id']}/status", json={"status": "completed"})

    assert client.put(f"/api/appointments/{appointment['id']}/cancel").status_code == 400


def test_update_payment_fields(client, appointment, customer):
    payment = client.post(
        "/api/payments",
        json={
            "appointment_id": appointment["id"],
            "user_id": customer.id,
            "amount": 250,
            "payment_method": "cash",
        },
    ).json()

    response = client.put(
        f"/api/appointments/{appointment['id']}",
        json={"payment_status": "completed", "payment_id": payment["id"]},
    )

    assert response.status_code == 200
    assert response.json()["data"]["payment_status"] == "completed"
    assert response.json()["data"]["payment_id"] == payment["id"]


def test_update_payment_fields_validation(client, appointment):
    url = f"/api/appointments/{appointment['id']}"

    assert client.put(url, json={"payment_status": "approved"}).status_code == 400
    assert client.put(url, json={"payment_id": 999}).status_code == 404
    assert client.put("/api/appointments/999", json={"payment_status": "failed"}).status_code == 404
