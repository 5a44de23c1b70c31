import io
from datetime import date, timedelta

import pytest

from conftest import PASSWORD, future_day
from micks_barber import config
from micks_barber.client.api import APIError
from micks_barber.client.wizard import BookingError, BookingWizard, PaymentFailed, Step, time_slots
from test_client_payments import FixedRandom


@pytest.fixture
def wizard(api, customer, barber, service):
    api.login(customer.email, PASSWORD)
    return BookingWizard(api)


def fill(wizard, api, when="10:00"):
    wizard.select_service(api.get_services()[0])
    wizard.next()
    wizard.select_barber(api.get_barbers()[0])
    wizard.next()
    wizard.select_date(future_day())
    wizard.select_time(when)


def test_wizard_requires_login(api):
    with pytest.raises(BookingError):
        BookingWizard(api)


def test_steps_are_guarded(wizard, api):
    assert wizard.step == Step.SERVICE
    assert not wizard.can_proceed()
    with pytest.raises(BookingError):
        wizard.next()

    wizard.select_service(api.get_services()[0])
    assert wizard.next() == Step.BARBER
    assert not wizard.can_proceed()

    wizard.select_barber(api.get_barbers()[0])
    assert wizard.next() == Step.DATE_TIME

    wizard.select_date(future_day())
    assert not wizard.can_proceed()
    wizard.select_time("10:00")
    assert wizard.can_proceed()


@pytest.mark.parametrize("value", ["2024/01/15", "tomorrow", ""])
def test_select_date_format(wizard, value):
    with pytest.raises(BookingError):
        wizard.select_date(value)


def test_select_date_in_the_past(wizard):
    with pytest.raises(BookingError, match="from today onwards"):
        wizard.select_date(date.today() - timedelta(days=1))
    assert wizard.date is None


def test_select_date_today_allowed(wizard):
    wizard.select_date(date.today())

    assert wizard.date == date.today().isoformat()


@pytest.mark.parametrize("value", ["8:59", "18:00", "25:00", "10:5", "noon"])
def test_select_time_rejected(wizard, value):
    with pytest.raises(BookingError):
        wizard.select_time(value)
    assert wizard.time is None


def test_select_time_normalized(wizard):
    wizard.select_time("9:05")

    assert wizard.time == "09:05"


def test_entering_payment_creates_pending_appointment(wizard, api, customer):
    fill(wizard, api)

    assert wizard.next() == Step.PAYMENT
    assert wizard.appointment_id is not None

    appt = api.get_appointment(wizard.appointment_id)
    assert appt["status"] == "pending"
    assert appt["payment_status"] == "pending"
    assert appt["user_id"] == customer.id
    assert appt["total_amount"] == 150.0


def test_back_and_forward_keeps_same_appointment(wizard, api, customer):
    fill(wizard, api)
    wizard.next()
    first_id = wizard.appointment_id

    assert wizard.back() == Step.DATE_TIME
    assert wizard.time == "10:00"
    wizard.next()

    assert wizard.appointment_id == first_id
    assert len(api.get_user_appointments(customer.id)) == 1


def test_changing_time_cancels_previous_appointment(wizard, api, customer):
    fill(wizard, api)
    wizard.next()
    first_id = wizard.appointment_id

    wizard.back()
    wizard.select_time("14:00")
    wizard.next()

    assert wizard.appointment_id != first_id
    statuses = {a["id"]: a["status"] for a in api.get_user_appointments(customer.id)}
    assert statuses == {first_id: "cancelled", wizard.appointment_id: "pending"}


def test_repicking_first_slot_after_change(wizard, api, customer):
    fill(wizard, api, when="10:00")
    wizard.next()
    wizard.back()
    wizard.select_time("14:00")
    wizard.next()
    wizard.back()
    wizard.select_time("10:00")

    assert wizard.next() == Step.PAYMENT
    assert api.get_appointment(wizard.appointment_id)["appointment_time"] == "10:00:00"
    active = [a for a in api.get_user_appointments(customer.id) if a["status"] != "cancelled"]
    assert [a["id"] for a in active] == [wizard.appointment_id]


def test_shifting_into_own_overlapping_slot(wizard, api):
    fill(wizard, api, when="10:00")
    wizard.next()
    wizard.back()
    wizard.select_time("10:10")

    assert wizard.next() == Step.PAYMENT


def test_changing_paid_booking_rejected(wizard, api):
    fill(wizard, api)
    wizard.next()
    wizard.pay_direct("card", rng=FixedRandom(0.1))
    paid_id = wizard.appointment_id

    wizard.back()
    wizard.back()
    wizard.select_time("15:00")

    with pytest.raises(BookingError):
        wizard.next()
    assert wizard.appointment_id == paid_id
    assert api.get_appointment(paid_id)["status"] == "pending"


def test_double_booking_keeps_wizard_in_date_time(wizard, api, other_customer, barbers, services):
    api.create_appointment(
        user_id=other_customer.id,
        barber_id=barbers[1].id,  # maior nota, primeiro da lista
        service_id=services[2].id,
        appointment_date=future_day(),
        appointment_time="10:00",
    )
    fill(wizard, api)

    with pytest.raises(APIError) as exc:
        wizard.next()

    assert exc.value.status_code == 409
    assert wizard.step == Step.DATE_TIME
    assert wizard.appointment_id is None


def test_pay_direct_success(wizard, api):
    fill(wizard, api)
    wizard.next()

    payment = wizard.pay_direct("card", rng=FixedRandom(0.1))

    assert wizard.step == Step.OVERVIEW
    assert payment["payment_status"] == "completed"
    assert payment["transaction_id"].startswith("TXN_")
    assert api.get_appointment(wizard.appointment_id)["payment_status"] == "completed"
    assert wizard.overview()["payment_status"] == "completed"


def test_pay_direct_failure_stays_on_payment(wizard, api):
    fill(wizard, api)
    wizard.next()

    with pytest.raises(PaymentFailed):
        wizard.pay_direct("card", rng=FixedRandom(0.99))

    assert wizard.step == Step.PAYMENT
    assert api.get_user_payments(wizard.user["id"]) == []


def test_pay_before_payment_step(wizard):
    with pytest.raises(BookingError):
        wizard.pay_direct("cash")


def test_pay_with_receipt_stays_pending(wizard, api):
    fill(wizard, api)
    wizard.next()

    payment = wizard.pay_with_receipt(io.BytesIO(b"\xff\xd8\xff" + b"0" * 32))

    assert wizard.step == Step.OVERVIEW
    assert payment["payment_status"] == "pending"
    assert payment["receipt_image"].startswith("/uploads/receipts/receipt-")
    pending = api.get_pending_payments()
    assert [p["id"] for p in pending] == [payment["id"]]


def test_overview_and_reset(wizard, api):
    fill(wizard, api)
    wizard.next()
    wizard.next()

    summary = wizard.overview()
    assert wizard.step == Step.OVERVIEW
    assert summary["service"] == "Beard Trim"
    assert summary["barber"] == "Mick Santos"
    assert summary["date"] == future_day()
    assert summary["time"] == "10:00"
    assert summary["total"] == "₱150.00"
    assert summary["payment_status"] == "pending"
    assert wizard.next() == Step.OVERVIEW

    wizard.reset()
    assert wizard.step == Step.SERVICE
    assert wizard.service is None and wizard.appointment_id is None


def test_time_slots():
    slots = time_slots()

    assert slots[0] == "09:00"
    assert slots[-1] == "17:30"
    assert len(slots) == 18


def test_time_error_follows_configured_hours(wizard, monkeypatch):
    monkeypatch.setattr(config, "BUSINESS_OPEN_HOUR", 10)
    monkeypatch.setattr(config, "BUSINESS_CLOSE_HOUR", 20)

    with pytest.raises(BookingError, match="between 10:00 AM and 7:59 PM"):
        wizard.select_time("09:30")
    wizard.select_time("19:30")

    assert wizard.time == "19:30"
