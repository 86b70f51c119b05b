from datetime import datetime, timedelta, timezone

from app.models.booking import Booking, BookingStatus, WaitlistEntry, WaitlistStatus


BOOKINGS = "/api/v1/bookings"


def _book(client, user, payload, auth_headers):
    return client.post(BOOKINGS, json=payload, headers=auth_headers(user))


def test_create_booking_requires_authentication(client, gym_class, future_date, booking_payload):
    response = client.post(BOOKINGS, json=booking_payload(gym_class.id, future_date))
    assert response.status_code == 401
    assert response.json()["success"] is False


def test_create_booking_rejects_invalid_token(client, gym_class, future_date, booking_payload):
    response = client.post(
        BOOKINGS,
        json=booking_payload(gym_class.id, future_date),
        headers={"Authorization": "Bearer not-a-jwt"},
    )
    assert response.status_code == 401


def test_create_booking_copies_class_snapshot(
    client, gym_class, future_date, member_user, member_headers, booking_payload
):
    response = client.post(
        BOOKINGS,
        json=booking_payload(gym_class.id, future_date, notes="First time"),
        headers=member_headers,
    )
    assert response.status_code == 201
    body = response.json()
    assert body["success"] is True
    assert body["message"] == "Booking created successfully"

    booking = body["data"]
    assert booking["classId"] == gym_class.id
    assert booking["memberId"] == member_user.member_profile.id
    assert booking["className"] == "Spin"
    assert booking["trainerId"] == gym_class.trainer_id
    assert booking["trainerName"] == "Tina Trainer"
    assert booking["duration"] == 60
    assert booking["location"] == "Main Studio"
    assert booking["bookingDate"] == future_date.isoformat()
    assert booking["startTime"] == "09:00"
    assert booking["endTime"] == "10:00"
    assert booking["formattedTime"] == "09:00 - 10:00"
    assert booking["status"] == "confirmed"
    assert booking["bookingType"] == "single"
    assert booking["notes"] == "First time"


def test_create_booking_accepts_snake_case_fields(client, gym_class, future_date, member_headers):
    payload = {
        "class_id": gym_class.id,
        "booking_date": future_date.isoformat(),
        "start_time": "07:30",
        "end_time": "08:30",
    }
    response = client.post(BOOKINGS, json=payload, headers=member_headers)
    assert response.status_code == 201
    assert response.json()["data"]["startTime"] == "07:30"


def test_create_booking_missing_details(client, gym_class, future_date, member_headers):
    payload = {"classId": gym_class.id, "bookingDate": future_date.isoformat(), "startTime": "09:00"}
    response = client.post(BOOKINGS, json=payload, headers=member_headers)
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "All booking details are required"}


def test_create_booking_blank_field_counts_as_missing(
    client, gym_class, future_date, member_headers, booking_payload
):
    response = client.post(
        BOOKINGS, json=booking_payload(gym_class.id, future_date, end_time=""), headers=member_headers
    )
    assert response.status_code == 400
    assert response.json()["message"] == "All booking details are required"


def test_create_booking_rejects_malformed_time(
    client, gym_class, future_date, member_headers, booking_payload
):
    response = client.post(
        BOOKINGS, json=booking_payload(gym_class.id, future_date, start_time="9am"), headers=member_headers
    )
    assert response.status_code == 422


def test_create_booking_unknown_class(client, future_date, member_headers, booking_payload):
    response = client.post(BOOKINGS, json=booking_payload(9999, future_date), headers=member_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Class not found"


def test_create_booking_without_member_profile(
    client, gym_class, future_date, trainer_headers, booking_payload
):
    response = client.post(BOOKINGS, json=booking_payload(gym_class.id, future_date), headers=trainer_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Member profile not found"


def test_duplicate_booking_is_rejected(client, gym_class, future_date, member_headers, booking_payload):
    payload = booking_payload(gym_class.id, future_date)
    assert client.post(BOOKINGS, json=payload, headers=member_headers).status_code == 201

    response = client.post(BOOKINGS, json=payload, headers=member_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "You already have a booking for this class at this time"


def test_same_member_other_start_time_is_not_a_duplicate(
    client, gym_class, future_date, member_headers, booking_payload
):
    assert client.post(
        BOOKINGS, json=booking_payload(gym_class.id, future_date, "09:00", "10:00"), headers=member_headers
    ).status_code == 201
    assert client.post(
        BOOKINGS, json=booking_payload(gym_class.id, future_date, "11:00", "12:00"), headers=member_headers
    ).status_code == 201


def test_full_slot_goes_to_waitlist(
    client, db, gym_class, future_date, make_member, auth_headers, booking_payload
):
    """Capacidad 2: A y B reservan, C y D pasan a la lista de espera en orden."""
    payload = booking_payload(gym_class.id, future_date)
    alice, bob, carol, dave = (make_member(n) for n in ("Alice", "Bob", "Carol", "Dave"))

    assert _book(client, alice, payload, auth_headers).status_code == 201
    assert _book(client, bob, payload, auth_headers).status_code == 201

    response = _book(client, carol, payload, auth_headers)
    assert response.status_code == 201
    body = response.json()
    assert body["message"] == "Class is full. You have been added to the waitlist."
    assert body["data"]["type"] == "waitlist"
    assert body["data"]["position"] == 1
    entry = body["data"]["waitlistEntry"]
    assert entry["position"] == 1
    assert entry["status"] == "waiting"
    assert entry["className"] == "Spin"
    assert entry["startTime"] == "09:00"
    assert entry["expiresAt"].startswith(f"{future_date.isoformat()}T10:00")

    response = _book(client, dave, payload, auth_headers)
    assert response.json()["data"]["position"] == 2

    # Cada llamada crea exactamente una fila
    assert db.query(Booking).count() == 2
    assert db.query(WaitlistEntry).count() == 2


def test_capacity_is_per_start_time(
    client, gym_class, future_date, make_member, auth_headers, booking_payload
):
    morning = booking_payload(gym_class.id, future_date, "09:00", "10:00")
    for _ in range(2):
        assert _book(client, make_member(), morning, auth_headers).json()["message"] == "Booking created successfully"

    evening = booking_payload(gym_class.id, future_date, "18:00", "19:00")
    response = _book(client, make_member(), evening, auth_headers)
    assert response.json()["message"] == "Booking created successfully"


def test_cancel_promotes_earliest_waiting_member(
    client, db, gym_class, future_date, make_member, auth_headers, booking_payload
):
    payload = booking_payload(gym_class.id, future_date)
    alice, bob, carol, dave = (make_member(n) for n in ("Alice", "Bob", "Carol", "Dave"))
    alice_booking = _book(client, alice, payload, auth_headers).json()["data"]
    _book(client, bob, payload, auth_headers)
    _book(client, carol, payload, auth_headers)
    _book(client, dave, payload, auth_headers)

    response = client.delete(f"{BOOKINGS}/{alice_booking['id']}", headers=auth_headers(alice))
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Booking cancelled successfully"
    assert body["data"]["status"] == "cancelled"
    assert body["data"]["cancelledAt"] is not None

    carol_member_id = carol.member_profile.id
    promoted = db.query(Booking).filter(
        Booking.member_id == carol_member_id, Booking.status == BookingStatus.CONFIRMED
    ).all()
    assert len(promoted) == 1
    assert promoted[0].start_time == "09:00"
    assert promoted[0].end_time == "10:00"
    assert promoted[0].class_name == "Spin"

    entries = {e.member_id: e for e in db.query(WaitlistEntry).all()}
    assert entries[carol_member_id].status == WaitlistStatus.CONVERTED
    assert entries[dave.member_profile.id].status == WaitlistStatus.WAITING

    # Exactamente una reserva nueva: 2 originales + 1 promocionada
    assert db.query(Booking).count() == 3
    assert db.query(Booking).filter(Booking.status != BookingStatus.CANCELLED).count() == 2


def test_cancel_without_waitlist_only_cancels(client, db, gym_class, future_date, member_headers, booking_payload):
    booking = client.post(
        BOOKINGS, json=booking_payload(gym_class.id, future_date), headers=member_headers
    ).json()["data"]

    response = client.delete(f"{BOOKINGS}/{booking['id']}", params={"reason": "Sick"}, headers=member_headers)
    assert response.status_code == 200
    assert response.json()["data"]["cancellationReason"] == "Sick"
    assert db.query(Booking).count() == 1


def test_cancel_within_two_hours_is_rejected(client, gym_class, member_headers, booking_payload):
    slot = datetime.now(timezone.utc) + timedelta(hours=1)
    end = slot + timedelta(hours=1)
    booking = client.post(
        BOOKINGS,
        json=booking_payload(gym_class.id, slot.date(), slot.strftime("%H:%M"), end.strftime("%H:%M")),
        headers=member_headers,
    ).json()["data"]

    response = client.delete(f"{BOOKINGS}/{booking['id']}", headers=member_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Bookings can only be cancelled at least 2 hours in advance"


def test_cancel_past_booking_is_rejected(client, db, gym_class, member_user, member_headers):
    yesterday = datetime.now(timezone.utc).date() - timedelta(days=1)
    booking = Booking(
        member_id=member_user.member_profile.id, class_id=gym_class.id, class_name=gym_class.name,
        duration=60, location="Main Studio", booking_date=yesterday,
        start_time="09:00", end_time="10:00",
    )
    db.add(booking)
    db.commit()

    response = client.delete(f"{BOOKINGS}/{booking.id}", headers=member_headers)
    assert response.status_code == 400


def test_cancel_with_more_than_two_hours_notice_succeeds(client, gym_class, member_headers, booking_payload):
    slot = datetime.now(timezone.utc) + timedelta(hours=3)
    end = slot + timedelta(hours=1)
    booking = client.post(
        BOOKINGS,
        json=booking_payload(gym_class.id, slot.date(), slot.strftime("%H:%M"), end.strftime("%H:%M")),
        headers=member_headers,
    ).json()["data"]

    response = client.delete(f"{BOOKINGS}/{booking['id']}", headers=member_headers)
    assert response.status_code == 200


def test_cancel_unknown_booking(client, member_headers):
    response = client.delete(f"{BOOKINGS}/9999", headers=member_headers)
    assert response.status_code == 404
    assert response.json()["message"] == "Booking not found"


def test_cancel_other_members_booking_is_forbidden(
    client, gym_class, future_date, make_member, auth_headers, booking_payload
):
    owner, intruder = make_member("Owner"), make_member("Intruder")
    booking = _book(client, owner, booking_payload(gym_class.id, future_date), auth_headers).json()["data"]

    response = client.delete(f"{BOOKINGS}/{booking['id']}", headers=auth_headers(intruder))
    assert response.status_code == 403
    assert response.json()["message"] == "Not authorized to cancel this booking"


def test_cancelling_twice_promotes_only_once(
    client, db, gym_class, future_date, make_member, auth_headers, booking_payload
):
    payload = booking_payload(gym_class.id, future_date)
    alice, bob, carol, dave = (make_member(n) for n in ("Alice", "Bob", "Carol", "Dave"))
    alice_booking = _book(client, alice, payload, auth_headers).json()["data"]
    _book(client, bob, payload, auth_headers)
    _book(client, carol, payload, auth_headers)
    _book(client, dave, payload, auth_headers)

    assert client.delete(f"{BOOKINGS}/{alice_booking['id']}", headers=auth_headers(alice)).status_code == 200
    response = client.delete(f"{BOOKINGS}/{alice_booking['id']}", headers=auth_headers(alice))
    assert response.status_code == 400
    assert response.json() == {"success": False, "message": "Booking is already cancelled"}

    active = db.query(Booking).filter(
        Booking.class_id == gym_class.id,
        Booking.booking_date == future_date,
        Booking.start_time == "09:00",
        Booking.status != BookingStatus.CANCELLED,
    ).count()
    assert active <= gym_class.capacity
    dave_entry = db.query(WaitlistEntry).filter(WaitlistEntry.member_id == dave.member_profile.id).one()
    assert dave_entry.status == WaitlistStatus.WAITING


def test_cancel_completed_booking_is_rejected(client, db, gym_class, future_date, member_user, member_headers):
    booking = Booking(
        member_id=member_user.member_profile.id, class_id=gym_class.id, class_name=gym_class.name,
        duration=60, location="Main Studio", booking_date=future_date,
        start_time="09:00", end_time="10:00", status=BookingStatus.COMPLETED,
    )
    db.add(booking)
    db.commit()

    response = client.delete(f"{BOOKINGS}/{booking.id}", headers=member_headers)
    assert response.status_code == 400
    assert response.json()["message"] == "Only confirmed bookings can be cancelled"


def test_rebooking_after_cancellation_is_allowed(
    client, gym_class, future_date, member_headers, booking_payload
):
    payload = booking_payload(gym_class.id, future_date)
    booking = client.post(BOOKINGS, json=payload, headers=member_headers).json()["data"]
    client.delete(f"{BOOKINGS}/{booking['id']}", headers=member_headers)

    response = client.post(BOOKINGS, json=payload, headers=member_headers)
    assert response.status_code == 201
    assert response.json()["message"] == "Booking created successfully"


def test_my_bookings_split_upcoming_and_past(client, db, gym_class, future_date, member_user, member_headers,
                                             booking_payload):
    past_date = datetime.now(timezone.utc).date() - timedelta(days=3)
    db.add(Booking(
        member_id=member_user.member_profile.id, class_id=gym_class.id, class_name=gym_class.name,
        duration=60, location="Main Studio", booking_date=past_date,
        start_time="09:00", end_time="10:00",
    ))
    db.commit()
    client.post(BOOKINGS, json=booking_payload(gym_class.id, future_date, "18:00", "19:00"), headers=member_headers)
    client.post(BOOKINGS, json=booking_payload(gym_class.id, future_date, "08:00", "09:00"), headers=member_headers)

    response = client.get(f"{BOOKINGS}/my-bookings", headers=member_headers)
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["total"] == 3
    assert [b["bookingDate"] for b in data["past"]] == [past_date.isoformat()]
    # Orden por fecha y hora de inicio
    assert [b["startTime"] for b in data["upcoming"]] == ["08:00", "18:00"]


def test_my_bookings_only_returns_own_bookings(
    client, gym_class, future_date, make_member, auth_headers, booking_payload
):
    alice, bob = make_member("Alice"), make_member("Bob")
    _book(client, alice, booking_payload(gym_class.id, future_date), auth_headers)

    data = client.get(f"{BOOKINGS}/my-bookings", headers=auth_headers(bob)).json()["data"]
    assert data == {"upcoming": [], "past": [], "total": 0}


def test_response_carries_process_time_header(client, gym_class, future_date):
    response = client.get(f"{BOOKINGS}/availability/{gym_class.id}/{future_date.isoformat()}")
    assert response.headers["X-Process-Time"].endswith("ms")
