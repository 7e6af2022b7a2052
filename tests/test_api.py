from conftest import headers
from reservation_engine.authorization import Actor, Role

# the HTTP layer runs on the real clock
DAY = "2099-06-01"


def slot(start, end):
    return {"start_date": f"{DAY}T{start}:00", "end_date": f"{DAY}T{end}:00"}


def create(client, actor, room_id, start, end, **extra):
    return client.post("/reservations", json={"room_id": room_id, **slot(start, end), **extra}, headers=headers(actor))


def test_root(client):
    assert client.get("/").json()["ok"] is True


def test_request_and_confirm_flow(client, room, requester, owner):
    r = create(client, requester, room.id, "10:00", "12:30", message="Répétition chorale")
    assert r.status_code == 201
    body = r.json()["reservation"]
    assert body["status"] == "PENDING"
    assert float(body["total_price"]) == 60
    reservation_id = body["id"]

    r2 = client.patch(f"/reservations/{reservation_id}", json={"status": "CONFIRMED"}, headers=headers(owner))
    assert r2.status_code == 200
    assert r2.json()["transition"] == {"from": "PENDING", "to": "CONFIRMED"}

    r3 = client.get(f"/reservations/{reservation_id}", headers=headers(requester))
    assert r3.status_code == 200
    assert r3.json()["reservation"]["status"] == "CONFIRMED"
    assert r3.json()["reservation"]["payment"] is None


def test_conflict_on_overlapping_request(client, room, requester, make_user):
    make_user("u-2")
    assert create(client, requester, room.id, "10:00", "12:30").status_code == 201
    assert create(client, requester, room.id, "12:30", "14:00").status_code == 201

    r = create(client, Actor("u-2", Role.REQUESTER), room.id, "11:00", "13:00")
    assert r.status_code == 409
    assert r.json()["error"] == "slot_conflict"


def test_invalid_interval(client, room, requester):
    r = create(client, requester, room.id, "12:00", "10:00")
    assert r.status_code == 422
    assert r.json()["error"] == "invalid_interval"

    past = client.post(
        "/reservations",
        json={"room_id": room.id, "start_date": "2000-01-01T10:00:00", "end_date": "2000-01-01T11:00:00"},
        headers=headers(requester),
    )
    assert past.status_code == 422


def test_unknown_room(client, requester):
    r = create(client, requester, "nope", "10:00", "11:00")
    assert r.status_code == 404
    assert r.json()["error"] == "not_found"


def test_only_requesters_create(client, room, owner):
    r = create(client, owner, room.id, "10:00", "11:00")
    assert r.status_code == 403


def test_requester_cannot_confirm_and_cancelled_is_final(client, room, requester, owner):
    reservation_id = create(client, requester, room.id, "10:00", "11:00").json()["reservation"]["id"]

    r = client.patch(f"/reservations/{reservation_id}", json={"status": "CONFIRMED"}, headers=headers(requester))
    assert r.status_code == 403
    assert r.json()["error"] == "forbidden"

    r = client.patch(
        f"/reservations/{reservation_id}", json={"status": "CANCELLED", "reason": "Salle indisponible"},
        headers=headers(owner),
    )
    assert r.status_code == 200

    r = client.patch(f"/reservations/{reservation_id}", json={"status": "CONFIRMED"}, headers=headers(requester))
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_transition"


def test_missing_actor_headers(client, room):
    assert client.get("/reservations").status_code == 422


def test_list_and_delete(client, room, requester, owner):
    first = create(client, requester, room.id, "10:00", "11:00").json()["reservation"]["id"]
    second = create(client, requester, room.id, "11:00", "12:00").json()["reservation"]["id"]
    client.patch(f"/reservations/{second}", json={"status": "CONFIRMED"}, headers=headers(owner))

    listed = client.get("/reservations", params={"status": "CONFIRMED"}, headers=headers(owner)).json()
    assert [r["id"] for r in listed["reservations"]] == [second]

    r = client.delete(f"/reservations/{second}", headers=headers(requester))
    assert r.status_code == 400
    assert r.json()["error"] == "invalid_state"

    r = client.delete(f"/reservations/{first}", headers=headers(requester))
    assert r.status_code == 200
    assert client.get(f"/reservations/{first}", headers=headers(requester)).status_code == 404


def test_payment_is_opened_for_confirmed_reservation(client, room, requester, owner):
    reservation_id = create(client, requester, room.id, "10:00", "12:00").json()["reservation"]["id"]
    assert client.post(f"/reservations/{reservation_id}/payment", headers=headers(requester)).status_code == 400

    client.patch(f"/reservations/{reservation_id}", json={"status": "CONFIRMED"}, headers=headers(owner))
    r = client.post(f"/reservations/{reservation_id}/payment", headers=headers(requester))
    assert r.status_code == 201
    assert float(r.json()["payment"]["amount"]) == 40
    assert r.json()["payment"]["status"] == "PENDING"


def test_availability(client, room, requester):
    create(client, requester, room.id, "10:00", "12:00")

    busy = client.get(f"/rooms/{room.id}/availability", params=slot("11:00", "13:00"))
    assert busy.json()["available"] is False

    free = client.get(f"/rooms/{room.id}/availability", params=slot("12:00", "13:00"))
    assert free.json()["available"] is True


def test_room_update_and_delete(client, room, requester, owner):
    r = client.patch(f"/rooms/{room.id}", json={"hourly_rate": "-5"}, headers=headers(owner))
    assert r.status_code == 422
    assert r.json()["error"] == "invalid_room"

    r = client.patch(f"/rooms/{room.id}", json={"available": False}, headers=headers(owner))
    assert r.json()["available"] is False
    assert create(client, requester, room.id, "10:00", "11:00").status_code == 409

    assert client.delete(f"/rooms/{room.id}", headers=headers(requester)).status_code == 403
    assert client.delete(f"/rooms/{room.id}", headers=headers(owner)).status_code == 200


def test_availability_of_unknown_room(client):
    r = client.get("/rooms/nope/availability", params=slot("10:00", "11:00"))
    assert r.status_code == 404
    assert r.json()["error"] == "not_found"


def test_unknown_status_filter(client, room, requester):
    r = client.get("/reservations", params={"status": "ARCHIVED"}, headers=headers(requester))
    assert r.status_code == 422
    assert r.json()["error"] == "invalid_filter"
