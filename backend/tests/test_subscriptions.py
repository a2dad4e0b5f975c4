from conftest import create_event, register


def participants_of(client, event_id, headers):
    response = client.get(f"/events/{event_id}/participants", headers=headers)
    assert response.status_code == 200
    return response.json()


def test_subscription_scenario(client, alice, bob):
    event = create_event(client, alice, date="2024-06-20")
    event_id = event["id"]

    response = client.post(f"/events/{event_id}/subscribe", json={"userId": bob["id"]}, headers=bob["headers"])
    assert response.status_code == 200
    assert response.json()["subscribersCount"] == 1
    assert response.json()["subscribers"] == [bob["id"]]
    assert [p["id"] for p in participants_of(client, event_id, bob["headers"])["participants"]] == [bob["id"]]

    response = client.post(f"/events/{event_id}/subscribe", json={"userId": bob["id"]}, headers=bob["headers"])
    assert response.status_code == 400
    assert response.json()["detail"] == "User is already subscribed to this event"
    assert participants_of(client, event_id, bob["headers"])["participantsCount"] == 1

    response = client.post(f"/events/{event_id}/unsubscribe", json={"userId": bob["id"]}, headers=bob["headers"])
    assert response.status_code == 200
    assert response.json()["subscribersCount"] == 0
    assert participants_of(client, event_id, bob["headers"])["participants"] == []

    response = client.post(f"/events/{event_id}/subscribe", json={"userId": alice["id"]}, headers=alice["headers"])
    assert response.status_code == 400
    assert participants_of(client, event_id, alice["headers"])["participants"] == []


def test_subscribe_defaults_to_current_user(client, alice, bob):
    event = create_event(client, alice)
    response = client.post(f"/events/{event['id']}/subscribe", headers=bob["headers"])
    assert response.status_code == 200
    assert response.json()["subscribers"] == [bob["id"]]

    response = client.post(f"/events/{event['id']}/unsubscribe", headers=bob["headers"])
    assert response.status_code == 200
    assert response.json()["subscribers"] == []


def test_owner_cannot_subscribe_without_body(client, alice):
    event = create_event(client, alice)
    response = client.post(f"/events/{event['id']}/subscribe", headers=alice["headers"])
    assert response.status_code == 400
    assert response.json()["detail"] == "Event creator cannot subscribe to their own event"


def test_unsubscribe_non_subscriber_is_rejected(client, alice, bob):
    event = create_event(client, alice)
    response = client.post(f"/events/{event['id']}/unsubscribe", headers=bob["headers"])
    assert response.status_code == 400
    assert response.json()["detail"] == "User is not subscribed to this event"


def test_subscribe_unknown_event_or_user(client, alice, bob):
    event = create_event(client, alice)
    assert client.post("/events/999/subscribe", headers=bob["headers"]).status_code == 404
    assert client.post("/events/999/unsubscribe", headers=bob["headers"]).status_code == 404
    response = client.post(f"/events/{event['id']}/subscribe", json={"userId": 999}, headers=bob["headers"])
    assert response.status_code == 404
    assert response.json()["detail"] == "User not found"


def test_cannot_subscribe_to_deleted_event(client, alice, bob):
    event = create_event(client, alice)
    client.delete(f"/events/{event['id']}", headers=alice["headers"])
    response = client.post(f"/events/{event['id']}/subscribe", headers=bob["headers"])
    assert response.status_code == 404


def test_participants_in_storage_order(client, alice, bob):
    carol = register(client, "carol@mail.com", "Carol").json()
    event = create_event(client, alice)
    client.post(f"/events/{event['id']}/subscribe", json={"userId": carol["id"]}, headers=alice["headers"])
    client.post(f"/events/{event['id']}/subscribe", json={"userId": bob["id"]}, headers=alice["headers"])

    data = participants_of(client, event["id"], alice["headers"])
    assert data["eventId"] == event["id"]
    assert data["eventTitle"] == event["title"]
    assert data["participantsCount"] == 2
    assert data["participants"] == [
        {"id": carol["id"], "name": "Carol", "email": "carol@mail.com"},
        {"id": bob["id"], "name": "Bob", "email": "bob@mail.com"},
    ]

    listed = client.get(f"/events/{event['id']}", headers=alice["headers"]).json()
    assert listed["subscribers"] == [carol["id"], bob["id"]]
    assert listed["participantsCount"] == 2


def test_participants_of_unknown_event(client, alice):
    assert client.get("/events/999/participants", headers=alice["headers"]).status_code == 404


def test_subscriber_count_changes_by_one(client, alice, bob):
    event = create_event(client, alice)
    counts = []
    for path in ("subscribe", "subscribe", "unsubscribe", "unsubscribe"):
        response = client.post(f"/events/{event['id']}/{path}", headers=bob["headers"])
        counts.append((response.status_code, participants_of(client, event["id"], bob["headers"])["participantsCount"]))
    assert counts == [(200, 1), (400, 1), (200, 0), (400, 0)]
