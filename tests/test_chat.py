from lostfound.models.message import Message
from lostfound.modules.chat import channel
from lostfound.modules.notifications import bus


def test_participants_exchange_messages_with_computed_receiver(client, auth, claim_setup):
    owner, claimer, item, claim = claim_setup()
    url = f"/api/v1/claims/{claim['id']}/messages"

    r1 = client.post(url, json={"content": "Hi, is this yours?"}, headers=auth(owner))
    r2 = client.post(url, json={"content": "Yes! Initials J.D."}, headers=auth(claimer))
    assert r1.status_code == 201 and r2.status_code == 201
    assert r1.get_json()["message"]["receiverId"] == claimer.id
    assert r2.get_json()["message"]["receiverId"] == owner.id


def test_client_supplied_receiver_is_rejected(client, auth, make_user, claim_setup):
    owner, claimer, item, claim = claim_setup()
    outsider = make_user()
    resp = client.post(
        f"/api/v1/claims/{claim['id']}/messages",
        json={"content": "hello", "receiverId": outsider.id},
        headers=auth(claimer),
    )
    assert resp.status_code == 400
    assert Message.query.count() == 0


def test_outsider_cannot_send_or_read(client, auth, make_user, claim_setup):
    owner, claimer, item, claim = claim_setup()
    outsider = make_user()
    url = f"/api/v1/claims/{claim['id']}/messages"

    assert client.post(url, json={"content": "let me in"}, headers=auth(outsider)).status_code == 403
    assert client.get(url, headers=auth(outsider)).status_code == 403
    assert Message.query.count() == 0


def test_history_is_ordered_oldest_first(client, auth, claim_setup):
    owner, claimer, item, claim = claim_setup()
    url = f"/api/v1/claims/{claim['id']}/messages"
    for i, who in enumerate([owner, claimer, owner, claimer]):
        client.post(url, json={"content": f"message {i}"}, headers=auth(who))

    messages = client.get(url, headers=auth(claimer)).get_json()["messages"]
    assert [m["content"] for m in messages] == [f"message {i}" for i in range(4)]


def test_message_participants_always_match_claim(client, auth, claim_setup):
    owner, claimer, item, claim = claim_setup()
    url = f"/api/v1/claims/{claim['id']}/messages"
    for who in (owner, claimer, claimer):
        client.post(url, json={"content": "ping"}, headers=auth(who))

    expected = {owner.id, claimer.id}
    for m in Message.query.all():
        assert {m.sender_id, m.receiver_id} == expected


def test_blank_and_oversized_messages_rejected(client, auth, claim_setup):
    owner, claimer, item, claim = claim_setup()
    url = f"/api/v1/claims/{claim['id']}/messages"
    assert client.post(url, json={"content": "   "}, headers=auth(owner)).status_code == 409
    assert client.post(url, json={"content": "x" * (channel.MAX_LENGTH + 1)}, headers=auth(owner)).status_code == 409


def test_unknown_claim_is_not_found(client, auth, make_user):
    resp = client.post("/api/v1/claims/999/messages", json={"content": "hi"}, headers=auth(make_user()))
    assert resp.status_code == 404


def test_new_message_is_pushed_to_claim_subscribers_only(client, auth, claim_setup):
    owner, claimer, item, claim = claim_setup()
    mine = bus.subscribe(channel.TABLE, lambda row: row.get("claimId") == claim["id"])
    other = bus.subscribe(channel.TABLE, lambda row: row.get("claimId") == claim["id"] + 1)

    client.post(f"/api/v1/claims/{claim['id']}/messages", json={"content": "on my way"}, headers=auth(owner))

    evt = mine.get_nowait()
    assert evt["content"] == "on my way"
    assert evt["senderId"] == owner.id
    assert other.empty()


def test_receiver_gets_message_notification(client, auth, claim_setup):
    from lostfound.models.notification import Notification

    owner, claimer, item, claim = claim_setup()
    client.post(f"/api/v1/claims/{claim['id']}/messages", json={"content": "hello"}, headers=auth(claimer))
    notes = Notification.query.filter_by(user_id=owner.id, kind="message").all()
    assert len(notes) == 1
    assert notes[0].payload["claimId"] == claim["id"]


def test_outsider_cannot_open_message_stream(client, auth, make_user, claim_setup):
    owner, claimer, item, claim = claim_setup()
    resp = client.get(f"/api/v1/claims/{claim['id']}/messages/stream", headers=auth(make_user()))
    assert resp.status_code == 403
