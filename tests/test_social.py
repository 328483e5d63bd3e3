"""Tests for friends and challenge invitations."""

import pytest

from tests.conftest import seed_challenge, seed_participant, seed_profile


def _befriend(db, a, b):
    db.tables.setdefault("friend_requests", []).append(
        {"id": f"fr-{a}-{b}", "sender_id": a, "receiver_id": b, "status": "accepted"}
    )


def test_send_and_accept_friend_request(client, api_base, supabase, current_user_id):
    seed_profile(supabase, "user-b", "bob")
    supabase.tables["friend_requests"] = [
        {"id": "fr-1", "sender_id": "user-b", "receiver_id": current_user_id, "status": "pending"}
    ]

    pending = client.get(f"{api_base}/friends/requests").json()
    assert [(r["id"], r["sender"]["username"]) for r in pending] == [("fr-1", "bob")]

    r = client.post(f"{api_base}/friends/requests/fr-1/respond", json={"status": "accepted"})
    assert r.status_code == 200
    assert r.json()["status"] == "accepted"

    friends = client.get(f"{api_base}/friends").json()
    assert [f["id"] for f in friends] == ["user-b"]


def test_friend_request_to_self_is_rejected(client, api_base, supabase, current_user_id):
    r = client.post(f"{api_base}/friends/requests", json={"receiver_id": current_user_id})
    assert r.status_code == 400


def test_duplicate_friend_request_in_either_direction(client, api_base, supabase, current_user_id):
    supabase.tables["friend_requests"] = [
        {"id": "fr-1", "sender_id": "user-b", "receiver_id": current_user_id, "status": "pending"}
    ]

    r = client.post(f"{api_base}/friends/requests", json={"receiver_id": "user-b"})

    assert r.status_code == 400
    assert len(supabase.rows("friend_requests")) == 1


def test_cannot_answer_someone_elses_request(client, api_base, supabase):
    supabase.tables["friend_requests"] = [
        {"id": "fr-1", "sender_id": "user-b", "receiver_id": "user-c", "status": "pending"}
    ]
    r = client.post(f"{api_base}/friends/requests/fr-1/respond", json={"status": "accepted"})
    assert r.status_code == 400


def test_search_excludes_caller(client, api_base, supabase, current_user_id):
    seed_profile(supabase, current_user_id, "lifter_you")
    seed_profile(supabase, "user-b", "Lifter_Bob")
    seed_profile(supabase, "user-c", "runner")

    r = client.get(f"{api_base}/friends/search", params={"q": "lifter"})

    assert [p["id"] for p in r.json()] == ["user-b"]


def test_invite_friends_skips_participants_and_pending(client, api_base, supabase, current_user_id):
    seed_challenge(supabase, "challenge-1")
    seed_participant(supabase, "challenge-1", current_user_id)
    seed_participant(supabase, "challenge-1", "user-c")
    for friend in ("user-b", "user-c", "user-d"):
        _befriend(supabase, current_user_id, friend)
    supabase.tables["challenge_invitations"] = [
        {
            "id": "inv-d",
            "challenge_id": "challenge-1",
            "sender_id": current_user_id,
            "receiver_id": "user-d",
            "status": "pending",
        }
    ]

    r = client.post(
        f"{api_base}/challenges/challenge-1/invitations",
        json={"receiver_ids": ["user-b", "user-c", "user-d", "user-b"]},
    )

    assert r.status_code == 201
    assert [i["receiver_id"] for i in r.json()] == ["user-b"]
    assert len(supabase.rows("challenge_invitations")) == 2


def test_invite_strangers_is_rejected(client, api_base, supabase):
    seed_challenge(supabase, "challenge-1")
    r = client.post(
        f"{api_base}/challenges/challenge-1/invitations", json={"receiver_ids": ["user-z"]}
    )
    assert r.status_code == 400
    assert r.json()["detail"] == "You can only invite friends"


def test_invitation_requires_receivers(client, api_base, supabase):
    seed_challenge(supabase, "challenge-1")
    r = client.post(f"{api_base}/challenges/challenge-1/invitations", json={"receiver_ids": []})
    assert r.status_code == 422


@pytest.fixture
def invitation(supabase, current_user_id):
    seed_challenge(supabase, "challenge-1", name="Leg Day League")
    supabase.tables["challenge_invitations"] = [
        {
            "id": "inv-1",
            "challenge_id": "challenge-1",
            "sender_id": "user-b",
            "receiver_id": current_user_id,
            "status": "pending",
            "created_at": "2026-10-01T12:00:00+00:00",
        }
    ]
    return "inv-1"


def test_pending_invitations_embed_challenge(client, api_base, invitation):
    [pending] = client.get(f"{api_base}/invitations").json()
    assert pending["id"] == invitation
    assert pending["challenge"]["name"] == "Leg Day League"


def test_accepting_invitation_joins_and_notifies_sender(
    client, api_base, supabase, invitation, current_user_id
):
    r = client.post(f"{api_base}/invitations/{invitation}/respond", json={"status": "accepted"})

    assert r.status_code == 200
    assert r.json()["status"] == "accepted"
    [participant] = supabase.rows("challenge_participants")
    assert (participant["challenge_id"], participant["user_id"]) == ("challenge-1", current_user_id)
    [notification] = supabase.rows("notifications")
    assert notification["user_id"] == "user-b"
    assert notification["type"] == "challenge_accepted"
    assert "Leg Day League" in notification["content"]


def test_dismissing_invitation_does_not_join(client, api_base, supabase, invitation):
    r = client.post(f"{api_base}/invitations/{invitation}/respond", json={"status": "dismissed"})

    assert r.status_code == 200
    assert supabase.rows("challenge_participants") == []
    assert supabase.rows("challenge_invitations")[0]["status"] == "dismissed"


def test_invitation_can_only_be_answered_once(client, api_base, invitation):
    client.post(f"{api_base}/invitations/{invitation}/respond", json={"status": "dismissed"})
    r = client.post(f"{api_base}/invitations/{invitation}/respond", json={"status": "accepted"})
    assert r.status_code == 400
