from tests.conftest import create_org, create_user, sign_in, switch_to


def _status(client, headers, kind, target_id):
    resp = client.get(f"/followers/status/{kind}/{target_id}", headers=headers)
    assert resp.status_code == 200, resp.text
    return resp.json()["is_following"]


def _followers_count(client, kind, target_id):
    return client.get(f"/followers/counts/{kind}/{target_id}").json()["followers_count"]


def _toggle(client, headers, target_id, target_type, action):
    return client.post(
        "/followers/toggle",
        json={"targetId": target_id, "targetType": target_type, "action": action},
        headers=headers,
    )


def test_user_follows_and_unfollows_organization(client):
    owner = create_user(client, "Owner", "owner@example.com")
    fan = create_user(client, "Fan", "fan@example.com")
    org = create_org(client, sign_in(client, owner["id"]), "Shop", "shop")
    headers = sign_in(client, fan["id"])

    assert _status(client, headers, "organization", org["id"]) is False
    assert _followers_count(client, "organization", org["id"]) == 0

    resp = _toggle(client, headers, org["id"], "organization", "follow")
    assert resp.status_code == 200
    assert resp.json()["status"] == "followed"
    assert _status(client, headers, "organization", org["id"]) is True
    assert _followers_count(client, "organization", org["id"]) == 1

    resp = _toggle(client, headers, org["id"], "organization", "unfollow")
    assert resp.json()["status"] == "unfollowed"
    assert _status(client, headers, "organization", org["id"]) is False
    assert _followers_count(client, "organization", org["id"]) == 0


def test_duplicate_follow_is_absorbed(client):
    a = create_user(client, "A", "a@example.com")
    b = create_user(client, "B", "b@example.com")
    headers = sign_in(client, a["id"])

    first = client.post(f"/followers/user/{b['id']}/follow", headers=headers)
    second = client.post(f"/followers/user/{b['id']}/follow", headers=headers)

    assert first.status_code == second.status_code == 200
    assert second.json()["status"] == "noop"
    assert _followers_count(client, "user", b["id"]) == 1

    gone = client.delete(f"/followers/user/{b['id']}/follow", headers=headers)
    again = client.delete(f"/followers/user/{b['id']}/follow", headers=headers)
    assert gone.json()["status"] == "unfollowed"
    assert again.json()["status"] == "noop"


def test_follow_requires_session(client):
    b = create_user(client, "B", "b@example.com")

    assert _toggle(client, {}, b["id"], "user", "follow").status_code == 401
    assert client.get(f"/followers/status/user/{b['id']}").status_code == 401
    bad = {"Authorization": "Bearer not-a-token"}
    assert _toggle(client, bad, b["id"], "user", "follow").status_code == 401


def test_invalid_targets_are_rejected(client):
    a = create_user(client, "A", "a@example.com")
    headers = sign_in(client, a["id"])

    resp = _toggle(client, headers, a["id"], "user", "follow")
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Cannot follow yourself"

    assert _toggle(client, headers, "missing", "user", "follow").status_code == 404
    assert _toggle(client, headers, a["id"], "team", "follow").status_code == 422
    assert _followers_count(client, "user", a["id"]) == 0


def test_business_cannot_follow_itself(client):
    owner = create_user(client, "Owner", "owner@example.com")
    headers = sign_in(client, owner["id"])
    org = create_org(client, headers, "Shop", "shop")
    assert switch_to(client, headers, org["id"]).status_code == 200

    resp = _toggle(client, headers, org["id"], "organization", "follow")

    assert resp.status_code == 400
    assert "switch to your personal account" in resp.json()["detail"]


def test_follow_state_depends_on_acting_identity(client):
    owner = create_user(client, "Owner", "owner@example.com")
    target = create_user(client, "Target", "target@example.com")
    headers = sign_in(client, owner["id"])
    org = create_org(client, headers, "Shop", "shop")

    switch_to(client, headers, org["id"])
    resp = _toggle(client, headers, target["id"], "user", "follow")
    assert resp.json()["follower"] == {"kind": "organization", "id": org["id"]}
    assert _status(client, headers, "user", target["id"]) is True

    switch_to(client, headers, None)
    assert _status(client, headers, "user", target["id"]) is False
    assert _followers_count(client, "user", target["id"]) == 1

    counts = client.get(f"/followers/counts/organization/{org['id']}").json()
    assert counts == {"followers_count": 0, "following_count": 1}


def test_follower_and_following_lists(client):
    a = create_user(client, "A", "a@example.com")
    b = create_user(client, "B", "b@example.com")
    c = create_user(client, "C", "c@example.com")
    org = create_org(client, sign_in(client, c["id"]), "Shop", "shop")
    headers = sign_in(client, a["id"])
    _toggle(client, headers, b["id"], "user", "follow")
    _toggle(client, headers, org["id"], "organization", "follow")

    followers = client.get(f"/followers/user/{b['id']}/followers").json()
    assert [(f["follower_kind"], f["follower_id"]) for f in followers] == [("user", a["id"])]

    following = client.get(f"/followers/user/{a['id']}/following").json()
    assert {f["target_id"] for f in following} == {b["id"], org["id"]}

    orgs_only = client.get(f"/followers/user/{a['id']}/following", params={"kind": "organization"}).json()
    assert [f["target_id"] for f in orgs_only] == [org["id"]]


def test_profile_shows_follow_state_for_acting_identity(client):
    a = create_user(client, "A", "a@example.com")
    b = create_user(client, "B", "b@example.com")
    headers = sign_in(client, a["id"])
    _toggle(client, headers, b["id"], "user", "follow")

    profile = client.get(f"/profile/{b['id']}", headers=headers).json()
    assert profile["kind"] == "user"
    assert profile["is_following"] is True
    assert profile["followers_count"] == 1

    own = client.get(f"/profile/{a['id']}", headers=headers).json()
    assert own["is_following"] is None
    assert own["following_count"] == 1

    anonymous = client.get(f"/profile/{b['id']}").json()
    assert anonymous["is_following"] is None

    assert client.get("/profile/nobody").status_code == 404


def test_toggle_refuses_stale_follower_identity(client):
    owner = create_user(client, "Owner", "owner@example.com")
    writer = create_user(client, "Writer", "writer@example.com")
    headers = sign_in(client, owner["id"])
    org = create_org(client, headers, "Shop", "shop")
    switch_to(client, headers, org["id"])

    resp = client.post(
        "/followers/toggle",
        json={
            "targetId": writer["id"],
            "targetType": "user",
            "action": "follow",
            "follower": {"kind": "user", "id": owner["id"]},
        },
        headers=headers,
    )
    assert resp.status_code == 409
    assert _followers_count(client, "user", writer["id"]) == 0

    resp = client.post(
        "/followers/toggle",
        json={
            "targetId": writer["id"],
            "targetType": "user",
            "action": "follow",
            "follower": {"kind": "organization", "id": org["id"]},
        },
        headers=headers,
    )
    assert resp.json()["status"] == "followed"
    assert resp.json()["follower"] == {"kind": "organization", "id": org["id"]}
