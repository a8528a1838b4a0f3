from tests.conftest import create_org, create_user, sign_in, switch_to


def test_post_is_attributed_to_acting_identity(client):
    owner = create_user(client, "Owner", "owner@example.com")
    headers = sign_in(client, owner["id"])
    org = create_org(client, headers, "Shop", "shop")

    personal = client.post("/posts/", json={"content": "hello"}, headers=headers).json()
    switch_to(client, headers, org["id"])
    business = client.post("/posts/", json={"content": "sale today"}, headers=headers).json()

    assert (personal["author_kind"], personal["author_id"]) == ("user", owner["id"])
    assert (business["author_kind"], business["author_id"]) == ("organization", org["id"])
    assert business["created_by"] == owner["id"]


def test_following_feed_uses_acting_identity(client):
    owner = create_user(client, "Owner", "owner@example.com")
    writer = create_user(client, "Writer", "writer@example.com")
    other = create_user(client, "Other", "other@example.com")
    owner_headers = sign_in(client, owner["id"])
    org = create_org(client, owner_headers, "Shop", "shop")

    writer_post = client.post("/posts/", json={"content": "from writer"}, headers=sign_in(client, writer["id"])).json()
    client.post("/posts/", json={"content": "from other"}, headers=sign_in(client, other["id"]))

    switch_to(client, owner_headers, org["id"])
    assert client.get("/posts/feed", params={"filter": "following"}, headers=owner_headers).json() == []
    client.post(f"/followers/user/{writer['id']}/follow", headers=owner_headers)

    feed = client.get("/posts/feed", params={"filter": "following"}, headers=owner_headers).json()
    assert [p["id"] for p in feed] == [writer_post["id"]]

    # the personal account follows nobody
    switch_to(client, owner_headers, None)
    assert client.get("/posts/feed", params={"filter": "following"}, headers=owner_headers).json() == []
    assert len(client.get("/posts/feed", headers=owner_headers).json()) == 2


def test_only_author_identity_can_delete(client):
    owner = create_user(client, "Owner", "owner@example.com")
    headers = sign_in(client, owner["id"])
    org = create_org(client, headers, "Shop", "shop")
    switch_to(client, headers, org["id"])
    post = client.post("/posts/", json={"content": "business post"}, headers=headers).json()

    switch_to(client, headers, None)
    assert client.delete(f"/posts/{post['id']}", headers=headers).status_code == 403

    switch_to(client, headers, org["id"])
    assert client.delete(f"/posts/{post['id']}", headers=headers).status_code == 204


def test_guest_accounts_can_follow(client):
    guest = client.post("/users/anonymous").json()
    writer = create_user(client, "Writer", "writer@example.com")
    assert guest["is_anonymous"] is True

    headers = sign_in(client, guest["id"])
    resp = client.post(f"/followers/user/{writer['id']}/follow", headers=headers)

    assert resp.json()["status"] == "followed"
