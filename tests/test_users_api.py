from tests.conftest import create_org, create_user, sign_in, switch_to


def test_owner_cannot_delete_account_while_owning_organization(client):
    owner = create_user(client, "Owner", "owner@example.com")
    headers = sign_in(client, owner["id"])
    org = create_org(client, headers, "Shop", "shop")

    resp = client.delete(f"/users/{owner['id']}", headers=headers)

    assert resp.status_code == 409
    assert client.get(f"/users/{owner['id']}").status_code == 200
    assert client.delete(f"/organizations/{org['id']}", headers=headers).status_code == 204
    assert client.delete(f"/users/{owner['id']}", headers=headers).status_code == 204
    assert client.get(f"/users/{owner['id']}").status_code == 404


def test_deleting_member_keeps_posts_made_as_organization(client):
    owner = create_user(client, "Owner", "owner@example.com")
    staff = create_user(client, "Staff", "staff@example.com")
    owner_headers = sign_in(client, owner["id"])
    staff_headers = sign_in(client, staff["id"])
    org = create_org(client, owner_headers, "Shop", "shop")
    client.post(f"/organizations/{org['id']}/members", json={"user_id": staff["id"]}, headers=owner_headers)

    personal = client.post("/posts/", json={"content": "mine"}, headers=staff_headers).json()
    switch_to(client, staff_headers, org["id"])
    business = client.post("/posts/", json={"content": "shop news"}, headers=staff_headers).json()
    client.post(f"/followers/user/{owner['id']}/follow", headers=staff_headers)
    switch_to(client, staff_headers, None)
    client.post(f"/followers/user/{owner['id']}/follow", headers=staff_headers)

    assert client.delete(f"/users/{staff['id']}", headers=staff_headers).status_code == 204

    remaining = client.get(f"/posts/by/organization/{org['id']}").json()
    assert [p["id"] for p in remaining] == [business["id"]]
    assert client.get(f"/posts/by/user/{staff['id']}").json() == []
    assert personal["id"] != business["id"]
    # only the personal edge went away
    counts = client.get(f"/followers/counts/user/{owner['id']}").json()
    assert counts["followers_count"] == 1
