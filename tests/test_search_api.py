from tests.conftest import create_org, create_user, sign_in


def test_search_matches_users_and_organizations(client):
    ana = create_user(client, "Ana Baker", "ana@example.com")
    create_user(client, "Bo", "bo@example.com")
    headers = sign_in(client, ana["id"])
    org = create_org(client, headers, "Corner Shop", "bakery-corner")
    client.post("/users/anonymous")

    results = client.get("/search/", params={"q": "BAKE"}, headers=headers).json()

    assert [(u["kind"], u["id"]) for u in results["users"]] == [("user", ana["id"])]
    # organizations also match on slug
    assert [(o["kind"], o["id"], o["slug"]) for o in results["organizations"]] == [
        ("organization", org["id"], "bakery-corner")
    ]


def test_search_type_filter_and_auth(client):
    ana = create_user(client, "Ana", "ana@example.com")
    headers = sign_in(client, ana["id"])
    create_org(client, headers, "Ana's Bakery", "anas-bakery")

    only_orgs = client.get("/search/", params={"q": "ana", "type": "organization"}, headers=headers).json()
    assert only_orgs["users"] == []
    assert len(only_orgs["organizations"]) == 1

    assert client.get("/search/", params={"q": "ana"}).status_code == 401
    assert client.get("/search/", params={"q": ""}, headers=headers).status_code == 422


def test_guests_are_not_searchable(client):
    ana = create_user(client, "Ana", "ana@example.com")
    client.post("/users/anonymous")

    results = client.get("/search/", params={"q": "guest"}, headers=sign_in(client, ana["id"])).json()

    assert results["users"] == []
