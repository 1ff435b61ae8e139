"""Tests for the integrations router and health probe."""

from uuid import uuid4


def test_list_account_pages(client, fake_graph, setup_account):
    fake_graph.add_get(
        "me/accounts",
        {"data": [{"id": "1111", "name": "Shop", "access_token": "secret"}]},
    )

    r = client.get(f"/integrations/accounts/{setup_account.id}/pages")

    assert r.status_code == 200
    assert r.json() == [{"id": "1111", "name": "Shop"}]


def test_list_pages_unknown_account(client):
    r = client.get(f"/integrations/accounts/{uuid4()}/pages")
    assert r.status_code == 404


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json() == {"status": "ok", "database": "ok"}
