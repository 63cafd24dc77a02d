import pytest

pytestmark = pytest.mark.django_db


def test_list_and_filter(client_for, alice, make_seal):
    make_seal(keeper=alice, name="Company seal")
    make_seal(keeper=alice, name="Contract seal", status="LOST")

    client = client_for(alice)
    everything = client.get("/api/seals/").json()["data"]
    lost = client.get("/api/seals/", {"status": "lost"}).json()["data"]

    assert everything["total"] == 2
    assert [s["name"] for s in lost["list"]] == ["Contract seal"]


def test_admin_creates_seal(client_for, admin_user, alice):
    response = client_for(admin_user).post(
        "/api/seals/",
        data={"name": "Legal seal", "type": "legal", "keeper_id": str(alice.id)},
        content_type="application/json",
    )

    assert response.status_code == 201
    data = response.json()["data"]
    assert data["type"] == "LEGAL"
    assert data["keeper"]["username"] == "alice"


def test_non_admin_cannot_create(client_for, alice):
    response = client_for(alice).post(
        "/api/seals/",
        data={"name": "Legal seal", "type": "LEGAL", "keeper_id": str(alice.id)},
        content_type="application/json",
    )

    assert response.status_code == 403
    assert response.json()["code"] == "FORBIDDEN"


def test_status_and_delete_endpoints(client_for, admin_user, seal):
    client = client_for(admin_user)

    changed = client.patch(f"/api/seals/{seal.id}/status", data={"status": "SUSPENDED"},
                           content_type="application/json")
    assert changed.json()["data"]["status"] == "SUSPENDED"

    deleted = client.delete(f"/api/seals/{seal.id}")
    assert deleted.status_code == 200
    assert client.get(f"/api/seals/{seal.id}").status_code == 404
