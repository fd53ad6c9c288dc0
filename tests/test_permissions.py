from connectvida.config.permissions_config import (
    ALL_PERMISSIONS,
    get_effective_permissions,
    invalid_permissions,
)
from conftest import add_church, add_member, add_super_admin


def test_admin_gets_every_permission():
    assert get_effective_permissions("admin") == ALL_PERMISSIONS


def test_unknown_role_gets_nothing():
    assert get_effective_permissions("visitante") == []
    assert get_effective_permissions(None) == []


def test_extra_permissions_are_merged_in_catalogue_order():
    permissions = get_effective_permissions("financeiro", ["kids-management", "bogus", "financial-panel"])
    assert permissions == ["financial-panel", "kids-management"]


def test_invalid_permissions():
    assert invalid_permissions(["ministries", "fly"]) == ["fly"]


def test_member_without_permission_is_forbidden(client, fake):
    church = add_church(fake)
    _, headers = add_member(fake, church["id"], funcao="membro")

    response = client.post("/api/v1/finance/transactions", json={
        "tipo": "Entrada", "categoria": "Dízimo", "descricao": "x", "valor": 10, "data_transacao": "2024-05-01",
    }, headers=headers)

    assert response.status_code == 403
    assert "financial-panel" in response.json()["detail"]


def test_extra_permission_unlocks_route(client, fake):
    church = add_church(fake)
    _, headers = add_member(fake, church["id"], funcao="membro", extra_permissoes=["financial-panel"])

    response = client.get("/api/v1/finance/summary", headers=headers)

    assert response.status_code == 200


def test_member_without_church_gets_400(client, fake):
    _, headers = add_member(fake, None)

    response = client.get("/api/v1/events", headers=headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Church not found for user"


def test_super_admin_acts_on_church_from_header(client, fake):
    church = add_church(fake)
    fake.add("eventos", {"id_igreja": church["id"], "nome": "Conferência", "data_hora": "2024-06-01T19:00:00"})
    _, headers = add_super_admin(fake, church_id=church["id"])

    response = client.get("/api/v1/events", headers=headers)

    assert response.status_code == 200
    assert [e["nome"] for e in response.json()["events"]] == ["Conferência"]


def test_invalid_token_is_rejected(client, fake):
    response = client.get("/api/v1/events", headers={"Authorization": "Bearer nope"})

    assert response.status_code == 401


def test_missing_token_is_rejected(client):
    response = client.get("/api/v1/events")

    assert response.status_code in (401, 403)
