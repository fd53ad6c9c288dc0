import pytest

from conftest import add_church, add_member


@pytest.fixture
def setup(client, fake):
    church = add_church(fake)
    leader, headers = add_member(fake, church["id"], funcao="lider_ministerio", nome_completo="Lúcia")
    volunteer, volunteer_headers = add_member(fake, church["id"], nome_completo="Vitor")
    ministry = client.post("/api/v1/ministries", json={"nome": "Louvor"}, headers=headers).json()
    return church, ministry, headers, volunteer, volunteer_headers


def test_list_ministries_without_leader(client, fake, setup):
    _, ministry, headers, _, _ = setup

    listed = client.get("/api/v1/ministries", headers=headers).json()

    assert listed[0]["id"] == ministry["id"]
    assert listed[0]["lider_nome"] == "Não Atribuído"
    assert listed[0]["volunteers_count"] == 0


def test_member_cannot_create_ministry(client, fake, setup):
    _, _, _, _, volunteer_headers = setup

    assert client.post("/api/v1/ministries", json={"nome": "X"}, headers=volunteer_headers).status_code == 403


def test_volunteer_lifecycle(client, fake, setup):
    _, ministry, headers, volunteer, _ = setup
    url = f"/api/v1/ministries/{ministry['id']}/volunteers"

    added = client.post(url, json={"membro_id": volunteer["id"]}, headers=headers)
    assert added.status_code == 201
    assert client.post(url, json={"membro_id": volunteer["id"]}, headers=headers).status_code == 409

    promoted = client.post(f"/api/v1/ministries/volunteers/{added.json()['id']}/promote", headers=headers)
    assert promoted.json()["papel"] == "lider"
    listed = client.get("/api/v1/ministries", headers=headers).json()[0]
    assert listed["lider_nome"] == "Vitor"
    assert listed["volunteers_count"] == 1

    removed = client.delete(f"/api/v1/ministries/volunteers/{added.json()['id']}", headers=headers)
    assert removed.status_code == 204
    assert fake.row("ministerios", ministry["id"])["lider_id"] is None


def test_volunteer_from_other_church_is_rejected(client, fake, setup):
    _, ministry, headers, _, _ = setup
    outsider, _ = add_member(fake, add_church(fake)["id"])

    response = client.post(f"/api/v1/ministries/{ministry['id']}/volunteers", json={"membro_id": outsider["id"]},
                           headers=headers)

    assert response.status_code == 400


def test_schedule_confirmation(client, fake, setup):
    church, ministry, headers, volunteer, volunteer_headers = setup
    other, other_headers = add_member(fake, church["id"])
    schedule = client.post(f"/api/v1/ministries/{ministry['id']}/schedules", json={"data_servico": "2024-06-02"},
                           headers=headers).json()

    slot = client.post(f"/api/v1/ministries/schedules/{schedule['id']}/volunteers",
                       json={"membro_id": volunteer["id"]}, headers=headers).json()
    assert slot["status_confirmacao"] == "Pendente"
    duplicate = client.post(f"/api/v1/ministries/schedules/{schedule['id']}/volunteers",
                            json={"membro_id": volunteer["id"]}, headers=headers)
    assert duplicate.status_code == 409

    url = f"/api/v1/ministries/schedule-volunteers/{slot['id']}"
    assert client.patch(url, json={"status_confirmacao": "Confirmado"}, headers=other_headers).status_code == 403
    confirmed = client.patch(url, json={"status_confirmacao": "Confirmado"}, headers=volunteer_headers)
    assert confirmed.json()["status_confirmacao"] == "Confirmado"

    schedules = client.get(f"/api/v1/ministries/{ministry['id']}/schedules", headers=headers).json()
    assert schedules[0]["voluntarios"][0]["nome_completo"] == "Vitor"


def test_demand_kanban(client, fake, setup):
    _, ministry, headers, volunteer, _ = setup
    demand = client.post(f"/api/v1/ministries/{ministry['id']}/demands", json={
        "titulo": "Ensaiar", "culto_id": "culto-1", "responsavel_id": volunteer["id"],
    }, headers=headers).json()
    assert demand["status"] == "pendente"

    bad = client.patch(f"/api/v1/ministries/demands/{demand['id']}/status", json={"status": "feito"}, headers=headers)
    assert bad.status_code == 400
    moved = client.patch(f"/api/v1/ministries/demands/{demand['id']}/status", json={"status": "em_andamento"},
                         headers=headers)
    assert moved.json()["status"] == "em_andamento"

    filtered = client.get(f"/api/v1/ministries/{ministry['id']}/demands", params={"culto_id": "culto-2"},
                          headers=headers).json()
    assert filtered == []
    listed = client.get(f"/api/v1/ministries/{ministry['id']}/demands", headers=headers).json()
    assert listed[0]["responsavel_nome"] == "Vitor"


def test_delete_ministry_removes_children(client, fake, setup):
    _, ministry, headers, volunteer, _ = setup
    client.post(f"/api/v1/ministries/{ministry['id']}/volunteers", json={"membro_id": volunteer["id"]}, headers=headers)
    schedule = client.post(f"/api/v1/ministries/{ministry['id']}/schedules", json={"data_servico": "2024-06-02"},
                           headers=headers).json()
    client.post(f"/api/v1/ministries/schedules/{schedule['id']}/volunteers", json={"membro_id": volunteer["id"]},
                headers=headers)

    assert client.delete(f"/api/v1/ministries/{ministry['id']}", headers=headers).status_code == 204

    for table in ("ministerios", "ministerio_voluntarios", "escalas_servico", "escala_voluntarios"):
        assert fake.rows(table) == []


def test_ministry_roles(client, fake, setup):
    church, ministry, headers, _, volunteer_headers = setup
    roles_url = f"/api/v1/ministries/{ministry['id']}/roles"

    created = client.post(roles_url, json={"nome": " Projeção ", "descricao": " "}, headers=headers)
    assert created.status_code == 201
    assert created.json()["nome"] == "Projeção"
    assert created.json()["descricao"] is None
    assert created.json()["id_igreja"] == church["id"]
    client.post(roles_url, json={"nome": "Fotógrafo"}, headers=headers)

    assert client.post(roles_url, json={"nome": "projeção"}, headers=headers).status_code == 409
    assert client.post(roles_url, json={"nome": "Som"}, headers=volunteer_headers).status_code == 403
    assert [r["nome"] for r in client.get(roles_url, headers=volunteer_headers).json()] == ["Fotógrafo", "Projeção"]

    assert client.delete(f"/api/v1/ministries/roles/{created.json()['id']}", headers=headers).status_code == 204
    assert client.delete(f"/api/v1/ministries/roles/{created.json()['id']}", headers=headers).status_code == 404
    assert client.delete(f"/api/v1/ministries/{ministry['id']}", headers=headers).status_code == 204
    assert fake.rows("ministerio_funcoes") == []
