import pytest

from conftest import add_church, add_member


@pytest.fixture
def group_setup(client, fake):
    church = add_church(fake)
    _, admin_headers = add_member(fake, church["id"], funcao="pastor")
    group = client.post("/api/v1/growth-groups", json={
        "nome": " GC Centro ", "meeting_day": "Quarta", "meeting_time": "20:00", "meeting_location": "Casa da Ana",
    }, headers=admin_headers).json()
    return church, group, admin_headers


def test_create_and_list_groups(client, fake, group_setup):
    church, group, admin_headers = group_setup
    leader, _ = add_member(fake, church["id"], funcao="gc_lider", nome_completo="Ana")
    _, member_headers = add_member(fake, church["id"])

    assert group["nome"] == "GC Centro"
    assert group["id_igreja"] == church["id"]
    client.post(f"/api/v1/growth-groups/{group['id']}/leaders", json={"membro_id": leader["id"]},
                headers=admin_headers)

    listed = client.get("/api/v1/growth-groups", headers=member_headers).json()
    assert [(g["nome"], g["lideres"], g["members_count"]) for g in listed] == [("GC Centro", ["Ana"], 0)]


def test_only_church_admins_manage_groups(client, fake, group_setup):
    church, group, admin_headers = group_setup
    _, member_headers = add_member(fake, church["id"], funcao="gc_lider")

    assert client.post("/api/v1/growth-groups", json={"nome": "X"}, headers=member_headers).status_code == 403
    assert client.put(f"/api/v1/growth-groups/{group['id']}", json={"nome": "Y"},
                      headers=member_headers).status_code == 403
    assert client.post("/api/v1/growth-groups", json={"nome": "GC", "meeting_day": "Feriado"},
                       headers=admin_headers).status_code == 422


def test_update_group(client, fake, group_setup):
    _, group, admin_headers = group_setup
    url = f"/api/v1/growth-groups/{group['id']}"

    updated = client.put(url, json={"meeting_day": "Sexta"}, headers=admin_headers)

    assert updated.status_code == 200
    assert updated.json()["meeting_day"] == "Sexta"
    assert updated.json()["nome"] == "GC Centro"
    assert client.put(url, json={}, headers=admin_headers).status_code == 400


def test_group_from_other_church_is_not_found(client, fake, group_setup):
    _, group, _ = group_setup
    other = add_church(fake)
    _, other_headers = add_member(fake, other["id"], funcao="admin")

    assert client.get(f"/api/v1/growth-groups/{group['id']}/members", headers=other_headers).status_code == 404
    assert client.delete(f"/api/v1/growth-groups/{group['id']}", headers=other_headers).status_code == 404


def test_leader_manages_members_of_own_group(client, fake, group_setup):
    church, group, admin_headers = group_setup
    leader, leader_headers = add_member(fake, church["id"], funcao="gc_lider")
    member, _ = add_member(fake, church["id"], nome_completo="Bruno")
    _, bystander_headers = add_member(fake, church["id"])
    outsider, _ = add_member(fake, add_church(fake)["id"])
    members_url = f"/api/v1/growth-groups/{group['id']}/members"

    assert client.post(members_url, json={"membro_id": member["id"]}, headers=leader_headers).status_code == 403
    client.post(f"/api/v1/growth-groups/{group['id']}/leaders", json={"membro_id": leader["id"]},
                headers=admin_headers)

    assert client.post(members_url, json={"membro_id": member["id"]}, headers=leader_headers).status_code == 201
    assert client.post(members_url, json={"membro_id": member["id"]}, headers=leader_headers).status_code == 409
    assert client.post(members_url, json={"membro_id": outsider["id"]}, headers=leader_headers).status_code == 400
    assert client.post(members_url, json={"membro_id": member["id"]}, headers=bystander_headers).status_code == 403
    assert [m["nome_completo"] for m in client.get(members_url, headers=bystander_headers).json()] == ["Bruno"]

    assert client.delete(f"{members_url}/{member['id']}", headers=leader_headers).status_code == 204
    assert client.delete(f"{members_url}/{member['id']}", headers=leader_headers).status_code == 404
    assert fake.rows("gc_group_members") == []


def test_remove_leader(client, fake, group_setup):
    church, group, admin_headers = group_setup
    leader, _ = add_member(fake, church["id"], funcao="gc_lider")
    leaders_url = f"/api/v1/growth-groups/{group['id']}/leaders"
    client.post(leaders_url, json={"membro_id": leader["id"]}, headers=admin_headers)

    assert client.delete(f"{leaders_url}/{leader['id']}", headers=admin_headers).status_code == 204
    assert client.get(leaders_url, headers=admin_headers).json() == []


def test_my_groups_prefers_leader_role(client, fake, group_setup):
    church, group, admin_headers = group_setup
    other_group = client.post("/api/v1/growth-groups", json={"nome": "GC Norte"}, headers=admin_headers).json()
    client.post("/api/v1/growth-groups", json={"nome": "GC Sul"}, headers=admin_headers)
    person, headers = add_member(fake, church["id"])
    for target, kind in ((group, "members"), (group, "leaders"), (other_group, "members")):
        client.post(f"/api/v1/growth-groups/{target['id']}/{kind}", json={"membro_id": person["id"]},
                    headers=admin_headers)

    mine = client.get("/api/v1/growth-groups/mine", headers=headers).json()

    assert [(g["nome"], g["papel"]) for g in mine] == [("GC Centro", "lider"), ("GC Norte", "membro")]
    assert mine[0]["meeting_location"] == "Casa da Ana"


def test_my_groups_empty(client, fake):
    church = add_church(fake)
    _, headers = add_member(fake, church["id"])

    assert client.get("/api/v1/growth-groups/mine", headers=headers).json() == []


def test_delete_group_removes_links(client, fake, group_setup):
    church, group, admin_headers = group_setup
    person, _ = add_member(fake, church["id"])
    for kind in ("members", "leaders"):
        client.post(f"/api/v1/growth-groups/{group['id']}/{kind}", json={"membro_id": person["id"]},
                    headers=admin_headers)

    assert client.delete(f"/api/v1/growth-groups/{group['id']}", headers=admin_headers).status_code == 204

    for table in ("gc_groups", "gc_group_members", "gc_group_leaders"):
        assert fake.rows(table) == []
