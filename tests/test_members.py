from datetime import date

from connectvida.modules.members.service import MEMBER_CLEANUP
from conftest import add_church, add_member, add_super_admin


def test_directory_requires_role(client, fake):
    church = add_church(fake)
    _, headers = add_member(fake, church["id"], funcao="voluntario")

    assert client.get("/api/v1/members", headers=headers).status_code == 403


def test_directory_search_and_birthdays(client, fake):
    church = add_church(fake)
    _, headers = add_member(fake, church["id"], funcao="integra", email="ze@example.com")
    ana, _ = add_member(fake, church["id"], email="ana@example.com")
    bruno, _ = add_member(fake, church["id"], email="bruno@example.com")
    this_month = date.today().replace(day=1)
    fake.add("informacoes_pessoais", {"membro_id": ana["id"], "data_nascimento": f"1990-{this_month:%m}-01",
                                      "telefone": "11999990000"})
    other_month = 1 if this_month.month != 1 else 2
    fake.add("informacoes_pessoais", {"membro_id": bruno["id"], "data_nascimento": f"1985-{other_month:02d}-10"})

    found = client.get("/api/v1/members", params={"search": "9999"}, headers=headers).json()
    assert [m["id"] for m in found] == [ana["id"]]
    assert found[0]["informacoes_pessoais"]["telefone"] == "11999990000"

    birthdays = client.get("/api/v1/members", params={"birthday_month": True}, headers=headers).json()
    assert [m["id"] for m in birthdays] == [ana["id"]]


def test_update_member_validates_role_and_permissions(client, fake):
    church = add_church(fake)
    _, headers = add_member(fake, church["id"], funcao="pastor")
    member, _ = add_member(fake, church["id"])
    url = f"/api/v1/members/{member['id']}"

    assert client.put(url, json={"funcao": "rei"}, headers=headers).status_code == 400
    assert client.put(url, json={"extra_permissoes": ["voar"]}, headers=headers).status_code == 400

    response = client.put(url, json={"funcao": "lider_ministerio", "extra_permissoes": ["kids-management"]},
                          headers=headers)
    assert response.status_code == 200
    assert fake.row("membros", member["id"])["funcao"] == "lider_ministerio"


def test_personal_info_marks_profile_complete(client, fake):
    church = add_church(fake)
    member, headers = add_member(fake, church["id"])

    first = client.put("/api/v1/members/me/personal-info", json={"telefone": "1"}, headers=headers)
    second = client.put("/api/v1/members/me/personal-info", json={"profissao": "Professor"}, headers=headers)

    assert first.status_code == second.status_code == 200
    rows = fake.rows("informacoes_pessoais")
    assert len(rows) == 1
    assert rows[0]["telefone"] == "1"
    assert rows[0]["profissao"] == "Professor"
    assert fake.row("membros", member["id"])["perfil_completo"] is True


def test_member_details(client, fake):
    church = add_church(fake)
    _, headers = add_member(fake, church["id"], funcao="admin")
    member, _ = add_member(fake, church["id"])
    spouse, _ = add_member(fake, church["id"], nome_completo="Carla")
    fake.add("informacoes_pessoais", {"membro_id": member["id"], "conjuge_id": spouse["id"]})
    school = fake.add("escolas", {"id_igreja": church["id"], "nome": "Discipulado"})
    fake.add("escola_inscricoes", {"escola_id": school["id"], "membro_id": member["id"]})
    fake.add("criancas", {"id_igreja": church["id"], "nome_crianca": "Davi", "responsavel_id": spouse["id"]})

    response = client.get(f"/api/v1/members/{member['id']}/details", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["personal"]["conjuge_nome"] == "Carla"
    assert body["enrollments"] == [{"escolas": {"nome": "Discipulado"}}]
    assert [k["nome_crianca"] for k in body["kids"]] == ["Davi"]
    assert body["journey"] is None


def test_details_forbidden_for_other_church(client, fake):
    church = add_church(fake)
    other = add_church(fake)
    _, headers = add_member(fake, other["id"], funcao="admin")
    member, _ = add_member(fake, church["id"])

    assert client.get(f"/api/v1/members/{member['id']}/details", headers=headers).status_code == 403


def test_mother_admin_sees_child_member_details(client, fake):
    mother = add_church(fake)
    child = add_church(fake, parent_church_id=mother["id"])
    _, headers = add_member(fake, mother["id"], funcao="pastor")
    member, _ = add_member(fake, child["id"])

    assert client.get(f"/api/v1/members/{member['id']}/details", headers=headers).status_code == 200


def test_delete_user_cleans_rows(client, fake):
    church = add_church(fake)
    _, headers = add_member(fake, church["id"], funcao="admin")
    member, _ = add_member(fake, church["id"], nome_completo="Saindo")
    fake.add("informacoes_pessoais", {"membro_id": member["id"]})
    fake.add("transacoes_financeiras", {"id_igreja": church["id"], "membro_id": member["id"], "membro_nome": "Saindo"})
    fake.fail("pastor_area_items", "delete")

    response = client.delete(f"/api/v1/members/{member['id']}", headers=headers)

    assert response.status_code == 200
    assert response.json() == {"success": True}
    assert fake.row("membros", member["id"]) is None
    assert fake.rows("informacoes_pessoais") == []
    assert fake.rows("transacoes_financeiras")[0]["membro_id"] is None
    assert member["id"] not in fake.auth.users
    cleaned = [table for op, table in fake.calls if op == "delete"]
    assert cleaned[:len(MEMBER_CLEANUP)] == [table for table, _ in MEMBER_CLEANUP]


def test_cannot_delete_self(client, fake):
    church = add_church(fake)
    me, headers = add_member(fake, church["id"], funcao="admin")

    assert client.delete(f"/api/v1/members/{me['id']}", headers=headers).status_code == 400


def test_admin_cannot_delete_super_admin_member(client, fake):
    church = add_church(fake)
    _, headers = add_member(fake, church["id"], funcao="admin")
    target, _ = add_member(fake, church["id"])
    fake.add("super_admins", {"id": target["id"]})

    assert client.delete(f"/api/v1/members/{target['id']}", headers=headers).status_code == 403


def test_super_admin_deletes_any_member(client, fake):
    church = add_church(fake)
    _, headers = add_super_admin(fake)
    target, _ = add_member(fake, church["id"])

    assert client.delete(f"/api/v1/members/{target['id']}", headers=headers).status_code == 200
