from connectvida.modules.admin.service import reset_tables
from connectvida.modules.churches.service import CHURCH_CASCADE
from conftest import add_church, add_member, add_super_admin


def test_reset_order_puts_dependents_first():
    tables = reset_tables()

    assert tables[0] == "cursos_inscricoes"
    assert tables[-1] == "igrejas"
    assert tables.index("membros") < tables.index("igrejas")
    assert len(tables) == len(set(tables))
    assert {t for t, _ in CHURCH_CASCADE} <= set(tables)
    assert "planos_assinatura" not in tables
    assert "super_admins" not in tables


def test_reset_system_keeps_plans_and_super_admins(client, fake):
    church = add_church(fake)
    add_member(fake, church["id"])
    fake.add("planos_assinatura", {"nome": "Básico", "preco_mensal": 10})
    fake.add("eventos", {"id_igreja": church["id"], "nome": "Culto"})
    _, headers = add_super_admin(fake)

    response = client.post("/api/v1/admin/reset-system", headers=headers)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is True
    assert body["counts"]["igrejas"] == 1
    assert body["counts"]["membros"] == 1
    assert body["counts"]["eventos"] == 1
    assert fake.rows("igrejas") == []
    assert len(fake.rows("planos_assinatura")) == 1
    assert len(fake.rows("super_admins")) == 1
    deleted = [table for op, table in fake.calls if op == "delete"]
    assert deleted == reset_tables()


def test_reset_system_reports_partial_counts(client, fake):
    add_church(fake)
    fake.fail("membros", "delete")
    _, headers = add_super_admin(fake)

    response = client.post("/api/v1/admin/reset-system", headers=headers)

    assert response.status_code == 500
    body = response.json()
    assert body["error"].startswith("membros:")
    assert "cursos" in body["counts"]
    assert "membros" not in body["counts"]
    assert len(fake.rows("igrejas")) == 1


def test_admin_routes_require_super_admin(client, fake):
    church = add_church(fake)
    _, headers = add_member(fake, church["id"], funcao="admin")

    assert client.post("/api/v1/admin/reset-system", headers=headers).status_code == 403
    assert client.get("/api/v1/admin/overview", headers=headers).status_code == 403


def test_overview(client, fake):
    active = add_church(fake)
    add_church(fake, status="inactive")
    add_member(fake, active["id"])
    add_member(fake, active["id"])
    fake.add("plan_change_requests", {"church_id": active["id"], "status": "pending"})
    fake.add("plan_change_requests", {"church_id": active["id"], "status": "approved"})
    _, headers = add_super_admin(fake)

    overview = client.get("/api/v1/admin/overview", headers=headers).json()

    assert overview == {
        "churches": 2,
        "churches_by_status": {"active": 1, "inactive": 1},
        "members": 2,
        "pending_plan_requests": 1,
    }
