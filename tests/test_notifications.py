import json

import httpx
import pytest

from connectvida.main import app
from connectvida.modules.notifications.providers import ResendClient, get_resend_client
from conftest import add_church, add_member, add_super_admin


def test_inbox_merges_own_and_church_broadcasts(client, fake):
    church = add_church(fake)
    other = add_church(fake)
    member, headers = add_member(fake, church["id"])
    someone, _ = add_member(fake, church["id"])
    fake.add("notificacoes", {"id_igreja": church["id"], "user_id": member["id"], "titulo": "Para você"})
    fake.add("notificacoes", {"id_igreja": church["id"], "user_id": someone["id"], "titulo": "Outro membro"})
    fake.add("notificacoes", {"id_igreja": other["id"], "titulo": "Outra igreja"})
    fake.add("notificacoes", {"id_igreja": church["id"], "titulo": "Aviso geral"})

    titles = [n["titulo"] for n in client.get("/api/v1/notifications", headers=headers).json()]

    assert titles == ["Aviso geral", "Para você"]


def test_mark_read(client, fake):
    church = add_church(fake)
    member, headers = add_member(fake, church["id"])
    someone, _ = add_member(fake, church["id"])
    mine = fake.add("notificacoes", {"id_igreja": church["id"], "user_id": member["id"], "lida": False})
    broadcast = fake.add("notificacoes", {"id_igreja": church["id"], "lida": False})
    foreign = fake.add("notificacoes", {"id_igreja": church["id"], "user_id": someone["id"], "lida": False})

    assert client.post(f"/api/v1/notifications/{mine['id']}/read", headers=headers).json()["lida"] is True
    assert client.post(f"/api/v1/notifications/{foreign['id']}/read", headers=headers).status_code == 404
    assert client.post("/api/v1/notifications/read-all", headers=headers).json() == {"updated": 1}
    assert fake.row("notificacoes", broadcast["id"])["lida"] is True
    assert fake.row("notificacoes", foreign["id"])["lida"] is False
    assert client.post("/api/v1/notifications/read-all", headers=headers).json() == {"updated": 0}


def test_create_requires_notification_permission(client, fake):
    church = add_church(fake)
    _, member_headers = add_member(fake, church["id"])
    _, pastor_headers = add_member(fake, church["id"], funcao="pastor")
    body = {"titulo": "Culto", "descricao": "Domingo às 19h"}

    assert client.post("/api/v1/notifications", json=body, headers=member_headers).status_code == 403
    created = client.post("/api/v1/notifications", json=body, headers=pastor_headers)
    assert created.status_code == 201
    assert created.json()["id_igreja"] == church["id"]
    assert created.json()["user_id"] is None
    assert created.json()["lida"] is False


def test_billing_notification_reaches_church_admins(client, fake):
    first = add_church(fake)
    second = add_church(fake)
    admin, _ = add_member(fake, first["id"], funcao="admin")
    add_member(fake, second["id"], funcao="pastor")
    add_member(fake, first["id"])
    _, root_headers = add_super_admin(fake)
    body = {"template": "BILLING", "titulo": "Fatura", "descricao": "Sua fatura venceu"}

    assert client.post("/api/v1/notifications/billing", json=body, headers=root_headers).json() == {"sent": 2}

    targeted = client.post("/api/v1/notifications/billing", json={**body, "admin_ids": [admin["id"]]},
                           headers=root_headers)
    assert targeted.json() == {"sent": 1}
    rows = fake.rows("notificacoes")
    assert {r["tipo"] for r in rows} == {"BILLING"}
    assert rows[-1]["user_id"] == admin["id"]
    assert rows[-1]["id_igreja"] == first["id"]


def test_billing_notification_validation(client, fake):
    _, root_headers = add_super_admin(fake)
    url = "/api/v1/notifications/billing"

    blank = client.post(url, json={"template": "BILLING", "titulo": " ", "descricao": "x"}, headers=root_headers)
    assert blank.status_code == 400
    nobody = client.post(url, json={"template": "PAYMENT_UPDATE", "titulo": "t", "descricao": "d"},
                         headers=root_headers)
    assert nobody.status_code == 400
    assert client.post(url, json={"template": "OTHER", "titulo": "t", "descricao": "d"},
                       headers=root_headers).status_code == 422


def test_templates_include_system_ones(client, fake):
    church = add_church(fake)
    _, headers = add_member(fake, church["id"], funcao="admin")
    fake.add("notification_templates", {"id_igreja": None, "tipo": "GERAL", "titulo": "Sistema", "descricao": "d"})

    client.post("/api/v1/notifications/templates", json={"tipo": "GERAL", "titulo": "Nosso", "descricao": "d"},
                headers=headers)

    titles = [t["titulo"] for t in client.get("/api/v1/notifications/templates", headers=headers).json()]
    assert titles == ["Sistema", "Nosso"]


@pytest.fixture
def resend():
    sent = []

    def install(status=200, answer=None, token="re_key"):
        def handler(request: httpx.Request) -> httpx.Response:
            sent.append((request, json.loads(request.content)))
            return httpx.Response(status, json=answer if answer is not None else {"id": "email_1"})

        transport = httpx.MockTransport(handler)
        app.dependency_overrides[get_resend_client] = lambda: ResendClient(
            "https://resend.test", token, "Connect Vida <noreply@connectvida.test>", transport=transport
        )
        return sent

    return install


def test_send_email(client, fake, resend):
    church = add_church(fake)
    _, headers = add_member(fake, church["id"], funcao="admin")
    sent = resend()

    response = client.post("/api/v1/notifications/email", json={
        "to": "ana@example.com", "subject": "Bem-vinda", "htmlContent": "<p>Olá</p>",
    }, headers=headers)

    assert response.json() == {"id": "email_1"}
    request, body = sent[0]
    assert request.url.path == "/emails"
    assert request.headers["Authorization"] == "Bearer re_key"
    assert body == {"from": "Connect Vida <noreply@connectvida.test>", "to": ["ana@example.com"],
                    "subject": "Bem-vinda", "html": "<p>Olá</p>"}


def test_send_email_errors(client, fake, resend):
    church = add_church(fake)
    _, headers = add_member(fake, church["id"], funcao="admin")
    _, member_headers = add_member(fake, church["id"])
    email = {"to": "ana@example.com", "subject": "Oi", "htmlContent": "<p>Oi</p>"}
    url = "/api/v1/notifications/email"

    resend()
    assert client.post(url, json={"to": "ana@example.com"}, headers=headers).status_code == 400
    assert client.post(url, json=email, headers=member_headers).status_code == 403

    resend(status=403, answer={"message": "domain not verified"})
    failed = client.post(url, json=email, headers=headers)
    assert failed.status_code == 502
    assert failed.json()["detail"]["error"] == "resend_error"

    resend(token=None)
    assert client.post(url, json=email, headers=headers).status_code == 500
