import json

import httpx
import pytest

from connectvida.main import app
from connectvida.modules.whatsapp.gateway import WhatsAppGateway, get_whatsapp_gateway, session_id_for
from conftest import add_church, add_member


@pytest.fixture
def gateway():
    calls = []

    def install(handler):
        def record(request: httpx.Request) -> httpx.Response:
            calls.append((request.url.path, json.loads(request.content) if request.content else None))
            return handler(request)

        transport = httpx.MockTransport(record)
        app.dependency_overrides[get_whatsapp_gateway] = lambda: WhatsAppGateway(
            "https://wa.test", None, 5, transport=transport
        )
        return calls

    return install


@pytest.fixture
def church_admin(fake):
    church = add_church(fake)
    _, headers = add_member(fake, church["id"], funcao="admin")
    return church, headers


def test_start_session_stores_qr(client, fake, gateway, church_admin):
    church, headers = church_admin
    calls = gateway(lambda request: httpx.Response(200, json={"qr": "QR-DATA"}))

    started = client.post("/api/v1/whatsapp/session", headers=headers).json()["session"]
    client.post("/api/v1/whatsapp/session", headers=headers)

    assert started["status"] == "awaiting_qr"
    assert started["qr_code"] == "QR-DATA"
    assert calls[0] == ("/sessions/start", {"sessionId": session_id_for(church["id"])})
    assert len(fake.rows("whatsapp_sessions")) == 1
    current = client.get("/api/v1/whatsapp/session", headers=headers).json()["session"]
    assert current["church_id"] == church["id"]


def test_start_session_without_qr_is_bad_gateway(client, fake, gateway, church_admin):
    _, headers = church_admin
    gateway(lambda request: httpx.Response(200, json={}))

    assert client.post("/api/v1/whatsapp/session", headers=headers).status_code == 502


def test_member_cannot_send(client, fake, gateway, church_admin):
    church, _ = church_admin
    _, member_headers = add_member(fake, church["id"])
    gateway(lambda request: httpx.Response(200, json={}))

    response = client.post("/api/v1/whatsapp/messages", json={"to_number": "11999990000", "body": "Oi"},
                           headers=member_headers)

    assert response.status_code == 403


def test_enqueue_normalizes_number(client, fake, gateway, church_admin):
    _, headers = church_admin
    gateway(lambda request: httpx.Response(200, json={}))

    queued = client.post("/api/v1/whatsapp/messages", json={"to_number": "+55 (11) 99999-0000", "body": "Oi"},
                         headers=headers)
    invalid = client.post("/api/v1/whatsapp/messages", json={"to_number": "abc", "body": "Oi"}, headers=headers)

    assert queued.status_code == 201
    assert queued.json()["to_number"] == "5511999990000"
    assert queued.json()["status"] == "pending"
    assert invalid.status_code == 400


def test_process_pending_marks_sent_and_failed(client, fake, gateway, church_admin):
    church, headers = church_admin
    other = add_church(fake)
    ok = fake.add("whatsapp_messages", {"church_id": church["id"], "to_number": "111", "body": "a",
                                        "status": "pending"})
    bad = fake.add("whatsapp_messages", {"church_id": church["id"], "to_number": "222", "body": "b",
                                         "status": "pending"})
    done = fake.add("whatsapp_messages", {"church_id": church["id"], "to_number": "333", "body": "c",
                                          "status": "sent"})
    foreign = fake.add("whatsapp_messages", {"church_id": other["id"], "to_number": "444", "body": "d",
                                             "status": "pending"})

    def handler(request):
        if json.loads(request.content)["to"] == "222":
            return httpx.Response(500, json={"message": "session closed"})
        return httpx.Response(200, json={"ok": True})

    calls = gateway(handler)

    response = client.post("/api/v1/whatsapp/process", headers=headers)

    assert response.json() == {"processed": 1, "failed": 1}
    assert [body["to"] for _, body in calls] == ["111", "222"]
    assert fake.row("whatsapp_messages", ok["id"])["status"] == "sent"
    assert fake.row("whatsapp_messages", ok["id"])["sent_at"]
    assert fake.row("whatsapp_messages", bad["id"])["status"] == "failed"
    assert fake.row("whatsapp_messages", bad["id"])["error"] == "session closed"
    assert fake.row("whatsapp_messages", done["id"])["status"] == "sent"
    assert fake.row("whatsapp_messages", foreign["id"])["status"] == "pending"


def test_process_respects_batch_size(client, fake, gateway, church_admin, monkeypatch):
    from connectvida.config import settings

    church, headers = church_admin
    monkeypatch.setattr(settings, "whatsapp_batch_size", 2)
    for number in ("1", "2", "3"):
        fake.add("whatsapp_messages", {"church_id": church["id"], "to_number": number, "body": "x",
                                       "status": "pending"})
    gateway(lambda request: httpx.Response(200, json={}))

    assert client.post("/api/v1/whatsapp/process", headers=headers).json() == {"processed": 2, "failed": 0}
    assert [m["status"] for m in fake.rows("whatsapp_messages")] == ["sent", "sent", "pending"]


def test_templates(client, fake, gateway, church_admin):
    _, headers = church_admin
    other_template = fake.add("whatsapp_templates", {"church_id": add_church(fake)["id"], "nome": "X",
                                                     "conteudo": "y"})
    gateway(lambda request: httpx.Response(200, json={}))

    for nome in ("Lembrete", "Boas-vindas"):
        client.post("/api/v1/whatsapp/templates", json={"nome": nome, "conteudo": "Olá {nome}"}, headers=headers)

    listed = client.get("/api/v1/whatsapp/templates", headers=headers).json()
    assert [t["nome"] for t in listed] == ["Boas-vindas", "Lembrete"]
    assert client.delete(f"/api/v1/whatsapp/templates/{other_template['id']}", headers=headers).status_code == 404
    assert client.delete(f"/api/v1/whatsapp/templates/{listed[0]['id']}", headers=headers).status_code == 204
