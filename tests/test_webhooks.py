import base64
import hashlib
import hmac
import json

import pytest

from connectvida.config import settings
from connectvida.modules.billing.providers import verify_abacatepay_signature
from connectvida.modules.billing.webhooks import map_abacatepay_status
from conftest import add_church


def sign(raw: bytes, secret: str) -> str:
    return base64.b64encode(hmac.new(secret.encode(), raw, hashlib.sha256).digest()).decode()


@pytest.fixture(autouse=True)
def no_secrets(monkeypatch):
    monkeypatch.setattr(settings, "asaas_webhook_token", None)
    monkeypatch.setattr(settings, "abacatepay_webhook_secret", None)


def test_map_abacatepay_status():
    assert map_abacatepay_status({"status": "PAID"}) == "Pago"
    assert map_abacatepay_status({"event_type": "payment_succeeded"}) == "Pago"
    assert map_abacatepay_status({"status": "failed"}) == "Atrasado"
    assert map_abacatepay_status({"status": "canceled"}) == "Cancelado"
    assert map_abacatepay_status({"status": "something"}) == "Pendente"
    assert map_abacatepay_status({}) == "Pendente"


def test_signature_verification():
    raw = b'{"external_reference": "c1"}'

    assert verify_abacatepay_signature(raw, None, None) is True
    assert verify_abacatepay_signature(raw, None, "s3cret") is False
    assert verify_abacatepay_signature(raw, "bogus", "s3cret") is False
    assert verify_abacatepay_signature(raw, sign(raw, "s3cret"), "s3cret") is True


def test_asaas_ignores_other_events(client, fake):
    response = client.post("/api/v1/billing/webhooks/asaas", json={"event": "PAYMENT_CREATED"})

    assert response.status_code == 200
    assert response.json() == {"message": "Evento não processado."}


def test_asaas_requires_external_reference(client, fake):
    response = client.post("/api/v1/billing/webhooks/asaas", json={"event": "PAYMENT_CONFIRMED", "payment": {}})

    assert response.status_code == 400


def test_asaas_confirmed_payment_updates_church(client, fake):
    church = add_church(fake, status="inactive", historico_pagamentos=[
        {"id": "old", "data": "2024-01-10", "valor": 49.9},
    ])

    response = client.post("/api/v1/billing/webhooks/asaas", json={
        "event": "PAYMENT_CONFIRMED",
        "payment": {
            "id": "pay_1", "externalReference": church["id"], "value": 49.9, "billingType": "PIX",
            "paymentDate": "2024-02-10", "subscription": "sub_1",
        },
    })

    assert response.json() == {"success": True}
    row = fake.row("igrejas", church["id"])
    assert row["status"] == "active"
    assert row["ultimo_pagamento_status"] == "Pago"
    assert row["data_proximo_pagamento"] == "2024-03-10"
    assert row["subscription_id_ext"] == "sub_1"
    history = row["historico_pagamentos"]
    assert [h["data"] for h in history] == ["2024-02-10", "2024-01-10"]
    assert history[0]["metodo"] == "ASAAS (PIX)"
    assert history[0]["referencia"] == "pay_1"


def test_asaas_next_due_date_from_payload(client, fake):
    church = add_church(fake)

    client.post("/api/v1/billing/webhooks/asaas", json={
        "event": "PAYMENT_CONFIRMED",
        "payment": {"externalReference": church["id"], "paymentDate": "2024-02-10", "nextDueDate": "2024-03-05"},
    })

    assert fake.row("igrejas", church["id"])["data_proximo_pagamento"] == "2024-03-05"


def test_asaas_unknown_church(client, fake):
    response = client.post("/api/v1/billing/webhooks/asaas", json={
        "event": "PAYMENT_CONFIRMED", "payment": {"externalReference": "missing"},
    })

    assert response.status_code == 400


def test_asaas_token_is_checked(client, fake, monkeypatch):
    monkeypatch.setattr(settings, "asaas_webhook_token", "tok")
    body = {"event": "PAYMENT_CREATED"}

    assert client.post("/api/v1/billing/webhooks/asaas", json=body).status_code == 401
    wrong = client.post("/api/v1/billing/webhooks/asaas", json=body, headers={"asaas-access-token": "nope"})
    assert wrong.json()["detail"] == "invalid_token"
    ok = client.post("/api/v1/billing/webhooks/asaas", json=body, headers={"asaas-access-token": "tok"})
    assert ok.status_code == 200


def test_abacatepay_updates_status_and_logs_event(client, fake):
    church = add_church(fake)
    payload = {"external_reference": church["id"], "status": "paid", "next_billing_date": "2024-07-01"}

    response = client.post("/api/v1/billing/webhooks/abacatepay", json=payload)

    assert response.json() == {"received": True, "status": "Pago"}
    row = fake.row("igrejas", church["id"])
    assert row["ultimo_pagamento_status"] == "Pago"
    assert row["data_proximo_pagamento"] == "2024-07-01"
    logged = fake.rows("eventos_aplicacao")
    assert logged[0]["event_name"] == "abacatepay_webhook"
    assert logged[0]["church_id"] == church["id"]


def test_abacatepay_signature_and_json(client, fake, monkeypatch):
    monkeypatch.setattr(settings, "abacatepay_webhook_secret", "s3cret")
    church = add_church(fake)
    raw = json.dumps({"external_reference": church["id"], "status": "failed"}).encode()
    url = "/api/v1/billing/webhooks/abacatepay"

    unsigned = client.post(url, content=raw)
    assert unsigned.status_code == 401
    assert unsigned.json()["detail"] == "invalid_signature"

    signed = client.post(url, content=raw, headers={"X-Abacatepay-Signature": sign(raw, "s3cret")})
    assert signed.json()["status"] == "Atrasado"

    garbage = b"not json"
    invalid = client.post(url, content=garbage, headers={"X-Abacatepay-Signature": sign(garbage, "s3cret")})
    assert invalid.status_code == 400
    assert invalid.json()["detail"] == "invalid_json"


def test_abacatepay_requires_reference(client, fake):
    response = client.post("/api/v1/billing/webhooks/abacatepay", json={"status": "paid"})

    assert response.status_code == 400


@pytest.mark.parametrize("path", ["asaas", "abacatepay"])
@pytest.mark.parametrize("body", [b"[]", b"\"paid\"", b"null"])
def test_webhook_rejects_non_object_json(client, fake, path, body):
    response = client.post(f"/api/v1/billing/webhooks/{path}", content=body,
                           headers={"Content-Type": "application/json"})

    assert response.status_code == 400
    assert response.json()["detail"] == "invalid_json"
