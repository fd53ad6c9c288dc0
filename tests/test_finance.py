from connectvida.modules.finance.service import budget_status, summarize
from conftest import add_church, add_member


def test_summarize_only_counts_confirmed():
    rows = [
        {"tipo": "Entrada", "categoria": "Dízimo", "valor": 100, "status": "Confirmado"},
        {"tipo": "Entrada", "categoria": "Oferta", "valor": 50.5, "status": "Confirmado"},
        {"tipo": "Saída", "categoria": "Energia", "valor": 30, "status": "Confirmado"},
        {"tipo": "Entrada", "categoria": "Dízimo", "valor": 999, "status": "Pendente"},
    ]

    summary = summarize(rows)

    assert summary["total_entradas"] == 150.5
    assert summary["total_saidas"] == 30
    assert summary["saldo"] == 120.5
    assert summary["por_categoria"] == {"Dízimo": 100, "Oferta": 50.5, "Energia": 30}


def test_budget_status():
    assert budget_status(100, 50) == "Ativo"
    assert budget_status(100, 100) == "Ativo"
    assert budget_status(100, 101) == "Excedido"
    assert budget_status(100, 500, "Finalizado") == "Finalizado"


def test_transaction_lifecycle(client, fake):
    church = add_church(fake)
    treasurer, headers = add_member(fake, church["id"], funcao="financeiro")

    created = client.post("/api/v1/finance/transactions", json={
        "tipo": "Entrada", "categoria": "Dízimo", "valor": 200, "data_transacao": "2024-05-02",
    }, headers=headers)
    assert created.status_code == 201
    transaction = created.json()
    assert transaction["status"] == "Pendente"
    assert transaction["recibo_emitido"] is False

    assert client.get("/api/v1/finance/summary", headers=headers).json()["saldo"] == 0

    approved = client.post(f"/api/v1/finance/transactions/{transaction['id']}/approve", headers=headers)
    assert approved.status_code == 200
    assert approved.json()["aprovado_por"] == treasurer["id"]

    summary = client.get("/api/v1/finance/summary", headers=headers).json()
    assert summary["total_entradas"] == 200
    assert summary["saldo"] == 200


def test_non_positive_value_is_rejected(client, fake):
    church = add_church(fake)
    _, headers = add_member(fake, church["id"], funcao="financeiro")

    response = client.post("/api/v1/finance/transactions", json={
        "tipo": "Saída", "categoria": "Aluguel", "valor": 0, "data_transacao": "2024-05-02",
    }, headers=headers)

    assert response.status_code == 422


def test_other_church_transaction_is_not_found(client, fake):
    church = add_church(fake)
    other = add_church(fake, nome="Outra")
    row = fake.add("transacoes_financeiras", {"id_igreja": other["id"], "valor": 10, "status": "Pendente"})
    _, headers = add_member(fake, church["id"], funcao="admin")

    response = client.delete(f"/api/v1/finance/transactions/{row['id']}", headers=headers)

    assert response.status_code == 404
    assert fake.row("transacoes_financeiras", row["id"]) is not None


def test_budget_becomes_exceeded_on_update(client, fake):
    church = add_church(fake)
    _, headers = add_member(fake, church["id"], funcao="admin")

    budget = client.post("/api/v1/finance/budgets", json={
        "categoria": "Eventos", "valor_orcado": 1000, "mes_ano": "2024-05",
    }, headers=headers).json()
    assert budget["status"] == "Ativo"

    updated = client.put(f"/api/v1/finance/budgets/{budget['id']}", json={"valor_gasto": 1200}, headers=headers)
    assert updated.json()["status"] == "Excedido"

    listed = client.get("/api/v1/finance/budgets", params={"mes_ano": "2024-05"}, headers=headers).json()
    assert listed[0]["valor_disponivel"] == -200
