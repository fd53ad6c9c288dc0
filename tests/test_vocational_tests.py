from fastapi import HTTPException
import pytest

from connectvida.modules.vocational_tests.service import MINISTRIES, QUESTIONS, rank_ministries, score_answers
from conftest import add_church, add_member


def answers_for(favorite: str, high: int = 5, low: int = 1) -> dict:
    return {str(q["id"]): high if q["ministerio"] == favorite else low for q in QUESTIONS}


def test_questions_cover_each_ministry_five_times():
    assert [q["id"] for q in QUESTIONS] == list(range(1, 41))
    assert QUESTIONS[0]["ministerio"] == "midia"
    assert QUESTIONS[39]["ministerio"] == "acao_social"
    assert all(sum(1 for q in QUESTIONS if q["ministerio"] == key) == 5 for key in MINISTRIES)


def test_score_answers_sums_per_ministry():
    scores = score_answers({6: 5, 7: 4, 26: 3})

    assert scores["louvor"] == 9
    assert scores["kids"] == 3
    assert scores["midia"] == 0


@pytest.mark.parametrize("answers", [{41: 3}, {0: 3}, {1: 6}, {1: -1}])
def test_score_answers_rejects_out_of_range(answers):
    with pytest.raises(HTTPException) as exc:
        score_answers(answers)
    assert exc.value.status_code == 400


def test_ranking_breaks_ties_by_ministry_order():
    ranking = rank_ministries({"kids": 20, "louvor": 20, "midia": 5})

    assert [r["ministerio"] for r in ranking[:3]] == ["louvor", "kids", "midia"]
    assert ranking[0]["percentual"] == 80
    assert ranking[0]["nome"] == "Louvor e Adoração"


def test_submit_keeps_only_latest(client, fake):
    church = add_church(fake)
    member, headers = add_member(fake, church["id"])
    _, pastor_headers = add_member(fake, church["id"], funcao="pastor")

    first = client.post("/api/v1/vocational-tests", json={"respostas": answers_for("kids")}, headers=headers)
    assert first.status_code == 201
    assert first.json()["ministerio_recomendado"] == "Kids"
    assert first.json()["soma_kids"] == 25
    assert first.json()["q26"] == 5
    second = client.post("/api/v1/vocational-tests", json={"respostas": answers_for("ensino")}, headers=headers)

    rows = fake.rows("testes_vocacionais")
    assert [r["is_ultimo"] for r in rows] == [False, True]
    assert rows[1]["soma_integra"] == 5
    assert rows[1]["id_igreja"] == church["id"]

    latest = client.get("/api/v1/vocational-tests/me", headers=headers).json()
    assert latest["id"] == second.json()["id"]
    assert latest["resultados"][0]["ministerio"] == "ensino"
    assert latest["resultados"][0]["percentual"] == 100

    history = client.get("/api/v1/vocational-tests/me/history", headers=headers).json()
    assert [h["ministerio_recomendado"] for h in history] == ["Ensino e Discipulado", "Kids"]

    details = client.get(f"/api/v1/members/{member['id']}/details", headers=pastor_headers).json()
    assert details["vocationalTest"]["ministerio_recomendado"] == "Ensino e Discipulado"


def test_no_test_taken(client, fake):
    church = add_church(fake)
    _, headers = add_member(fake, church["id"])

    assert client.get("/api/v1/vocational-tests/me", headers=headers).json() is None
    assert client.post("/api/v1/vocational-tests", json={"respostas": {}}, headers=headers).status_code == 422


def test_questions_endpoint(client, fake):
    response = client.get("/api/v1/vocational-tests/questions")

    assert len(response.json()["perguntas"]) == 40
    assert len(response.json()["ministerios"]) == 8


def test_church_results_for_member_managers(client, fake):
    church = add_church(fake)
    other = add_church(fake)
    _, admin_headers = add_member(fake, church["id"], funcao="admin")
    _, ana_headers = add_member(fake, church["id"], nome_completo="Ana")
    _, bia_headers = add_member(fake, church["id"], nome_completo="Bia")
    _, outsider_headers = add_member(fake, other["id"])
    client.post("/api/v1/vocational-tests", json={"respostas": answers_for("midia")}, headers=bia_headers)
    client.post("/api/v1/vocational-tests", json={"respostas": answers_for("kids")}, headers=ana_headers)
    client.post("/api/v1/vocational-tests", json={"respostas": answers_for("louvor")}, headers=ana_headers)
    client.post("/api/v1/vocational-tests", json={"respostas": answers_for("kids")}, headers=outsider_headers)

    assert client.get("/api/v1/vocational-tests", headers=ana_headers).status_code == 403
    results = client.get("/api/v1/vocational-tests", headers=admin_headers).json()

    assert [(r["membro_nome"], r["ministerio_recomendado"]) for r in results] == [
        ("Ana", "Louvor e Adoração"), ("Bia", "Mídia e Tecnologia"),
    ]
