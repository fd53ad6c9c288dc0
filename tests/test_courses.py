import pytest

from conftest import add_church, add_member


@pytest.fixture
def course_setup(client, fake):
    church = add_church(fake)
    _, admin_headers = add_member(fake, church["id"], funcao="admin")
    professor, professor_headers = add_member(fake, church["id"], funcao="lider_ministerio", nome_completo="Paulo")
    course = client.post("/api/v1/courses", json={"nome": "Fundamentos", "professor_id": professor["id"]},
                         headers=admin_headers).json()
    return church, course, admin_headers, professor_headers


def test_new_course_is_a_draft_with_defaults(client, fake, course_setup):
    church, course, _, _ = course_setup

    assert course["status"] == "Rascunho"
    assert course["tipo"] == "Online"
    assert course["nota_minima_aprovacao"] == 70
    assert course["certificado_disponivel"] is True
    assert course["id_igreja"] == church["id"]


def test_creator_teaches_when_no_professor_given(client, fake):
    church = add_church(fake)
    admin, headers = add_member(fake, church["id"], funcao="pastor")

    course = client.post("/api/v1/courses", json={"nome": "Liderança"}, headers=headers).json()

    assert course["professor_id"] == admin["id"]


def test_drafts_hidden_from_members(client, fake, course_setup):
    church, course, admin_headers, professor_headers = course_setup
    _, member_headers = add_member(fake, church["id"])

    assert client.get("/api/v1/courses", headers=member_headers).json() == []
    assert client.get(f"/api/v1/courses/{course['id']}", headers=member_headers).status_code == 404
    assert len(client.get("/api/v1/courses", headers=professor_headers).json()) == 1

    client.put(f"/api/v1/courses/{course['id']}", json={"status": "Ativo"}, headers=admin_headers)

    listed = client.get("/api/v1/courses", headers=member_headers).json()
    assert [c["nome"] for c in listed] == ["Fundamentos"]
    assert listed[0]["professor"]["nome"] == "Paulo"


def test_only_church_admins_manage_courses(client, fake, course_setup):
    _, course, _, professor_headers = course_setup

    assert client.post("/api/v1/courses", json={"nome": "X"}, headers=professor_headers).status_code == 403
    assert client.put(f"/api/v1/courses/{course['id']}", json={"status": "Ativo"},
                      headers=professor_headers).status_code == 403
    assert client.delete(f"/api/v1/courses/{course['id']}", headers=professor_headers).status_code == 403


def test_professor_builds_content_in_order(client, fake, course_setup):
    church, course, _, professor_headers = course_setup
    _, member_headers = add_member(fake, church["id"])
    modules_url = f"/api/v1/courses/{course['id']}/modules"

    first = client.post(modules_url, json={"titulo": "Introdução"}, headers=professor_headers).json()
    second = client.post(modules_url, json={"titulo": "Prática"}, headers=professor_headers).json()
    assert (first["ordem"], second["ordem"]) == (1, 2)
    assert client.post(modules_url, json={"titulo": "X"}, headers=member_headers).status_code == 403

    lessons_url = f"/api/v1/courses/modules/{first['id']}/lessons"
    client.post(lessons_url, json={"titulo": "Boas-vindas", "tipo": "Texto"}, headers=professor_headers)
    video = client.post(lessons_url, json={"titulo": "Aula 1", "conteudo": "https://youtu.be/x"},
                        headers=professor_headers).json()
    assert video["tipo"] == "Video"
    assert video["ordem"] == 2
    invalid = client.post(lessons_url, json={"titulo": "Z", "tipo": "Slides"}, headers=professor_headers)
    assert invalid.status_code == 422

    detail = client.get(f"/api/v1/courses/{course['id']}", headers=professor_headers).json()
    assert [m["titulo"] for m in detail["modulos"]] == ["Introdução", "Prática"]
    assert [a["titulo"] for a in detail["modulos"][0]["aulas"]] == ["Boas-vindas", "Aula 1"]

    assert client.delete(f"/api/v1/courses/lessons/{video['id']}", headers=professor_headers).status_code == 204
    assert client.delete(f"/api/v1/courses/modules/{first['id']}", headers=professor_headers).status_code == 204
    assert fake.rows("cursos_aulas") == []


def test_enrollment(client, fake, course_setup):
    church, course, admin_headers, professor_headers = course_setup
    student, student_headers = add_member(fake, church["id"], nome_completo="Bia")
    url = f"/api/v1/courses/{course['id']}/enroll"

    assert client.post(url, headers=student_headers).status_code == 400
    client.put(f"/api/v1/courses/{course['id']}", json={"status": "Ativo"}, headers=admin_headers)
    enrolled = client.post(url, headers=student_headers)
    assert enrolled.status_code == 201
    assert enrolled.json()["progresso"] == 0
    assert client.post(url, headers=student_headers).status_code == 409

    mine = client.get("/api/v1/courses/enrollments/me", headers=student_headers).json()
    assert mine[0]["curso"]["nome"] == "Fundamentos"
    listed = client.get("/api/v1/courses", headers=student_headers).json()
    assert (listed[0]["inscrito"], listed[0]["alunos_count"]) == (True, 1)

    students = client.get(f"/api/v1/courses/{course['id']}/students", headers=professor_headers).json()
    assert [s["membro"]["nome_completo"] for s in students] == ["Bia"]
    assert client.get(f"/api/v1/courses/{course['id']}/students", headers=student_headers).status_code == 403
    assert student["id"] == students[0]["id_membro"]


def test_delete_course_cascades(client, fake, course_setup):
    church, course, admin_headers, _ = course_setup
    _, student_headers = add_member(fake, church["id"])
    module = client.post(f"/api/v1/courses/{course['id']}/modules", json={"titulo": "M"}, headers=admin_headers).json()
    client.post(f"/api/v1/courses/modules/{module['id']}/lessons", json={"titulo": "A"}, headers=admin_headers)
    client.put(f"/api/v1/courses/{course['id']}", json={"status": "Ativo"}, headers=admin_headers)
    client.post(f"/api/v1/courses/{course['id']}/enroll", headers=student_headers)

    assert client.delete(f"/api/v1/courses/{course['id']}", headers=admin_headers).status_code == 204

    for table in ("cursos", "cursos_modulos", "cursos_aulas", "cursos_inscricoes"):
        assert fake.rows(table) == []


def test_course_of_other_church_is_not_found(client, fake, course_setup):
    _, course, _, _ = course_setup
    other = add_church(fake)
    _, other_headers = add_member(fake, other["id"], funcao="admin")

    assert client.get(f"/api/v1/courses/{course['id']}", headers=other_headers).status_code == 404
    assert client.post(f"/api/v1/courses/{course['id']}/modules", json={"titulo": "M"},
                       headers=other_headers).status_code == 404
