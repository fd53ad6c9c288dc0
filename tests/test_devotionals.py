from connectvida.modules.devotionals.service import reading_time
from conftest import add_church, add_member


def test_reading_time():
    assert reading_time("") == 0
    assert reading_time("a" * 200) == 1
    assert reading_time("a" * 201) == 2


def test_member_submission_waits_for_approval(client, fake):
    church = add_church(fake)
    _, admin_headers = add_member(fake, church["id"], funcao="admin")
    author, author_headers = add_member(fake, church["id"])
    _, reader_headers = add_member(fake, church["id"])

    created = client.post("/api/v1/devotionals", json={
        "titulo": "Fé", "conteudo": "x" * 450, "status": "Publicado",
    }, headers=author_headers)
    assert created.status_code == 201
    devotional = created.json()
    assert devotional["status"] == "Pendente"
    assert devotional["tempo_leitura"] == 3
    assert devotional["autor_id"] == author["id"]

    assert client.get("/api/v1/devotionals", headers=reader_headers).json() == []
    assert len(client.get("/api/v1/devotionals", headers=author_headers).json()) == 1

    approved = client.post(f"/api/v1/devotionals/{devotional['id']}/approve", headers=admin_headers)
    assert approved.json()["status"] == "Publicado"
    assert approved.json()["data_publicacao"]
    assert len(client.get("/api/v1/devotionals", headers=reader_headers).json()) == 1


def test_featured_first_then_newest(client, fake):
    church = add_church(fake)
    _, headers = add_member(fake, church["id"], funcao="admin")
    for titulo, date, featured in (("Antigo", "2024-01-01", False), ("Destaque", "2023-01-01", True),
                                   ("Novo", "2024-03-01", False)):
        fake.add("devocionais", {"id_igreja": church["id"], "titulo": titulo, "status": "Publicado",
                                 "data_publicacao": date, "featured": featured})

    titles = [d["titulo"] for d in client.get("/api/v1/devotionals", headers=headers).json()]

    assert titles == ["Destaque", "Novo", "Antigo"]


def test_likes_toggle(client, fake):
    church = add_church(fake)
    _, headers = add_member(fake, church["id"])
    devotional = fake.add("devocionais", {"id_igreja": church["id"], "titulo": "Paz", "status": "Publicado"})
    url = f"/api/v1/devotionals/{devotional['id']}/like"

    assert client.post(url, headers=headers).json() == {"liked": True, "likes_count": 1}
    listed = client.get("/api/v1/devotionals", headers=headers).json()[0]
    assert listed["liked_by_me"] is True
    assert client.post(url, headers=headers).json() == {"liked": False, "likes_count": 0}


def test_comment_moderation_and_views(client, fake):
    church = add_church(fake)
    _, admin_headers = add_member(fake, church["id"], funcao="admin")
    _, member_headers = add_member(fake, church["id"])
    devotional = fake.add("devocionais", {"id_igreja": church["id"], "titulo": "Paz", "status": "Publicado"})
    comments_url = f"/api/v1/devotionals/{devotional['id']}/comments"

    pending = client.post(comments_url, json={"conteudo": "Amém"}, headers=member_headers).json()
    assert pending["aprovado"] is False
    published = client.post(comments_url, json={"conteudo": "Glória"}, headers=admin_headers).json()
    assert published["aprovado"] is True
    assert client.post(comments_url, json={"conteudo": ""}, headers=member_headers).status_code == 422

    member_view = client.get(f"/api/v1/devotionals/{devotional['id']}", headers=member_headers).json()
    assert [c["conteudo"] for c in member_view["comments"]] == ["Glória"]
    admin_view = client.get(f"/api/v1/devotionals/{devotional['id']}", headers=admin_headers).json()
    assert len(admin_view["comments"]) == 2
    assert admin_view["visualizacoes"] == 2
    assert fake.row("devocionais", devotional["id"])["visualizacoes"] == 2


def test_delete_removes_likes_and_comments(client, fake):
    church = add_church(fake)
    _, headers = add_member(fake, church["id"], funcao="pastor")
    devotional = fake.add("devocionais", {"id_igreja": church["id"], "titulo": "Paz", "status": "Publicado"})
    fake.add("devocional_curtidas", {"devocional_id": devotional["id"], "membro_id": "m1"})
    fake.add("devocional_comentarios", {"devocional_id": devotional["id"], "autor_id": "m1"})

    assert client.delete(f"/api/v1/devotionals/{devotional['id']}", headers=headers).status_code == 204

    assert fake.rows("devocional_curtidas") == []
    assert fake.rows("devocional_comentarios") == []


def test_pending_comment_is_approved_then_visible(client, fake):
    church = add_church(fake)
    _, admin_headers = add_member(fake, church["id"], funcao="admin")
    _, author_headers = add_member(fake, church["id"])
    _, reader_headers = add_member(fake, church["id"])
    devotional = fake.add("devocionais", {"id_igreja": church["id"], "titulo": "Paz", "status": "Publicado"})
    details_url = f"/api/v1/devotionals/{devotional['id']}"

    comment = client.post(f"{details_url}/comments", json={"conteudo": "Amém"}, headers=author_headers).json()
    assert client.get(details_url, headers=reader_headers).json()["comments"] == []
    assert client.post(f"/api/v1/devotionals/comments/{comment['id']}/approve",
                       headers=reader_headers).status_code == 403

    approved = client.post(f"/api/v1/devotionals/comments/{comment['id']}/approve", headers=admin_headers)
    assert approved.status_code == 200
    assert approved.json()["aprovado"] is True
    assert [c["conteudo"] for c in client.get(details_url, headers=reader_headers).json()["comments"]] == ["Amém"]


def test_comment_rejection_and_own_removal(client, fake):
    church = add_church(fake)
    other = add_church(fake)
    _, admin_headers = add_member(fake, church["id"], funcao="admin")
    _, author_headers = add_member(fake, church["id"])
    _, reader_headers = add_member(fake, church["id"])
    _, outsider_headers = add_member(fake, other["id"], funcao="admin")
    devotional = fake.add("devocionais", {"id_igreja": church["id"], "titulo": "Paz", "status": "Publicado"})
    comments_url = f"/api/v1/devotionals/{devotional['id']}/comments"
    spam = client.post(comments_url, json={"conteudo": "Spam"}, headers=author_headers).json()
    mine = client.post(comments_url, json={"conteudo": "Oração"}, headers=author_headers).json()

    assert client.delete(f"/api/v1/devotionals/comments/{spam['id']}", headers=reader_headers).status_code == 403
    assert client.delete(f"/api/v1/devotionals/comments/{spam['id']}", headers=outsider_headers).status_code == 404
    assert client.delete(f"/api/v1/devotionals/comments/{spam['id']}", headers=admin_headers).status_code == 204
    assert client.delete(f"/api/v1/devotionals/comments/{mine['id']}", headers=author_headers).status_code == 204
    assert fake.rows("devocional_comentarios") == []


def test_pending_devotional_details_hidden_from_other_members(client, fake):
    church = add_church(fake)
    _, admin_headers = add_member(fake, church["id"], funcao="admin")
    author, author_headers = add_member(fake, church["id"])
    _, reader_headers = add_member(fake, church["id"])
    draft = fake.add("devocionais", {"id_igreja": church["id"], "titulo": "Rascunho", "status": "Pendente",
                                     "autor_id": author["id"], "visualizacoes": 0})
    url = f"/api/v1/devotionals/{draft['id']}"

    assert client.get(url, headers=reader_headers).status_code == 404
    assert fake.row("devocionais", draft["id"])["visualizacoes"] == 0
    assert client.get(url, headers=author_headers).status_code == 200
    assert client.get(url, headers=admin_headers).status_code == 200
    assert fake.row("devocionais", draft["id"])["visualizacoes"] == 2
