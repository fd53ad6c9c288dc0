from conftest import add_church, add_member, add_super_admin


def test_login_and_me(client, fake):
    church = add_church(fake, nome="Vida Nova")
    member, _ = add_member(fake, church["id"], funcao="pastor", email="pastor@example.com")

    login = client.post("/api/v1/auth/login", json={"email": "pastor@example.com", "password": "secret123"})
    assert login.status_code == 200
    token = login.json()["access_token"]

    me = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    body = me.json()
    assert body["id"] == member["id"]
    assert body["is_super_admin"] is False
    assert body["church"]["nome"] == "Vida Nova"
    assert "financial-panel" in body["permissions"]
    assert "system-settings" not in body["permissions"]


def test_login_with_wrong_password(client, fake):
    add_member(fake, None, email="someone@example.com")

    response = client.post("/api/v1/auth/login", json={"email": "someone@example.com", "password": "nope"})

    assert response.status_code == 401


def test_me_without_member_row(client, fake):
    user = fake.auth.add_user("lonely@example.com", "secret123")
    headers = {"Authorization": f"Bearer {fake.auth.issue_token(user.id)}"}

    body = client.get("/api/v1/auth/me", headers=headers).json()

    assert body["profile"] is None
    assert body["permissions"] == []


def test_first_super_admin_can_be_bootstrapped(client, fake):
    _, headers = add_member(fake, None)

    response = client.post("/api/v1/auth/super-admins", json={
        "name": "Root", "email": "root@connectvida.com", "password": "secret123",
    }, headers=headers)

    assert response.status_code == 201
    user_id = response.json()["userId"]
    assert fake.row("super_admins", user_id)["email"] == "root@connectvida.com"


def test_super_admin_creation_is_locked_after_bootstrap(client, fake):
    add_super_admin(fake)
    _, headers = add_member(fake, None)

    response = client.post("/api/v1/auth/super-admins", json={
        "name": "Intruder", "email": "x@example.com", "password": "secret123",
    }, headers=headers)

    assert response.status_code == 403


def test_existing_email_is_reused_for_super_admin(client, fake):
    _, headers = add_super_admin(fake)
    existing = fake.auth.add_user("pastor@example.com", "old")

    response = client.post("/api/v1/auth/super-admins", json={
        "name": "Pastor", "email": "pastor@example.com", "password": "newpass1",
    }, headers=headers)

    assert response.json()["userId"] == existing.id
    assert fake.auth.users[existing.id].password == "newpass1"
