from scout_backend.commands import create_admin_command
from scout_backend.models import User, UserRole


def register(client, **overrides):
    payload = {"email": "Jane@Example.com ", "password": "secret123", "name": " Jane "}
    payload.update(overrides)
    return client.post("/api/users/register", json=payload)


def test_register_normalises_input_and_hides_the_hash(client):
    response = register(client)

    assert response.status_code == 201
    user = response.get_json()["user"]
    assert user["email"] == "jane@example.com"
    assert user["name"] == "Jane"
    assert user["role"] == "PLAYER"
    assert "passwordHash" not in user


def test_register_rejects_bad_input(client):
    short = register(client, password="123")
    assert short.status_code == 400
    assert short.get_json()["errors"]["password"] == ["Password must be at least 6 characters long"]

    bad_role = register(client, role="coach")
    assert bad_role.status_code == 400
    assert "role" in bad_role.get_json()["errors"]

    self_made_admin = register(client, role="admin")
    assert self_made_admin.status_code == 400
    assert self_made_admin.get_json()["errors"]["role"] == ["Invalid role. Must be one of: PLAYER, SCOUT"]

    missing = client.post("/api/users/register", json={"email": "x@example.com"})
    assert missing.status_code == 400


def test_register_duplicate_email_conflicts(client):
    register(client)
    response = register(client, email="jane@example.com")

    assert response.status_code == 400
    assert response.get_json()["msg"] == "Email already in use"


def test_login_and_me(client):
    register(client, role="scout")

    failed = client.post("/api/users/login", json={"email": "jane@example.com", "password": "wrong-one"})
    assert failed.status_code == 401
    assert failed.get_json()["msg"] == "Invalid credentials"

    login = client.post("/api/users/login", json={"email": "JANE@example.com", "password": "secret123"})
    assert login.status_code == 200
    token = login.get_json()["accessToken"]

    me = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.get_json()["role"] == "SCOUT"


def test_me_rejects_garbage_token(client):
    response = client.get("/api/users/me", headers={"Authorization": "Bearer not-a-token"})
    assert response.status_code == 401


def test_list_and_get_users(client, make_user, auth_headers):
    alice = make_user(name="Alice")
    headers = auth_headers(alice)

    assert [u["name"] for u in client.get("/api/users", headers=headers).get_json()] == ["Alice"]
    assert client.get(f"/api/users/{alice.id}", headers=headers).get_json()["email"] == alice.email
    assert client.get("/api/users/999", headers=headers).status_code == 404


def test_only_admins_delete_users(client, make_user, auth_headers, make_challenge, engine):
    admin_headers = auth_headers(make_user(role=UserRole.ADMIN))
    player = make_user()
    busy = make_user()
    engine.join_challenge(make_challenge().id, busy.id)

    forbidden = client.delete(f"/api/users/{busy.id}", headers=auth_headers(player))
    assert forbidden.status_code == 403
    assert forbidden.get_json()["msg"] == "Access denied. Required role(s): ADMIN"

    assert client.delete(f"/api/users/{busy.id}", headers=admin_headers).status_code == 400
    assert client.delete(f"/api/users/{player.id}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/users/{player.id}", headers=admin_headers).status_code == 404


def test_user_progress_endpoint(client, make_user, make_challenge, auth_headers, engine):
    user = make_user()
    participant = engine.join_challenge(make_challenge(title="Plank").id, user.id)
    engine.record_progress(participant.id, 100, "Held it")

    body = client.get(f"/api/users/{user.id}/progress", headers=auth_headers(user)).get_json()

    assert body["userId"] == user.id
    assert body["stats"]["total"] == 1
    assert body["stats"]["completed"] == 1
    assert body["stats"]["averageProgress"] == 100
    assert body["challenges"][0]["challenge"]["title"] == "Plank"
    assert body["challenges"][0]["status"] == "COMPLETED"


def test_health_and_home(client):
    assert client.get("/").get_json()["status"] == "OK"
    health = client.get("/health")
    assert health.status_code == 200
    assert health.get_json()["database"] == "connected"


def test_create_admin_command(app):
    runner = app.test_cli_runner()

    result = runner.invoke(create_admin_command, ["--email", "Root@Example.com", "--password", "supersecret"])
    assert result.exit_code == 0, result.output
    admin = User.query.filter_by(email="root@example.com").one()
    assert admin.role == UserRole.ADMIN

    again = runner.invoke(create_admin_command, ["--email", "root@example.com", "--password", "supersecret"])
    assert again.exit_code != 0
    assert "already exists" in again.output


def test_user_updates_own_profile(client, make_user, auth_headers):
    user = make_user(name="Old Name")
    headers = auth_headers(user)

    response = client.put(
        f"/api/users/{user.id}",
        json={"name": " New Name ", "email": "New@Example.com", "password": "another123"},
        headers=headers,
    )

    assert response.status_code == 200
    assert response.get_json()["name"] == "New Name"
    assert response.get_json()["email"] == "new@example.com"
    login = client.post("/api/users/login", json={"email": "new@example.com", "password": "another123"})
    assert login.status_code == 200


def test_user_update_permissions(client, make_user, auth_headers):
    user = make_user()
    other = make_user()
    admin_headers = auth_headers(make_user(role=UserRole.ADMIN))
    url = f"/api/users/{user.id}"

    assert client.put(url, json={"name": "Hijacked"}, headers=auth_headers(other)).status_code == 403
    assert client.put(url, json={"role": "ADMIN"}, headers=auth_headers(user)).status_code == 403

    promoted = client.put(url, json={"role": "scout"}, headers=admin_headers)
    assert promoted.status_code == 200
    assert promoted.get_json()["role"] == "SCOUT"

    invalid = client.put(url, json={"role": "coach"}, headers=admin_headers)
    assert invalid.status_code == 400
    assert "role" in invalid.get_json()["errors"]

    taken = client.put(url, json={"email": other.email}, headers=admin_headers)
    assert taken.status_code == 400
    assert taken.get_json()["msg"] == "Email already in use"

    assert client.put("/api/users/999", json={"name": "Ghost"}, headers=admin_headers).status_code == 404


def test_update_password(client, make_user, auth_headers):
    user = make_user(password="secret123")
    headers = auth_headers(user)
    url = "/api/users/update-password"

    missing = client.put(url, json={"currentPassword": "secret123"}, headers=headers)
    assert missing.status_code == 400
    assert missing.get_json()["msg"] == "Current password and new password are required"

    wrong = client.put(url, json={"currentPassword": "nope", "newPassword": "brandnew1"}, headers=headers)
    assert wrong.status_code == 401
    assert wrong.get_json()["msg"] == "Current password is incorrect"

    same = client.put(url, json={"currentPassword": "secret123", "newPassword": "secret123"}, headers=headers)
    assert same.status_code == 400
    assert same.get_json()["msg"] == "New password must be different from current password"

    short = client.put(url, json={"currentPassword": "secret123", "newPassword": "abc"}, headers=headers)
    assert short.status_code == 400
    assert short.get_json()["errors"]["newPassword"] == ["New password must be at least 6 characters long"]

    changed = client.put(url, json={"currentPassword": "secret123", "newPassword": "brandnew1"}, headers=headers)
    assert changed.status_code == 200
    assert client.post("/api/users/login", json={"email": user.email, "password": "brandnew1"}).status_code == 200
    assert client.post("/api/users/login", json={"email": user.email, "password": "secret123"}).status_code == 401


def test_update_password_requires_a_token(client):
    response = client.put("/api/users/update-password", json={"currentPassword": "a", "newPassword": "bbbbbb"})
    assert response.status_code == 401
