from conftest import PASSWORD


def _register_and_login(client, email: str, full_name: str | None = None, password: str = PASSWORD):
    # CORS preflight smoke (OPTIONS) for auth routes should not error (middleware handles it)
    for path, method in [("/auth/register", "POST"), ("/auth/login", "POST"), ("/auth/me", "GET")]:
        pre = client.options(path, headers={"Origin": "http://localhost:5173", "Access-Control-Request-Method": method})
        assert pre.status_code in (200, 204)

    # Register
    r = client.post("/auth/register", json={"email": email, "full_name": full_name, "password": password})
    assert r.status_code == 201, r.text
    user = r.json()
    assert user["email"] == email.lower()
    assert "id" in user
    assert user["job_family"] is None and user["level"] is None

    # Duplicate should 409
    r2 = client.post("/auth/register", json={"email": email, "full_name": full_name, "password": password})
    assert r2.status_code == 409, r2.text

    # Login
    r3 = client.post("/auth/login", json={"email": email, "password": password})
    assert r3.status_code == 200, r3.text
    token_payload = r3.json()
    token = token_payload["access_token"]
    assert token_payload.get("token_type") == "bearer"

    # Me
    r4 = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r4.status_code == 200, r4.text
    me = r4.json()
    assert me["email"] == email.lower()
    assert me["id"] == user["id"]
    return {"Authorization": f"Bearer {token}"}


def test_register_login_memory_provider(client):
    _register_and_login(client, "User1@example.com", "User One")


def test_register_login_sqlite_provider(client, sqlite_provider):
    _register_and_login(client, "User2@example.com", "User Two")
    assert sqlite_provider.exists()


def test_wrong_password_and_bad_token(client):
    _register_and_login(client, "user3@example.com")
    r = client.post("/auth/login", json={"email": "user3@example.com", "password": "WrongPassw0rd!"})
    assert r.status_code == 401
    r = client.get("/auth/me", headers={"Authorization": "Bearer not-a-token"})
    assert r.status_code == 401
    r = client.get("/auth/me")
    assert r.status_code == 401


def test_blank_password_rejected(client):
    r = client.post("/auth/register", json={"email": "user4@example.com", "password": "        x"})
    assert r.status_code == 400


def test_register_with_rubric_selection(client):
    r = client.post(
        "/auth/register",
        json={"email": "pgm@example.com", "password": PASSWORD, "job_family": "PgM", "level": "Sr. Staff"},
    )
    assert r.status_code == 201, r.text
    assert r.json()["job_family"] == "PgM"
    assert r.json()["level"] == "Sr. Staff"

    r = client.post("/auth/register", json={"email": "x@example.com", "password": PASSWORD, "job_family": "Designer"})
    assert r.status_code == 422


def test_update_preferences(client, sqlite_provider):
    headers = _register_and_login(client, "prefs@example.com")
    r = client.put("/auth/me/preferences", json={"job_family": "BizOps", "level": "Director"}, headers=headers)
    assert r.status_code == 200, r.text
    assert r.json()["job_family"] == "BizOps"
    me = client.get("/auth/me", headers=headers).json()
    assert (me["job_family"], me["level"]) == ("BizOps", "Director")

    r = client.put("/auth/me/preferences", json={"level": "Intern"}, headers=headers)
    assert r.status_code == 422
