import pytest

from auth.session import CookieState, SessionData


def session_cookie_header(response) -> str:
    return response.headers.get("set-cookie", "")


@pytest.mark.asyncio
async def test_get_user_anonymous(client):
    response = await client.get("/user")

    assert response.status_code == 202
    assert response.json() == {"message": "user not logged in"}
    # an anonymous visit creates no session
    assert "set-cookie" not in response.headers


@pytest.mark.asyncio
async def test_signup_logs_in_new_user(client, signup_body):
    response = await client.post("/users", json=signup_body)

    assert response.status_code == 201
    assert response.json() == {
        "id": 1,
        "email": "ada@example.com",
        "firstName": "Ada",
        "lastName": "Lovelace",
    }
    set_cookie = session_cookie_header(response)
    assert set_cookie.startswith("session=")
    assert "httponly" in set_cookie.lower()
    # browser-session cookie without remember me
    assert "Max-Age" not in set_cookie

    response = await client.get("/user")
    assert response.status_code == 200
    assert response.json()["email"] == "ada@example.com"


@pytest.mark.asyncio
async def test_signup_with_minimal_body(client):
    response = await client.post("/users", json={"email": "a@x.com", "firstName": "A", "password": "p"})

    assert response.status_code == 201
    assert response.json()["lastName"] == ""


@pytest.mark.asyncio
async def test_signup_remember_me_sets_persistent_cookie(client, signup_body):
    response = await client.post("/users", json={**signup_body, "rememberMe": True})

    assert response.status_code == 201
    assert "Max-Age=604800" in session_cookie_header(response)


@pytest.mark.asyncio
async def test_signup_duplicate_email(client, signup_body, user_store):
    await user_store.create("ada@example.com", "Ada", "Lovelace", "secret")

    response = await client.post("/users", json=signup_body)

    assert response.status_code == 409
    assert response.json() == {"message": "user already exists"}
    assert "set-cookie" not in response.headers


@pytest.mark.asyncio
async def test_duplicate_signup_keeps_existing_login(client, signup_body):
    await client.post("/users", json=signup_body)

    response = await client.post("/users", json=signup_body)
    assert response.status_code == 409

    response = await client.get("/user")
    assert response.status_code == 200
    assert response.json()["id"] == 1


@pytest.mark.asyncio
@pytest.mark.parametrize("body", [
    {"email": "not-an-email", "firstName": "Ada", "password": "p"},
    {"email": "a@b..com", "firstName": "Ada", "password": "p"},
    {"email": "ada@example.com", "firstName": "Ada", "password": "é" * 40},
    {"email": "ada@example.com", "password": "p"},
    {"email": "ada@example.com", "firstName": "Ada"},
])
async def test_signup_invalid_body(client, body):
    response = await client.post("/users", json=body)

    assert response.status_code == 400
    assert "message" in response.json()
    assert "set-cookie" not in response.headers


@pytest.mark.asyncio
async def test_logged_in_user_creating_user_stays_logged_in(client, signup_body):
    await client.post("/users", json=signup_body)

    response = await client.post("/users", json={"email": "grace@example.com", "firstName": "Grace", "password": "cobol"})

    assert response.status_code == 201
    assert response.json()["id"] == 2
    assert "set-cookie" not in response.headers

    response = await client.get("/user")
    assert response.json()["email"] == "ada@example.com"


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["GET", "DELETE"])
async def test_user_by_id_requires_login(client, method):
    response = await client.request(method, "/user/1")

    assert response.status_code == 401
    assert response.json() == {"error_code": "login_required", "message": "logged in user required"}


@pytest.mark.asyncio
async def test_get_user_by_id(client, signup_body):
    await client.post("/users", json=signup_body)
    await client.post("/users", json={"email": "grace@example.com", "firstName": "Grace", "password": "cobol"})

    response = await client.get("/user/2")

    assert response.status_code == 200
    assert response.json()["firstName"] == "Grace"


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["GET", "DELETE"])
@pytest.mark.parametrize("user_id", ["abc", "0", "-3"])
async def test_user_by_id_malformed_id(client, signup_body, method, user_id):
    await client.post("/users", json=signup_body)

    response = await client.request(method, f"/user/{user_id}")

    assert response.status_code == 400
    assert "invalid user id" in response.json()["message"]


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["GET", "DELETE"])
async def test_user_by_id_not_found(client, signup_body, method):
    await client.post("/users", json=signup_body)

    response = await client.request(method, "/user/99")

    assert response.status_code == 404
    assert response.json() == {"message": "no user with id=99"}


@pytest.mark.asyncio
async def test_delete_other_user(client, signup_body, user_store):
    await client.post("/users", json=signup_body)
    grace = await user_store.create("grace@example.com", "Grace", "Hopper", "cobol")

    response = await client.delete(f"/user/{grace.id}")

    assert response.status_code == 200
    assert await user_store.load(grace.id) is None

    response = await client.get("/user")
    assert response.status_code == 200


@pytest.mark.asyncio
async def test_deleting_yourself_leaves_a_stale_session(client, signup_body, session_manager):
    await client.post("/users", json=signup_body)

    response = await client.delete("/user/1")
    assert response.status_code == 200

    response = await client.get("/user")
    assert response.status_code == 401
    assert response.json()["error_code"] == "session_stale"
    assert response.json()["message"] == "stale user session deleted, please try again"
    assert "Max-Age=0" in session_cookie_header(response)
    assert len(session_manager.store) == 0

    response = await client.get("/user")
    assert response.status_code == 202


@pytest.mark.asyncio
async def test_stale_session_for_deleted_user(client, session_manager):
    cookie = CookieState(secure=False)
    cookie.set_max_age(60_000)
    await session_manager.store.set("stale-session", SessionData(user_id=42, cookie=cookie), ttl_ms=60_000)
    headers = {"Cookie": f"session={session_manager.cookie.signer.dumps('stale-session')}"}

    response = await client.get("/user", headers=headers)

    assert response.status_code == 401
    assert response.json()["error_code"] == "session_stale"
    assert "Max-Age=0" in session_cookie_header(response)
    assert "stale-session" not in session_manager.store

    # a client that ignores the cleared cookie is simply anonymous now
    response = await client.get("/user", headers=headers)
    assert response.status_code == 202


@pytest.mark.asyncio
async def test_stale_session_on_protected_route(client, session_manager):
    await session_manager.store.set("stale-session", SessionData(user_id=42), ttl_ms=60_000)
    headers = {"Cookie": f"session={session_manager.cookie.signer.dumps('stale-session')}"}

    response = await client.get("/user/1", headers=headers)

    assert response.status_code == 401
    assert response.json()["error_code"] == "session_stale"


@pytest.mark.asyncio
async def test_signup_password_at_byte_limit(client, user_store):
    password = "é" * 36

    response = await client.post("/users", json={"email": "ada@example.com", "firstName": "Ada", "password": password})

    assert response.status_code == 201
    assert await user_store.authenticate("ada@example.com", password) is not None


@pytest.mark.asyncio
async def test_user_by_id_non_ascii_digits(client, signup_body):
    await client.post("/users", json=signup_body)

    for user_id in ["٣", "²"]:
        response = await client.get(f"/user/{user_id}")
        assert response.status_code == 400
        assert "invalid user id" in response.json()["message"]
