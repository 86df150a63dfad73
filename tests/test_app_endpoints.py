import pytest

from examapp.app import create_app
from examapp.config import Settings
from examapp.errors import MissingSecretError


def _post(client, **form):
    data = {"authType": "register", "email": "a@b.com", "password": "secret1", "redirectTo": "/"}
    data.update(form)
    return client.post("/login", data=data, follow_redirects=False)


def test_register_sets_cookie_and_redirects(client):
    r = _post(client)
    assert r.status_code == 303
    assert r.headers["location"] == "/"
    assert r.headers["set-cookie"].startswith("RJ_session=")
    user = client.app.state.store.find_user_by_email("a@b.com")
    assert user.id == 1

    home = client.get("/", follow_redirects=False)
    assert home.status_code == 200
    assert "a@b.com" in home.text


def test_register_same_email_again(client):
    _post(client)
    client.cookies.clear()
    r = _post(client)
    assert r.status_code == 400
    assert "set-cookie" not in r.headers
    assert "User with email a@b.com already exists" in r.text
    assert client.app.state.store.find_user_by_id(2) is None


def test_short_password_rerenders_form(client):
    r = _post(client, authType="login", password="short")
    assert r.status_code == 400
    assert "Password must be at least 6 characters long" in r.text
    assert 'value="a@b.com"' in r.text
    assert 'value="short"' not in r.text


def test_login_then_logout(client):
    _post(client)
    client.cookies.clear()

    r = _post(client, authType="login", redirectTo="/")
    assert r.status_code == 303
    assert client.get("/", follow_redirects=False).status_code == 200

    out = client.post("/logout", follow_redirects=False)
    assert out.status_code == 303
    assert out.headers["location"] == "/login"
    assert "max-age=0" in out.headers["set-cookie"].lower()

    after = client.get("/", follow_redirects=False)
    assert after.status_code == 303
    assert after.headers["location"] == "/login?redirectTo=%2F"


def test_bad_credentials_message(client):
    _post(client)
    client.cookies.clear()
    r = _post(client, authType="login", password="secret2")
    assert r.status_code == 400
    assert "Email/Password combination is incorrect" in r.text


def test_protected_page_without_cookie(client):
    r = client.get("/", follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/login?redirectTo=%2F"


def test_login_page(client):
    r = client.get("/login?redirectTo=/exams/3")
    assert r.status_code == 200
    assert 'name="redirectTo" value="/exams/3"' in r.text


def test_login_page_when_logged_in_goes_home(client):
    _post(client)
    r = client.get("/login", follow_redirects=False)
    assert r.status_code == 303
    assert r.headers["location"] == "/"


def test_missing_secret_is_fatal_at_startup(db_url):
    with pytest.raises(MissingSecretError):
        create_app(Settings(database_url=db_url, session_secrets=()))


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("EXAMAPP_SESSION_SECRET", "old, new")
    monkeypatch.setenv("EXAMAPP_COOKIE_SECURE", "false")
    monkeypatch.setenv("EXAMAPP_ARGON2_TIME_COST", "2")
    s = Settings.from_env()
    assert s.session_secrets == ("old", "new")
    assert s.cookie_secure is False
    assert s.argon2_time_cost == 2
    assert s.session_max_age == 60 * 60 * 24 * 30


def test_failed_registration_rerenders_register_choice(client):
    r = _post(client, password="123")
    assert r.status_code == 400
    assert 'value="register" checked' in r.text
    assert 'value="login" checked' not in r.text
