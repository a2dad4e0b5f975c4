import pytest
from event_manager.core.exceptions import AuthenticationError, ConflictError, ForbiddenError
from event_manager.core.security import decode_access_token
from event_manager.models.user import User
from event_manager.services.auth_service import auth_service, record_login
from event_manager.services.soft_delete import mark_deleted


def make_user(history=None):
    return User(name="Test", email="t@mail.com", hashed_password="x", login_history=history or [])


def test_record_login_prepends_unseen_pair():
    user = make_user([{"ip": "1.1.1.1", "userAgent": "A", "date": "2024-01-01T00:00:00+00:00"}])
    assert record_login(user, "2.2.2.2", "B", limit=5) is True
    assert [(e["ip"], e["userAgent"]) for e in user.login_history] == [("2.2.2.2", "B"), ("1.1.1.1", "A")]


def test_record_login_ignores_known_pair():
    history = [{"ip": "1.1.1.1", "userAgent": "A", "date": "2024-01-01T00:00:00+00:00"}]
    user = make_user(list(history))
    assert record_login(user, "1.1.1.1", "A", limit=5) is False
    assert user.login_history == history


def test_record_login_needs_ip_and_user_agent():
    user = make_user()
    assert record_login(user, None, "A", limit=5) is False
    assert record_login(user, "1.1.1.1", "", limit=5) is False
    assert user.login_history == []


def test_record_login_caps_history():
    user = make_user()
    for i in range(7):
        record_login(user, f"10.0.0.{i}", "A", limit=5)
    assert len(user.login_history) == 5
    assert user.login_history[0]["ip"] == "10.0.0.6"
    assert user.login_history[-1]["ip"] == "10.0.0.2"


def test_register_and_login(db_session, settings):
    user = auth_service.register(db_session, " Liam@Mail.com ", "Liam", "pw")
    assert user.email == "liam@mail.com"

    result = auth_service.login(db_session, settings, "liam@mail.com", "pw", ip="1.1.1.1", user_agent="A")
    assert result.new_device is True
    assert result.user.id == user.id
    assert len(result.user.login_history) == 1

    payload = decode_access_token(result.token, settings)
    assert payload["sub"] == str(user.id)
    assert payload["email"] == "liam@mail.com"
    # 24 hour validity
    assert payload["exp"] - payload["iat"] == 24 * 60 * 60

    again = auth_service.login(db_session, settings, "liam@mail.com", "pw", ip="1.1.1.1", user_agent="A")
    assert again.new_device is False


def test_register_conflict_includes_deleted(db_session):
    user = auth_service.register(db_session, "mia@mail.com", "Mia", "pw")
    mark_deleted(db_session, user)
    with pytest.raises(ConflictError):
        auth_service.register(db_session, "mia@mail.com", "Mia", "pw")


def test_login_failures(db_session, settings):
    user = auth_service.register(db_session, "noah@mail.com", "Noah", "pw")
    with pytest.raises(AuthenticationError):
        auth_service.login(db_session, settings, "noah@mail.com", "bad")
    with pytest.raises(AuthenticationError):
        auth_service.login(db_session, settings, "nobody@mail.com", "pw")

    mark_deleted(db_session, user)
    with pytest.raises(ForbiddenError):
        auth_service.login(db_session, settings, "noah@mail.com", "pw")
