from f1clash.auth import AuthStatus, get_cookie


def test_get_cookie_finds_value():
    headers = {"Cookie": "a=1; admin_session=token; b=2"}
    assert get_cookie(headers, "admin_session") == "token"
    assert get_cookie(headers, "a") == "1"


def test_get_cookie_missing():
    assert get_cookie({"Cookie": "a=1"}, "admin_session") is None
    assert get_cookie({}, "admin_session") is None


def test_get_cookie_requires_full_name():
    headers = {"cookie": "admin_session_old=x; admin_session=token"}
    assert get_cookie(headers, "admin_session") == "token"


def test_get_cookie_splits_on_semicolon_space_only():
    assert get_cookie({"Cookie": "a=1;admin_session=token"}, "admin_session") is None


def test_auth_disabled_without_token():
    status = AuthStatus.from_headers({"Cookie": "admin_session=token"}, None)
    assert status == AuthStatus(enabled=False, logged_in=False)


def test_auth_logged_in_with_matching_cookie():
    session_token = "token"
    status = AuthStatus.from_headers({"Cookie": "admin_session=token"}, session_token)
    assert status == AuthStatus(enabled=True, logged_in=True)


def test_auth_not_logged_in_with_wrong_or_missing_cookie():
    session_token = "token"
    assert AuthStatus.from_headers({"Cookie": "admin_session=secret"}, session_token) == AuthStatus(True, False)
    assert AuthStatus.from_headers({}, session_token) == AuthStatus(True, False)