"""
Tests for the authentication layer – login, cookie rotation, request dispatch.
"""

import threading
import unittest
from urllib.parse import parse_qs

import requests
import requests_mock

from pfsense_control.auth.login import (
    build_login_payload,
    find_login_form,
    is_login_page,
    login_csrf_token,
    session_cookie_from_headers,
)
from pfsense_control.auth.secret import SessionSecret
from pfsense_control.auth.session import SessionManager
from pfsense_control.exceptions import (
    AuthenticationError,
    LoginFormNotFound,
    SessionExpired,
    SessionNotEstablished,
    StructureNotFound,
    TransportError,
)

from html_pages import (
    BASE_URL,
    DASHBOARD_PAGE,
    LOGIN_CSRF,
    LOGIN_PAGE,
    LOGIN_PAGE_WITHOUT_CSRF,
    gateways_page,
)

GATEWAYS_URL = BASE_URL + "system_gateways.php"


def _register_login(m, status_code=302, login_cookie="auth456"):
    m.get(BASE_URL, text=LOGIN_PAGE, headers={"Set-Cookie": "PHPSESSID=pre123; path=/; secure; HttpOnly"})
    headers = {"Location": "/"}
    if login_cookie:
        headers["Set-Cookie"] = f"PHPSESSID={login_cookie}; path=/; secure; HttpOnly"
    m.post(BASE_URL + "index.php", status_code=status_code, headers=headers,
           text="" if status_code == 302 else LOGIN_PAGE)


class TestLoginHelpers(unittest.TestCase):
    def test_login_page_detected(self):
        self.assertTrue(is_login_page(LOGIN_PAGE))

    def test_dashboard_is_not_login_page(self):
        self.assertFalse(is_login_page(DASHBOARD_PAGE))
        self.assertFalse(is_login_page(""))

    def test_login_csrf_token(self):
        self.assertEqual(login_csrf_token(find_login_form(LOGIN_PAGE)), LOGIN_CSRF)

    def test_login_csrf_token_missing(self):
        with self.assertRaises(AuthenticationError):
            login_csrf_token(find_login_form(LOGIN_PAGE_WITHOUT_CSRF))

    def test_build_login_payload(self):
        payload = build_login_payload("sid:x,1", "admin", "s3cret")
        self.assertEqual(payload, {
            "__csrf_magic": "sid:x,1",
            "usernamefld": "admin",
            "passwordfld": "s3cret",
            "login": "Sign In",
        })

    def test_session_cookie_from_headers(self):
        headers = {"Set-Cookie": "foo=bar; path=/, PHPSESSID=abc123; path=/; HttpOnly"}
        self.assertEqual(session_cookie_from_headers(headers), "abc123")

    def test_session_cookie_deleted_ignored(self):
        headers = {"Set-Cookie": "PHPSESSID=deleted; expires=Thu, 01-Jan-1970 00:00:01 GMT"}
        self.assertIsNone(session_cookie_from_headers(headers))

    def test_session_cookie_absent(self):
        self.assertIsNone(session_cookie_from_headers({}))
        self.assertIsNone(session_cookie_from_headers({"Set-Cookie": "other=1"}))


class TestSessionSecret(unittest.TestCase):
    def test_repr_is_redacted(self):
        secret = SessionSecret("hunter2")
        self.assertNotIn("hunter2", repr(secret))
        self.assertNotIn("hunter2", str(secret))

    def test_wipe_zeroes_buffer(self):
        secret = SessionSecret("hunter2")
        buf = secret._buf
        secret.wipe()
        self.assertEqual(bytes(buf), b"\x00" * len("hunter2"))
        self.assertFalse(secret)
        self.assertFalse(secret.matches("hunter2"))

    def test_matches(self):
        self.assertTrue(SessionSecret("abc").matches("abc"))
        self.assertFalse(SessionSecret("abc").matches("abd"))


class TestSessionManagerLogin(unittest.TestCase):
    def setUp(self):
        self.manager = SessionManager(BASE_URL, "admin", "pfsense")

    def tearDown(self):
        self.manager.close()

    def test_login_success(self):
        with requests_mock.Mocker() as m:
            _register_login(m)
            self.manager.login()

            self.assertTrue(self.manager.is_established)
            get_root, post_login = m.request_history
            self.assertEqual(post_login.method, "POST")
            self.assertEqual(post_login.headers["Cookie"], "PHPSESSID=pre123")
            body = parse_qs(post_login.text)
            self.assertEqual(body["__csrf_magic"], [LOGIN_CSRF])
            self.assertEqual(body["usernamefld"], ["admin"])
            self.assertEqual(body["passwordfld"], ["pfsense"])
            self.assertEqual(body["login"], ["Sign In"])

            # Later requests carry the cookie issued with the login redirect
            m.get(GATEWAYS_URL, text=gateways_page())
            self.manager.get_page("system_gateways.php")
            self.assertEqual(m.last_request.headers["Cookie"], "PHPSESSID=auth456")

    def test_login_does_not_follow_redirect(self):
        with requests_mock.Mocker() as m:
            _register_login(m)
            self.manager.login()
            self.assertEqual(m.call_count, 2)

    def test_bad_credentials(self):
        with requests_mock.Mocker() as m:
            _register_login(m, status_code=200, login_cookie=None)
            with self.assertRaises(AuthenticationError):
                self.manager.login()
            self.assertFalse(self.manager.is_established)
            with self.assertRaises(SessionNotEstablished):
                self.manager.send(self.manager.create_request("GET", "system_gateways.php"))

    def test_login_form_without_csrf(self):
        with requests_mock.Mocker() as m:
            m.get(BASE_URL, text=LOGIN_PAGE_WITHOUT_CSRF)
            with self.assertRaises(AuthenticationError):
                self.manager.login()
            self.assertEqual(m.call_count, 1)

    def test_no_login_form_and_no_session(self):
        with requests_mock.Mocker() as m:
            m.get(BASE_URL, text=DASHBOARD_PAGE)
            with self.assertRaises(LoginFormNotFound) as ctx:
                self.manager.login()
        self.assertIsInstance(ctx.exception, AuthenticationError)
        self.assertIsInstance(ctx.exception, StructureNotFound)
        self.assertFalse(self.manager.is_established)

    def test_login_is_idempotent_with_session(self):
        with requests_mock.Mocker() as m:
            _register_login(m)
            self.manager.login()
            m.get(BASE_URL, text=DASHBOARD_PAGE)
            self.manager.login()
            self.assertTrue(self.manager.is_established)
            posts = [r for r in m.request_history if r.method == "POST"]
            self.assertEqual(len(posts), 1)
            self.assertEqual(m.last_request.headers["Cookie"], "PHPSESSID=auth456")


class TestSessionManagerSend(unittest.TestCase):
    def setUp(self):
        self.manager = SessionManager(BASE_URL, "admin", "pfsense")
        self.mocker = requests_mock.Mocker()
        self.mocker.start()
        _register_login(self.mocker)
        self.manager.login()

    def tearDown(self):
        self.mocker.stop()
        self.manager.close()

    def test_send_before_login(self):
        manager = SessionManager(BASE_URL, "admin", "pfsense")
        with self.assertRaises(SessionNotEstablished):
            manager.send(manager.create_request("GET", "system_gateways.php"))
        manager.close()

    def test_cookie_rotation(self):
        self.mocker.get(GATEWAYS_URL, [
            {"text": gateways_page(), "headers": {"Set-Cookie": "PHPSESSID=rot789; path=/"}},
            {"text": gateways_page()},
        ])
        self.manager.get_page("system_gateways.php")
        self.assertEqual(self.mocker.last_request.headers["Cookie"], "PHPSESSID=auth456")
        self.manager.get_page("system_gateways.php")
        self.assertEqual(self.mocker.last_request.headers["Cookie"], "PHPSESSID=rot789")

    def test_cookie_rotation_across_threads(self):
        received = []
        issued = []

        def rotate(request, context):
            received.append(request.headers["Cookie"])
            token = f"tok{len(issued)}"
            issued.append(token)
            context.headers["Set-Cookie"] = f"PHPSESSID={token}; path=/"
            return gateways_page()

        self.mocker.get(GATEWAYS_URL, text=rotate)
        errors = []

        def worker():
            try:
                for _ in range(5):
                    self.manager.get_page("system_gateways.php")
            except Exception as exc:
                errors.append(exc)

        threads = [threading.Thread(target=worker) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        self.assertEqual(errors, [])
        self.assertEqual(len(received), 40)
        # each request carries the id issued by the response before it
        self.assertEqual(received[0], "PHPSESSID=auth456")
        self.assertEqual(received[1:], [f"PHPSESSID={token}" for token in issued[:-1]])
        self.assertTrue(self.manager._session_id.matches(issued[-1]))

    def test_stale_cookie_header_replaced(self):
        self.mocker.get(GATEWAYS_URL, text=gateways_page())
        request = self.manager.create_request("GET", "system_gateways.php")
        request.headers["Cookie"] = "PHPSESSID=stale"
        self.manager.send(request)
        self.assertEqual(self.mocker.last_request.headers["Cookie"], "PHPSESSID=auth456")

    def test_deleted_cookie_not_adopted(self):
        self.mocker.get(GATEWAYS_URL, text=gateways_page(),
                        headers={"Set-Cookie": "PHPSESSID=deleted; expires=Thu, 01-Jan-1970 00:00:01 GMT"})
        self.manager.get_page("system_gateways.php")
        self.manager.get_page("system_gateways.php")
        self.assertEqual(self.mocker.last_request.headers["Cookie"], "PHPSESSID=auth456")

    def test_non_2xx_raises_transport_error(self):
        self.mocker.get(GATEWAYS_URL, status_code=500, text="Internal Server Error")
        with self.assertRaises(TransportError) as ctx:
            self.manager.send(self.manager.create_request("GET", "system_gateways.php"))
        self.assertEqual(ctx.exception.status_code, 500)
        self.assertIn("status=500", str(ctx.exception))

    def test_suppressed_status_check_returns_redirect(self):
        self.mocker.post(GATEWAYS_URL, status_code=302, headers={"Location": "system_gateways.php"})
        response = self.manager.send(
            self.manager.create_request("POST", "system_gateways.php", data={"save": "Save"}),
            suppress_status_check=True,
        )
        self.assertEqual(response.status_code, 302)

    def test_timeout_wrapped(self):
        self.mocker.get(GATEWAYS_URL, exc=requests.exceptions.ConnectTimeout)
        with self.assertRaises(TransportError) as ctx:
            self.manager.get_page("system_gateways.php")
        self.assertIsInstance(ctx.exception.__cause__, requests.exceptions.ConnectTimeout)

    def test_connection_error_wrapped(self):
        self.mocker.get(GATEWAYS_URL, exc=requests.exceptions.ConnectionError)
        with self.assertRaises(TransportError):
            self.manager.get_page("system_gateways.php")

    def test_login_page_means_expired(self):
        self.mocker.get(GATEWAYS_URL, text=LOGIN_PAGE)
        with self.assertRaises(SessionExpired):
            self.manager.get_page("system_gateways.php")
        self.assertFalse(self.manager.is_established)

    def test_close_wipes_and_blocks(self):
        password_buf = self.manager._password._buf
        self.manager.close()
        self.assertFalse(self.manager.is_established)
        self.assertEqual(bytes(password_buf), b"\x00" * len("pfsense"))
        self.assertIsNone(self.manager._session_id)
        with self.assertRaises(SessionNotEstablished):
            self.manager.create_request("GET", "system_gateways.php")

    def test_repr_hides_secrets(self):
        text = repr(self.manager)
        self.assertNotIn("pfsense", text)
        self.assertNotIn("auth456", text)


class TestSessionManagerContext(unittest.TestCase):
    def test_context_manager_closes(self):
        with SessionManager(BASE_URL, "admin", "pfsense") as manager:
            pass
        with self.assertRaises(SessionNotEstablished):
            manager.create_request("GET", "")


if __name__ == "__main__":
    unittest.main()
