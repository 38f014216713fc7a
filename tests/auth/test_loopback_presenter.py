import socket
import threading
import unittest

import httpx

from auth.errors import MissingConfiguration, UserCanceled
from auth.presenter import LoopbackAuthorizationPresenter


def _get(url: str) -> httpx.Response:
    with httpx.Client(trust_env=False, timeout=5.0) as client:
        return client.get(url)


def _free_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


class LoopbackAuthorizationPresenterTests(unittest.TestCase):
    def test_returns_redirect_url_with_query(self) -> None:
        prefix = f"http://127.0.0.1:{_free_port()}/oauth2redirect"
        opened: list[str] = []
        responses: list[httpx.Response] = []

        def open_browser(url: str) -> bool:
            opened.append(url)
            responses.append(_get(f"{prefix}?code=abc&state=s"))
            return True

        presenter = LoopbackAuthorizationPresenter(timeout_seconds=5.0, open_browser=open_browser)
        callback_url = presenter.present_authorization("https://accounts.example/auth", prefix)

        self.assertEqual(f"{prefix}?code=abc&state=s", callback_url)
        self.assertEqual(["https://accounts.example/auth"], opened)
        self.assertEqual(200, responses[0].status_code)

    def test_error_redirect_is_still_returned_to_caller(self) -> None:
        prefix = f"http://127.0.0.1:{_free_port()}/cb"

        def open_browser(url: str) -> bool:
            _get(f"{prefix}?error=access_denied")
            return True

        presenter = LoopbackAuthorizationPresenter(timeout_seconds=5.0, open_browser=open_browser)

        self.assertEqual(
            f"{prefix}?error=access_denied",
            presenter.present_authorization("https://accounts.example/auth", prefix),
        )

    def test_rejects_non_loopback_redirect(self) -> None:
        presenter = LoopbackAuthorizationPresenter(open_browser=lambda url: True)

        with self.assertRaises(MissingConfiguration):
            presenter.present_authorization(
                "https://accounts.example/auth",
                "com.example.app:/oauth2redirect",
            )

    def test_timeout_raises_user_canceled(self) -> None:
        prefix = f"http://127.0.0.1:{_free_port()}/oauth2redirect"
        presenter = LoopbackAuthorizationPresenter(timeout_seconds=0.2, open_browser=lambda url: True)

        with self.assertRaises(UserCanceled) as context:
            presenter.present_authorization("https://accounts.example/auth", prefix)

        self.assertIn("timed out", str(context.exception))

    def test_cancel_unblocks_waiting_caller(self) -> None:
        prefix = f"http://127.0.0.1:{_free_port()}/oauth2redirect"
        presenter: LoopbackAuthorizationPresenter

        def open_browser(url: str) -> bool:
            threading.Timer(0.05, presenter.cancel).start()
            return True

        presenter = LoopbackAuthorizationPresenter(timeout_seconds=5.0, open_browser=open_browser)

        with self.assertRaises(UserCanceled) as context:
            presenter.present_authorization("https://accounts.example/auth", prefix)

        self.assertEqual("Sign-in canceled", str(context.exception))


if __name__ == "__main__":
    unittest.main()
