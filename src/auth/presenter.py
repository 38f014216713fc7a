"""Browser-based authorization presenter with a loopback redirect listener."""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
import webbrowser
from typing import Callable, Optional
from urllib.parse import urlsplit

from aiohttp import web

from .errors import AuthError, MissingConfiguration, UserCanceled

_SUCCESS_PAGE = """
<html>
  <body>
    <h1>Sign-in complete</h1>
    <p>You can close this window and return to the terminal.</p>
  </body>
</html>
"""


class LoopbackAuthorizationPresenter:
    """Opens the consent page and waits for the redirect on 127.0.0.1.

    The listener runs an aiohttp app on its own asyncio loop in a daemon
    thread; `present_authorization()` blocks the caller until the redirect
    arrives, `cancel()` is called, or the timeout elapses.
    """

    def __init__(
        self,
        *,
        timeout_seconds: float = 300.0,
        open_browser: Optional[Callable[[str], object]] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self._timeout_seconds = timeout_seconds
        self._open_browser = open_browser or webbrowser.open
        self._logger = logger or logging.getLogger("auth.presenter")

        self._thread: Optional[threading.Thread] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._stop_async: Optional[asyncio.Event] = None
        self._started = threading.Event()
        self._finished = threading.Event()
        self._startup_error: Optional[Exception] = None
        self._callback_url: Optional[str] = None
        self._canceled = False

    def present_authorization(self, url: str, callback_prefix: str) -> str:
        parts = urlsplit(callback_prefix)
        if parts.scheme != "http" or not parts.hostname or parts.port is None:
            raise MissingConfiguration(
                "Loopback sign-in needs a redirect URI like "
                "http://127.0.0.1:8765/oauth2redirect"
            )

        self._callback_url = None
        self._canceled = False
        self._finished.clear()
        self._start_listener(parts.hostname, parts.port, parts.path or "/", callback_prefix)
        try:
            self._logger.info("Opening browser for Google consent")
            if not self._open_browser(url):
                self._logger.warning("Could not open a browser. Visit this URL to sign in: %s", url)

            if not self._finished.wait(self._timeout_seconds):
                raise UserCanceled("Sign-in timed out")
            if self._canceled or self._callback_url is None:
                raise UserCanceled()
            return self._callback_url
        finally:
            self._stop_listener()

    def cancel(self) -> None:
        self._canceled = True
        self._finished.set()

    def _start_listener(self, host: str, port: int, path: str, prefix: str) -> None:
        self._startup_error = None
        self._started.clear()
        self._thread = threading.Thread(
            target=self._run_loop,
            args=(host, port, path, prefix),
            daemon=True,
            name="oauth-callback",
        )
        self._thread.start()

        if not self._started.wait(5.0):
            raise AuthError("OAuth callback listener did not start within 5.0s")
        if self._startup_error is not None:
            raise AuthError(f"OAuth callback listener failed: {self._startup_error}")

    def _stop_listener(self) -> None:
        if self._thread is None:
            return

        if self._loop and self._stop_async:
            with contextlib.suppress(RuntimeError):
                self._loop.call_soon_threadsafe(self._stop_async.set)

        self._thread.join(timeout=5.0)
        if self._thread.is_alive():
            self._logger.error("OAuth callback listener did not stop within 5.0s")

        self._thread = None
        self._loop = None
        self._stop_async = None

    def _run_loop(self, host: str, port: int, path: str, prefix: str) -> None:
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        self._stop_async = asyncio.Event()

        try:
            self._loop.run_until_complete(self._serve(host, port, path, prefix))
        except Exception as error:
            self._startup_error = error
            self._logger.error("OAuth callback listener failed: %s", error)
            self._started.set()
        finally:
            self._loop.close()

    async def _serve(self, host: str, port: int, path: str, prefix: str) -> None:
        async def handle_callback(request: web.Request) -> web.Response:
            query = request.query_string
            self._callback_url = f"{prefix}?{query}" if query else prefix
            self._finished.set()
            if request.query.get("error"):
                return web.Response(
                    text=f"Sign-in failed: {request.query['error']}",
                    status=400,
                )
            return web.Response(text=_SUCCESS_PAGE, content_type="text/html")

        app = web.Application()
        app.router.add_get(path, handle_callback)
        runner = web.AppRunner(app)
        await runner.setup()
        try:
            site = web.TCPSite(runner, host=host, port=port)
            await site.start()
            self._logger.info("Waiting for OAuth redirect on http://%s:%d%s", host, port, path)
            self._started.set()
            assert self._stop_async is not None
            await self._stop_async.wait()
        finally:
            await runner.cleanup()
