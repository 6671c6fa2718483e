"""
Rendering Engines

Thin interface over a headless browser: launch a session, load markup,
let remote assets settle, paginate to PDF bytes, close. The adapter owns
timeouts, concurrency and teardown; engines only perform the steps.
"""

from abc import ABC, abstractmethod

from folio.contexts.rendering.logger import _log_debug

CHROMIUM_ARGS = (
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--allow-file-access-from-files",
)

# Letter at 96 dpi
VIEWPORT = {"width": 816, "height": 1056}

PDF_OPTIONS = {
    "format": "Letter",
    "print_background": True,
    "margin": {"top": "0.5in", "right": "0.5in", "bottom": "0.5in", "left": "0.5in"},
}


class EngineSession(ABC):
    """One live engine instance holding one page."""

    @abstractmethod
    def load(self, html: str, timeout_s: float) -> None:
        """
        Load markup into the page.

        Raises:
            TimeoutError: If the content does not load within timeout_s
        """

    @abstractmethod
    def settle(self, grace_s: float) -> None:
        """Give late assets (images, fonts) a grace period to finish loading."""

    @abstractmethod
    def paginate(self) -> bytes:
        """Print the loaded page to PDF bytes."""

    @abstractmethod
    def close(self) -> None:
        """Release the instance. Must be safe to call after any failure."""


class RenderEngine(ABC):
    @abstractmethod
    def launch(self) -> EngineSession:
        """Start a new engine instance."""


class PlaywrightSession(EngineSession):
    def __init__(self, playwright, browser, page):
        self._playwright = playwright
        self._browser = browser
        self._page = page

    def load(self, html: str, timeout_s: float) -> None:
        from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

        try:
            self._page.set_content(html, wait_until="load", timeout=timeout_s * 1000)
        except PlaywrightTimeoutError as e:
            raise TimeoutError(f"content did not load within {timeout_s}s") from e
        self._page.emulate_media(media="print")

    def settle(self, grace_s: float) -> None:
        self._page.wait_for_load_state("networkidle", timeout=max(grace_s, 0.001) * 1000)
        self._page.wait_for_timeout(grace_s * 1000)

    def paginate(self) -> bytes:
        return self._page.pdf(**PDF_OPTIONS)

    def close(self) -> None:
        # Each step tolerates a half-started session
        for closer in (self._close_page, self._close_browser, self._stop_playwright):
            try:
                closer()
            except Exception as e:
                _log_debug(f"Ignoring teardown error: {type(e).__name__}: {e}")

    def _close_page(self) -> None:
        if self._page is not None:
            self._page.close()
            self._page = None

    def _close_browser(self) -> None:
        if self._browser is not None:
            self._browser.close()
            self._browser = None

    def _stop_playwright(self) -> None:
        if self._playwright is not None:
            self._playwright.stop()
            self._playwright = None


class PlaywrightEngine(RenderEngine):
    """
    Headless Chromium through Playwright's sync API.

    Each launch starts its own Playwright driver and browser, so sessions
    are independent and can run on separate worker threads.
    """

    def __init__(self, args=CHROMIUM_ARGS, viewport=None):
        self.args = list(args)
        self.viewport = dict(viewport or VIEWPORT)

    def launch(self) -> EngineSession:
        from playwright.sync_api import sync_playwright

        playwright = sync_playwright().start()
        browser = page = None
        try:
            browser = playwright.chromium.launch(headless=True, args=self.args)
            page = browser.new_page(viewport=self.viewport)
        except Exception:
            PlaywrightSession(playwright, browser, page).close()
            raise
        return PlaywrightSession(playwright, browser, page)
