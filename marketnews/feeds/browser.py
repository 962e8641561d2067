"""
Sessão Chromium headless usada para renderizar a página de notícias.

Camada fina sobre a API síncrona do Playwright, expondo só o que o pipeline
usa: carregar URL, esperar seletor, consultar elementos, ler texto e clicar.
Exceções do Playwright viram ``FetchError`` / ``ElementTimeout``.

Objetos síncronos do Playwright ficam presos à thread que os criou: a sessão
precisa ser aberta, usada e fechada na mesma thread.
"""

import logging
from typing import List, Optional

from pydantic import BaseModel
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError
from playwright.sync_api import sync_playwright

from marketnews.config import DEFAULT_USER_AGENT
from marketnews.errors import ElementNotFound, ElementTimeout, FetchError

log = logging.getLogger(__name__)


class BrowserOptions(BaseModel):
    headless: bool = True
    no_sandbox: bool = True
    disable_dev_shm_usage: bool = True
    hide_automation: bool = True  # esconde navigator.webdriver
    user_agent: Optional[str] = DEFAULT_USER_AGENT

    def launch_args(self) -> List[str]:
        args = []
        if self.no_sandbox:
            args.append("--no-sandbox")
        if self.disable_dev_shm_usage:
            args.append("--disable-dev-shm-usage")
        if self.hide_automation:
            args.append("--disable-blink-features=AutomationControlled")
        return args


class PageElement:
    def __init__(self, handle):
        self._handle = handle

    def find(self, selector: str) -> "PageElement":
        try:
            found = self._handle.query_selector(selector)
        except PlaywrightError as e:
            raise FetchError(f"query {selector!r} failed: {e}") from e
        if found is None:
            raise ElementNotFound(f"no element matches {selector!r}")
        return PageElement(found)

    def find_all(self, selector: str) -> List["PageElement"]:
        try:
            return [PageElement(h) for h in self._handle.query_selector_all(selector)]
        except PlaywrightError as e:
            raise FetchError(f"query {selector!r} failed: {e}") from e

    def text(self) -> str:
        try:
            return (self._handle.inner_text() or "").strip()
        except PlaywrightError as e:
            raise FetchError(f"could not read element text: {e}") from e

    def click(self, timeout_ms: Optional[int] = None) -> None:
        # sem timeout o Playwright espera até 30s o elemento ficar clicável
        kwargs = {"timeout": timeout_ms} if timeout_ms is not None else {}
        try:
            self._handle.click(**kwargs)
        except PlaywrightError as e:
            raise FetchError(f"click failed: {e}") from e


class BrowserSession:
    def __init__(self, playwright, browser, page):
        self._playwright = playwright
        self._browser = browser
        self._page = page

    def load(self, url: str) -> None:
        try:
            self._page.goto(url)
        except PlaywrightError as e:
            raise FetchError(f"could not load {url}: {e}") from e

    def wait_for(self, selector: str, timeout_ms: int) -> PageElement:
        try:
            handle = self._page.wait_for_selector(selector, state="attached", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise ElementTimeout(f"{selector!r} did not appear within {timeout_ms}ms") from e
        except PlaywrightError as e:
            raise FetchError(f"waiting for {selector!r} failed: {e}") from e
        if handle is None:
            raise ElementTimeout(f"{selector!r} did not appear within {timeout_ms}ms")
        return PageElement(handle)

    def find(self, selector: str) -> PageElement:
        try:
            found = self._page.query_selector(selector)
        except PlaywrightError as e:
            raise FetchError(f"query {selector!r} failed: {e}") from e
        if found is None:
            raise ElementNotFound(f"no element matches {selector!r}")
        return PageElement(found)

    def find_all(self, selector: str) -> List[PageElement]:
        try:
            return [PageElement(h) for h in self._page.query_selector_all(selector)]
        except PlaywrightError as e:
            raise FetchError(f"query {selector!r} failed: {e}") from e

    def close(self) -> None:
        # Fecha na ordem inversa; falhas aqui não devem impedir o resto
        for closer in (self._browser.close, self._playwright.stop):
            try:
                closer()
            except Exception:
                log.debug("Failed to close browser resource cleanly", exc_info=True)


def acquire_session(options: Optional[BrowserOptions] = None) -> BrowserSession:
    options = options or BrowserOptions()
    playwright = None
    try:
        playwright = sync_playwright().start()
        browser = playwright.chromium.launch(headless=options.headless, args=options.launch_args())
        context = browser.new_context(user_agent=options.user_agent) if options.user_agent else browser.new_context()
        page = context.new_page()
    except PlaywrightError as e:
        if playwright is not None:
            playwright.stop()
        raise FetchError(f"could not start browser: {e}") from e
    log.info("Browser session started (headless=%s)", options.headless)
    return BrowserSession(playwright, browser, page)
