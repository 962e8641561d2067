# marketnews/tests/test_browser.py
import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from marketnews.errors import ElementNotFound, ElementTimeout, FetchError
from marketnews.feeds import browser
from marketnews.feeds.browser import BrowserOptions, BrowserSession, PageElement


class StubHandle:
    """Imita um ElementHandle do Playwright."""

    def __init__(self, text="", children=None, error=None):
        self._text = text
        self.children = children or {}
        self.error = error
        self.click_kwargs = []

    def _maybe_fail(self):
        if self.error is not None:
            raise self.error

    def query_selector(self, selector):
        self._maybe_fail()
        found = self.children.get(selector) or []
        return found[0] if found else None

    def query_selector_all(self, selector):
        self._maybe_fail()
        return list(self.children.get(selector) or [])

    def inner_text(self):
        self._maybe_fail()
        return self._text

    def click(self, **kwargs):
        self._maybe_fail()
        self.click_kwargs.append(kwargs)


class StubPage(StubHandle):
    def __init__(self, children=None, error=None, wait_result=None, wait_error=None):
        super().__init__(children=children, error=error)
        self.wait_result = wait_result
        self.wait_error = wait_error
        self.wait_calls = []
        self.visited = []

    def goto(self, url):
        self._maybe_fail()
        self.visited.append(url)

    def wait_for_selector(self, selector, state=None, timeout=None):
        self.wait_calls.append((selector, state, timeout))
        if self.wait_error is not None:
            raise self.wait_error
        return self.wait_result


class Closable:
    def __init__(self, error=None):
        self.error = error
        self.calls = 0

    def __call__(self):
        self.calls += 1
        if self.error is not None:
            raise self.error


def _session(page):
    return BrowserSession(playwright=None, browser=None, page=page)


# ---------- BrowserSession ----------

def test_wait_for_timeout_becomes_element_timeout():
    page = StubPage(wait_error=PlaywrightTimeoutError("Timeout 10000ms exceeded."))
    with pytest.raises(ElementTimeout) as exc:
        _session(page).wait_for(".sepH_a_line", 10000)
    assert isinstance(exc.value, TimeoutError)
    assert page.wait_calls == [(".sepH_a_line", "attached", 10000)]


def test_wait_for_returning_nothing_is_a_timeout():
    with pytest.raises(ElementTimeout):
        _session(StubPage(wait_result=None)).wait_for("ul", 500)


def test_wait_for_other_errors_are_fetch_errors_not_timeouts():
    page = StubPage(wait_error=PlaywrightError("Target page, context or browser has been closed"))
    with pytest.raises(FetchError) as exc:
        _session(page).wait_for("ul", 500)
    assert not isinstance(exc.value, ElementTimeout)


def test_wait_for_returns_wrapped_element():
    page = StubPage(wait_result=StubHandle("Accept and Continue"))
    assert _session(page).wait_for("button", 500).text() == "Accept and Continue"


def test_load_error_becomes_fetch_error():
    page = StubPage(error=PlaywrightError("net::ERR_NAME_NOT_RESOLVED"))
    with pytest.raises(FetchError):
        _session(page).load("https://example.test/")


def test_load_visits_url():
    page = StubPage()
    _session(page).load("https://example.test/")
    assert page.visited == ["https://example.test/"]


def test_session_find_missing_raises_element_not_found():
    with pytest.raises(ElementNotFound):
        _session(StubPage()).find("ul")


def test_session_find_all_wraps_handles():
    page = StubPage(children={".sepH_a_line": [StubHandle("a"), StubHandle("b")]})
    found = _session(page).find_all(".sepH_a_line")
    assert all(isinstance(el, PageElement) for el in found)
    assert [el.text() for el in found] == ["a", "b"]


def test_session_query_errors_become_fetch_errors():
    page = StubPage(error=PlaywrightError("Execution context was destroyed"))
    with pytest.raises(FetchError):
        _session(page).find("ul")
    with pytest.raises(FetchError):
        _session(page).find_all("ul")


def test_close_stops_playwright_even_if_browser_close_fails():
    browser_close = Closable(error=PlaywrightError("already closed"))
    pw_stop = Closable()

    class Holder:
        pass

    b, pw = Holder(), Holder()
    b.close, pw.stop = browser_close, pw_stop
    BrowserSession(playwright=pw, browser=b, page=StubPage()).close()
    assert browser_close.calls == 1
    assert pw_stop.calls == 1


# ---------- PageElement ----------

def test_element_find_missing_raises_element_not_found():
    with pytest.raises(ElementNotFound):
        PageElement(StubHandle()).find("h5.color-red")


def test_element_text_is_stripped():
    assert PageElement(StubHandle("  Gold climbs \n")).text() == "Gold climbs"


def test_element_text_error_becomes_fetch_error():
    with pytest.raises(FetchError):
        PageElement(StubHandle(error=PlaywrightError("detached"))).text()


def test_element_find_all_error_becomes_fetch_error():
    with pytest.raises(FetchError):
        PageElement(StubHandle(error=PlaywrightError("detached"))).find_all("span")


def test_click_passes_timeout_through():
    handle = StubHandle()
    PageElement(handle).click(timeout_ms=5000)
    PageElement(handle).click()
    assert handle.click_kwargs == [{"timeout": 5000}, {}]


def test_click_error_becomes_fetch_error():
    with pytest.raises(FetchError):
        PageElement(StubHandle(error=PlaywrightTimeoutError("element is not visible"))).click(timeout_ms=10)


# ---------- BrowserOptions / acquire_session ----------

def test_launch_args_default_to_hardened_flags():
    assert BrowserOptions().launch_args() == [
        "--no-sandbox",
        "--disable-dev-shm-usage",
        "--disable-blink-features=AutomationControlled",
    ]


def test_launch_args_can_be_turned_off():
    opts = BrowserOptions(no_sandbox=False, disable_dev_shm_usage=False, hide_automation=False)
    assert opts.launch_args() == []


class StubPlaywright:
    def __init__(self, launch_error=None):
        self.launch_error = launch_error
        self.launch_kwargs = None
        self.context_kwargs = None
        self.stopped = False
        self.chromium = self

    # sync_playwright() -> .start()
    def start(self):
        return self

    def stop(self):
        self.stopped = True

    def launch(self, **kwargs):
        if self.launch_error is not None:
            raise self.launch_error
        self.launch_kwargs = kwargs
        return self

    def new_context(self, **kwargs):
        self.context_kwargs = kwargs
        return self

    def new_page(self):
        return StubPage()

    def close(self):
        pass


def test_acquire_session_applies_options(monkeypatch):
    pw = StubPlaywright()
    monkeypatch.setattr(browser, "sync_playwright", lambda: pw)

    session = browser.acquire_session(BrowserOptions(headless=True, user_agent="UA/1.0"))

    assert isinstance(session, BrowserSession)
    assert pw.launch_kwargs == {"headless": True, "args": BrowserOptions().launch_args()}
    assert pw.context_kwargs == {"user_agent": "UA/1.0"}


def test_acquire_session_launch_failure_is_fetch_error_and_stops_driver(monkeypatch):
    pw = StubPlaywright(launch_error=PlaywrightError("Executable doesn't exist"))
    monkeypatch.setattr(browser, "sync_playwright", lambda: pw)

    with pytest.raises(FetchError):
        browser.acquire_session()
    assert pw.stopped
