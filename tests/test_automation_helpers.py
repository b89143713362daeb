import pytest
from playwright.sync_api import Error as PlaywrightError

from outreach.linkedin import automation
from outreach.linkedin.automation import (
    DIALOG_CLOSE_BUTTON,
    NEXT_BUTTON,
    LinkedInAutomation,
    build_search_url,
    css_escape,
)


def test_search_url_encodes_query_and_facets():
    url = build_search_url("vp engineering", network="S", geo_urn="103644278")

    assert url.startswith("https://www.linkedin.com/search/results/people/?keywords=vp%20engineering")
    assert "&network=%5B%22S%22%5D" in url
    assert url.endswith("&geoUrn=%5B%22103644278%22%5D")


def test_search_url_without_geo():
    assert "geoUrn" not in build_search_url("cto")


def test_css_escape_dom_ids():
    assert css_escape("ember123") == "ember123"
    assert css_escape("thread:2-0") == "thread\\:2-0"
    assert css_escape("a.b c") == "a\\.b\\ c"


class StubLocator:
    def __init__(self, visible=True, disabled=False, aria_disabled=None, error=None):
        self.visible = visible
        self.disabled = disabled
        self.aria_disabled = aria_disabled
        self.error = error
        self.clicks = 0

    @property
    def first(self):
        return self

    def is_visible(self, timeout=None):
        if self.error:
            raise self.error
        return self.visible

    def is_disabled(self):
        return self.disabled

    def get_attribute(self, name):
        return self.aria_disabled if name == "aria-disabled" else None

    def click(self, timeout=None):
        self.clicks += 1


class StubKeyboard:
    def __init__(self):
        self.pressed = []

    def press(self, key):
        self.pressed.append(key)


class StubPage:
    def __init__(self, locators):
        self.locators = locators
        self.keyboard = StubKeyboard()

    def locator(self, selector):
        return self.locators[selector]


def _automation(**locators):
    return LinkedInAutomation(StubPage(locators))


@pytest.mark.parametrize("button, expected", [
    (StubLocator(), True),
    (StubLocator(aria_disabled="false"), True),
    (StubLocator(visible=False), False),
    (StubLocator(disabled=True), False),
    (StubLocator(aria_disabled="true"), False),
    (StubLocator(error=PlaywrightError("detached")), False),
])
def test_next_page_requires_visible_enabled_button(button, expected):
    linkedin = _automation(**{NEXT_BUTTON: button})

    assert linkedin.next_page_available() is expected


@pytest.fixture
def no_sleep(monkeypatch):
    monkeypatch.setattr(automation.time, "sleep", lambda seconds: None)


def test_close_invite_dialog_clicks_visible_close_button(no_sleep):
    close = StubLocator()
    linkedin = _automation(**{DIALOG_CLOSE_BUTTON: close})

    linkedin.close_invite_dialog()

    assert close.clicks == 1
    assert linkedin.page.keyboard.pressed == []


def test_close_invite_dialog_falls_back_to_escape(no_sleep):
    close = StubLocator(visible=False)
    linkedin = _automation(**{DIALOG_CLOSE_BUTTON: close})

    linkedin.close_invite_dialog()

    assert close.clicks == 0
    assert linkedin.page.keyboard.pressed == ["Escape"]


def test_close_invite_dialog_never_raises(no_sleep):
    linkedin = _automation(**{DIALOG_CLOSE_BUTTON: StubLocator(error=PlaywrightError("gone"))})

    linkedin.close_invite_dialog()
