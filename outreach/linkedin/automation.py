"""
LinkedIn browser automation via Playwright.

This is the only module that touches Playwright locators. Everything the
campaign engine needs from the page goes through LinkedInAutomation:

  - search results:  result_links(), read_result(), relationship_text()
  - invite flow:     click_relationship_control(), open_note_dialog(),
                     fill_note(), send_invitation(), close_invite_dialog()
  - pagination:      next_page_available(), go_to_next_page()
  - messaging inbox: open_inbox(), visible_conversations(), ...

Read-only checks return gracefully on failure (empty string, False).
Actions raise OutreachActionError subclasses so callers can classify them.
"""
import logging
import time
from urllib.parse import quote

from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator, Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from outreach.errors import ActionAffordanceTimeout, OutreachActionError, PageAdvanceTimeout

FEED_URL = "https://www.linkedin.com/feed/"
LOGIN_URL = "https://www.linkedin.com/login"
MESSAGING_URL = "https://www.linkedin.com/messaging/"
PEOPLE_SEARCH_URL = "https://www.linkedin.com/search/results/people/"

RESULT_LINK = 'a[data-view-name="search-result-lockup-title"]'
NEXT_BUTTON = 'button[data-testid="pagination-controls-next-button-visible"]'
ADD_NOTE_BUTTON = 'button[aria-label="Add a note"]'
NOTE_INPUT = "#custom-message"
SEND_INVITATION_BUTTON = 'button[aria-label="Send invitation"]'
DIALOG_CLOSE_BUTTON = (
    'button[aria-label="Dismiss"], button[aria-label="Cancel"], button[aria-label="Close"]'
)
SEARCH_INPUT = 'input[placeholder*="Search"], input[placeholder*="search"]'

CONVERSATION_ITEM = "li.msg-conversations-container__convo-item"
CONVERSATION_LIST = ".msg-conversations-container--inbox-shortcuts"
LOAD_MORE_CONVERSATIONS = 'button:has-text("Load more conversations")'
MESSAGE_EDITOR = '.msg-form__contenteditable[contenteditable="true"]'
MESSAGE_SEND_BUTTON = ".msg-form__send-button"

# The relationship button lives three levels above the name link.
_RELATIONSHIP_TEXT_JS = """node => {
    const container = node.parentElement?.parentElement?.parentElement || null;
    if (!container) return '';
    const rel = container.querySelector('[data-view-name="relationship-building-button"]');
    return rel ? (rel.textContent || '').trim() : '';
}"""

_RELATIONSHIP_CLICK_JS = """node => {
    const container = node.parentElement?.parentElement?.parentElement || null;
    if (!container) return false;
    const rel = container.querySelector('[data-view-name="relationship-building-button"]');
    if (!rel) return false;
    const clickable = rel.querySelector('a,button');
    if (!clickable) return false;
    clickable.click();
    return true;
}"""

_VISIBLE_CONVERSATIONS_JS = """(items, snippetLower) => {
    const results = [];
    for (const item of items) {
        if (!item || item.classList.contains('msg-conversation-card--occluded')) continue;
        const snippetNode = item.querySelector('.msg-conversation-card__message-snippet');
        if (!snippetNode) continue;
        const snippet = (snippetNode.textContent || '').replace(/\\s+/g, ' ').trim();
        if (!snippet || !snippet.toLowerCase().includes(snippetLower)) continue;
        const nameNode = item.querySelector('.msg-conversation-card__participant-names');
        const name = (nameNode?.textContent || '').replace(/\\s+/g, ' ').trim();
        if (!name) continue;
        results.push({ id: item.getAttribute('id') || '', name, snippet });
    }
    return results;
}"""

_SCROLL_LIST_JS = """el => {
    const list = el.querySelector('.msg-conversations-container__conversations-list') || el;
    const before = list.scrollTop;
    list.scrollTop = before + list.clientHeight;
    if (list.scrollTop === before) list.scrollTop = list.scrollHeight;
    return list.scrollTop !== before;
}"""


def build_search_url(query: str, network: str = "S", geo_urn: str = "") -> str:
    url = (
        f"{PEOPLE_SEARCH_URL}?keywords={quote(query)}"
        f"&origin=FACETED_SEARCH"
        f"&network=%5B%22{quote(network)}%22%5D"
    )
    if geo_urn:
        url += f"&geoUrn=%5B%22{quote(geo_urn)}%22%5D"
    return url


def css_escape(value: str) -> str:
    """Escape a DOM id for use in a CSS #id selector."""
    special = " !\"#$%&'()*+,./:;<=>?@[\\]^`{|}~"
    return "".join(f"\\{ch}" if ch in special else ch for ch in value)


class LinkedInAutomation:
    """All LinkedIn browser interactions via Playwright."""

    def __init__(self, page: Page):
        self.page = page
        self.logger = logging.getLogger("outreach")

    # --- Session ---

    def check_login_status(self) -> bool:
        """True if the feed renders the global search input."""
        try:
            self.page.goto(FEED_URL, wait_until="domcontentloaded")
            return self.page.locator(SEARCH_INPUT).first.is_visible(timeout=8000)
        except PlaywrightError as e:
            self.logger.debug(f"Login check failed: {e}")
            return False

    def login_with_credentials(self, email: str, password: str) -> bool:
        """Fill the login form and wait for the feed. Returns True on success."""
        try:
            self.page.goto(LOGIN_URL, wait_until="domcontentloaded")
            self.page.fill("#username", email)
            self.page.fill("#password", password)
            self.page.click('button[type="submit"]')
            self.page.wait_for_url("**/feed/**", timeout=60000)
            return True
        except PlaywrightError as e:
            self.logger.error(f"Credential login failed: {e}")
            return False

    def detect_security_challenge(self) -> bool:
        """Check if LinkedIn is showing a CAPTCHA or security verification."""
        current_url = self.page.url.lower()
        if any(term in current_url for term in ["checkpoint", "challenge"]):
            self.logger.critical("Security challenge detected in URL!")
            return True

        try:
            challenge_text = self.page.locator(
                "text=/verify.*identity|security.*verification|unusual.*activity/i"
            )
            if challenge_text.first.is_visible(timeout=2000):
                self.logger.critical("Security challenge detected on page!")
                return True
        except PlaywrightError:
            pass

        return False

    # --- Search Results ---

    def search_people(self, query: str, network: str = "S", geo_urn: str = "",
                      timeout_ms: int = 15000) -> bool:
        """Open the people search for `query`. Returns False if no results rendered."""
        self.logger.info(f"Searching for \"{query}\"...")
        self.page.goto(build_search_url(query, network, geo_urn), wait_until="domcontentloaded")
        try:
            self.page.wait_for_selector(RESULT_LINK, timeout=timeout_ms)
        except PlaywrightTimeoutError:
            self.logger.warning("Search results did not render.")
            return False
        time.sleep(2)
        self.logger.info("Search page loaded.")
        return True

    def result_links(self) -> list[Locator]:
        """Name links of the search results on the current page, in DOM order."""
        try:
            return self.page.locator(RESULT_LINK).all()
        except PlaywrightError as e:
            self.logger.warning(f"Could not list search results: {e}")
            return []

    def read_result(self, link: Locator) -> tuple[str, str]:
        """Return (display name, raw href) of a result link."""
        try:
            name = (link.text_content() or "").strip()
            href = link.get_attribute("href") or ""
        except PlaywrightError as e:
            raise OutreachActionError(f"Could not read search result: {e}") from e
        return name, href

    def relationship_text(self, link: Locator) -> str:
        """Text of the entry's relationship button; empty if it can't be found."""
        try:
            return link.evaluate(_RELATIONSHIP_TEXT_JS) or ""
        except PlaywrightError as e:
            self.logger.debug(f"Relationship button unreachable: {e}")
            return ""

    # --- Invitation Flow ---

    def click_relationship_control(self, link: Locator) -> bool:
        try:
            return bool(link.evaluate(_RELATIONSHIP_CLICK_JS))
        except PlaywrightError as e:
            self.logger.debug(f"Relationship button click failed: {e}")
            return False

    def _wait_and_click(self, selector: str, label: str, timeout_ms: int) -> None:
        button = self.page.locator(selector).first
        try:
            button.wait_for(state="visible", timeout=timeout_ms)
            button.click(timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise ActionAffordanceTimeout(label, timeout_ms) from e
        except PlaywrightError as e:
            raise OutreachActionError(f"Clicking '{label}' failed: {e}") from e

    def open_note_dialog(self, timeout_ms: int) -> None:
        self._wait_and_click(ADD_NOTE_BUTTON, "Add a note", timeout_ms)
        self.logger.debug('"Add a note" button clicked.')

    def fill_note(self, note: str, timeout_ms: int) -> None:
        box = self.page.locator(NOTE_INPUT)
        try:
            box.wait_for(state="visible", timeout=timeout_ms)
            box.fill(note)
        except PlaywrightTimeoutError as e:
            raise ActionAffordanceTimeout("note input", timeout_ms) from e
        except PlaywrightError as e:
            raise OutreachActionError(f"Filling the note failed: {e}") from e
        self.logger.debug(f"Filled connection note ({len(note)} chars).")

    def send_invitation(self, timeout_ms: int) -> None:
        self._wait_and_click(SEND_INVITATION_BUTTON, "Send invitation", timeout_ms)
        self.logger.debug('"Send invitation" button clicked.')

    def close_invite_dialog(self) -> None:
        """Close any invite modal left open. Never raises."""
        try:
            close_btn = self.page.locator(DIALOG_CLOSE_BUTTON).first
            if close_btn.is_visible(timeout=1000):
                close_btn.click(timeout=2000)
            else:
                self.page.keyboard.press("Escape")
            time.sleep(0.5)
        except PlaywrightError as e:
            self.logger.debug(f"Closing invite dialog failed: {e}")

    def pause(self, seconds: float) -> None:
        time.sleep(seconds)

    # --- Pagination ---

    def next_page_available(self) -> bool:
        """Next is usable only if visible, enabled and not aria-disabled."""
        button = self.page.locator(NEXT_BUTTON)
        try:
            if not button.is_visible():
                return False
            if button.is_disabled():
                return False
            return button.get_attribute("aria-disabled") != "true"
        except PlaywrightError:
            return False

    def go_to_next_page(self, settle_seconds: float, timeout_ms: int) -> None:
        """Click next and wait for result markers. Raises PageAdvanceTimeout."""
        self.close_invite_dialog()
        try:
            self.page.locator(NEXT_BUTTON).click(timeout=timeout_ms)
            time.sleep(settle_seconds)
            self.page.wait_for_selector(RESULT_LINK, timeout=timeout_ms)
        except PlaywrightError as e:
            raise PageAdvanceTimeout(f"Next page did not render: {e}") from e

    # --- Messaging Inbox ---

    def open_inbox(self) -> None:
        self.logger.info("Opening LinkedIn Messaging inbox...")
        self.page.goto(MESSAGING_URL, wait_until="domcontentloaded")
        self.page.wait_for_selector(CONVERSATION_ITEM, timeout=20000)
        time.sleep(1)

    def visible_conversations(self, snippet: str) -> list[dict]:
        """Loaded conversations whose latest snippet contains `snippet`."""
        try:
            return self.page.eval_on_selector_all(
                CONVERSATION_ITEM, _VISIBLE_CONVERSATIONS_JS, snippet.strip().lower()
            )
        except PlaywrightError as e:
            self.logger.warning(f"Could not read conversation list: {e}")
            return []

    def load_more_conversations(self) -> bool:
        button = self.page.locator(LOAD_MORE_CONVERSATIONS)
        try:
            if not button.is_visible():
                return False
            button.click()
            time.sleep(1.2)
            return True
        except PlaywrightError:
            return False

    def scroll_conversation_list(self) -> bool:
        container = self.page.locator(CONVERSATION_LIST)
        try:
            if not container.count():
                return False
            if container.first.evaluate(_SCROLL_LIST_JS):
                return True

            box = container.first.bounding_box()
            if not box:
                return False
            self.page.mouse.move(box["x"] + box["width"] / 2, box["y"] + min(40, box["height"] / 2))
            self.page.mouse.wheel(0, box["height"])
            return True
        except PlaywrightError:
            return False

    def open_conversation(self, conversation_id: str, name: str) -> None:
        if conversation_id:
            link = self.page.locator(
                f"li#{css_escape(conversation_id)} .msg-conversation-listitem__link"
            )
        else:
            link = self.page.locator(CONVERSATION_ITEM).filter(has_text=name).locator(
                ".msg-conversation-listitem__link"
            ).first
        try:
            link.scroll_into_view_if_needed()
        except PlaywrightError:
            pass
        try:
            link.click()
        except PlaywrightError as e:
            raise OutreachActionError(f"Could not open conversation with {name}: {e}") from e

    def draft_message(self, message: str, timeout_ms: int = 15000) -> None:
        editor = self.page.locator(MESSAGE_EDITOR)
        try:
            editor.wait_for(state="visible", timeout=timeout_ms)
            editor.click()
            editor.fill("")
            editor.type(message, delay=15)
        except PlaywrightTimeoutError as e:
            raise ActionAffordanceTimeout("message editor", timeout_ms) from e
        except PlaywrightError as e:
            raise OutreachActionError(f"Typing the message failed: {e}") from e

    def click_send_if_available(self) -> bool:
        button = self.page.locator(MESSAGE_SEND_BUTTON)
        try:
            if not button.is_visible():
                return False
            button.click()
            return True
        except PlaywrightError as e:
            self.logger.warning(f"Send click failed: {e}")
            return False
