"""Scripted fakes for the Playwright-facing automation and browser session."""

from outreach.errors import ActionAffordanceTimeout, OutreachActionError, PageAdvanceTimeout


class FakeEntry:
    """A search result as the automation layer would see it."""

    def __init__(self, name, href, button_text="Connect", behavior="ok"):
        self.name = name
        self.href = href
        self.button_text = button_text
        # ok | no_click | no_note | no_input | send_fails | unreadable
        self.behavior = behavior


class FakeLinkedIn:
    """Scripted stand-in for LinkedInAutomation over a list of result pages."""

    def __init__(self, pages, fail_advance_to=(), conversations=None):
        self.pages = pages
        self.page_index = 0
        self.fail_advance_to = set(fail_advance_to)
        self.active = None
        self.calls = []
        self.notes = {}
        self.closed_dialogs = 0
        self.pauses = []
        self.searches = []
        # inbox: one list of conversation dicts per pass
        self.conversation_passes = conversations or []
        self.pass_index = 0
        self.drafts = []
        self.sent_messages = []
        self.inbox_opened = False

    # search results
    def search_people(self, query, network="S", geo_urn=""):
        self.searches.append(query)
        return True

    def result_links(self):
        return list(self.pages[self.page_index])

    def read_result(self, link):
        if link.behavior == "unreadable":
            raise OutreachActionError("detached")
        return link.name, link.href

    def relationship_text(self, link):
        return link.button_text

    # invite flow
    def click_relationship_control(self, link):
        self.calls.append(("click", link.name))
        if link.behavior == "no_click":
            return False
        self.active = link
        return True

    def open_note_dialog(self, timeout_ms):
        self.calls.append(("add_note", self.active.name))
        if self.active.behavior == "no_note":
            raise ActionAffordanceTimeout("Add a note", timeout_ms)

    def fill_note(self, note, timeout_ms):
        if self.active.behavior == "no_input":
            raise ActionAffordanceTimeout("note input", timeout_ms)
        self.notes[self.active.name] = note
        self.calls.append(("fill", self.active.name))

    def send_invitation(self, timeout_ms):
        if self.active.behavior == "send_fails":
            raise OutreachActionError("Send invitation detached")
        self.calls.append(("send", self.active.name))

    def close_invite_dialog(self):
        self.closed_dialogs += 1

    def pause(self, seconds):
        self.pauses.append(seconds)

    # pagination
    def next_page_available(self):
        return self.page_index < len(self.pages) - 1

    def go_to_next_page(self, settle_seconds, timeout_ms):
        self.page_index += 1
        if self.page_index in self.fail_advance_to:
            raise PageAdvanceTimeout("results never rendered")

    # inbox
    def open_inbox(self):
        self.inbox_opened = True

    def visible_conversations(self, snippet):
        if self.pass_index < len(self.conversation_passes):
            batch = self.conversation_passes[self.pass_index]
        elif self.conversation_passes:
            batch = self.conversation_passes[-1]
        else:
            batch = []
        self.pass_index += 1
        return list(batch)

    def load_more_conversations(self):
        return False

    def scroll_conversation_list(self):
        return True

    def open_conversation(self, dom_id, name):
        self.calls.append(("open_conversation", name))

    def draft_message(self, message):
        self.drafts.append(message)

    def click_send_if_available(self):
        self.sent_messages.append(self.drafts[-1])
        return True


class FakeSession:
    def __init__(self, linkedin, login_error=None):
        self.linkedin = linkedin
        self.login_error = login_error
        self.logged_in = False
        self.closed = False

    def login(self):
        if self.login_error:
            raise self.login_error
        self.logged_in = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.closed = True


def profile(n, button_text="Connect", behavior="ok"):
    return FakeEntry(f"Person {n}", f"/in/person-{n}/", button_text, behavior)
