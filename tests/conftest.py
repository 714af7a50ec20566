"""Shared fixtures: fake issuers that count what they report."""

import threading
from collections import defaultdict

import pytest

from errors import FatalConfigError, TransientRequestError
from issuers import RequestIssuer


class CountingIssuer(RequestIssuer):
    """Reports ``per_cycle`` successful sub-requests instantly and tallies them per user."""

    def __init__(self, per_cycle=1, delay=0.0):
        self.per_cycle = per_cycle
        self.delay = delay
        self.lock = threading.Lock()
        self.reported = defaultdict(int)
        self.closed = False

    def issue(self, user_id, report):
        if self.delay:
            threading.Event().wait(self.delay)
        for _ in range(self.per_cycle):
            report(True)
            with self.lock:
                self.reported[user_id] += 1
        return self.per_cycle

    def total(self):
        with self.lock:
            return sum(self.reported.values())

    def close(self):
        self.closed = True


class FatalIssuer(RequestIssuer):
    def __init__(self):
        self.calls = 0

    def issue(self, user_id, report):
        self.calls += 1
        raise FatalConfigError("no access token found")


class FlakyIssuer(RequestIssuer):
    """Every other cycle raises a transient error."""

    def __init__(self):
        self.lock = threading.Lock()
        self.cycles = 0
        self.ok = 0

    def issue(self, user_id, report):
        with self.lock:
            self.cycles += 1
            fail = self.cycles % 2 == 0
            if not fail:
                self.ok += 1
        if fail:
            raise TransientRequestError("HTTP 503", status_code=503)
        report(True)
        return 1


@pytest.fixture
def counting_issuer():
    return CountingIssuer()


@pytest.fixture
def fatal_issuer():
    return FatalIssuer()


@pytest.fixture
def flaky_issuer():
    return FlakyIssuer()


@pytest.fixture
def clean_env(monkeypatch):
    for name in (
        "API_BASE_URL",
        "TEST_ACCESS_TOKEN",
        "TEST_USER_ID",
        "TEST_USER_ACCOUNT_ID",
        "TEST_USER_EMAIL",
        "TEST_NOTE_ID",
        "TEST_PROJECT_ID",
        "TEST_TEMPLATE_ID",
    ):
        # teardown also removes values written by load_dotenv
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    return monkeypatch
