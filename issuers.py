"""
Request issuers: the unit of work each virtual user repeats.

An issuer performs one cycle of HTTP calls and calls ``report(success)``
once per call as it finishes. Raise FatalConfigError for anything that
should stop the whole run; per-call problems are transient.
"""

import logging

import requests
from requests.adapters import HTTPAdapter

from credentials import check_base_url
from errors import FatalConfigError, TransientRequestError

logger = logging.getLogger(__name__)

# ============================================================================
# CONFIGURATION
# ============================================================================

REQUEST_TIMEOUT = 10  # seconds
REQUEST_HEADERS = {
    "Content-Type": "application/json",
    "User-Agent": "ActiveUserLoad/1.0",
}


class RequestIssuer:
    """Base class for a pluggable unit of work."""

    def validate(self):
        """Check configuration before any user is spawned."""

    def issue(self, user_id, report):
        """
        Run one unit of work for ``user_id``.

        Call ``report(True)`` / ``report(False)`` per sub-request and return
        the number of sub-requests attempted.
        """
        raise NotImplementedError

    def close(self):
        """Release shared resources once the run is over."""


class CallableIssuer(RequestIssuer):
    """Wrap a plain ``func(user_id, report)`` as an issuer."""

    def __init__(self, func, validator=None):
        self.func = func
        self.validator = validator

    def validate(self):
        if self.validator is not None:
            self.validator()

    def issue(self, user_id, report):
        result = self.func(user_id, report)
        return 0 if result is None else result


class MutationStep:
    """One PUT call in the cycle: a name for logs, a path and a JSON body."""

    def __init__(self, name, path, payload):
        self.name = name
        self.path = path
        self.payload = payload

    def __repr__(self):
        return f"MutationStep({self.name!r}, {self.path!r})"


def default_steps(context):
    """The note / project / template updates exercised by every user."""
    return [
        MutationStep(
            "update note title",
            f"/api/notes/{context.note_id}",
            {"slug": "Test note for helloscribe. Test ID - 1990 | updated"},
        ),
        MutationStep(
            "update project name",
            f"/api/project/{context.project_id}",
            {"name": "Test project updated"},
        ),
        MutationStep(
            "update template name",
            f"/api/templates/{context.template_id}",
            {"name": "Test template name | updated"},
        ),
    ]


def build_session(pool_size=10):
    """A requests session whose connection pool is shared by all users."""
    session = requests.Session()
    adapter = HTTPAdapter(pool_connections=1, pool_maxsize=max(1, pool_size))
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.headers.update(REQUEST_HEADERS)
    return session


class HttpMutationIssuer(RequestIssuer):
    """Authenticated PUT calls against the target API."""

    def __init__(self, context, session=None, steps=None, timeout=REQUEST_TIMEOUT, pool_size=10):
        self.context = context
        self.timeout = timeout
        self.steps = list(steps) if steps is not None else default_steps(context)
        self._owns_session = session is None
        self.session = session if session is not None else build_session(pool_size)

    def validate(self):
        if not self.context.access_token:
            raise FatalConfigError("no access token found to use with the http requests.")
        check_base_url(self.context.base_url)
        if not self.steps:
            raise FatalConfigError("no request steps configured")

    def auth_headers(self):
        return {
            "Authorization": f"Bearer {self.context.access_token}",
            "Content-Type": "application/json",
        }

    def put(self, step):
        """Send one step; raise TransientRequestError on any failure."""
        url = self.context.base_url.rstrip("/") + step.path
        try:
            response = self.session.put(
                url,
                json=step.payload,
                headers=self.auth_headers(),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise TransientRequestError(f"can't {step.name}: {e}") from e

        try:
            if not 200 <= response.status_code < 300:
                raise TransientRequestError(
                    f"can't {step.name}: HTTP {response.status_code}",
                    status_code=response.status_code,
                )
        finally:
            response.close()
        return response.status_code

    def issue(self, user_id, report):
        for step in self.steps:
            try:
                self.put(step)
            except TransientRequestError as e:
                logger.warning("[user %s] %s", user_id, e)
                report(False)
            else:
                report(True)
        return len(self.steps)

    def close(self):
        if self._owns_session:
            self.session.close()
