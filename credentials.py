"""
Load the test account and target API settings from the environment.

Values come from an env file (python-dotenv) and the process environment.
The process environment wins when both define a variable.
"""

import logging
import os
from dataclasses import dataclass
from urllib.parse import urlparse

from dotenv import load_dotenv

from errors import FatalConfigError

logger = logging.getLogger(__name__)

# ============================================================================
# CONFIGURATION
# ============================================================================

ENV_FILE_PATH = ".env"

# Resources on the test account that every virtual user mutates
DEFAULT_NOTE_ID = "652f9ad5d769854a8c558d97"
DEFAULT_PROJECT_ID = "64ddf79ab40bc5668f46b46d"
DEFAULT_TEMPLATE_ID = "652fe87c1bcf5f9e5674d7e0"


@dataclass(frozen=True)
class AccountContext:
    """Credentials and resource ids shared by every virtual user."""

    base_url: str
    access_token: str
    user_id: str = ""
    account_id: str = ""
    user_email: str = ""
    note_id: str = DEFAULT_NOTE_ID
    project_id: str = DEFAULT_PROJECT_ID
    template_id: str = DEFAULT_TEMPLATE_ID


def check_base_url(url):
    """Raise FatalConfigError unless url is an absolute http(s) URL."""
    parsed = urlparse(url or "")
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise FatalConfigError(f"API_BASE_URL is not a valid http(s) URL: {url!r}")
    return url.rstrip("/")


def load_test_context(env_file=ENV_FILE_PATH):
    """Read the env file and build a validated AccountContext."""
    if env_file:
        if os.path.isfile(env_file):
            load_dotenv(env_file, override=False)
            logger.info("Loaded environment from %s", env_file)
        else:
            logger.warning("Env file %s not found, using process environment only", env_file)

    token = os.getenv("TEST_ACCESS_TOKEN", "").strip()
    if not token:
        raise FatalConfigError("no access token found to use with the http requests (TEST_ACCESS_TOKEN)")

    return AccountContext(
        base_url=check_base_url(os.getenv("API_BASE_URL", "")),
        access_token=token,
        user_id=os.getenv("TEST_USER_ID", ""),
        account_id=os.getenv("TEST_USER_ACCOUNT_ID", ""),
        user_email=os.getenv("TEST_USER_EMAIL", ""),
        note_id=os.getenv("TEST_NOTE_ID") or DEFAULT_NOTE_ID,
        project_id=os.getenv("TEST_PROJECT_ID") or DEFAULT_PROJECT_ID,
        template_id=os.getenv("TEST_TEMPLATE_ID") or DEFAULT_TEMPLATE_ID,
    )
