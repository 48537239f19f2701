# backend/tests/conftest.py
"""
Pytest configuration for the candidature mail relay backend tests.

- Ensures that the project root (backend/) is added to sys.path
  so that `import app.*` works correctly in tests.
- Ensures required environment variables for tests are set
  with safe dummy values (e.g., EMAIL_FROM, BREVO_API_KEY).
- Clears cached settings / senders between tests so that monkeypatched
  environment variables are picked up.
"""

import os
import sys
from pathlib import Path

import pytest


def _ensure_project_root_in_sys_path() -> None:
    # This file is located at: backend/tests/conftest.py
    # parents[1] -> backend/
    project_root = Path(__file__).resolve().parents[1]
    project_root_str = str(project_root)

    if project_root_str not in sys.path:
        # Insert at the beginning so it has priority over site-packages, etc.
        sys.path.insert(0, project_root_str)


def _ensure_test_env_vars() -> None:
    """
    Set dummy environment variables required for tests.

    These values are only for local testing and do NOT contain real secrets.
    In real environments, proper values should be provided via .env or system env.
    """
    os.environ.setdefault("EMAIL_FROM", "noreply@example.com")
    os.environ.setdefault("EMAIL_FROM_NAME", "Recrutement")
    os.environ.setdefault("BREVO_API_KEY", "dummy-brevo-api-key-for-tests")
    os.environ.setdefault("MAIL_TRANSPORT", "brevo")
    os.environ.setdefault("CONTACT_RECIPIENT_EMAIL", "operator@example.com")


_ensure_project_root_in_sys_path()
_ensure_test_env_vars()


@pytest.fixture(autouse=True)
def _reset_mail_caches():
    from app.mail.factory import reset_mail_sender
    from app.notifications.factory import build_renderer

    reset_mail_sender()
    build_renderer.cache_clear()
    yield
    reset_mail_sender()
    build_renderer.cache_clear()
