"""
Pytest configuration and shared fixtures.
This file ensures the project root is in sys.path for imports and pins the
environment before the application settings are loaded.
"""

import os
import sys
from pathlib import Path

# Add project root to sys.path so we can import domain, services, etc.
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

# Settings are read once at import time; keep tests off real databases and vendors.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "testing"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["INITIAL_CREDIT_BALANCE"] = "10"
os.environ["LLM_RETRY_DELAY_SEC"] = "0"
os.environ.pop("OPENAI_API_KEY", None)
os.environ.pop("GEMINI_API_KEY", None)

from test_fixtures import api_client, db_session, llm_vendor  # noqa: E402,F401
