"""Configuration defaults and .env loading for the OneSky client.

WHY: Credentials and the API endpoint differ per deployment and must
never be hardcoded. Keeping the defaults in one module makes them easy
to find and override.

HOW: python-dotenv loads the .env file on import. Defaults are plain
module-level constants; load_credentials() reads the key pair from the
environment and fails with a clear message when either half is missing.

RULES:
- ONESKY_API_KEY is the public key, ONESKY_API_SECRET the secret key
  (OneSky: Site Settings → API Keys)
- ONESKY_BASE_URL overrides the public platform endpoint
- Explicit OneSkyClient arguments always win over the environment
"""

from __future__ import annotations

import os

from dotenv import load_dotenv

# Load .env from the working directory
load_dotenv()

# ---------------------------------------------------------------------------
# API configuration defaults
# ---------------------------------------------------------------------------

DEFAULT_BASE_URL = "https://platform.api.onesky.io/1/"
ONESKY_BASE_URL = os.getenv("ONESKY_BASE_URL", DEFAULT_BASE_URL)

REQUEST_TIMEOUT_S = 15 * 60  # 15 minutes, applied to every request
DEFAULT_PER_PAGE = 100
"""Page size used by OneSkyClient.get_all() when none is given."""

PUBLIC_KEY_ENV = "ONESKY_API_KEY"
SECRET_KEY_ENV = "ONESKY_API_SECRET"


def load_credentials() -> tuple[str, str]:
    """Load the OneSky public/secret key pair from the environment.

    WHY: Every request is signed with the secret key. Loading it from the
    environment (via .env) keeps it out of source code.

    HOW: Reads ONESKY_API_KEY and ONESKY_API_SECRET from os.environ,
    stripping surrounding whitespace.

    RULES:
    - Raises ValueError naming the first missing or empty variable
    - Never returns a default/placeholder value
    """
    public_key = os.getenv(PUBLIC_KEY_ENV, "").strip()
    if not public_key:
        raise ValueError(
            f"OneSky public key not configured. Add {PUBLIC_KEY_ENV} to the "
            f"environment or the .env file."
        )
    secret_key = os.getenv(SECRET_KEY_ENV, "").strip()
    if not secret_key:
        raise ValueError(
            f"OneSky secret key not configured. Add {SECRET_KEY_ENV} to the "
            f"environment or the .env file."
        )
    return public_key, secret_key
