"""Configuration settings for the hypothesis checker."""

import logging
import os
from dotenv import load_dotenv

load_dotenv()

# Logging setup
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
logging.basicConfig(
    level=getattr(logging, LOG_LEVEL),
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)

# Contact email sent to providers for polite-pool identification
CONTACT_EMAIL = os.getenv("CONTACT_EMAIL")

# OpenAlex
OPENALEX_BASE_URL = "https://api.openalex.org"

# Semantic Scholar (reached through the relay)
SEMANTIC_SCHOLAR_BASE_URL = "https://api.semanticscholar.org/graph/v1"
SEMANTIC_SCHOLAR_API_KEY = os.getenv("SEMANTIC_SCHOLAR_API_KEY")
RELAY_URL = os.getenv("RELAY_URL", "http://127.0.0.1:8000/api/semanticscholar")

# Results per page, shared by every provider
PAGE_SIZE = 25

# Citation floor applied when the caller sets no minimum
DEFAULT_MIN_CITATIONS = 5

# Retry settings (Semantic Scholar)
MAX_ATTEMPTS = 3
RATE_LIMIT_RETRY_DELAY = 5.0  # seconds to wait after a 429
RETRY_BACKOFF_UNIT = 1.0  # attempt * unit seconds after other failures

REQUEST_TIMEOUT = 30.0

# Email (Resend)
RESEND_API_KEY = os.getenv("RESEND_API_KEY")
RESEND_API_URL = "https://api.resend.com/emails"
EMAIL_SENDER = os.getenv("EMAIL_SENDER", "Onboarding Resend <onboarding@resend.dev>")
