import os
import pytz
from dotenv import load_dotenv

load_dotenv()

# Upstream project-management API (returns {success, data} envelopes)
UPSTREAM_API_URL = os.getenv("UPSTREAM_API_URL", "http://127.0.0.1:8080/api").rstrip("/")
UPSTREAM_API_TOKEN = os.getenv("UPSTREAM_API_TOKEN")
UPSTREAM_TIMEOUT_SECONDS = float(os.getenv("UPSTREAM_TIMEOUT_SECONDS", "10"))

# "Today" / "Yesterday" are calendar days in this zone
REPORTS_TIMEZONE = pytz.timezone(os.getenv("REPORTS_TIMEZONE", "UTC"))

ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("ALLOWED_ORIGINS", "*").split(",")
    if origin.strip()
]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
