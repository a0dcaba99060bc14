import requests
import os
from dotenv import load_dotenv

load_dotenv()

API_BASE_URL = os.getenv("API_BASE_URL", "http://127.0.0.1:8000").rstrip("/")
API_TIMEOUT_SECONDS = float(os.getenv("API_TIMEOUT_SECONDS", "30"))


class APIError(Exception):
    """Reports service answered with an HTTP error."""


def api_request(method, endpoint, json=None, params=None, raw=False):
    response = requests.request(
        method=method,
        url=f"{API_BASE_URL}{endpoint}",
        json=json,
        params=params,
        timeout=API_TIMEOUT_SECONDS,
    )

    if response.status_code >= 400:
        raise APIError(response.text)

    if raw:
        return response
    return response.json()
