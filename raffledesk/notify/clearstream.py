import os
import logging
from typing import Any, Mapping, Optional
from urllib.parse import urljoin

import requests
from dotenv import load_dotenv

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.getclearstream.com/v1"


def to_e164(phone: str) -> str:
    """Format a North American phone number for the texts API.

    ``555-123-4567`` becomes ``+15551234567``; numbers whose digits already
    start with the country code ``1`` are only prefixed with ``+``.
    """
    digits = "".join(ch for ch in phone if ch.isdigit())
    if not digits:
        raise ValueError("phone must contain digits")
    return f"+{digits}" if digits.startswith("1") else f"+1{digits}"


class ClearstreamClient:
    """Minimal client for the Clearstream SMS texts endpoint."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: int = 30,
        session: Optional[requests.Session] = None,
    ):
        load_dotenv()
        key = api_key or os.getenv("CLEARSTREAM_API_KEY")
        if not key:
            raise ValueError("Environment variable 'CLEARSTREAM_API_KEY' is not set")

        self.api_key = key
        self.base_url = (
            base_url or os.getenv("CLEARSTREAM_BASE_URL") or DEFAULT_BASE_URL
        ).rstrip("/")
        self.session = session or requests.Session()
        self.timeout = timeout

    # -------- headers --------
    @property
    def headers(self) -> Mapping[str, str]:
        return {
            "Accept": "application/json",
            "Content-Type": "application/json",
            "X-Api-Key": self.api_key,
        }

    # -------- core request --------
    def _request(
        self,
        method: str,
        path: str,
        *,
        json: Optional[dict] = None,
    ) -> Any:
        url = urljoin(self.base_url + "/", path.lstrip("/"))
        r = self.session.request(
            method=method.upper(),
            url=url,
            headers=self.headers,
            json=json,
            timeout=self.timeout,
        )
        r.raise_for_status()
        return r.json() if r.content else None

    # -------- API callers --------
    def send_text(self, phone: str, header: str, body: str) -> Any:
        """Send a one-off text message to ``phone``.

        Raises
        ------
        requests.HTTPError
            If the API rejects the request.
        """
        to = to_e164(phone)
        # Never log the API key; the destination is enough for diagnostics.
        logger.debug(f"Sending SMS notification to {to}")
        return self._request(
            "POST",
            "/texts",
            json={"to": to, "text_header": header, "text_body": body},
        )
