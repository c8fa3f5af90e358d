"""Authenticated HTTP access to a gateway's XML API."""

import logging
import threading
import time

import requests
from requests.auth import HTTPBasicAuth

from ..core.exceptions import AuthenticationError, ConnectionError, ValidationError

logger = logging.getLogger(__name__)

DEFAULT_PORT = 80
DEFAULT_USERNAME = "smile"
DEFAULT_TIMEOUT = 10.0
CHUNK_SIZE = 4096

HTTP_METHODS = ("GET", "PUT", "POST", "DELETE")


class DocumentFetcher:
    """Sends one request per call to a gateway, with Basic Auth and a timeout.

    The timeout is a deadline for the whole exchange, from connecting to the
    last body byte. ``requests`` only bounds each socket operation, so the
    exchange runs on a helper thread that the caller stops waiting for once
    the deadline passes; the helper itself gives up at its next read.

    No session is kept between calls and nothing is retried: a 401 raises
    AuthenticationError, everything else that goes wrong raises
    ConnectionError.
    """

    def __init__(
        self,
        host: str,
        password: str,
        username: str = DEFAULT_USERNAME,
        port: int = DEFAULT_PORT,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.host = host
        self.port = port
        self.username = username
        self.timeout = timeout
        self._password = password

    @property
    def base_url(self) -> str:
        return f"http://{self.host}:{self.port}"

    def request(self, endpoint: str, method: str = "GET", data: str | None = None) -> str:
        """Perform a request and return the response body.

        Args:
            endpoint: Path on the gateway, e.g. ``/core/domain_objects``.
            method: One of GET, PUT, POST, DELETE.
            data: Optional XML fragment sent as the request body.

        Returns:
            Raw response text.

        Raises:
            AuthenticationError: If the gateway rejects the credential.
            ConnectionError: On timeout, network failure or non-2xx status.
            ValidationError: If the method is not supported.
        """
        if method not in HTTP_METHODS:
            raise ValidationError(f"Unsupported HTTP method: {method}", f"expected one of {', '.join(HTTP_METHODS)}")

        url = f"{self.base_url}{endpoint}"
        logger.debug("%s %s", method, url)

        deadline = time.monotonic() + self.timeout
        outcome: dict = {}
        worker = threading.Thread(
            target=self._exchange,
            args=(method, url, data, deadline, outcome),
            name=f"gateway-request-{self.host}",
            daemon=True,
        )
        worker.start()
        worker.join(self.timeout)

        if worker.is_alive():
            raise ConnectionError("Request timeout", f"{self.host} after {self.timeout}s")
        if "error" in outcome:
            raise outcome["error"]
        return outcome["text"]

    def _exchange(self, method: str, url: str, data: str | None, deadline: float, outcome: dict) -> None:
        try:
            outcome["text"] = self._send(method, url, data, deadline)
        except Exception as e:
            outcome["error"] = e

    def _send(self, method: str, url: str, data: str | None, deadline: float) -> str:
        try:
            response = requests.request(
                method,
                url,
                auth=HTTPBasicAuth(self.username, self._password),
                headers={"Content-Type": "text/xml"},
                data=data.encode("utf-8") if data is not None else None,
                timeout=self.timeout,
                stream=True,
            )
        except requests.Timeout as e:
            raise ConnectionError("Request timeout", f"{self.host} after {self.timeout}s") from e
        except requests.RequestException as e:
            raise ConnectionError("Failed to connect to gateway", str(e)) from e

        with response:
            if response.status_code == 401:
                raise AuthenticationError("Invalid credentials", self.host)

            if not response.ok:
                raise ConnectionError(f"HTTP {response.status_code}: {response.reason}")

            return self._read_body(response, deadline)

    def _read_body(self, response: requests.Response, deadline: float) -> str:
        chunks: list[bytes] = []
        try:
            for chunk in response.iter_content(chunk_size=CHUNK_SIZE):
                if time.monotonic() > deadline:
                    raise ConnectionError("Request timeout", f"{self.host} after {self.timeout}s")
                chunks.append(chunk)
        except requests.RequestException as e:
            raise ConnectionError("Failed to read gateway response", str(e)) from e

        return b"".join(chunks).decode(response.encoding or "utf-8", errors="replace")
