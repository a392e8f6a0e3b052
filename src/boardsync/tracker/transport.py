"""Transports that carry GitHub REST and GraphQL requests.

Two implementations share one interface:
- HttpTransport talks to the API directly with httpx and a token.
- GhCliTransport shells out to ``gh api`` and reuses the gh CLI's login.
"""

from __future__ import annotations

import json
import logging
import subprocess
from typing import Any, Protocol

import httpx

from boardsync.logging import sanitize_for_log, truncate_output
from boardsync.tracker.exceptions import TransportError

logger = logging.getLogger("boardsync.tracker")

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0

RATE_LIMIT_PATTERNS = ("rate limit", "secondary rate", "abuse detection")


class Transport(Protocol):
    """Request carrier used by GitHubTracker."""

    def rest(self, method: str, path: str, body: dict[str, Any] | None = None) -> dict[str, Any]:
        """Send a REST request and return the decoded JSON object."""
        ...

    def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """Run a GraphQL document and return its ``data`` object."""
        ...

    def close(self) -> None:
        """Release any held resources."""
        ...


def is_rate_limited(status: int | None, text: str) -> bool:
    """Whether a failed response is a rate-limit rejection."""
    if status == 429:
        return True
    lowered = text.lower()
    return any(pattern in lowered for pattern in RATE_LIMIT_PATTERNS)


def graphql_data(response: Any) -> dict[str, Any]:
    """Extract ``data`` from a decoded GraphQL response.

    Raises:
        TransportError: If the response carries errors or no data.
    """
    if not isinstance(response, dict):
        raise TransportError(f"Unexpected GraphQL response: {response!r}")

    errors = response.get("errors")
    if errors:
        retryable = any(
            isinstance(error, dict) and error.get("type") == "RATE_LIMITED" for error in errors
        )
        messages = "; ".join(
            str(error.get("message", error)) if isinstance(error, dict) else str(error)
            for error in errors
        )
        raise TransportError(f"GraphQL errors: {messages}", retryable=retryable)

    data = response.get("data")
    if not isinstance(data, dict):
        raise TransportError("GraphQL response has no data")
    return data


class HttpTransport:
    """GitHub API transport over httpx."""

    def __init__(
        self,
        token: str,
        api_url: str = DEFAULT_API_URL,
        graphql_url: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        """Initialize the transport.

        Args:
            token: GitHub token with repo and project scopes.
            api_url: REST API root (GitHub Enterprise: https://HOST/api/v3).
            graphql_url: GraphQL endpoint; derived from api_url when omitted.
            timeout: Per-request timeout in seconds.
        """
        self.token = token
        self.api_url = api_url.rstrip("/")
        if graphql_url is None:
            if self.api_url.endswith("/api/v3"):
                graphql_url = self.api_url[: -len("/v3")] + "/graphql"
            else:
                graphql_url = self.api_url + "/graphql"
        self.graphql_url = graphql_url
        self.timeout = timeout
        self._client: httpx.Client | None = None

    @property
    def client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                headers={
                    "Authorization": f"Bearer {self.token}",
                    "Accept": "application/vnd.github+json",
                    "X-GitHub-Api-Version": "2022-11-28",
                },
                timeout=self.timeout,
            )
        return self._client

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _send(self, method: str, url: str, body: dict[str, Any] | None) -> Any:
        try:
            response = self.client.request(method, url, json=body)
        except (httpx.ConnectError, httpx.ConnectTimeout) as e:
            # Request never reached the tracker
            raise TransportError(f"Could not connect to {url}: {e}", retryable=True) from e
        except httpx.TimeoutException as e:
            raise TransportError(f"Request to {url} timed out after {self.timeout}s") from e
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {url} failed: {e}") from e

        if response.status_code >= 400:
            text = sanitize_for_log(truncate_output(response.text, 1000))
            retryable = response.status_code == 429 or (
                response.status_code == 403
                and (
                    response.headers.get("x-ratelimit-remaining") == "0"
                    or is_rate_limited(response.status_code, text)
                )
            )
            raise TransportError(
                f"{method} {url} failed: {response.status_code} - {text}",
                status=response.status_code,
                retryable=retryable,
            )

        try:
            return response.json()
        except ValueError as e:
            raise TransportError(
                f"Invalid JSON from {url}: {e}", status=response.status_code
            ) from e

    def rest(self, method: str, path: str, body: dict[str, Any] | None = None) -> dict[str, Any]:
        url = f"{self.api_url}/{path.lstrip('/')}"
        logger.debug("REST %s %s", method, url)
        data = self._send(method, url, body)
        if not isinstance(data, dict):
            raise TransportError(f"Unexpected response from {url}: {data!r}")
        return data

    def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables
        return graphql_data(self._send("POST", self.graphql_url, payload))


class GhCliTransport:
    """GitHub API transport through the ``gh`` command-line tool.

    Request bodies are piped to ``gh api --input -`` as JSON, so titles and
    bodies never pass through argument parsing.
    """

    def __init__(
        self,
        gh_path: str = "gh",
        hostname: str | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.gh_path = gh_path
        self.hostname = hostname
        self.timeout = timeout

    def check_available(self) -> bool:
        """Check that the gh CLI is installed and responds."""
        try:
            result = subprocess.run(
                [self.gh_path, "--version"],
                capture_output=True,
                text=True,
                timeout=10,
            )
            return result.returncode == 0
        except (OSError, subprocess.TimeoutExpired):
            return False

    def close(self) -> None:
        pass

    def _run_gh(self, *args: str, input_data: str | None = None) -> str:
        """Run a gh command and return its stdout.

        Raises:
            subprocess.CalledProcessError: If gh exits non-zero.
            subprocess.TimeoutExpired: If gh does not finish in time.
            OSError: If gh is missing or cannot be executed.
        """
        result = subprocess.run(
            [self.gh_path, *args],
            input=input_data,
            capture_output=True,
            text=True,
            check=True,
            timeout=self.timeout,
        )
        return result.stdout

    def _api(self, endpoint: str, method: str, body: dict[str, Any] | None) -> Any:
        args = ["api", endpoint, "--method", method]
        if self.hostname:
            args += ["--hostname", self.hostname]
        input_data = None
        if body is not None:
            args += ["--input", "-"]
            input_data = json.dumps(body)

        logger.debug("gh api %s %s", method, endpoint)
        try:
            output = self._run_gh(*args, input_data=input_data)
        except FileNotFoundError as e:
            raise TransportError(f"gh CLI not found at '{self.gh_path}'") from e
        except OSError as e:
            raise TransportError(f"Could not run '{self.gh_path}': {e}") from e
        except subprocess.TimeoutExpired as e:
            raise TransportError(f"gh api {endpoint} timed out after {self.timeout}s") from e
        except subprocess.CalledProcessError as e:
            if endpoint == "graphql" and e.stdout:
                # gh exits non-zero on GraphQL errors but still prints the response
                try:
                    response = json.loads(e.stdout)
                except ValueError:
                    response = None
                if isinstance(response, dict) and response.get("errors"):
                    graphql_data(response)
            stderr = sanitize_for_log(truncate_output((e.stderr or "").strip(), 1000))
            status = _http_status(stderr)
            raise TransportError(
                f"gh api {endpoint} failed: {stderr}",
                status=status,
                retryable=is_rate_limited(status, stderr),
            ) from e

        try:
            return json.loads(output)
        except ValueError as e:
            raise TransportError(f"Invalid JSON from gh api {endpoint}: {e}") from e

    def rest(self, method: str, path: str, body: dict[str, Any] | None = None) -> dict[str, Any]:
        data = self._api(path.lstrip("/"), method, body)
        if not isinstance(data, dict):
            raise TransportError(f"Unexpected response from gh api {path}: {data!r}")
        return data

    def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        payload: dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables
        return graphql_data(self._api("graphql", "POST", payload))


def _http_status(stderr: str) -> int | None:
    """Pull the status code out of gh's '(HTTP 404)' error suffix."""
    marker = "(HTTP "
    start = stderr.rfind(marker)
    if start == -1:
        return None
    digits = stderr[start + len(marker) : start + len(marker) + 3]
    return int(digits) if digits.isdigit() else None
