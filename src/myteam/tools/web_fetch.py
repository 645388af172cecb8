"""URL fetch tool with SSRF protection, returning readable text."""

import html
import ipaddress
import re
import socket
from typing import Any
from urllib.parse import urlparse

import httpx

from .base import Tool, ToolResult

# Private/reserved IP ranges to block
BLOCKED_NETWORKS = [
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("169.254.0.0/16"),
    ipaddress.ip_network("::1/128"),
    ipaddress.ip_network("fc00::/7"),
    ipaddress.ip_network("fe80::/10"),
    ipaddress.ip_network("0.0.0.0/8"),
    ipaddress.ip_network("100.64.0.0/10"),
]

ALLOWED_SCHEMES = {"http", "https"}

USER_AGENT = "Mozilla/5.0 (compatible; myteam-research/0.1)"

_SCRIPT_RE = re.compile(r"<script[^>]*>.*?</script>", re.IGNORECASE | re.DOTALL)
_STYLE_RE = re.compile(r"<style[^>]*>.*?</style>", re.IGNORECASE | re.DOTALL)
_TAG_RE = re.compile(r"<[^>]+>")
_SPACE_RE = re.compile(r"\s+")


def is_private_ip(ip: str) -> bool:
    """Check if an IP address is in a private/reserved range."""
    try:
        addr = ipaddress.ip_address(ip)
        return any(addr in network for network in BLOCKED_NETWORKS)
    except ValueError:
        return True  # Invalid IP, treat as blocked


def resolve_and_validate(hostname: str) -> tuple[bool, str | None]:
    """Resolve hostname and check none of its addresses are private.

    Returns (valid, error_message).
    """
    try:
        infos = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except socket.gaierror as e:
        return False, f"DNS resolution failed: {e}"

    if not infos:
        return False, f"Could not resolve hostname: {hostname}"

    for _, _, _, _, sockaddr in infos:
        ip = sockaddr[0]
        if is_private_ip(ip):
            return False, f"Blocked: {hostname} resolves to private IP {ip}"
    return True, None


def html_to_text(markup: str) -> str:
    """Strip scripts, styles and tags, and collapse whitespace."""
    text = _SCRIPT_RE.sub(" ", markup)
    text = _STYLE_RE.sub(" ", text)
    text = _TAG_RE.sub(" ", text)
    text = html.unescape(text)
    return _SPACE_RE.sub(" ", text).strip()


class FetchUrlTool(Tool):
    """Tool for fetching a public web page as plain text."""

    def __init__(
        self,
        timeout: float = 10.0,
        max_chars: int = 10_000,
        max_redirects: int = 5,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._timeout = timeout
        self._max_chars = max_chars
        self._max_redirects = max_redirects
        self._transport = transport

    @property
    def name(self) -> str:
        return "fetch_url"

    @property
    def description(self) -> str:
        return (
            "Fetch and extract the text content of a URL. "
            "Only HTTP/HTTPS URLs on public hosts are allowed."
        )

    @property
    def parameters(self) -> dict[str, Any]:
        return {
            "type": "object",
            "properties": {
                "url": {
                    "type": "string",
                    "description": "The URL to fetch. Must be http:// or https://",
                },
            },
            "required": ["url"],
        }

    def _validate_url(self, url: str) -> tuple[bool, str | None]:
        """Validate URL scheme and host."""
        parsed = urlparse(url)

        if parsed.scheme.lower() not in ALLOWED_SCHEMES:
            return False, f"Scheme not allowed: {parsed.scheme or '(none)'}. Use http or https."

        if not parsed.hostname:
            return False, "URL must have a hostname"

        return resolve_and_validate(parsed.hostname)

    async def execute(self, **kwargs: Any) -> ToolResult:
        url = kwargs["url"].strip()
        valid, error = self._validate_url(url)
        if not valid:
            return ToolResult(success=False, output="", error=error)

        try:
            async with httpx.AsyncClient(
                timeout=self._timeout,
                follow_redirects=True,
                max_redirects=self._max_redirects,
                headers={"User-Agent": USER_AGENT},
                transport=self._transport,
            ) as client:
                response = await client.get(url)
        except httpx.TimeoutException:
            return ToolResult(
                success=False,
                output="",
                error=f"Request timed out after {self._timeout}s",
            )
        except httpx.TooManyRedirects:
            return ToolResult(
                success=False,
                output="",
                error=f"Too many redirects (max {self._max_redirects})",
            )
        except httpx.RequestError as e:
            return ToolResult(success=False, output="", error=f"Request failed: {e}")

        if not response.is_success:
            return ToolResult(
                success=False,
                output="",
                error=f"HTTP {response.status_code} {response.reason_phrase}",
                metadata={"status_code": response.status_code},
            )

        content_type = response.headers.get("content-type", "")
        text = html_to_text(response.text) if "html" in content_type else response.text.strip()
        truncated = len(text) > self._max_chars
        return ToolResult(
            success=True,
            output=text[: self._max_chars],
            metadata={
                "status_code": response.status_code,
                "content_type": content_type,
                "truncated": truncated,
            },
        )
