from __future__ import annotations

import asyncio
import ipaddress
import re
import warnings
from typing import Final
from urllib.parse import urlparse

import httpx
from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning

from research_synth.core.exceptions import FetchError, FetchTimeout, UnsafeUrlError

MAX_SOURCE_CHARS: Final[int] = 12_000
_MAX_BYTES: Final[int] = 5_000_000  # 5 MB
_USER_AGENT: Final[str] = "ResearchSynthBot/1.0 (+http://localhost:4203/skill.md)"
_ACCEPT: Final[str] = "text/html,text/plain"
_NOISE_TAGS: Final[list[str]] = [
    "script",
    "style",
    "noscript",
    "nav",
    "footer",
    "header",
    "aside",
]

_TAG_RE = re.compile(r"<[^>]+>")
_WHITESPACE_RUN_RE = re.compile(r"\s{2,}")


def _is_private_or_local_ip(host: str) -> bool:
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        return False
    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_reserved
        or ip.is_multicast
    )


def _validate_url(url: str) -> None:
    parsed = urlparse(url)

    if parsed.scheme not in {"http", "https"}:
        raise UnsafeUrlError("Only http/https URLs are allowed.")

    if not parsed.netloc:
        raise UnsafeUrlError("URL must include a hostname.")

    host = parsed.hostname or ""
    if host in {"localhost"}:
        raise UnsafeUrlError("Localhost URLs are not allowed.")

    # If hostname is an IP, block private/local ranges
    if _is_private_or_local_ip(host):
        raise UnsafeUrlError("Private/local IP URLs are not allowed.")


def _is_textual(content_type: str) -> bool:
    return "text" in content_type or "json" in content_type


async def _fetch_body_with_client(url: str, client: httpx.AsyncClient) -> str:
    headers = {"User-Agent": _USER_AGENT, "Accept": _ACCEPT}
    async with client.stream("GET", url, headers=headers) as resp:
        if not resp.is_success:
            raise FetchError(f"HTTP {resp.status_code} fetching {url}")

        content_type = resp.headers.get("content-type", "")
        if not _is_textual(content_type.lower()):
            raise FetchError(f"Non-text content-type: {content_type}")

        chunks: list[bytes] = []
        total = 0
        async for chunk in resp.aiter_bytes():
            if not chunk:
                continue
            chunks.append(chunk)
            total += len(chunk)
            if total > _MAX_BYTES:
                raise FetchError("Response too large")

        content = b"".join(chunks)
        encoding = resp.charset_encoding or "utf-8"

    try:
        return content.decode(encoding, errors="replace")
    except LookupError:
        return content.decode("utf-8", errors="replace")


async def fetch_url_text(
    url: str,
    *,
    timeout_s: float = 20.0,
    max_chars: int = MAX_SOURCE_CHARS,
    client: httpx.AsyncClient | None = None,
) -> str:
    """
    GET a URL and return its extracted plain text.

    Raises FetchTimeout when the whole exchange, body included, takes longer
    than timeout_s and FetchError for any other failure (bad status, binary
    content, unsafe URL).
    """
    _validate_url(url)

    try:
        # If a client is provided, reuse it. Otherwise create a one-off client.
        if client is None:
            async with httpx.AsyncClient(
                timeout=timeout_s,
                follow_redirects=True,
            ) as local_client:
                body = await asyncio.wait_for(
                    _fetch_body_with_client(url, local_client), timeout_s
                )
        else:
            body = await asyncio.wait_for(_fetch_body_with_client(url, client), timeout_s)
    except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
        raise FetchTimeout(f"Timed out after {timeout_s:g}s fetching {url}") from exc
    except httpx.HTTPError as exc:
        raise FetchError(f"Request failed fetching {url}: {exc!r}") from exc

    return extract_text_from_html(body, max_chars=max_chars)


def extract_text_from_html(html: str, max_chars: int = MAX_SOURCE_CHARS) -> str:
    if not html:
        return ""

    with warnings.catch_warnings():
        # Plain text that looks like a URL or filename is expected input here
        warnings.simplefilter("ignore", MarkupResemblesLocatorWarning)
        soup = BeautifulSoup(html, "lxml")

    # Remove noisy tags
    for tag in soup(_NOISE_TAGS):
        tag.decompose()

    text = soup.get_text(separator=" ", strip=True)
    # Decoded entities (&lt;b&gt;) can reintroduce tag-like sequences
    text = _TAG_RE.sub(" ", text)
    text = _WHITESPACE_RUN_RE.sub(" ", text).strip()

    return text[:max_chars].strip()


def truncate_text(text: str, max_chars: int = MAX_SOURCE_CHARS) -> str:
    return text[:max_chars]
