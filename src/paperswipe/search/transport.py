"""Relay transports for reaching the arXiv API.

Transports are tried in order; the first one returning a usable feed wins.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from urllib.parse import quote

import requests

logger = logging.getLogger(__name__)

DEFAULT_PROXIES = [
    "https://api.allorigins.win/raw?url={url}",
    "https://corsproxy.io/?{url}",
]
FEED_MARKERS = ("<feed", "<entry")


class MalformedResponseError(ValueError):
    """Upstream answered, but not with something we can parse."""


def looks_like_feed(text: str) -> bool:
    return any(marker in text for marker in FEED_MARKERS)


@dataclass
class ProxyTransport:
    """Wraps a target URL in a relay template such as ``https://relay/?{url}``."""

    template: str
    timeout: int = 30

    @property
    def name(self) -> str:
        return self.template.split("?")[0]

    def wrap(self, target_url: str) -> str:
        return self.template.format(url=quote(target_url, safe=""))

    def fetch(self, target_url: str) -> str:
        resp = requests.get(self.wrap(target_url), timeout=self.timeout)
        resp.raise_for_status()
        text = resp.text
        if not looks_like_feed(text):
            raise MalformedResponseError("Response is not valid arXiv XML")
        return text


@dataclass
class DirectTransport(ProxyTransport):
    """Talks to the upstream without a relay."""

    template: str = "{url}"

    @property
    def name(self) -> str:
        return "direct"

    def wrap(self, target_url: str) -> str:
        return target_url


def build_transports(proxies: list[str], timeout: int = 30, direct: bool = False) -> list[ProxyTransport]:
    transports: list[ProxyTransport] = [ProxyTransport(p, timeout=timeout) for p in proxies]
    if direct:
        transports.append(DirectTransport(timeout=timeout))
    return transports


class TransportChain:
    def __init__(self, transports: list[ProxyTransport]):
        self.transports = list(transports)

    def fetch(self, target_url: str) -> str | None:
        """Return the first valid feed body, or None when every transport failed."""
        last_error: Exception | None = None
        for transport in self.transports:
            try:
                text = transport.fetch(target_url)
                logger.debug(f"[arxiv] Fetched via {transport.name}")
                return text
            except (requests.RequestException, MalformedResponseError) as e:
                logger.warning(f"[arxiv] Proxy attempt failed ({transport.name}): {e}")
                last_error = e

        logger.error(f"[arxiv] All proxies failed. Last error: {last_error}")
        return None
