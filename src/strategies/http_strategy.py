# src/strategies/http_strategy.py

"""Shared HTTP machinery for web-backed strategies."""

import time
from abc import abstractmethod
from dataclasses import dataclass
from typing import Any

import cloudscraper  # type: ignore[import-untyped]
from bs4 import BeautifulSoup
from curl_cffi import requests as curl_requests

from src.strategies.base_strategy import BaseStrategy

# Cloudflare interstitial markers, checked before the CAPTCHA keywords
_CF_CHALLENGE_MARKERS: tuple[str, ...] = (
    "challenges.cloudflare.com",
    "cdn-cgi/challenge-platform",
    "just a moment",
    "cf-turnstile",
    "cf_chl_opt",
)

# Pages longer than this with a <body> skip the keyword scan
_CONTENT_PAGE_MIN_LENGTH = 5000

# Longest uninterrupted sleep between cancellation checks
_SLEEP_SLICE = 0.25


@dataclass
class CircuitBreaker:
    """Consecutive-failure breaker with a half-open trial after cooldown."""

    threshold: int
    cooldown: float
    failures: int = 0
    opened_at: float | None = None

    @property
    def is_open(self) -> bool:
        return self.opened_at is not None

    def allows_request(self) -> bool:
        """True when closed, or when the cooldown has elapsed."""
        if self.opened_at is None:
            return True
        return time.time() - self.opened_at >= self.cooldown

    def record_success(self) -> None:
        self.failures = 0
        self.opened_at = None

    def record_failure(self) -> bool:
        """Count a failure; return True if this one tripped the breaker."""
        self.failures += 1
        if self.failures >= self.threshold and self.opened_at is None:
            self.opened_at = time.time()
            return True
        if self.opened_at is not None:
            # A failed half-open trial request restarts the cooldown
            self.opened_at = time.time()
        return False


class HttpStrategy(BaseStrategy):
    """Base class for strategies that read retail web pages.

    Pages are fetched through a browser-impersonating ``curl_cffi``
    session. Each GET is retried up to ``MAX_RETRIES`` times; block pages
    (Cloudflare challenges, CAPTCHA prompts) and HTTP 403/429 double the
    inter-request delay up to ``MAX_DELAY_MULTIPLIER`` times its base.
    Repeated exhausted GETs open a :class:`CircuitBreaker`, and a
    ``cloudscraper`` session is tried once before a page is given up on.
    Every sleep and request start checks ``cancel_event``, so a cancelled
    fetch stops within one request or ``_SLEEP_SLICE`` seconds.
    """

    def __init__(self, name: str) -> None:
        super().__init__(name)
        self.session = curl_requests.Session(
            impersonate=self.settings.IMPERSONATE_BROWSER
        )
        self.breaker = CircuitBreaker(
            threshold=self.settings.CIRCUIT_BREAKER_THRESHOLD,
            cooldown=self.settings.CIRCUIT_BREAKER_COOLDOWN,
        )
        self.delay: float = self.settings.REQUEST_DELAY

    @abstractmethod
    def _get_homepage(self) -> str:
        """Return the site homepage, sent as the Referer."""
        ...

    def _sleep(self, seconds: float) -> None:
        """Sleep in short slices, stopping early once cancelled."""
        remaining = seconds
        while remaining > 0:
            self._checkpoint()
            step = min(remaining, _SLEEP_SLICE)
            time.sleep(step)
            remaining -= step
        self._checkpoint()

    def _headers(self) -> dict[str, str]:
        return {
            **self.settings.DEFAULT_HEADERS,
            "Referer": self._get_homepage(),
        }

    def _block_reason(self, text: str) -> str | None:
        """Return why *text* looks like a block page, or ``None``."""
        if text.lstrip().startswith(("{", "[")):
            return None
        lower = text.lower()
        for marker in _CF_CHALLENGE_MARKERS:
            if marker in lower:
                return f"Cloudflare challenge ({marker})"
        # Real product pages often mention "captcha" in footer scripts
        if "<body" in lower and len(text) > _CONTENT_PAGE_MIN_LENGTH:
            return None
        for keyword in self.settings.CAPTCHA_KEYWORDS:
            if keyword in lower:
                return f"CAPTCHA prompt ({keyword})"
        return None

    def _back_off(self) -> None:
        """Double the inter-request delay (capped) and sleep it off."""
        cap = self.settings.REQUEST_DELAY * self.settings.MAX_DELAY_MULTIPLIER
        self.delay = min(self.delay * 2, cap)
        self.logger.warning(
            "[%s] Backing off, request delay now %.1fs",
            self.name,
            self.delay,
        )
        self._sleep(self.delay)

    def _attempt(self, url: str, headers: dict[str, str]) -> str | None:
        """One GET; the body on success, ``None`` on any failure."""
        self._checkpoint()
        try:
            resp = self.session.get(
                url,
                headers=headers,
                timeout=self.settings.REQUEST_TIMEOUT,
            )
        except Exception as exc:
            self.logger.warning(
                "[%s] GET %s raised %s", self.name, url, exc, exc_info=True,
            )
            self._sleep(self.delay)
            return None

        if resp.status_code != 200:
            self.logger.warning(
                "[%s] GET %s returned HTTP %d",
                self.name,
                url,
                resp.status_code,
            )
            if resp.status_code in (403, 429):
                self._back_off()
            return None

        body = str(resp.text)
        reason = self._block_reason(body)
        if reason is not None:
            self.logger.warning("[%s] %s at %s", self.name, reason, url)
            self._back_off()
            return None
        return body

    def _fetch_text(self, url: str) -> str | None:
        """GET *url* with retries behind the circuit breaker."""
        if not self.breaker.allows_request():
            self.logger.debug(
                "[%s] Circuit open, skipping %s", self.name, url
            )
            return None

        headers = self._headers()
        for attempt in range(1, self.settings.MAX_RETRIES + 1):
            body = self._attempt(url, headers)
            if body is not None:
                self.breaker.record_success()
                self.delay = self.settings.REQUEST_DELAY
                return body
            self.logger.debug(
                "[%s] Attempt %d/%d failed for %s",
                self.name,
                attempt,
                self.settings.MAX_RETRIES,
                url,
            )

        if self.breaker.record_failure():
            self.logger.error(
                "[%s] Circuit breaker opened after %d failed fetches",
                self.name,
                self.breaker.failures,
            )
        return None

    def _fetch_with_cloudscraper(self, url: str) -> str | None:
        """Last-resort GET through a cloudscraper session."""
        self._checkpoint()
        try:
            scraper: Any = cloudscraper.create_scraper()
            resp: Any = scraper.get(
                url,
                headers=self._headers(),
                timeout=self.settings.REQUEST_TIMEOUT,
            )
        except Exception as exc:
            self.logger.error(
                "[%s] cloudscraper GET %s failed: %s",
                self.name,
                url,
                exc,
                exc_info=True,
            )
            return None
        if resp.status_code != 200:
            return None
        return str(resp.text)

    def _get_page(self, url: str) -> BeautifulSoup | None:
        """Fetch and parse *url*, or ``None`` if every path failed."""
        self._checkpoint()
        if not self.breaker.allows_request():
            return None
        self._sleep(self.delay)

        body = self._fetch_text(url)
        if body is None:
            self.logger.info(
                "[%s] Retries exhausted for %s, trying cloudscraper",
                self.name,
                url,
            )
            body = self._fetch_with_cloudscraper(url)
        if body is None:
            return None
        return BeautifulSoup(body, "lxml")
