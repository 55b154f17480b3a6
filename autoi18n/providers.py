"""
Machine-translation providers.

A provider exposes one coroutine, `translate(text, target_language)`, and
raises ProviderError when no usable translation could be obtained. The
network providers talk plain HTTP through `requests`; the blocking call runs
in a worker thread so concurrent files keep progressing.
"""

from __future__ import annotations

import asyncio
import logging
import time
from abc import ABC, abstractmethod
from typing import Optional, Protocol

import requests

from .cache import TranslationCache
from .errors import ProviderError
from .placeholders import protect_placeholders, restore_placeholders

log = logging.getLogger(__name__)

LIBRETRANSLATE_URL = "http://localhost:5000"
GOOGLE_TRANSLATE_URL = "https://translation.googleapis.com/language/translate/v2"
REQUEST_TIMEOUT = 30
ATTEMPTS = 3


class TranslationProvider(Protocol):
    async def translate(self, text: str, target_language: str) -> str:
        ...


class HTTPProvider(ABC):
    """Shared request/retry plumbing for the REST based providers."""

    name = "http"

    def __init__(self, timeout: float = REQUEST_TIMEOUT, attempts: int = ATTEMPTS) -> None:
        self.timeout = timeout
        self.attempts = max(1, attempts)

    async def translate(self, text: str, target_language: str) -> str:
        protected, tokens = protect_placeholders(text)
        result = await asyncio.to_thread(self._translate_with_retry, protected, target_language)
        return restore_placeholders(result, tokens)

    def _translate_with_retry(self, text: str, target_language: str) -> str:
        attempt = 0
        while True:
            try:
                return self._request(text, target_language)
            except (requests.RequestException, ValueError, KeyError, IndexError, TypeError) as exc:
                attempt += 1
                if attempt >= self.attempts:
                    raise ProviderError(
                        f"{self.name} failed to translate '{text[:50]}' to {target_language}: {exc}"
                    ) from exc
                log.debug("%s attempt %d failed: %s", self.name, attempt, exc)
                time.sleep(0.5 * attempt)

    @abstractmethod
    def _request(self, text: str, target_language: str) -> str:
        """Send one protected string and return the raw translated text."""


class LibreTranslateProvider(HTTPProvider):
    """LibreTranslate REST API (self-hosted or libretranslate.com)."""

    name = "libretranslate"

    def __init__(self, url: str = LIBRETRANSLATE_URL, api_key: Optional[str] = None,
                 source: str = "auto", **kwargs) -> None:
        super().__init__(**kwargs)
        self.url = url.rstrip("/")
        if not self.url.endswith("/translate"):
            self.url += "/translate"
        self.api_key = api_key
        self.source = source

    def _request(self, text: str, target_language: str) -> str:
        payload = {"q": text, "source": self.source, "target": target_language, "format": "text"}
        if self.api_key:
            payload["api_key"] = self.api_key
        resp = requests.post(self.url, json=payload, timeout=self.timeout)
        resp.raise_for_status()
        translated = resp.json()["translatedText"]
        if not isinstance(translated, str):
            raise ValueError(f"unexpected translatedText {translated!r}")
        return translated


class GoogleTranslateProvider(HTTPProvider):
    """Google Cloud Translation v2 (Basic) REST API, authenticated by API key."""

    name = "google"

    def __init__(self, api_key: str, project_id: Optional[str] = None,
                 source: Optional[str] = None, url: str = GOOGLE_TRANSLATE_URL, **kwargs) -> None:
        super().__init__(**kwargs)
        if not api_key:
            raise ProviderError("Google Translate needs an API key")
        self.api_key = api_key
        self.project_id = project_id
        self.source = None if source in (None, "", "auto") else source
        self.url = url

    def _request(self, text: str, target_language: str) -> str:
        payload = {"q": text, "target": target_language, "format": "text"}
        if self.source:
            payload["source"] = self.source
        headers = {"x-goog-user-project": self.project_id} if self.project_id else {}
        resp = requests.post(
            self.url,
            params={"key": self.api_key},
            json=payload,
            headers=headers,
            timeout=self.timeout,
        )
        resp.raise_for_status()
        return resp.json()["data"]["translations"][0]["translatedText"]


class DryRunProvider:
    """Pretend translation: tags the text with the target language."""

    name = "dry-run"

    async def translate(self, text: str, target_language: str) -> str:
        return f"[{target_language}]{text}"


class CachingProvider:
    """Wraps another provider and answers repeated strings from a cache."""

    def __init__(self, inner: TranslationProvider, cache: TranslationCache) -> None:
        self.inner = inner
        self.cache = cache
        self.hits = 0

    async def translate(self, text: str, target_language: str) -> str:
        cached = self.cache.get(text, target_language)
        if cached is not None:
            self.hits += 1
            return cached
        translation = await self.inner.translate(text, target_language)
        self.cache.put(text, target_language, translation)
        return translation
