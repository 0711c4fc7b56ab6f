"""Market sentiment feeds."""

from __future__ import annotations

from abc import ABC, abstractmethod
import logging
import time
from typing import Optional

import httpx

from signal_arena.config import settings

logger = logging.getLogger(__name__)

NEUTRAL_FEAR_GREED = 50


class SentimentFeed(ABC):
    @abstractmethod
    def get_fear_greed_index(self) -> int:
        """Return an index in [0, 100]; never raises."""
        raise NotImplementedError


class FearGreedFeed(SentimentFeed):
    """alternative.me Fear & Greed index, falling back to 50 on failure."""

    def __init__(
        self,
        url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.url = url or settings.fear_greed_url
        self.timeout = timeout if timeout is not None else settings.fear_greed_timeout_s
        self.max_retries = max(
            1, max_retries if max_retries is not None else settings.fear_greed_max_retries
        )
        self._transport = transport

    def get_fear_greed_index(self) -> int:
        for attempt in range(1, self.max_retries + 1):
            try:
                return self._fetch()
            except (httpx.HTTPError, KeyError, IndexError, TypeError, ValueError) as exc:
                if attempt < self.max_retries:
                    time.sleep(0.5 * attempt)
                    continue
                logger.warning(
                    "Failed to fetch fear & greed index, using default %s: %s",
                    NEUTRAL_FEAR_GREED,
                    exc,
                )
        return NEUTRAL_FEAR_GREED

    def _fetch(self) -> int:
        with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
            response = client.get(self.url)
        response.raise_for_status()
        value = int(response.json()["data"][0]["value"])
        return max(0, min(100, value))
