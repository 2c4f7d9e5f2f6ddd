"""Store for AI answers keyed by normalized question text.

The cache key is the trimmed, lower-cased question and nothing else.  The
subject symbol, timeframe and ``simple_mode`` flag are forwarded to the
backend but do not take part in cache identity, so the same question asked
about two different symbols shares one entry.  Whoever refreshes the entry
last decides which answer is cached.
"""

from __future__ import annotations

from datetime import datetime

from tradelens.cache.entry import CacheEntryState
from tradelens.cache.keyed_cache import FetchFn
from tradelens.interfaces.market_data_provider import IMarketDataProvider
from tradelens.models.cache import FreshnessPolicy
from tradelens.models.market import AIResponse
from tradelens.stores.base import EntityStore
from tradelens.utils.clock import Clock, utc_now
from tradelens.utils.errors import ErrorKind, InvalidRequestError
from tradelens.utils.normalization import normalize_question


class AIResponseStore(EntityStore[str, AIResponse]):
    """AI answers per question; refreshed after 5 min, no stale warning."""

    name = "ai_response"
    DEFAULT_POLICY = FreshnessPolicy(cache_window=300)

    def __init__(
        self,
        provider: IMarketDataProvider,
        policy: FreshnessPolicy | None = None,
        clock: Clock = utc_now,
    ) -> None:
        super().__init__(policy=policy, clock=clock)
        self._provider = provider

    async def _fetch(self, key: str) -> AIResponse:
        """Not used: every fetch goes through :meth:`_fetcher`.

        The key is the lower-cased question, so it cannot stand in for the
        text the caller asked, and the symbol and timeframe are not part of it.
        """
        raise NotImplementedError("AI answers are fetched with the question as asked")

    def _fetcher(
        self,
        question: str,
        symbol: str | None,
        timeframe_days: int | None,
        simple_mode: bool,
    ) -> FetchFn:
        async def fetch(_key: str) -> AIResponse:
            return await self._provider.ask_ai(question, symbol, timeframe_days, simple_mode)

        return fetch

    @staticmethod
    def _key(question: str) -> str:
        key = normalize_question(question)
        if not key:
            raise InvalidRequestError("Please enter a question.")
        return key

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def read(
        self,
        question: str,
        symbol: str | None = None,
        timeframe_days: int | None = None,
        simple_mode: bool = False,
    ) -> AIResponse | None:
        """Return the cached answer, scheduling a refresh when it is due."""
        key = self._key(question)
        return self._read(key, self._fetcher(question, symbol, timeframe_days, simple_mode))

    async def ask(
        self,
        question: str,
        symbol: str | None = None,
        timeframe_days: int | None = None,
        simple_mode: bool = False,
    ) -> AIResponse | None:
        """Return a fresh cached answer, or wait for the backend to produce one.

        Returns ``None`` when the fetch fails and nothing was cached; the
        classified error is available from :meth:`last_error`.
        """
        key = self._key(question)
        cached = self._cache.get(key)
        if cached is not None and not self._cache.should_refresh(key):
            self._logger.info("ai_response_cache_hit", question=key[:30])
            return cached

        result = await self._cache.refresh(
            key, self._fetcher(question, symbol, timeframe_days, simple_mode)
        )
        return result.value

    async def force_refresh(
        self,
        question: str,
        symbol: str | None = None,
        timeframe_days: int | None = None,
        simple_mode: bool = False,
    ) -> AIResponse:
        """Fetch now; raises the classified error when nothing can be returned."""
        key = self._key(question)
        return await self._force_refresh(
            key, self._fetcher(question, symbol, timeframe_days, simple_mode)
        )

    def peek(self, question: str) -> AIResponse | None:
        return self._cache.get(self._key(question))

    def cached_response(self, question: str) -> AIResponse | None:
        """Cached answer for *question*, fresh or not; never fetches."""
        return self.peek(question)

    def state(self, question: str) -> CacheEntryState[AIResponse] | None:
        return self._state(self._key(question))

    def last_update_time(self, question: str) -> datetime | None:
        return self._cache.last_success_at(self._key(question))

    def is_stale(self, question: str) -> bool:
        return self._cache.is_stale(self._key(question))

    def last_error(self, question: str) -> ErrorKind | None:
        return self._cache.last_error(self._key(question))

    def error_message(self, question: str) -> str | None:
        return self._cache.error_message(self._key(question))

    def is_loading(self, question: str) -> bool:
        return self._cache.is_fetching(self._key(question))
