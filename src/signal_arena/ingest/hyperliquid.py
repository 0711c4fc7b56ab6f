"""Hyperliquid connectivity through ccxt."""

from __future__ import annotations

from dataclasses import dataclass
import logging
import threading
import time
from typing import Any, Callable, Dict, Optional

import ccxt

from signal_arena.config import settings
from signal_arena.models.market import ExchangeAccount

logger = logging.getLogger(__name__)

PERP_SUFFIX = "-PERP"
SETTLE_CURRENCY = "USDC"


def api_coin(symbol: str) -> str:
    """``BTC-PERP`` / ``BTC/USDC:USDC`` / ``btc`` -> ``BTC``."""
    coin = symbol.strip()
    if "/" in coin:
        coin = coin.split("/", 1)[0]
    if coin.upper().endswith(PERP_SUFFIX):
        coin = coin[: -len(PERP_SUFFIX)]
    return coin.upper()


def display_symbol(symbol: str) -> str:
    return f"{api_coin(symbol)}{PERP_SUFFIX}"


def to_market_symbol(symbol: str) -> str:
    return f"{api_coin(symbol)}/{SETTLE_CURRENCY}:{SETTLE_CURRENCY}"


def create_hyperliquid_client(account: Optional[ExchangeAccount] = None) -> ccxt.hyperliquid:
    config: Dict[str, Any] = {
        "enableRateLimit": True,
        "timeout": settings.exchange_timeout_ms,
        "options": {"defaultType": "swap"},
    }
    if account is not None:
        if account.wallet_address:
            config["walletAddress"] = account.wallet_address
        if account.private_key:
            config["privateKey"] = account.private_key
    exchange = ccxt.hyperliquid(config)
    try:
        exchange.set_sandbox_mode(settings.hyperliquid_testnet)
    except ccxt.NotSupported:
        exchange.options["sandboxMode"] = settings.hyperliquid_testnet
    return exchange


@dataclass
class _Session:
    client: Any
    last_used: float


class ExchangeSessionPool:
    """Per-account exchange clients with idle-timeout eviction.

    Sessions are keyed by ``ExchangeAccount.session_key``; requests without an
    account share the public session. A session idle for longer than the TTL
    is replaced on its next access and dropped by ``evict_idle``.
    """

    def __init__(
        self,
        factory: Optional[Callable[[Optional[ExchangeAccount]], Any]] = None,
        ttl_s: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._factory = factory or create_hyperliquid_client
        self.ttl_s = ttl_s if ttl_s is not None else settings.exchange_session_ttl_s
        self._clock = clock
        self._sessions: Dict[str, _Session] = {}
        self._lock = threading.Lock()

    def get_client(self, account: Optional[ExchangeAccount] = None) -> Any:
        key = account.session_key if account is not None else "public"
        with self._lock:
            now = self._clock()
            session = self._sessions.get(key)
            if session is not None and now - session.last_used < self.ttl_s:
                session.last_used = now
                return session.client

            client = self._factory(account)
            self._sessions[key] = _Session(client=client, last_used=now)
            self._evict_locked(now)
            active = len(self._sessions)
        logger.info("Created exchange session (%s active)", active)
        return client

    def evict_idle(self) -> int:
        with self._lock:
            return self._evict_locked(self._clock())

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _evict_locked(self, now: float) -> int:
        stale = [
            key
            for key, session in self._sessions.items()
            if now - session.last_used > self.ttl_s
        ]
        for key in stale:
            del self._sessions[key]
        if stale:
            logger.debug("Evicted %s idle exchange sessions", len(stale))
        return len(stale)
