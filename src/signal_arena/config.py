"""Configuration loader for Signal Arena."""

from dataclasses import dataclass
import os
from typing import Tuple

from dotenv import load_dotenv


def _get_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "y", "on"}


def _get_csv(value: str | None, default: Tuple[str, ...]) -> Tuple[str, ...]:
    if not value:
        return default
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _get_float(value: str | None, default: float) -> float:
    if value is None or value == "":
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_int(value: str | None, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    llm_provider: str
    llm_api_base: str
    llm_api_key: str
    llm_model: str
    openai_api_key: str
    openai_api_base: str
    openai_model: str
    deepseek_api_key: str
    deepseek_api_base: str
    deepseek_model: str
    ollama_api_base: str
    ollama_model: str
    llm_temperature: float
    llm_max_tokens: int
    llm_timeout_s: float
    llm_max_retries: int
    hyperliquid_testnet: bool
    hyperliquid_wallet_address: str
    hyperliquid_private_key: str
    exchange_timeout_ms: int
    exchange_session_ttl_s: float
    fear_greed_url: str
    fear_greed_timeout_s: float
    fear_greed_max_retries: int
    scan_max_symbols: int
    scan_min_volume: float
    scan_top_count: int
    signal_reference_balance: float
    signal_ttl_hours: float
    pattern_timeframes: Tuple[str, ...]
    market_lookback_days: int
    risk_default_pct: float
    risk_max_leverage: float

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        return cls(
            llm_provider=os.getenv("LLM_PROVIDER", "openai"),
            llm_api_base=os.getenv("LLM_API_BASE", ""),
            llm_api_key=os.getenv("LLM_API_KEY", ""),
            llm_model=os.getenv("LLM_MODEL", ""),
            openai_api_key=os.getenv("OPENAI_API_KEY", ""),
            openai_api_base=os.getenv("OPENAI_API_BASE", "https://api.openai.com/v1"),
            openai_model=os.getenv("OPENAI_MODEL", "gpt-4o"),
            deepseek_api_key=os.getenv("DEEPSEEK_API_KEY", ""),
            deepseek_api_base=os.getenv(
                "DEEPSEEK_API_BASE", "https://api.deepseek.com/v1"
            ),
            deepseek_model=os.getenv("DEEPSEEK_MODEL", "deepseek-chat"),
            ollama_api_base=os.getenv("OLLAMA_API_BASE", "http://localhost:11434/v1"),
            ollama_model=os.getenv("OLLAMA_MODEL", ""),
            llm_temperature=_get_float(os.getenv("LLM_TEMPERATURE"), 0.1),
            llm_max_tokens=_get_int(os.getenv("LLM_MAX_TOKENS"), 2000),
            llm_timeout_s=_get_float(os.getenv("LLM_TIMEOUT_S"), 60.0),
            llm_max_retries=_get_int(os.getenv("LLM_MAX_RETRIES"), 3),
            hyperliquid_testnet=_get_bool(os.getenv("HYPERLIQUID_TESTNET"), default=False),
            hyperliquid_wallet_address=os.getenv("HYPERLIQUID_WALLET_ADDRESS", ""),
            hyperliquid_private_key=os.getenv("HYPERLIQUID_PRIVATE_KEY", ""),
            exchange_timeout_ms=_get_int(os.getenv("EXCHANGE_TIMEOUT_MS"), 30000),
            exchange_session_ttl_s=_get_float(
                os.getenv("EXCHANGE_SESSION_TTL_S"), 3600.0
            ),
            fear_greed_url=os.getenv("FEAR_GREED_URL", "https://api.alternative.me/fng/"),
            fear_greed_timeout_s=_get_float(os.getenv("FEAR_GREED_TIMEOUT_S"), 10.0),
            fear_greed_max_retries=_get_int(os.getenv("FEAR_GREED_MAX_RETRIES"), 3),
            scan_max_symbols=_get_int(os.getenv("SCAN_MAX_SYMBOLS"), 30),
            scan_min_volume=_get_float(os.getenv("SCAN_MIN_VOLUME"), 2_000_000.0),
            scan_top_count=_get_int(os.getenv("SCAN_TOP_COUNT"), 5),
            signal_reference_balance=_get_float(
                os.getenv("SIGNAL_REFERENCE_BALANCE"), 10_000.0
            ),
            signal_ttl_hours=_get_float(os.getenv("SIGNAL_TTL_HOURS"), 24.0),
            pattern_timeframes=_get_csv(
                os.getenv("PATTERN_TIMEFRAMES"),
                default=("1h", "4h"),
            ),
            market_lookback_days=_get_int(os.getenv("MARKET_LOOKBACK_DAYS"), 7),
            risk_default_pct=_get_float(os.getenv("RISK_DEFAULT_PCT"), 2.0),
            risk_max_leverage=_get_float(os.getenv("RISK_MAX_LEVERAGE"), 5.0),
        )


settings = Settings.from_env()
