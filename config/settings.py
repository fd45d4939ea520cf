from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # DexScreener (public, no key)
    dexscreener_base_url: str = "https://api.dexscreener.com"
    dexscreener_max_rps: float = 4.0

    # GeckoTerminal OHLCV (public, 30 req/min on the free tier)
    geckoterminal_base_url: str = "https://api.geckoterminal.com/api/v2"
    geckoterminal_max_rps: float = 0.5
    enable_price_history: bool = True

    # Analysis cache
    cache_backend: str = "memory"  # "memory" or "redis"
    redis_url: str = "redis://localhost:6379/0"
    analysis_cache_ttl_sec: int = 300

    # Advisory thresholds
    suspicious_spread_pct: float = 10.0

    # Telegram bot
    telegram_bot_token: str = ""

    # Wallet history is simulated until an indexer is wired in
    simulated_transactions: bool = True

    # Status API
    api_enabled: bool = True
    api_port: int = 5000

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False


settings = Settings()
