from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Solana JSON-RPC
    rpc_url: str = "https://api.mainnet-beta.solana.com"
    rpc_max_rps: float = 8.0  # public mainnet endpoint throttles hard above ~10
    rpc_timeout_sec: float = 30.0  # getProgramAccounts on big mints is slow

    # DexScreener
    dexscreener_max_rps: float = 4.0
    dexscreener_timeout_sec: float = 10.0

    # Safety scoring: only pools whose dexId contains this count as liquidity
    trusted_venue: str = "raydium"

    # Token used when a request omits ?mint=
    default_mint: str = "B9z8cEWFmc7LvQtjKsaLoKqW5MJmGRCWqs1DPKupCfkk"

    # Holder fallback (getTokenLargestAccounts returns at most 20 rows)
    largest_accounts_limit: int = 20
    owner_lookup_concurrency: int = 10

    # HTTP API
    api_host: str = "0.0.0.0"
    api_port: int = Field(3000, validation_alias=AliasChoices("api_port", "port"))
    api_rate_limit: str = "60/minute"

    # Logging
    log_level: str = "INFO"
    json_logs: bool = False


settings = Settings()
