from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}

    inventory_api_key: str
    inventory_api_url: str = "https://api.tsstravelsoft.com"
    inventory_timeout: float = 30.0
    inventory_currency: str = "EUR"
    inventory_nationality: str = "DE"
    cache_ttl_hours: int = 2
    cache_refresh_threshold_hours: int = 1
    cache_purge_interval_minutes: int = 30
    verification_alternatives_limit: int = 3
    anthropic_api_key: str = ""
    log_level: str = "INFO"
