"""アプリケーション設定（Pydantic Settings）"""
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """アプリケーション設定"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Project
    environment: str = Field(
        default="development",
        description="環境 (development, staging, production)",
    )

    # Reverse geocoding (Nominatim)
    nominatim_base_url: str = Field(
        default="https://nominatim.openstreetmap.org",
        description="NominatimのベースURL",
    )
    nominatim_user_agent: str = Field(
        default="Wukkie.uk/1.0 (Bug Tracker for the World)",
        description="Nominatimへ送るUser-Agent（利用規約により必須）",
    )
    nominatim_timeout: int = Field(
        default=10,
        description="Nominatimリクエストのタイムアウト（秒）",
    )
    nominatim_max_retries: int = Field(
        default=2,
        description="Nominatimリクエストのリトライ回数",
    )
    nominatim_requests_per_second: float = Field(
        default=1.0,
        gt=0,
        description="Nominatimへの最大リクエスト数/秒（利用規約上限は1）",
    )
    nominatim_zoom: int = Field(
        default=14,
        ge=0,
        le=18,
        description="逆ジオコーディングの詳細度（14 = 地区レベル）",
    )
    reverse_geocoding_enabled: bool = Field(
        default=True,
        description="逆ジオコーディングを有効にするか",
    )
    reverse_geocoding_cache_enabled: bool = Field(
        default=True,
        description="逆ジオコーディングキャッシュを有効にするか",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="ログレベル (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
