"""ジオタグ領域の説明サービス"""

from typing import Any, Optional

from ....infrastructure.config.settings import Settings
from ....shared.exceptions.errors import GeocodingError
from ....shared.http.client import HTTPClient
from ....shared.http.rate_limiter import RateLimiter
from ....shared.logging.config import get_logger
from ...privacy.domain.tag_grammar import is_valid_tag, normalize_tag
from ...privacy.services.location_privacy_service import (
    PRIVACY_PRECISION_KM,
    LocationPrivacyService,
)
from ..domain.models import LocationDescription
from ..providers.cache_geocoder import CacheGeocoder
from ..providers.nominatim_geocoder import NominatimReverseGeocoder

logger = get_logger(__name__)


class LocationDescriptionService:
    """
    ジオタグ領域の説明サービス

    ネットワークには常にタグのセル中心だけを送り、元の座標は扱わない。
    取得はベストエフォートで、失敗時はNoneを返す。
    """

    def __init__(
        self,
        geocoder: NominatimReverseGeocoder,
        use_cache: bool = True,
        privacy_service: Optional[LocationPrivacyService] = None,
    ) -> None:
        """
        Args:
            geocoder: 逆ジオコーダー
            use_cache: キャッシュを使用するか
            privacy_service: 領域復元に使うサービス
        """
        self.base_geocoder = geocoder
        self.cache: Optional[CacheGeocoder] = CacheGeocoder(geocoder) if use_cache else None
        self.privacy_service = privacy_service or LocationPrivacyService()

        logger.info(f"LocationDescriptionService initialized: cache={use_cache}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "LocationDescriptionService":
        """設定からNominatimクライアントを組み立てて生成"""
        http_client = HTTPClient(
            timeout=settings.nominatim_timeout,
            max_retries=settings.nominatim_max_retries,
            user_agent=settings.nominatim_user_agent,
        )
        geocoder = NominatimReverseGeocoder(
            http_client=http_client,
            base_url=settings.nominatim_base_url,
            zoom=settings.nominatim_zoom,
            rate_limiter=RateLimiter(
                requests_per_second=settings.nominatim_requests_per_second
            ),
        )
        return cls(geocoder, use_cache=settings.reverse_geocoding_cache_enabled)

    def describe(self, tag: str) -> Optional[LocationDescription]:
        """
        ジオタグの地域説明を取得

        Args:
            tag: ジオタグ

        Returns:
            Optional[LocationDescription]: 地域の説明（タグ不正・取得失敗時はNone）
        """
        if not is_valid_tag(tag):
            return None

        area = self.privacy_service.reconstruct(tag)
        if area is None:
            return None

        tag = normalize_tag(tag)

        try:
            if self.cache is not None:
                return self.cache.reverse_geocode_tag(tag, area.center.lat, area.center.lng)
            return self.base_geocoder.reverse_geocode(area.center.lat, area.center.lng)
        except GeocodingError as e:
            logger.warning(f"Reverse geocoding failed for {tag}: {e}")
            return None

    def tooltip(self, tag: str) -> str:
        """ツールチップ用の説明文"""
        suffix = f"{normalize_tag(tag)} (~{PRIVACY_PRECISION_KM:g}km area)"
        description = self.describe(tag)

        if description is None:
            return suffix

        return f"{description.formatted}\n{suffix}"

    def clear_cache(self) -> None:
        """キャッシュをクリア（キャッシュ使用時のみ）"""
        if self.cache is not None:
            self.cache.clear_cache()
        else:
            logger.warning("Cache clearing is only supported when caching is enabled")

    def get_cache_stats(self) -> Optional[dict[str, Any]]:
        """キャッシュ統計を取得（キャッシュ使用時のみ）"""
        if self.cache is not None:
            return self.cache.get_cache_stats()
        logger.warning("Cache stats are only available when caching is enabled")
        return None
