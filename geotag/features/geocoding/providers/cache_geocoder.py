"""キャッシュ付き逆ジオコーダー"""

from typing import Any, Optional

from ....shared.logging.config import get_logger
from ..domain.models import LocationDescription
from .nominatim_geocoder import NominatimReverseGeocoder

logger = get_logger(__name__)


class CacheGeocoder:
    """
    キャッシュ付き逆ジオコーダー

    同じジオタグへのAPI呼び出しを削減するため、ジオタグをキーにした
    メモリ内キャッシュを使用。プロセス起動時に生成して注入し、
    テストではclear_cache()で空にする。
    同じキーへの同時アクセスでは後勝ちで上書きする（値はタグごとに同一）。
    """

    def __init__(self, geocoder: NominatimReverseGeocoder) -> None:
        """
        Args:
            geocoder: ベースとなる逆ジオコーダー
        """
        self.geocoder = geocoder
        self.cache: dict[str, LocationDescription] = {}
        self.hit_count = 0
        self.miss_count = 0

        logger.info("CacheGeocoder initialized")

    def reverse_geocode_tag(
        self, tag: str, latitude: float, longitude: float
    ) -> Optional[LocationDescription]:
        """
        ジオタグのセル中心を逆ジオコーディング（キャッシュあり）

        失敗・結果なしはキャッシュせず、次回再試行する。

        Args:
            tag: ジオタグ（キャッシュキー）
            latitude: セル中心の緯度
            longitude: セル中心の経度

        Returns:
            Optional[LocationDescription]: 地域の説明（見つからない場合はNone）

        Raises:
            GeocodingError: APIリクエストに失敗した場合
        """
        cache_key = tag.lower()

        cached = self.cache.get(cache_key)
        if cached is not None:
            self.hit_count += 1
            logger.debug(f"Cache hit for tag: {cache_key}")
            return cached

        self.miss_count += 1
        logger.debug(f"Cache miss for tag: {cache_key}")

        description = self.geocoder.reverse_geocode(latitude, longitude)

        if description is not None:
            self.cache[cache_key] = description

        return description

    def clear_cache(self) -> None:
        """キャッシュをクリア"""
        cache_size = len(self.cache)
        self.cache.clear()
        self.hit_count = 0
        self.miss_count = 0
        logger.info(f"Cache cleared: {cache_size} entries removed")

    def get_cache_stats(self) -> dict[str, Any]:
        """
        キャッシュ統計を取得

        Returns:
            dict[str, Any]: キャッシュ統計（サイズ、ヒット数、ミス数、ヒット率）
        """
        total_requests = self.hit_count + self.miss_count
        hit_rate = (self.hit_count / total_requests * 100) if total_requests > 0 else 0.0

        stats = {
            "cache_size": len(self.cache),
            "hit_count": self.hit_count,
            "miss_count": self.miss_count,
            "total_requests": total_requests,
            "hit_rate_percent": round(hit_rate, 2),
        }

        logger.debug(f"Cache stats: {stats}")

        return stats
