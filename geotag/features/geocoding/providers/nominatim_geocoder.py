"""OpenStreetMap Nominatimによる逆ジオコーディング実装"""
from typing import Any, Optional

from ....shared.exceptions.errors import GeocodingError, HTTPError
from ....shared.http.client import HTTPClient
from ....shared.http.rate_limiter import RateLimiter
from ....shared.logging.config import get_logger
from ..domain.models import LocationDescription

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://nominatim.openstreetmap.org"

# Nominatimのaddressキー（優先順）
NEIGHBORHOOD_KEYS = ("neighbourhood", "suburb", "district", "quarter", "residential")
CITY_KEYS = ("city", "town", "municipality", "village", "hamlet")
STATE_KEYS = ("state", "province", "region", "county", "state_district")


def _first_present(address: dict[str, Any], keys: tuple[str, ...]) -> Optional[str]:
    for key in keys:
        value = address.get(key)
        if value:
            return value
    return None


class NominatimReverseGeocoder:
    """Nominatim逆ジオコーディングAPI実装（APIキー不要）"""

    def __init__(
        self,
        http_client: Optional[HTTPClient] = None,
        base_url: str = DEFAULT_BASE_URL,
        zoom: int = 14,
        rate_limiter: Optional[RateLimiter] = None,
    ) -> None:
        """
        Args:
            http_client: HTTPクライアント（User-Agent設定済みのもの）
            base_url: NominatimのベースURL
            zoom: 詳細度（14 = 地区レベル）
            rate_limiter: レート制限（デフォルト: 1リクエスト/秒）
        """
        self.http_client = http_client or HTTPClient()
        self.base_url = base_url.rstrip("/")
        self.zoom = zoom
        self.rate_limiter = rate_limiter or RateLimiter(requests_per_second=1.0)

        logger.info(f"NominatimReverseGeocoder initialized: {self.base_url}")

    def reverse_geocode(
        self, latitude: float, longitude: float
    ) -> Optional[LocationDescription]:
        """
        座標から地域の説明を取得（逆ジオコーディング）

        Args:
            latitude: 緯度（ジオタグのセル中心を渡すこと）
            longitude: 経度

        Returns:
            Optional[LocationDescription]: 地域の説明（見つからない場合はNone）

        Raises:
            GeocodingError: APIリクエストに失敗した場合
        """
        params = {
            "format": "json",
            "lat": latitude,
            "lon": longitude,
            "addressdetails": 1,
            "extratags": 1,
            "namedetails": 1,
            "zoom": self.zoom,
        }

        self.rate_limiter.wait()

        try:
            logger.debug(f"Reverse geocoding: ({latitude}, {longitude})")
            data = self.http_client.get_json(f"{self.base_url}/reverse", params=params)
        except HTTPError as e:
            raise GeocodingError(f"Nominatim request failed: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("address"), dict):
            logger.warning(
                f"No reverse geocoding results for: ({latitude}, {longitude})"
            )
            return None

        description = self._to_description(data)

        logger.debug(
            f"Reverse geocoded: ({latitude}, {longitude}) -> {description.formatted}"
        )

        return description

    def _to_description(self, data: dict[str, Any]) -> LocationDescription:
        """Nominatimのレスポンスを短い説明に変換"""
        address = data["address"]

        neighborhood = _first_present(address, NEIGHBORHOOD_KEYS)
        city = _first_present(address, CITY_KEYS)
        state = _first_present(address, STATE_KEYS)
        country = address.get("country")

        parts = []
        if neighborhood:
            parts.append(neighborhood)
        if city and city != neighborhood:
            parts.append(city)
        if country:
            parts.append(country)

        formatted = ", ".join(parts) or data.get("display_name") or "Unknown location"

        return LocationDescription(
            formatted=formatted,
            neighborhood=neighborhood,
            city=city,
            state=state,
            country=country,
        )
