"""位置情報プライバシーサービス"""

import math
from typing import Iterable, Optional

from ....shared.exceptions.errors import CodeProviderError, InvalidCoordinateError
from ....shared.logging.config import get_logger
from ..domain.models import LatLng, LocationArea, PrivacyLocation
from ..domain.tag_grammar import (
    GEO_TAG_PREFIX,
    PRIVACY_CODE_LENGTH,
    is_valid_tag,
    normalize_tag,
    tag_body,
)
from ..providers.base import BaseCodeProvider
from ..providers.open_location_code_provider import OpenLocationCodeProvider

logger = get_logger(__name__)

# 6桁コードを「これ以上細分化しない」最も粗いセルとしてデコードするためのパディング
PADDING_SUFFIX = "00+"

# 6桁コードの公称半径。緯度による実際のセル幅の変化は考慮しない
PRIVACY_PRECISION_KM = 1.0

# 近隣タグ生成用のオフセット（度）。6桁セルの一辺0.05度と同じ幅で、
# 中心から動かすと隣のセルの中心に着地する
NEIGHBOR_OFFSET_DEG = 0.05

# N, S, E, W, NE, NW, SE, SW
NEIGHBOR_DIRECTIONS: tuple[tuple[int, int], ...] = (
    (1, 0),
    (-1, 0),
    (0, 1),
    (0, -1),
    (1, 1),
    (1, -1),
    (-1, 1),
    (-1, -1),
)


def _wrap_longitude(lng: float) -> float:
    """経度を[-180, 180)に正規化"""
    return ((lng + 180.0) % 360.0) - 180.0


class LocationPrivacyService:
    """
    位置情報プライバシーサービス

    正確な座標を約1km四方のジオタグ（"#geo" + Plus Code先頭6文字）に
    切り詰め、タグからの領域復元・近隣タグ生成・包含判定を行う。
    すべての操作は副作用のない同期処理で、スレッド間で共有してよい。
    """

    def __init__(self, code_provider: Optional[BaseCodeProvider] = None) -> None:
        """
        Args:
            code_provider: Plus Codeプロバイダー（省略時はopenlocationcode）
        """
        self.code_provider = code_provider or OpenLocationCodeProvider()
        logger.debug(
            f"LocationPrivacyService initialized: provider={self.code_provider.__class__.__name__}"
        )

    def truncate(
        self, lat: float, lng: float, label: Optional[str] = None
    ) -> PrivacyLocation:
        """
        座標をプライバシー保護されたジオタグに変換

        Args:
            lat: 緯度（-90〜90）
            lng: 経度（-180〜180）
            label: 任意のラベル

        Returns:
            PrivacyLocation: 共有用の位置情報

        Raises:
            InvalidCoordinateError: 座標が範囲外の場合
            CodeProviderError: エンコード・デコードに失敗した場合
        """
        self._validate_coordinate(lat, lng)

        full_code = self.code_provider.encode(lat, lng)
        privacy_code = full_code[:PRIVACY_CODE_LENGTH]
        tag = f"{GEO_TAG_PREFIX}{privacy_code.lower()}"

        # プロバイダーの出力がタグの書式を満たさない場合は失敗させる
        if not is_valid_tag(tag):
            raise CodeProviderError(
                f"Provider returned an unusable code {full_code!r} for ({lat}, {lng})"
            )

        # 第三者がタグだけから復元できる中心と一致させる
        area = self._decode_area(tag_body(tag))

        return PrivacyLocation(
            tag=tag,
            full_code=full_code,
            center_lat=area.center.lat,
            center_lng=area.center.lng,
            precision_km=PRIVACY_PRECISION_KM,
            label=label,
        )

    def reconstruct(self, tag: str) -> Optional[LocationArea]:
        """
        ジオタグから領域を復元

        Args:
            tag: ジオタグ（大文字・小文字不問）

        Returns:
            Optional[LocationArea]: 領域（タグ不正・デコード失敗時はNone）
        """
        if not is_valid_tag(tag):
            return None

        try:
            return self._decode_area(tag_body(tag))
        except CodeProviderError as e:
            logger.warning(f"Failed to reconstruct area for {tag}: {e}")
            return None

    def contains(self, lat: float, lng: float, tag: str) -> bool:
        """座標がジオタグの領域内（境界を含む）にあるか"""
        area = self.reconstruct(tag)
        if area is None:
            return False
        return area.contains(lat, lng)

    def nearby_tags(self, tag: str, radius_multiplier: float = 1.0) -> list[str]:
        """
        近隣エリアのジオタグを取得

        中心から8方向に固定オフセットだけ動かした点を切り詰めて求める近似。
        高緯度では経度方向のセル幅が縮むため、重複や隙間が生じうる。

        Args:
            tag: 基準のジオタグ
            radius_multiplier: オフセットの倍率

        Returns:
            list[str]: 基準タグを先頭にした重複のないジオタグ（最大9件、タグ不正時は空）
        """
        area = self.reconstruct(tag)
        if area is None:
            return []

        nearby = [normalize_tag(tag)]
        step = NEIGHBOR_OFFSET_DEG * radius_multiplier

        for lat_sign, lng_sign in NEIGHBOR_DIRECTIONS:
            lat = area.center.lat + lat_sign * step
            lng = _wrap_longitude(area.center.lng + lng_sign * step)

            # 極を越える候補は捨てる
            if not -90.0 <= lat <= 90.0:
                continue

            neighbor = self.truncate(lat, lng).tag
            if neighbor not in nearby:
                nearby.append(neighbor)

        return nearby

    def format_for_display(self, location: PrivacyLocation) -> str:
        """投稿・一覧表示用の文字列を作成（例: "#geo9c3xgv (Soho) ~1km area"）"""
        parts = [location.tag]

        if location.label:
            parts.append(f"({location.label})")

        parts.append(f"~{location.precision_km:g}km area")

        return " ".join(parts)

    def describe_tag(self, tag: str) -> str:
        """ジオタグの簡易説明文"""
        if not is_valid_tag(tag):
            return "Invalid location"

        return f"Approximate area: ~{PRIVACY_PRECISION_KM:g}km radius ({normalize_tag(tag)})"

    def merge_location_tags(
        self, hashtags: Iterable[str], *locations: PrivacyLocation
    ) -> list[str]:
        """
        ハッシュタグのリストの先頭に位置情報のジオタグを追加

        既に含まれているタグ（大文字・小文字不問）は追加しない。
        """
        merged = list(hashtags)
        existing = {h.lower() for h in merged}

        new_tags = []
        for location in locations:
            if location.tag not in existing:
                new_tags.append(location.tag)
                existing.add(location.tag)

        return new_tags + merged

    def _decode_area(self, privacy_code: str) -> LocationArea:
        """
        6桁コードをパディングしてデコードし、矩形領域を作成

        Raises:
            CodeProviderError: デコードに失敗した場合
        """
        decoded = self.code_provider.decode(privacy_code + PADDING_SUFFIX)
        half = decoded.resolution / 2

        if not half > 0:
            raise CodeProviderError(
                f"Degenerate cell for {privacy_code!r}: resolution={decoded.resolution}"
            )

        return LocationArea(
            south_west=LatLng(decoded.latitude - half, decoded.longitude - half),
            north_east=LatLng(decoded.latitude + half, decoded.longitude + half),
            center=LatLng(decoded.latitude, decoded.longitude),
        )

    @staticmethod
    def _validate_coordinate(lat: float, lng: float) -> None:
        """座標の範囲チェック（丸めは行わない）"""
        if not (isinstance(lat, (int, float)) and math.isfinite(lat) and -90.0 <= lat <= 90.0):
            raise InvalidCoordinateError(f"Latitude out of range [-90, 90]: {lat!r}")
        if not (isinstance(lng, (int, float)) and math.isfinite(lng) and -180.0 <= lng <= 180.0):
            raise InvalidCoordinateError(f"Longitude out of range [-180, 180]: {lng!r}")


# デフォルトインスタンスによる簡易関数
_default_service = LocationPrivacyService()

truncate = _default_service.truncate
reconstruct = _default_service.reconstruct
contains = _default_service.contains
nearby_tags = _default_service.nearby_tags
format_for_display = _default_service.format_for_display
describe_tag = _default_service.describe_tag
merge_location_tags = _default_service.merge_location_tags
