"""位置情報プライバシー機能のドメインモデル"""
from dataclasses import dataclass
from typing import Any, Optional

from ....shared.exceptions.errors import InvalidTagError
from .tag_grammar import GEO_TAG_PREFIX, PRIVACY_CODE_LENGTH, is_valid_tag


@dataclass(frozen=True)
class LatLng:
    """緯度・経度のペア"""

    lat: float
    lng: float

    def to_dict(self) -> dict[str, float]:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class DecodedCode:
    """Plus Codeのデコード結果（セル中心と一辺の角度幅）"""

    latitude: float
    longitude: float
    resolution: float  # 度


@dataclass(frozen=True)
class LocationArea:
    """
    ジオタグから復元した矩形領域

    保存も更新もしない。タグから必要な時に毎回計算する。
    """

    south_west: LatLng
    north_east: LatLng
    center: LatLng

    def contains(self, lat: float, lng: float) -> bool:
        """座標が領域内（境界を含む）にあるか"""
        return (
            self.south_west.lat <= lat <= self.north_east.lat
            and self.south_west.lng <= lng <= self.north_east.lng
        )

    @property
    def lat_span(self) -> float:
        return self.north_east.lat - self.south_west.lat

    @property
    def lng_span(self) -> float:
        return self.north_east.lng - self.south_west.lng

    def to_dict(self) -> dict[str, dict[str, float]]:
        return {
            "southWest": self.south_west.to_dict(),
            "northEast": self.north_east.to_dict(),
            "center": self.center.to_dict(),
        }


@dataclass(frozen=True)
class PrivacyLocation:
    """
    公開・共有用の位置情報

    元の高精度な座標は保持しない。center_lat / center_lng は
    切り詰めたコードのセル中心であり、入力座標ではない。
    """

    tag: str  # "#geo" + Plus Code先頭6文字（小文字）
    full_code: str  # 参照用の完全なPlus Code
    center_lat: float  # 切り詰めセルの中心緯度
    center_lng: float  # 切り詰めセルの中心経度
    precision_km: float  # セルの公称半径（km）
    label: Optional[str] = None  # 任意のラベル（位置の保証なし）

    def to_dict(self) -> dict[str, Any]:
        """JSON保存用の辞書に変換"""
        data: dict[str, Any] = {
            "tag": self.tag,
            "fullCode": self.full_code,
            "centerLat": self.center_lat,
            "centerLng": self.center_lng,
            "precisionKm": self.precision_km,
        }
        if self.label is not None:
            data["label"] = self.label
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PrivacyLocation":
        """
        保存済みの辞書から復元

        Raises:
            InvalidTagError: タグが不正、またはfullCodeから導出できない場合
        """
        try:
            tag = data["tag"]
            full_code = data["fullCode"]
            center_lat = float(data["centerLat"])
            center_lng = float(data["centerLng"])
            precision_km = float(data["precisionKm"])
        except (KeyError, TypeError, ValueError) as e:
            raise InvalidTagError(f"Malformed privacy location record: {e}") from e

        if not is_valid_tag(tag):
            raise InvalidTagError(f"Invalid geo tag: {tag!r}")

        expected = f"{GEO_TAG_PREFIX}{str(full_code)[:PRIVACY_CODE_LENGTH].lower()}"
        if tag.lower() != expected:
            raise InvalidTagError(
                f"Geo tag {tag!r} does not match full code {full_code!r}"
            )

        return cls(
            tag=expected,
            full_code=full_code,
            center_lat=center_lat,
            center_lng=center_lng,
            precision_km=precision_km,
            label=data.get("label"),
        )
