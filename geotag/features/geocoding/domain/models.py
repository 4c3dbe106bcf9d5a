"""逆ジオコーディング機能のドメインモデル"""
from dataclasses import dataclass
from typing import Any, Optional


@dataclass
class LocationDescription:
    """ジオタグ領域の人間向けの説明"""

    formatted: str  # 表示用の短い説明（例: "Soho, London, United Kingdom"）
    neighborhood: Optional[str] = None  # 地区
    city: Optional[str] = None  # 市区町村
    state: Optional[str] = None  # 州・県
    country: Optional[str] = None  # 国

    def __repr__(self) -> str:
        return f"LocationDescription({self.formatted!r})"

    def to_dict(self) -> dict[str, Any]:
        """JSON出力用の辞書に変換"""
        return {
            "formatted": self.formatted,
            "neighborhood": self.neighborhood,
            "city": self.city,
            "state": self.state,
            "country": self.country,
        }
