"""Plus Codeプロバイダーの基底クラス"""

from abc import ABC, abstractmethod

from ..domain.models import DecodedCode


class BaseCodeProvider(ABC):
    """
    Open Location Code準拠のエンコーダー/デコーダーの抽象基底クラス

    同じ規格に準拠した別実装に差し替えられるよう、
    encode / decode の2操作だけを要求する。
    """

    @abstractmethod
    def encode(self, latitude: float, longitude: float) -> str:
        """
        座標を完全精度のPlus Codeに変換

        Args:
            latitude: 緯度
            longitude: 経度

        Returns:
            str: 完全なPlus Code（例: "9C3XGV2F+2V"）
        """
        pass

    @abstractmethod
    def decode(self, code: str) -> DecodedCode:
        """
        Plus Code（パディング済み可）をセル中心と解像度に変換

        Raises:
            CodeProviderError: コードが不正な場合
        """
        pass
