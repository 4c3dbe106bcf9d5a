"""openlocationcodeライブラリによるPlus Code実装"""

from openlocationcode import openlocationcode as olc

from ....shared.exceptions.errors import CodeProviderError
from ....shared.logging.config import get_logger
from ..domain.models import DecodedCode
from .base import BaseCodeProvider

logger = get_logger(__name__)


class OpenLocationCodeProvider(BaseCodeProvider):
    """Google製openlocationcodeパッケージのアダプター"""

    def __init__(self, code_length: int = 10) -> None:
        """
        Args:
            code_length: エンコード時の桁数（デフォルト: 10桁 ≒ 14m四方）
        """
        self.code_length = code_length
        logger.debug(f"OpenLocationCodeProvider initialized: code_length={code_length}")

    def encode(self, latitude: float, longitude: float) -> str:
        try:
            return olc.encode(latitude, longitude, self.code_length)
        except Exception as e:
            raise CodeProviderError(
                f"Failed to encode ({latitude}, {longitude}): {e}"
            ) from e

    def decode(self, code: str) -> DecodedCode:
        try:
            area = olc.decode(code)
        except Exception as e:
            raise CodeProviderError(f"Failed to decode {code!r}: {e}") from e

        # ペアコードでは緯度・経度とも同じ角度幅
        resolution = area.latitudeHi - area.latitudeLo

        return DecodedCode(
            latitude=area.latitudeCenter,
            longitude=area.longitudeCenter,
            resolution=resolution,
        )
