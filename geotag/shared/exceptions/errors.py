"""カスタム例外定義"""


class GeoTagError(Exception):
    """ジオタグ基底例外"""

    pass


class InvalidCoordinateError(GeoTagError):
    """緯度・経度が範囲外"""

    pass


class InvalidTagError(GeoTagError):
    """ジオタグの書式エラー"""

    pass


class CodeProviderError(GeoTagError):
    """Plus Codeのエンコード・デコードエラー"""

    pass


class HTTPError(GeoTagError):
    """HTTP関連のエラー"""

    pass


class GeocodingError(GeoTagError):
    """逆ジオコーディングエラー"""

    pass


class ConfigurationError(GeoTagError):
    """設定エラー"""

    pass
