"""レート制限ユーティリティ"""

import random
import threading
import time
from typing import Optional

from ..logging.config import get_logger

logger = get_logger(__name__)


class RateLimiter:
    """
    レート制限を実装するクラス

    前回のリクエストから最低間隔が空くまで待機する。
    Nominatimの利用規約（1リクエスト/秒以下）を守るため、
    ジッターは最低間隔に上乗せする方向にのみ加える。
    """

    def __init__(
        self,
        requests_per_second: Optional[float] = 1.0,
        max_jitter: float = 0.0,
    ):
        """
        Args:
            requests_per_second: 秒あたりの最大リクエスト数（Noneで無制限）
            max_jitter: 最低間隔に加えるランダム待機の上限（秒）
        """
        if requests_per_second is not None and requests_per_second <= 0:
            raise ValueError("requests_per_second must be > 0")

        self.min_interval = 1.0 / requests_per_second if requests_per_second else 0.0
        self.max_jitter = max_jitter
        self.last_request_time: Optional[float] = None
        self._lock = threading.Lock()

        logger.debug(
            f"RateLimiter initialized: min_interval={self.min_interval:.2f}s, "
            f"max_jitter={self.max_jitter:.2f}s"
        )

    def wait(self) -> None:
        """
        適切な待機時間をスリープ

        前回のリクエストからの経過時間を考慮し、
        必要に応じて追加の待機を行う
        """
        with self._lock:
            current_time = time.monotonic()

            if self.last_request_time is not None:
                elapsed = current_time - self.last_request_time
                wait_time = self.min_interval + random.uniform(0.0, self.max_jitter)

                if elapsed < wait_time:
                    sleep_duration = wait_time - elapsed
                    logger.debug(f"Rate limiting: sleeping for {sleep_duration:.2f}s")
                    time.sleep(sleep_duration)

            self.last_request_time = time.monotonic()

    def reset(self) -> None:
        """レート制限をリセット"""
        with self._lock:
            self.last_request_time = None
        logger.debug("RateLimiter reset")
