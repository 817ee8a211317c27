# -*- coding: utf-8 -*-
"""
令牌桶限流模块

功能：
- 所有 Service Quotas API 调用共享的令牌桶
- 固定补充速率 + 固定突发容量
- 等待令牌时响应调用方的取消信号
"""

import threading
import time
import logging
from typing import Callable, Optional

from provider.errors import FetchCancelled

logger = logging.getLogger(__name__)


class TokenBucketLimiter:
    """
    令牌桶限流器

    功能：
    - acquire() 阻塞直到拿到一个令牌或取消信号触发
    - try_acquire() 非阻塞获取
    - 桶初始为满，连续 burst 次获取不阻塞
    """

    def __init__(self,
                 rate_per_second: float = 5.0,
                 burst: int = 10,
                 clock: Callable[[], float] = time.monotonic):
        """
        初始化限流器

        Args:
            rate_per_second: 令牌补充速率（个/秒）
            burst: 桶容量（突发上限）
            clock: 单调时钟（测试时可替换）
        """
        if rate_per_second <= 0:
            raise ValueError("rate_per_second 必须为正数")
        if burst < 1:
            raise ValueError("burst 必须 >= 1")

        self.rate = float(rate_per_second)
        self.burst = int(burst)
        self._clock = clock
        self._tokens = float(burst)
        self._last_refill = clock()
        self._lock = threading.Lock()

    def _refill(self):
        now = self._clock()
        elapsed = now - self._last_refill
        if elapsed > 0:
            self._tokens = min(self.burst, self._tokens + elapsed * self.rate)
            self._last_refill = now

    def _take_or_wait_time(self) -> float:
        """拿到令牌返回 0，否则返回需要等待的秒数"""
        with self._lock:
            self._refill()
            if self._tokens >= 1.0:
                self._tokens -= 1.0
                return 0.0
            return (1.0 - self._tokens) / self.rate

    def try_acquire(self) -> bool:
        """非阻塞获取一个令牌"""
        return self._take_or_wait_time() == 0.0

    def acquire(self, cancel_event: Optional[threading.Event] = None):
        """
        阻塞获取一个令牌

        Args:
            cancel_event: 取消信号，触发后抛出 FetchCancelled

        Raises:
            FetchCancelled: 等待期间取消信号触发
        """
        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise FetchCancelled("rate limiter wait cancelled")

            wait_time = self._take_or_wait_time()
            if wait_time == 0.0:
                return

            logger.debug(f"限流等待 {wait_time:.3f} 秒")
            if cancel_event is not None:
                if cancel_event.wait(wait_time):
                    raise FetchCancelled("rate limiter wait cancelled")
            else:
                time.sleep(wait_time)

    def available_tokens(self) -> float:
        with self._lock:
            self._refill()
            return self._tokens
