# -*- coding: utf-8 -*-
"""
缓存实现模块

功能：
- 内存缓存实现（固定 TTL，绝对过期时间）
- 每次读取都做逻辑过期检查
- 后台线程定期清理过期条目
"""

import time
import threading
import logging
from contextlib import contextmanager
from typing import Any, Callable, Dict, Optional, Tuple

from scheduler.scheduler import PeriodicTask

logger = logging.getLogger(__name__)


class _ReadWriteLock:
    """读写锁：读者之间可并行，写者独占"""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writer = False

    @contextmanager
    def read(self):
        with self._cond:
            while self._writer:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if self._readers == 0:
                    self._cond.notify_all()

    @contextmanager
    def write(self):
        with self._cond:
            while self._writer or self._readers:
                self._cond.wait()
            self._writer = True
        try:
            yield
        finally:
            with self._cond:
                self._writer = False
                self._cond.notify_all()


class MemoryCache:
    """
    内存缓存实现

    功能：
    - 存储聚合结果、区域列表、服务列表
    - 所有条目使用同一个 TTL
    - 过期条目对读取不可见，由后台线程物理删除
    """

    def __init__(self,
                 ttl: float,
                 sweep_interval: float = 60.0,
                 clock: Callable[[], float] = time.time,
                 start_sweeper: bool = True):
        """
        初始化内存缓存

        Args:
            ttl: 生存时间（秒）
            sweep_interval: 后台清理间隔（秒），与 TTL 无关
            clock: 时间函数（测试时可替换）
            start_sweeper: 是否启动后台清理线程
        """
        if ttl <= 0:
            raise ValueError("ttl 必须为正数")
        self.ttl = ttl
        self._clock = clock
        self._cache: Dict[str, Tuple[Any, float]] = {}  # key -> (value, expiration_time)
        self._lock = _ReadWriteLock()

        self._sweeper = PeriodicTask(self.cleanup_expired, sweep_interval, name="CacheSweepThread")
        if start_sweeper:
            self._sweeper.start()

    def get(self, key: str) -> Tuple[Optional[Any], bool]:
        """
        获取缓存值

        Args:
            key: 缓存键

        Returns:
            (value, exists) 元组，exists=True 表示缓存命中且未过期
        """
        with self._lock.read():
            entry = self._cache.get(key)

        if entry is None:
            return None, False

        value, expiration_time = entry
        if self._clock() >= expiration_time:
            return None, False

        return value, True

    def set(self, key: str, value: Any):
        """
        设置缓存值（覆盖已有条目）

        Args:
            key: 缓存键
            value: 缓存值
        """
        expiration_time = self._clock() + self.ttl
        with self._lock.write():
            self._cache[key] = (value, expiration_time)

    def delete(self, key: str):
        """删除缓存值"""
        with self._lock.write():
            self._cache.pop(key, None)

    def clear(self):
        """清空所有缓存"""
        with self._lock.write():
            self._cache = {}
        logger.info("缓存已清空")

    def cleanup_expired(self) -> int:
        """
        清理过期条目

        Returns:
            删除的条目数
        """
        current_time = self._clock()
        with self._lock.read():
            expired_keys = [
                key for key, (_, expiration_time) in self._cache.items()
                if current_time >= expiration_time
            ]

        removed = 0
        for key in expired_keys:
            with self._lock.write():
                entry = self._cache.get(key)
                # 读写之间可能被重新 set
                if entry is not None and current_time >= entry[1]:
                    del self._cache[key]
                    removed += 1

        if removed:
            logger.debug(f"清理过期缓存条目: {removed} 个")
        return removed

    def close(self):
        """停止后台清理线程"""
        self._sweeper.stop()

    def sweeper_status(self) -> dict:
        return self._sweeper.get_status()

    def __len__(self) -> int:
        with self._lock.read():
            return len(self._cache)
