# -*- coding: utf-8 -*-
"""
定时任务实现模块

功能：
- 在后台线程中按固定间隔调用一个函数
- 不关心被调用函数的业务含义
- 只负责"什么时候执行"
"""

import threading
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class PeriodicTask:
    """
    周期任务

    职责：
    1. 每 interval 秒调用一次 func
    2. func 抛出的异常只记录日志，不退出线程
    3. stop() 立即唤醒等待中的线程
    """

    def __init__(self, func: Callable[[], object], interval: float, name: str = "PeriodicTask"):
        """
        初始化周期任务

        Args:
            func: 要周期执行的函数
            interval: 执行间隔（秒）
            name: 线程名称（用于日志）
        """
        if interval <= 0:
            raise ValueError("interval 必须为正数")
        self.func = func
        self.interval = interval
        self.name = name

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start(self):
        """启动后台线程（守护线程，不阻塞进程退出）"""
        if self.is_running():
            logger.warning(f"[{self.name}] 已在运行")
            return

        self._stop_event.clear()
        self._thread = threading.Thread(target=self._loop, name=self.name, daemon=True)
        self._thread.start()
        logger.debug(f"[{self.name}] 已启动，间隔: {self.interval} 秒")

    def stop(self, timeout: float = 5.0):
        """停止后台线程（最多等待 timeout 秒）"""
        self._stop_event.set()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)
        self._thread = None

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def _loop(self):
        while not self._stop_event.wait(self.interval):
            try:
                self.func()
            except Exception as e:
                logger.error(f"[{self.name}] 执行异常: {e}", exc_info=True)

        logger.debug(f"[{self.name}] 循环已退出")

    def get_status(self) -> dict:
        return {
            'name': self.name,
            'running': self.is_running(),
            'interval': self.interval
        }
