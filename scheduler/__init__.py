# -*- coding: utf-8 -*-
"""
定时任务模块

功能：
- 在后台线程中按固定间隔执行函数（如缓存过期清理）
"""

from scheduler.scheduler import PeriodicTask

__all__ = ['PeriodicTask']
