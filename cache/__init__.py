# -*- coding: utf-8 -*-
"""
缓存模块

功能：
- 带 TTL 的内存缓存，供查询服务、区域列表、服务列表使用
"""

from .cache import MemoryCache

__all__ = ['MemoryCache']
