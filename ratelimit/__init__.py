# -*- coding: utf-8 -*-
"""
限流模块

功能：
- 保护 Service Quotas API，避免多区域并发时被限流
"""

from .token_bucket import TokenBucketLimiter

__all__ = ['TokenBucketLimiter']
