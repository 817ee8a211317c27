# -*- coding: utf-8 -*-
"""
数据模型模块

功能：
- 配额、服务、区域数据结构
- 聚合结果和查询响应
"""

from .quota import (
    GLOBAL_REGION,
    FetchResult,
    Quota,
    QuotaDefinition,
    QuotaResponse,
    Region,
    Service,
    UsageMetric,
)
