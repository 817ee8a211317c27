# -*- coding: utf-8 -*-
"""
聚合与指标模块

功能：
- 多区域并发聚合、全局配额去重
- 暴露 Prometheus 格式的指标
"""

from .aggregator import QuotaAggregator, deduplicate_global_quotas
from .metrics import QuotaMetrics
