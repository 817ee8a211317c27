# -*- coding: utf-8 -*-
"""
CloudWatch 模块

功能：
- 按配额携带的使用量指标描述查询 CloudWatch
- 选择最新数据点并按推荐统计方法取值
"""

from .client import CloudWatchClient, extract_statistic, latest_datapoint, normalize_statistic
