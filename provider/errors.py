# -*- coding: utf-8 -*-
"""
配额看板异常定义

功能：
- 区分区域级失败、服务级失败、取消与无效请求
- 提供取消信号检查函数，供所有发起远程调用的位置使用
"""

import threading
from typing import Optional


class QuotaDashboardError(Exception):
    """配额看板异常基类"""


class FetchCancelled(QuotaDashboardError):
    """调用方的取消信号已触发"""

    def __init__(self, message: str = "fetch cancelled"):
        super().__init__(message)


class RegionFetchError(QuotaDashboardError):
    """
    单个区域拉取失败（无法列出服务或无法初始化区域客户端）

    只影响该区域，由聚合引擎转换为 warning
    """

    def __init__(self, region: str, cause: Exception):
        super().__init__(str(cause))
        self.region = region
        self.cause = cause


class RegionListingError(QuotaDashboardError):
    """无法枚举已启用的区域，对查询是硬错误"""


class InvalidRequestError(QuotaDashboardError):
    """请求参数无效（例如区域选择器解析后为空）"""


class NoCachedDataError(QuotaDashboardError):
    """导出请求对应的缓存键从未被填充或已过期"""

    def __init__(self, message: str = "No data available. Please fetch quotas first."):
        super().__init__(message)


def raise_if_cancelled(cancel_event: Optional[threading.Event]):
    """取消信号已触发时抛出 FetchCancelled"""
    if cancel_event is not None and cancel_event.is_set():
        raise FetchCancelled()
