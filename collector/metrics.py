# -*- coding: utf-8 -*-
"""
Prometheus 指标模块

功能：
- 配额限制、使用量、使用百分比指标
- 看板自身指标（区域失败、拉取耗时、缓存命中、使用量来源）
- 提供指标数据供 /metrics 端点使用
"""

import logging
from typing import Iterable, Optional
from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram, REGISTRY, generate_latest

from model.quota import Quota

logger = logging.getLogger(__name__)

QUOTA_LABELS = ['provider', 'region', 'service', 'quota_name', 'quota_code']


class QuotaMetrics:
    """
    配额看板指标

    每次新的聚合结果（非缓存命中）都会刷新配额指标
    """

    def __init__(self, registry: Optional[CollectorRegistry] = None):
        """
        初始化指标

        Args:
            registry: Prometheus 注册表（默认全局注册表，测试时传入独立实例）
        """
        self.registry = registry if registry is not None else REGISTRY

        # 1. cloud_service_quota_limit: 配额限制值
        self.quota_limit = Gauge(
            'cloud_service_quota_limit',
            'Cloud service quota limit value',
            QUOTA_LABELS,
            registry=self.registry
        )

        # 2. cloud_service_quota_usage: 配额使用量（无使用量数据时为 NaN）
        self.quota_usage = Gauge(
            'cloud_service_quota_usage',
            'Cloud service quota usage value',
            QUOTA_LABELS,
            registry=self.registry
        )

        # 3. cloud_quota_usage_percent: 配额使用百分比（无使用量数据时为 NaN）
        self.quota_usage_percent = Gauge(
            'cloud_quota_usage_percent',
            'Cloud service quota usage percentage (usage / limit * 100)',
            QUOTA_LABELS,
            registry=self.registry
        )

        # 看板自身指标
        self.region_fetch_errors_total = Counter(
            'quota_dashboard_region_fetch_errors_total',
            'Total number of failed region fetches',
            ['region'],
            registry=self.registry
        )

        self.region_fetch_duration_seconds = Histogram(
            'quota_dashboard_region_fetch_duration_seconds',
            'Duration of a single region fetch in seconds',
            buckets=[0.5, 1.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0],
            registry=self.registry
        )

        self.aggregation_duration_seconds = Histogram(
            'quota_dashboard_aggregation_duration_seconds',
            'Duration of a multi-region aggregation in seconds',
            buckets=[1.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0, 600.0],
            registry=self.registry
        )

        self.cache_requests_total = Counter(
            'quota_dashboard_cache_requests_total',
            'Total number of quota cache lookups',
            ['result'],
            registry=self.registry
        )

        self.usage_resolution_total = Counter(
            'quota_dashboard_usage_resolution_total',
            'Total number of usage resolutions by winning strategy',
            ['strategy'],
            registry=self.registry
        )

    def update_quotas(self, quotas: Iterable[Quota]):
        """
        用聚合结果刷新配额指标

        Args:
            quotas: 配额列表
        """
        count = 0
        for quota in quotas:
            labels = {
                'provider': 'aws',
                'region': quota.region,
                'service': quota.service_code,
                'quota_name': quota.quota_name,
                'quota_code': quota.quota_code
            }
            self.quota_limit.labels(**labels).set(quota.value)

            if quota.has_usage_metrics:
                # usage 可能是 0（账号没有使用资源），这是正常情况
                self.quota_usage.labels(**labels).set(quota.usage)
                if quota.value > 0:
                    self.quota_usage_percent.labels(**labels).set(quota.usage_percentage)
                else:
                    self.quota_usage_percent.labels(**labels).set(float('nan'))
            else:
                self.quota_usage.labels(**labels).set(float('nan'))
                self.quota_usage_percent.labels(**labels).set(float('nan'))
            count += 1

        logger.debug(f"配额指标已更新: {count} 个")

    def record_region_error(self, region: str):
        self.region_fetch_errors_total.labels(region=region).inc()

    def observe_region_fetch(self, duration: float):
        self.region_fetch_duration_seconds.observe(duration)

    def observe_aggregation(self, duration: float):
        self.aggregation_duration_seconds.observe(duration)

    def record_cache_request(self, hit: bool):
        self.cache_requests_total.labels(result='hit' if hit else 'miss').inc()

    def record_usage_resolution(self, strategy: str):
        self.usage_resolution_total.labels(strategy=strategy).inc()

    def get_metrics(self) -> bytes:
        """
        获取 Prometheus 格式的指标数据

        Returns:
            Prometheus text format
        """
        return generate_latest(self.registry)
