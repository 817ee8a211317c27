# -*- coding: utf-8 -*-
"""
使用量解析模块

功能：
- 按固定顺序尝试多个使用量来源（直接探测 -> CloudWatch 指标）
- 第一个成功的来源生效，后续来源不再尝试
- 解析失败只影响使用量，不影响配额本身
"""

import logging
import threading
from abc import ABC, abstractmethod
from typing import List, Optional, Tuple
from botocore.exceptions import BotoCoreError, ClientError

from cloudwatch.client import CloudWatchClient, extract_statistic, latest_datapoint, normalize_statistic
from model.quota import Quota, QuotaDefinition
from provider.aws.usage_probes import ProbeRegistry
from provider.errors import raise_if_cancelled

logger = logging.getLogger(__name__)

STRATEGY_NONE = 'none'


class UsageStrategy(ABC):
    """
    使用量来源接口

    try_resolve 返回 (usage, ok)，ok=False 表示该来源没有数据，继续尝试下一个
    """

    name = ''

    @abstractmethod
    def try_resolve(self,
                    quota: Quota,
                    definition: QuotaDefinition,
                    region: str,
                    cancel_event: Optional[threading.Event] = None) -> Tuple[float, bool]:
        pass


class DirectProbeStrategy(UsageStrategy):
    """通过资源 API 直接统计（分发表中有登记的配额）"""

    name = 'direct_api'

    def __init__(self, registry: ProbeRegistry, client_factory):
        self.registry = registry
        self.client_factory = client_factory

    def try_resolve(self, quota, definition, region, cancel_event=None):
        probe = self.registry.get(quota.quota_code)
        if probe is None:
            return 0.0, False
        if probe.service_code != quota.service_code:
            return 0.0, False

        raise_if_cancelled(cancel_event)
        try:
            usage = probe(self.client_factory, region)
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"直接探测失败 {quota.service_code}/{quota.quota_code} (region: {region}): {e}")
            return 0.0, False
        except Exception as e:
            logger.error(f"直接探测异常 {quota.service_code}/{quota.quota_code} (region: {region}): {e}", exc_info=True)
            return 0.0, False

        logger.debug(f"直接探测成功 {quota.service_code}/{quota.quota_code} (region: {region}): {usage}")
        return usage, True


class MetricStatisticStrategy(UsageStrategy):
    """通过配额定义携带的 CloudWatch 使用量指标获取"""

    name = 'cloudwatch'

    def __init__(self, client_factory):
        self.client_factory = client_factory

    def try_resolve(self, quota, definition, region, cancel_event=None):
        metric = definition.usage_metric
        if metric is None or not metric.namespace or not metric.metric_name:
            return 0.0, False

        raise_if_cancelled(cancel_event)
        statistic = normalize_statistic(metric.statistic_recommendation)
        try:
            client = CloudWatchClient(region, self.client_factory)
            datapoints = client.get_metric_statistics(
                namespace=metric.namespace,
                metric_name=metric.metric_name,
                dimensions=metric.dimensions,
                statistic=statistic
            )
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"CloudWatch 获取使用量失败 {quota.service_code}/{quota.quota_code} (region: {region}): {e}")
            return 0.0, False
        except Exception as e:
            logger.error(f"CloudWatch 获取使用量异常 {quota.service_code}/{quota.quota_code} (region: {region}): {e}", exc_info=True)
            return 0.0, False

        latest = latest_datapoint(datapoints)
        if latest is None:
            return 0.0, False
        return extract_statistic(latest, statistic), True


class UsageResolver:
    """
    使用量解析器

    功能：
    - 依次调用策略列表，第一个 ok 的策略生效
    - 所有策略都没有数据时，配额保持 has_usage_metrics=False, usage=0
    """

    def __init__(self, strategies: List[UsageStrategy], metrics=None):
        """
        Args:
            strategies: 按优先级排列的策略列表
            metrics: QuotaMetrics 实例（可选）
        """
        self.strategies = list(strategies)
        self.metrics = metrics

    def resolve(self,
                quota: Quota,
                definition: QuotaDefinition,
                region: str,
                cancel_event: Optional[threading.Event] = None) -> Optional[str]:
        """
        解析单个配额的使用量并写入 quota

        Returns:
            生效策略名称，没有数据时返回 None

        Raises:
            FetchCancelled: 取消信号触发
        """
        winner = None
        for strategy in self.strategies:
            raise_if_cancelled(cancel_event)
            usage, ok = strategy.try_resolve(quota, definition, region, cancel_event)
            if ok:
                quota.apply_usage(usage)
                winner = strategy.name
                break

        if self.metrics is not None:
            self.metrics.record_usage_resolution(winner or STRATEGY_NONE)
        return winner


def build_default_resolver(client_factory, registry: ProbeRegistry, metrics=None) -> UsageResolver:
    """默认策略顺序：直接探测优先，其次 CloudWatch"""
    return UsageResolver(
        strategies=[
            DirectProbeStrategy(registry, client_factory),
            MetricStatisticStrategy(client_factory),
        ],
        metrics=metrics
    )
