# -*- coding: utf-8 -*-
"""
单区域配额拉取模块

功能：
- 列出区域内的服务（可按服务代码过滤）
- 逐个服务拉取默认配额和已应用配额并合并
- 对每个配额调用使用量解析器
"""

import logging
import threading
from typing import Dict, List, Optional
from botocore.exceptions import BotoCoreError, ClientError

from model.quota import Quota, QuotaDefinition, Service
from provider.aws.service_quotas import ServiceQuotasClient
from provider.errors import RegionFetchError, raise_if_cancelled

logger = logging.getLogger(__name__)


def merge_quota_definitions(defaults: List[QuotaDefinition],
                            applied: List[QuotaDefinition]) -> List[QuotaDefinition]:
    """
    按 quota_code 合并默认配额和已应用配额

    已应用配额覆盖同代码的默认配额，保持首次出现的位置
    """
    merged: Dict[str, QuotaDefinition] = {}
    for definition in defaults:
        merged[definition.quota_code] = definition
    for definition in applied:
        merged[definition.quota_code] = definition
    return list(merged.values())


class RegionFetcher:
    """
    单区域配额拉取器

    功能：
    - 区域客户端初始化失败或服务列表失败，整个区域失败（RegionFetchError）
    - 单个服务的配额列表失败，只跳过该服务
    - 每个服务、每个配额之前检查取消信号
    """

    def __init__(self, client_factory, limiter, resolver):
        """
        Args:
            client_factory: AWSClientFactory 实例
            limiter: TokenBucketLimiter 实例（所有区域共享）
            resolver: UsageResolver 实例
        """
        self.client_factory = client_factory
        self.limiter = limiter
        self.resolver = resolver

    def _quotas_client(self, region: str) -> ServiceQuotasClient:
        try:
            return ServiceQuotasClient(region, self.client_factory, self.limiter)
        except (ClientError, BotoCoreError) as e:
            raise RegionFetchError(region, e) from e

    def list_services(self, region: str, cancel_event: Optional[threading.Event] = None) -> List[Service]:
        """
        列出区域内的服务

        Raises:
            RegionFetchError: 无法列出服务
            FetchCancelled: 取消信号触发
        """
        client = self._quotas_client(region)
        try:
            return client.list_services(cancel_event)
        except (ClientError, BotoCoreError) as e:
            raise RegionFetchError(region, e) from e

    def _fetch_service(self,
                       client: ServiceQuotasClient,
                       region: str,
                       service: Service,
                       cancel_event: Optional[threading.Event]) -> List[Quota]:
        try:
            defaults = client.list_default_quotas(service.code, cancel_event)
            applied = client.list_applied_quotas(service.code, cancel_event)
        except (ClientError, BotoCoreError) as e:
            logger.warning(f"跳过服务 {service.code} (region: {region}): 获取配额列表失败: {e}")
            return []

        quotas = []
        for definition in merge_quota_definitions(defaults, applied):
            raise_if_cancelled(cancel_event)
            quota = Quota.from_definition(region, service, definition)
            self.resolver.resolve(quota, definition, region, cancel_event)
            quotas.append(quota)
        return quotas

    def fetch(self,
              region: str,
              service_filter: str = "",
              cancel_event: Optional[threading.Event] = None) -> List[Quota]:
        """
        拉取单个区域的配额

        Args:
            region: 区域代码
            service_filter: 服务代码（为空表示所有服务，不区分大小写）
            cancel_event: 取消信号

        Returns:
            Quota 列表（服务按 API 顺序，配额按分页顺序）

        Raises:
            RegionFetchError: 区域级失败
            FetchCancelled: 取消信号触发
        """
        raise_if_cancelled(cancel_event)
        client = self._quotas_client(region)
        try:
            services = client.list_services(cancel_event)
        except (ClientError, BotoCoreError) as e:
            raise RegionFetchError(region, e) from e

        if service_filter:
            wanted = service_filter.lower()
            services = [s for s in services if s.code.lower() == wanted]
            if not services:
                logger.debug(f"区域 {region} 中没有服务 {service_filter}")

        quotas: List[Quota] = []
        for service in services:
            raise_if_cancelled(cancel_event)
            quotas.extend(self._fetch_service(client, region, service, cancel_event))

        logger.info(f"区域 {region} 拉取完成: {len(services)} 个服务, {len(quotas)} 个配额")
        return quotas
