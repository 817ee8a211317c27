# -*- coding: utf-8 -*-
"""
带缓存的配额查询服务

功能：
- 缓存键只包含区域选择器和服务过滤，搜索在缓存之后过滤
- 缓存未命中时解析区域并调用聚合引擎
- 所有区域都失败的结果不写入缓存
- 区域列表、服务列表同样走缓存
"""

import logging
import threading
from datetime import datetime, timezone
from typing import Callable, List, Optional, Sequence, Tuple

from model.quota import FetchResult, Quota, QuotaResponse, Region, Service
from provider.errors import InvalidRequestError, NoCachedDataError, raise_if_cancelled

logger = logging.getLogger(__name__)

ALL_REGIONS = "all"
REGIONS_CACHE_KEY = "regions"


def quotas_cache_key(region_selector: str, service_filter: str) -> str:
    return f"quotas:{region_selector}:{service_filter}"


def services_cache_key(region: str) -> str:
    return f"services:{region}"


def parse_region_selector(region_selector: str) -> List[str]:
    """逗号分隔的区域列表，去除空白并丢弃空项"""
    return [r.strip() for r in region_selector.split(',') if r.strip()]


class QuotaService:
    """
    配额查询服务

    功能：
    - query: 缓存优先的配额查询
    - refresh: 清空全部缓存
    - get_regions / get_services: 带缓存的区域、服务列表
    - get_cached_quotas: 只读缓存（导出使用）
    """

    def __init__(self,
                 cache,
                 aggregator,
                 fetcher,
                 region_lister: Callable[[], List[Region]],
                 configured_regions: Sequence[str] = (),
                 metrics=None):
        """
        初始化查询服务

        Args:
            cache: MemoryCache 实例
            aggregator: QuotaAggregator 实例
            fetcher: RegionFetcher 实例（服务列表使用）
            region_lister: 返回已启用区域列表的函数
            configured_regions: 配置的区域列表，非空时 "all" 表示这些区域
            metrics: QuotaMetrics 实例（可选）
        """
        self.cache = cache
        self.aggregator = aggregator
        self.fetcher = fetcher
        self.region_lister = region_lister
        self.configured_regions = [r for r in configured_regions if r]
        self.metrics = metrics

    def _record_cache(self, hit: bool):
        if self.metrics is not None:
            self.metrics.record_cache_request(hit)

    def _resolve_regions(self, region_selector: str, cancel_event: Optional[threading.Event]) -> List[str]:
        selector = region_selector.strip()
        if selector == "" or selector.lower() == ALL_REGIONS:
            if self.configured_regions:
                regions = list(self.configured_regions)
            else:
                enabled, _ = self.get_regions(cancel_event)
                regions = [r.code for r in enabled]
        else:
            regions = parse_region_selector(selector)

        if not regions:
            raise InvalidRequestError(f"no regions resolved from selector '{region_selector}'")
        return regions

    def query(self,
              region_selector: str,
              service_filter: str = "",
              search_term: str = "",
              cancel_event: Optional[threading.Event] = None) -> QuotaResponse:
        """
        查询配额

        Args:
            region_selector: "" / "all" / 逗号分隔的区域列表
            service_filter: 服务代码（为空表示所有服务）
            search_term: 搜索词（配额名称、服务名称、服务代码，不区分大小写）
            cancel_event: 取消信号

        Returns:
            QuotaResponse

        Raises:
            InvalidRequestError: 区域选择器解析后为空
            RegionListingError: 无法枚举已启用区域
        """
        cache_key = quotas_cache_key(region_selector, service_filter)
        cached, hit = self.cache.get(cache_key)
        self._record_cache(hit)

        if hit:
            result, fetched_at = cached
            quotas = result.copy_quotas()
            warnings = list(result.warnings)
            from_cache = True
            logger.debug(f"配额缓存命中: {cache_key}")
        else:
            regions = self._resolve_regions(region_selector, cancel_event)
            result = self.aggregator.aggregate(regions, service_filter, cancel_event)
            fetched_at = datetime.now(timezone.utc)
            quotas = result.copy_quotas()
            warnings = list(result.warnings)
            from_cache = False

            if self.metrics is not None:
                self.metrics.update_quotas(result.quotas)

            if not result.quotas and result.warnings:
                logger.warning(f"所有区域拉取失败，不写入缓存: {cache_key}")
            elif cancel_event is not None and cancel_event.is_set():
                logger.warning(f"查询已取消，部分结果不写入缓存: {cache_key}")
            else:
                stored = FetchResult.build(result.copy_quotas(), list(result.warnings))
                self.cache.set(cache_key, (stored, fetched_at))

        if search_term:
            quotas = [q for q in quotas if q.matches(search_term)]

        return QuotaResponse(quotas=quotas, fetched_at=fetched_at, from_cache=from_cache, warnings=warnings)

    def aggregate(self,
                  regions: Sequence[str],
                  service_filter: str = "",
                  cancel_event: Optional[threading.Event] = None) -> FetchResult:
        """直接调用聚合引擎，不经过缓存"""
        return self.aggregator.aggregate(regions, service_filter, cancel_event)

    def refresh(self):
        """清空全部缓存，下一次查询重新拉取"""
        self.cache.clear()
        logger.info("配额缓存已刷新")

    def get_regions(self, cancel_event: Optional[threading.Event] = None) -> Tuple[List[Region], bool]:
        """
        获取已启用区域列表

        Returns:
            (区域列表, 是否来自缓存)

        Raises:
            RegionListingError: 无法枚举区域
        """
        cached, hit = self.cache.get(REGIONS_CACHE_KEY)
        if hit:
            return list(cached), True

        raise_if_cancelled(cancel_event)
        regions = self.region_lister()
        self.cache.set(REGIONS_CACHE_KEY, list(regions))
        return list(regions), False

    def get_services(self, region: str,
                     cancel_event: Optional[threading.Event] = None) -> Tuple[List[Service], bool]:
        """
        获取区域内的服务列表

        Returns:
            (服务列表, 是否来自缓存)

        Raises:
            RegionFetchError: 无法列出服务
        """
        cache_key = services_cache_key(region)
        cached, hit = self.cache.get(cache_key)
        if hit:
            return list(cached), True

        services = self.fetcher.list_services(region, cancel_event)
        self.cache.set(cache_key, list(services))
        return list(services), False

    def get_cached_quotas(self, region_selector: str, service_filter: str = "") -> List[Quota]:
        """
        只从缓存读取配额（导出使用）

        Raises:
            NoCachedDataError: 缓存中没有该查询的数据
        """
        cached, hit = self.cache.get(quotas_cache_key(region_selector, service_filter))
        if not hit:
            raise NoCachedDataError()
        result, _ = cached
        return result.copy_quotas()
