# -*- coding: utf-8 -*-
"""
多区域聚合模块

功能：
- 线程池并发拉取多个区域（每个区域一个任务，并发数有上限）
- 单个区域失败转换为 warning，不影响其他区域
- 全局配额跨区域去重
- 响应调用方取消信号，返回已完成部分
"""

import time
import logging
import threading
from concurrent.futures import FIRST_COMPLETED, ThreadPoolExecutor, wait
from typing import Iterable, List, Optional, Tuple

from model.quota import GLOBAL_REGION, FetchResult, Quota
from provider.errors import FetchCancelled, RegionFetchError

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 10

# 等待任务完成时检查取消信号的间隔（秒）
CANCEL_POLL_INTERVAL = 0.1


def region_warning(region: str, cause) -> str:
    return f"failed to fetch quotas for region {region}: {cause}"


def deduplicate_global_quotas(quotas: Iterable[Quota]) -> List[Quota]:
    """
    全局配额去重

    每个 (service_code, quota_code) 只保留第一次出现的全局配额，区域改为 "global"；
    非全局配额原样保留
    """
    seen = set()
    result = []
    for quota in quotas:
        if not quota.global_quota:
            result.append(quota)
            continue
        key = (quota.service_code, quota.quota_code)
        if key in seen:
            continue
        seen.add(key)
        quota.region = GLOBAL_REGION
        result.append(quota)
    return result


class QuotaAggregator:
    """
    多区域配额聚合器

    功能：
    - 区域任务之间互不影响，失败信息作为 warning 收集
    - 结果默认按区域完成顺序拼接；deterministic_dedup=True 时按区域代码排序
    """

    def __init__(self,
                 fetcher,
                 max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
                 deterministic_dedup: bool = False,
                 metrics=None):
        """
        初始化聚合器

        Args:
            fetcher: RegionFetcher 实例
            max_concurrency: 最大并发区域数（<= 0 时使用 10）
            deterministic_dedup: 去重前是否按区域代码排序
            metrics: QuotaMetrics 实例（可选）
        """
        self.fetcher = fetcher
        self.max_concurrency = max_concurrency if max_concurrency > 0 else DEFAULT_MAX_CONCURRENCY
        self.deterministic_dedup = deterministic_dedup
        self.metrics = metrics

    def _fetch_region(self,
                      region: str,
                      service_filter: str,
                      cancel_event: Optional[threading.Event],
                      warnings: List[str],
                      warnings_lock: threading.Lock) -> List[Quota]:
        """单个区域任务，区域级失败写入 warnings 并返回空列表"""
        start_time = time.time()
        try:
            return self.fetcher.fetch(region, service_filter, cancel_event)
        except FetchCancelled:
            raise
        except RegionFetchError as e:
            logger.error(f"区域 {region} 拉取失败: {e.cause}")
            cause = e.cause
        except Exception as e:
            logger.error(f"区域 {region} 拉取异常: {e}", exc_info=True)
            cause = e
        finally:
            if self.metrics is not None:
                self.metrics.observe_region_fetch(time.time() - start_time)

        with warnings_lock:
            warnings.append(region_warning(region, cause))
        if self.metrics is not None:
            self.metrics.record_region_error(region)
        return []

    def aggregate(self,
                  regions: Iterable[str],
                  service_filter: str = "",
                  cancel_event: Optional[threading.Event] = None) -> FetchResult:
        """
        并发拉取多个区域并聚合

        Args:
            regions: 区域代码列表（重复的区域只拉取一次）
            service_filter: 服务代码过滤（为空表示所有服务）
            cancel_event: 取消信号

        Returns:
            FetchResult（取消时为已完成部分）
        """
        start_time = time.time()
        unique_regions = list(dict.fromkeys(r for r in regions if r))
        if not unique_regions:
            return FetchResult()

        region_results: List[Tuple[str, List[Quota]]] = []
        warnings: List[str] = []
        warnings_lock = threading.Lock()

        max_workers = min(self.max_concurrency, len(unique_regions))
        logger.info(f"开始聚合 {len(unique_regions)} 个区域（{max_workers} 个并发线程）, service={service_filter or 'all'}")

        executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix='RegionFetch')
        future_to_region = {
            executor.submit(self._fetch_region, region, service_filter, cancel_event, warnings, warnings_lock): region
            for region in unique_regions
        }
        pending = set(future_to_region)
        cancelled = False
        try:
            while pending:
                if cancel_event is not None and cancel_event.is_set():
                    cancelled = True
                    break
                done, pending = wait(pending, timeout=CANCEL_POLL_INTERVAL, return_when=FIRST_COMPLETED)
                for future in done:
                    region = future_to_region[future]
                    try:
                        region_results.append((region, future.result()))
                    except FetchCancelled:
                        with warnings_lock:
                            warnings.append(region_warning(region, FetchCancelled()))
        finally:
            if cancelled:
                for future in pending:
                    future.cancel()
                executor.shutdown(wait=False, cancel_futures=True)
            else:
                executor.shutdown(wait=True)

        with warnings_lock:
            if cancelled:
                for future in pending:
                    warnings.append(region_warning(future_to_region[future], FetchCancelled()))
                logger.warning(f"聚合被取消，返回已完成的 {len(region_results)} 个区域")
            collected_warnings = list(warnings)

        if self.deterministic_dedup:
            region_results.sort(key=lambda item: item[0])

        all_quotas: List[Quota] = []
        for _, quotas in region_results:
            all_quotas.extend(quotas)
        all_quotas = deduplicate_global_quotas(all_quotas)

        duration = time.time() - start_time
        if self.metrics is not None:
            self.metrics.observe_aggregation(duration)
        logger.info(f"聚合完成: {len(all_quotas)} 个配额, {len(collected_warnings)} 个 warning, 耗时 {duration:.2f} 秒")
        return FetchResult.build(all_quotas, collected_warnings)
