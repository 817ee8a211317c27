# -*- coding: utf-8 -*-
"""
AWS CloudWatch 指标查询模块

功能：
- 按 Service Quotas 提供的使用量指标描述查询 CloudWatch
- 固定时间窗口（最近 24 小时）和统计周期（5 分钟）
- 取时间戳最新的数据点，按推荐统计方法取值
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List, Optional
from botocore.exceptions import ClientError

logger = logging.getLogger(__name__)

# 查询窗口和统计周期
METRIC_WINDOW = timedelta(hours=24)
METRIC_PERIOD_SECONDS = 300

DEFAULT_STATISTIC = 'Maximum'
SUPPORTED_STATISTICS = ('Maximum', 'Average', 'Sum', 'Minimum')


def normalize_statistic(recommendation: Optional[str]) -> str:
    """
    规范化推荐统计方法

    空值或不支持的统计方法都回退到 Maximum
    """
    if recommendation and recommendation in SUPPORTED_STATISTICS:
        return recommendation
    return DEFAULT_STATISTIC


def latest_datapoint(datapoints: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """返回时间戳最新的数据点，列表为空时返回 None"""
    latest = None
    for datapoint in datapoints:
        timestamp = datapoint.get('Timestamp')
        if timestamp is None:
            continue
        if latest is None or timestamp > latest['Timestamp']:
            latest = datapoint
    return latest


def extract_statistic(datapoint: Dict[str, Any], statistic: str) -> float:
    """从数据点中取出统计值，缺失时为 0"""
    value = datapoint.get(normalize_statistic(statistic))
    if value is None:
        return 0.0
    return float(value)


class CloudWatchClient:
    """
    CloudWatch 指标查询客户端

    功能：
    - 构建 GetMetricStatistics 请求
    - 返回原始数据点列表，由调用方决定如何取值
    """

    def __init__(self, region: str, client_factory):
        """
        初始化 CloudWatch 客户端

        Args:
            region: AWS 区域
            client_factory: AWSClientFactory 实例
        """
        self.region = region
        try:
            self.client = client_factory.client('cloudwatch', region)
            logger.debug(f"CloudWatch 客户端初始化成功，区域: {region}")
        except Exception as e:
            logger.error(f"初始化 CloudWatch 客户端失败: {e}")
            raise

    def get_metric_statistics(
        self,
        namespace: str,
        metric_name: str,
        dimensions: Dict[str, str],
        statistic: str = DEFAULT_STATISTIC,
        end_time: Optional[datetime] = None,
        window: timedelta = METRIC_WINDOW,
        period: int = METRIC_PERIOD_SECONDS
    ) -> List[Dict[str, Any]]:
        """
        获取 CloudWatch 指标统计数据

        Args:
            namespace: 命名空间（如 'AWS/Usage'）
            metric_name: 指标名称
            dimensions: 维度字典
            statistic: 统计方法（'Maximum', 'Average', 'Sum', 'Minimum'）
            end_time: 结束时间（默认：现在）
            window: 时间窗口（默认 24 小时）
            period: 统计周期（秒，默认 300）

        Returns:
            数据点列表，无数据时为空列表
        """
        if end_time is None:
            end_time = datetime.now(timezone.utc)
        start_time = end_time - window

        dimension_list = [
            {'Name': k, 'Value': v}
            for k, v in dimensions.items()
        ]

        try:
            response = self.client.get_metric_statistics(
                Namespace=namespace,
                MetricName=metric_name,
                Dimensions=dimension_list,
                StartTime=start_time,
                EndTime=end_time,
                Period=period,
                Statistics=[normalize_statistic(statistic)]
            )
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            error_message = e.response.get("Error", {}).get("Message")
            logger.warning(f"CloudWatch API 调用异常 {namespace}/{metric_name}: {error_code} - {error_message}")
            raise

        datapoints = response.get('Datapoints', [])
        if not datapoints:
            logger.debug(f"CloudWatch 指标无数据: {namespace}/{metric_name} (dimensions: {dimensions})")
        return datapoints
