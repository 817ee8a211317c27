# -*- coding: utf-8 -*-
"""
配额数据结构

功能：
- 定义 Quota / Service / Region 等看板数据结构
- 解析 Service Quotas API 返回的原始配额定义
- 使用率由 usage / value 派生，不单独设置
"""

from dataclasses import dataclass, field, replace
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

# 全局配额去重后使用的区域值
GLOBAL_REGION = "global"


@dataclass
class Service:
    """服务（服务代码 + 显示名称）"""
    code: str
    name: str

    def to_dict(self) -> Dict[str, str]:
        return {'code': self.code, 'name': self.name}


@dataclass
class Region:
    """区域（区域代码 + 显示名称）"""
    code: str
    name: str

    def to_dict(self) -> Dict[str, str]:
        return {'code': self.code, 'name': self.name}


@dataclass(frozen=True)
class UsageMetric:
    """Service Quotas 提供的使用量指标描述（CloudWatch 查询位置）"""
    namespace: str
    metric_name: str
    dimensions: Dict[str, str] = field(default_factory=dict)
    statistic_recommendation: str = ""

    @classmethod
    def from_api(cls, metric: Optional[Dict[str, Any]]) -> Optional['UsageMetric']:
        """
        从 API 的 UsageMetric 字段解析

        Returns:
            UsageMetric，缺少命名空间或指标名时返回 None
        """
        if not metric:
            return None
        namespace = metric.get('MetricNamespace')
        metric_name = metric.get('MetricName')
        if not namespace or not metric_name:
            return None
        return cls(
            namespace=namespace,
            metric_name=metric_name,
            dimensions=dict(metric.get('MetricDimensions') or {}),
            statistic_recommendation=metric.get('MetricStatisticRecommendation') or ""
        )


@dataclass(frozen=True)
class QuotaDefinition:
    """ListServiceQuotas / ListAWSDefaultServiceQuotas 返回的单个配额定义"""
    quota_code: str
    quota_name: str
    value: float = 0.0
    unit: str = ""
    adjustable: bool = False
    global_quota: bool = False
    usage_metric: Optional[UsageMetric] = None

    @classmethod
    def from_api(cls, quota: Dict[str, Any]) -> 'QuotaDefinition':
        value = quota.get('Value')
        return cls(
            quota_code=quota.get('QuotaCode', ''),
            quota_name=quota.get('QuotaName', ''),
            value=float(value) if value is not None else 0.0,
            unit=quota.get('Unit', ''),
            adjustable=bool(quota.get('Adjustable', False)),
            global_quota=bool(quota.get('GlobalQuota', False)),
            usage_metric=UsageMetric.from_api(quota.get('UsageMetric'))
        )


@dataclass
class Quota:
    """
    单个 (region, service, quota_code) 的配额记录

    usage_percentage 只在 has_usage_metrics 为真且 value > 0 时有值，
    始终等于 usage / value * 100
    """
    region: str
    service_code: str
    service_name: str
    quota_name: str
    quota_code: str
    value: float = 0.0
    usage: float = 0.0
    unit: str = ""
    adjustable: bool = False
    global_quota: bool = False
    has_usage_metrics: bool = False

    @classmethod
    def from_definition(cls, region: str, service: Service, definition: QuotaDefinition) -> 'Quota':
        return cls(
            region=region,
            service_code=service.code,
            service_name=service.name,
            quota_name=definition.quota_name,
            quota_code=definition.quota_code,
            value=definition.value,
            unit=definition.unit,
            adjustable=definition.adjustable,
            global_quota=definition.global_quota
        )

    @property
    def usage_percentage(self) -> float:
        if not self.has_usage_metrics or self.value <= 0:
            return 0.0
        return self.usage / self.value * 100.0

    def apply_usage(self, usage: float):
        """记录使用量并标记已有使用量数据"""
        self.usage = float(usage)
        self.has_usage_metrics = True

    def copy(self) -> 'Quota':
        return replace(self)

    def matches(self, term: str) -> bool:
        """配额名称、服务名称或服务代码包含 term（不区分大小写）"""
        term = term.lower()
        return (term in self.quota_name.lower()
                or term in self.service_name.lower()
                or term in self.service_code.lower())

    def to_dict(self) -> Dict[str, Any]:
        return {
            'region': self.region,
            'service_code': self.service_code,
            'service_name': self.service_name,
            'quota_name': self.quota_name,
            'quota_code': self.quota_code,
            'value': self.value,
            'usage': self.usage,
            'usage_percentage': self.usage_percentage,
            'has_usage_metrics': self.has_usage_metrics,
            'unit': self.unit,
            'adjustable': self.adjustable,
            'global': self.global_quota
        }


@dataclass(frozen=True)
class FetchResult:
    """一次聚合的结果，构造后不再修改"""
    quotas: Tuple[Quota, ...] = ()
    warnings: Tuple[str, ...] = ()

    @classmethod
    def build(cls, quotas: List[Quota], warnings: List[str]) -> 'FetchResult':
        return cls(quotas=tuple(quotas), warnings=tuple(warnings))

    def copy_quotas(self) -> List[Quota]:
        return [q.copy() for q in self.quotas]


@dataclass
class QuotaResponse:
    """查询服务返回的响应包"""
    quotas: List[Quota]
    fetched_at: datetime
    from_cache: bool
    warnings: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.quotas)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'quotas': [q.to_dict() for q in self.quotas],
            'total': self.total,
            'fetched_at': self.fetched_at.isoformat(),
            'from_cache': self.from_cache,
            'warnings': list(self.warnings)
        }
