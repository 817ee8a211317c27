# -*- coding: utf-8 -*-
"""
AWS Service Quotas API 客户端模块

功能：
- 封装 AWS Service Quotas API 调用
- 列出区域内的服务、默认配额、已应用配额
- 每一页请求之前先从共享限流器获取令牌
"""

import logging
import threading
from botocore.exceptions import ClientError
from typing import Any, Dict, Iterator, List, Optional

from model.quota import QuotaDefinition, Service
from provider.errors import raise_if_cancelled

logger = logging.getLogger(__name__)


class ServiceQuotasClient:
    """
    AWS Service Quotas API 客户端

    功能：
    - 调用 ListServices 获取区域内的服务列表
    - 调用 ListAWSDefaultServiceQuotas 获取默认配额
    - 调用 ListServiceQuotas 获取账号已应用的配额
    - 分页按 NextToken 顺序请求，每页消耗一个令牌
    """

    def __init__(self, region: str, client_factory, limiter):
        """
        初始化 Service Quotas 客户端

        Args:
            region: AWS 区域
            client_factory: AWSClientFactory 实例
            limiter: TokenBucketLimiter 实例（所有区域共享）

        Raises:
            ClientError / BotoCoreError: 客户端初始化失败
        """
        self.region = region
        self.limiter = limiter
        try:
            self.client = client_factory.client('service-quotas', region)
            logger.debug(f"Service Quotas 客户端初始化成功，区域: {region}")
        except Exception as e:
            logger.error(f"初始化 Service Quotas 客户端失败: region={region}, error={e}")
            raise

    def _paginate(self,
                  operation: str,
                  result_key: str,
                  cancel_event: Optional[threading.Event] = None,
                  **kwargs) -> Iterator[Dict[str, Any]]:
        method = getattr(self.client, operation)
        next_token = None
        while True:
            raise_if_cancelled(cancel_event)
            self.limiter.acquire(cancel_event)

            params = dict(kwargs)
            if next_token:
                params['NextToken'] = next_token
            response = method(**params)

            for item in response.get(result_key, []):
                yield item

            next_token = response.get('NextToken')
            if not next_token:
                break

    def list_services(self, cancel_event: Optional[threading.Event] = None) -> List[Service]:
        """
        列出区域内所有支持 Service Quotas 的服务

        Returns:
            Service 列表（保持 API 返回顺序）
        """
        services = []
        try:
            for item in self._paginate('list_services', 'Services', cancel_event):
                services.append(Service(code=item.get('ServiceCode', ''), name=item.get('ServiceName', '')))
        except ClientError as e:
            error_code = e.response.get('Error', {}).get('Code', 'Unknown')
            logger.error(f"ListServices 失败: region={self.region}, error={error_code}: {e}")
            raise

        logger.debug(f"列出服务成功: region={self.region}, 共 {len(services)} 个服务")
        return services

    def list_default_quotas(self, service_code: str,
                            cancel_event: Optional[threading.Event] = None) -> List[QuotaDefinition]:
        """
        列出服务的 AWS 默认配额

        Args:
            service_code: 服务代码（如 'ec2'）

        Returns:
            QuotaDefinition 列表
        """
        quotas = [
            QuotaDefinition.from_api(item)
            for item in self._paginate('list_aws_default_service_quotas', 'Quotas', cancel_event,
                                       ServiceCode=service_code)
        ]
        logger.debug(f"列出默认配额成功: service_code={service_code}, region={self.region}, 共 {len(quotas)} 个")
        return quotas

    def list_applied_quotas(self, service_code: str,
                            cancel_event: Optional[threading.Event] = None) -> List[QuotaDefinition]:
        """
        列出服务在当前账号已应用的配额（包含账号级调整后的值）

        Args:
            service_code: 服务代码（如 'ec2'）

        Returns:
            QuotaDefinition 列表
        """
        quotas = [
            QuotaDefinition.from_api(item)
            for item in self._paginate('list_service_quotas', 'Quotas', cancel_event,
                                       ServiceCode=service_code)
        ]
        logger.debug(f"列出已应用配额成功: service_code={service_code}, region={self.region}, 共 {len(quotas)} 个")
        return quotas
