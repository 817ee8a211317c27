# -*- coding: utf-8 -*-
"""
AWS 资源 API 客户端基类

功能：
- 统一客户端初始化（通过 AWSClientFactory）
- 统一分页计数和错误日志
"""

import logging
from typing import Any, Callable, Dict, Optional
from botocore.exceptions import ClientError, BotoCoreError

logger = logging.getLogger(__name__)


class BaseAWSClient:
    """
    资源 API 客户端基类

    子类只需声明 service_name，并用 _count_pages 实现各类计数
    """

    service_name = ''

    def __init__(self, region: str, client_factory):
        """
        初始化客户端

        Args:
            region: AWS 区域（全局服务同样需要一个 region 来创建客户端）
            client_factory: AWSClientFactory 实例
        """
        self.region = region
        try:
            self.client = client_factory.client(self.service_name, region)
        except Exception as e:
            logger.error(f"初始化 {self.service_name} 客户端失败: region={region}, error={e}")
            raise

    def _count_pages(self,
                     operation: str,
                     result_key: str,
                     item_filter: Optional[Callable[[Dict[str, Any]], bool]] = None,
                     **kwargs) -> int:
        """
        遍历分页结果并计数

        Args:
            operation: boto3 分页操作名（如 'describe_vpcs'）
            result_key: 每页中的列表字段名（如 'Vpcs'）
            item_filter: 可选过滤函数，只统计返回 True 的条目
            **kwargs: 传给 paginate 的请求参数

        Returns:
            条目数量
        """
        try:
            count = 0
            paginator = self.client.get_paginator(operation)
            for page in paginator.paginate(**kwargs):
                items = page.get(result_key, []) or []
                if item_filter is None:
                    count += len(items)
                else:
                    count += sum(1 for item in items if item_filter(item))

            logger.debug(f"{self.service_name}.{operation}: {count} 个 (region: {self.region})")
            return count

        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code")
            error_message = e.response.get("Error", {}).get("Message")
            logger.warning(f"{self.service_name}.{operation} 失败: {error_code} - {error_message}")
            raise
        except BotoCoreError as e:
            logger.warning(f"{self.service_name}.{operation} 失败（BotoCoreError）: {e}")
            raise
