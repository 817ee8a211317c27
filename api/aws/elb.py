# -*- coding: utf-8 -*-
"""
Elastic Load Balancing API 客户端模块

功能：
- 封装 ELBv2 API 调用（DescribeLoadBalancers, DescribeTargetGroups）
- 按类型（ALB/NLB）统计负载均衡器数量
"""

import logging

from api.aws.base import BaseAWSClient

logger = logging.getLogger(__name__)


class ELBClient(BaseAWSClient):
    """
    ELB API 客户端

    功能：
    - 统计负载均衡器、目标组数量
    - 支持类型过滤（application / network）
    """

    service_name = 'elbv2'

    def count_load_balancers(self, lb_type: str) -> int:
        """
        统计指定类型的负载均衡器

        Args:
            lb_type: 负载均衡器类型（'application' 或 'network'）
        """
        lb_type = lb_type.lower()
        return self._count_pages(
            'describe_load_balancers', 'LoadBalancers',
            item_filter=lambda lb: lb.get('Type', '').lower() == lb_type
        )

    def count_target_groups(self) -> int:
        return self._count_pages('describe_target_groups', 'TargetGroups')
