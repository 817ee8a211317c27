# -*- coding: utf-8 -*-
"""
Auto Scaling API 客户端模块

功能：
- 统计 Auto Scaling 组数量
"""

from api.aws.base import BaseAWSClient


class AutoScalingClient(BaseAWSClient):
    """Auto Scaling API 客户端"""

    service_name = 'autoscaling'

    def count_auto_scaling_groups(self) -> int:
        return self._count_pages('describe_auto_scaling_groups', 'AutoScalingGroups')
