# -*- coding: utf-8 -*-
"""
Route 53 API 客户端模块

功能：
- 统计公有托管域名（Hosted Zones）数量
- Route 53 是全局服务，boto3 仍需要一个 region 创建客户端
"""

import logging

from api.aws.base import BaseAWSClient

logger = logging.getLogger(__name__)


class Route53Client(BaseAWSClient):
    """Route 53 API 客户端"""

    service_name = 'route53'

    def count_public_hosted_zones(self) -> int:
        """公有托管域名数量（私有托管域名不计入）"""
        return self._count_pages(
            'list_hosted_zones', 'HostedZones',
            item_filter=lambda zone: not zone.get('Config', {}).get('PrivateZone', False)
        )
