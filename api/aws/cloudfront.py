# -*- coding: utf-8 -*-
"""
CloudFront API 客户端模块

功能：
- 统计账号下的 Distribution 数量
- CloudFront 是全局服务
"""

import logging

from api.aws.base import BaseAWSClient

logger = logging.getLogger(__name__)


class CloudFrontClient(BaseAWSClient):
    """CloudFront API 客户端"""

    service_name = 'cloudfront'

    def count_distributions(self) -> int:
        """
        Distribution 数量

        ListDistributions 的条目嵌套在 DistributionList.Items 下，不能直接用 _count_pages
        """
        count = 0
        paginator = self.client.get_paginator('list_distributions')
        for page in paginator.paginate():
            items = page.get('DistributionList', {}).get('Items') or []
            count += len(items)

        logger.debug(f"cloudfront.list_distributions: {count} 个")
        return count
