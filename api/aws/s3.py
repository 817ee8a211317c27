# -*- coding: utf-8 -*-
"""
S3 API 客户端模块

功能：
- 统计账号下的存储桶数量（ListBuckets 返回账号内全部区域的桶）
"""

import logging

from api.aws.base import BaseAWSClient

logger = logging.getLogger(__name__)


class S3Client(BaseAWSClient):
    """S3 API 客户端"""

    service_name = 's3'

    def count_buckets(self) -> int:
        response = self.client.list_buckets()
        buckets = response.get('Buckets', [])
        logger.debug(f"获取到 {len(buckets)} 个存储桶")
        return len(buckets)
