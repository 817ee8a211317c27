# -*- coding: utf-8 -*-
"""
DynamoDB API 客户端模块

功能：
- 统计区域内的表数量
"""

from api.aws.base import BaseAWSClient


class DynamoDBClient(BaseAWSClient):
    """DynamoDB API 客户端"""

    service_name = 'dynamodb'

    def count_tables(self) -> int:
        return self._count_pages('list_tables', 'TableNames')
