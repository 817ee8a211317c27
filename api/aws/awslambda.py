# -*- coding: utf-8 -*-
"""
Lambda API 客户端模块

功能：
- 统计区域内的 Lambda 函数数量
"""

from api.aws.base import BaseAWSClient


class LambdaClient(BaseAWSClient):
    """Lambda API 客户端"""

    service_name = 'lambda'

    def count_functions(self) -> int:
        return self._count_pages('list_functions', 'Functions')
