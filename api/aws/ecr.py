# -*- coding: utf-8 -*-
"""
ECR API 客户端模块

功能：
- 统计区域内的镜像仓库数量
"""

from api.aws.base import BaseAWSClient


class ECRClient(BaseAWSClient):
    """ECR API 客户端"""

    service_name = 'ecr'

    def count_repositories(self) -> int:
        return self._count_pages('describe_repositories', 'repositories')
