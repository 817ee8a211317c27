# -*- coding: utf-8 -*-
"""
RDS API 客户端模块

功能：
- 统计 DB 实例、DB 集群数量
"""

from api.aws.base import BaseAWSClient


class RDSClient(BaseAWSClient):
    """RDS API 客户端"""

    service_name = 'rds'

    def count_db_instances(self) -> int:
        return self._count_pages('describe_db_instances', 'DBInstances')

    def count_db_clusters(self) -> int:
        return self._count_pages('describe_db_clusters', 'DBClusters')
