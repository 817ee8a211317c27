# -*- coding: utf-8 -*-
"""
EKS API 客户端模块

功能：
- 封装 EKS API 调用（ListClusters, ListNodegroups, ListFargateProfiles, ListAddons）
- 跨所有集群统计节点组、Fargate profiles、插件数量
"""

import logging
from typing import Callable, List
from botocore.exceptions import ClientError, BotoCoreError

from api.aws.base import BaseAWSClient

logger = logging.getLogger(__name__)


class EKSClient(BaseAWSClient):
    """
    EKS API 客户端

    功能：
    - 调用 EKS API 获取集群及集群内资源数量
    - 单个集群统计失败只跳过该集群
    """

    service_name = 'eks'

    def list_clusters(self) -> List[str]:
        """
        列出所有 EKS 集群

        Returns:
            集群名称列表
        """
        clusters = []
        paginator = self.client.get_paginator('list_clusters')
        for page in paginator.paginate():
            clusters.extend(page.get('clusters', []))

        logger.debug(f"获取到 {len(clusters)} 个 EKS 集群")
        return clusters

    def count_clusters(self) -> int:
        return len(self.list_clusters())

    def _count_across_clusters(self, count_func: Callable[[str], int]) -> int:
        total = 0
        for cluster_name in self.list_clusters():
            try:
                total += count_func(cluster_name)
            except (ClientError, BotoCoreError) as e:
                logger.warning(f"统计集群 {cluster_name} 的资源失败: {e}")
                continue
        return total

    def count_nodegroups(self) -> int:
        """所有集群的托管节点组数量"""
        return self._count_across_clusters(
            lambda name: self._count_pages('list_nodegroups', 'nodegroups', clusterName=name)
        )

    def count_fargate_profiles(self) -> int:
        """所有集群的 Fargate profile 数量"""
        return self._count_across_clusters(
            lambda name: self._count_pages('list_fargate_profiles', 'fargateProfileNames', clusterName=name)
        )

    def count_addons(self) -> int:
        """所有集群的插件数量"""
        return self._count_across_clusters(
            lambda name: self._count_pages('list_addons', 'addons', clusterName=name)
        )
