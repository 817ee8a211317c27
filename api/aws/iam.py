# -*- coding: utf-8 -*-
"""
IAM API 客户端模块

功能：
- 统计用户、角色、用户组、客户托管策略数量
- IAM 是全局服务
"""

from api.aws.base import BaseAWSClient


class IAMClient(BaseAWSClient):
    """IAM API 客户端"""

    service_name = 'iam'

    def count_users(self) -> int:
        return self._count_pages('list_users', 'Users')

    def count_roles(self) -> int:
        return self._count_pages('list_roles', 'Roles')

    def count_groups(self) -> int:
        return self._count_pages('list_groups', 'Groups')

    def count_local_policies(self) -> int:
        """只统计客户托管策略（Scope=Local）"""
        return self._count_pages('list_policies', 'Policies', Scope='Local')
