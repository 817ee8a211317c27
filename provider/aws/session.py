# -*- coding: utf-8 -*-
"""
AWS 客户端工厂模块

功能：
- 统一管理凭证（指定 AK/SK、profile 或默认凭证链）
- 按 (service, region) 缓存 boto3 客户端，避免每次调用重新创建
- 线程安全：boto3 Session 本身不是线程安全的，创建客户端时加锁
"""

import boto3
import logging
import threading
from botocore.config import Config
from typing import Dict, Optional, Tuple

logger = logging.getLogger(__name__)


class AWSClientFactory:
    """
    AWS 客户端工厂

    功能：
    - 持有一个 boto3 Session
    - 按需创建并缓存各服务、各区域的客户端
    """

    def __init__(self,
                 access_key: Optional[str] = None,
                 secret_key: Optional[str] = None,
                 profile: Optional[str] = None,
                 max_pool_connections: int = 20):
        """
        初始化客户端工厂

        Args:
            access_key: AWS Access Key（可选，如果提供则使用指定凭证）
            secret_key: AWS Secret Key（可选，如果提供则使用指定凭证）
            profile: AWS 配置文件中的 profile 名称（可选）
            max_pool_connections: 每个客户端的连接池大小
        """
        if access_key and secret_key:
            self._session = boto3.Session(
                aws_access_key_id=access_key,
                aws_secret_access_key=secret_key
            )
            logger.info("AWS 客户端工厂初始化（使用指定凭证）")
        elif profile:
            self._session = boto3.Session(profile_name=profile)
            logger.info(f"AWS 客户端工厂初始化（使用 profile: {profile}）")
        else:
            self._session = boto3.Session()
            logger.info("AWS 客户端工厂初始化（使用默认凭证链）")

        self._config = Config(
            retries={'max_attempts': 5, 'mode': 'standard'},
            max_pool_connections=max_pool_connections
        )
        self._clients: Dict[Tuple[str, str], object] = {}
        self._lock = threading.Lock()

    def client(self, service_name: str, region: str):
        """
        获取指定服务、区域的 boto3 客户端

        Args:
            service_name: boto3 服务名（如 'ec2', 'service-quotas'）
            region: AWS 区域

        Returns:
            boto3 客户端（可在线程间共享）
        """
        key = (service_name, region)
        with self._lock:
            client = self._clients.get(key)
            if client is None:
                client = self._session.client(service_name, region_name=region, config=self._config)
                self._clients[key] = client
                logger.debug(f"创建 {service_name} 客户端，区域: {region}")
            return client
