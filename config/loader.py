# -*- coding: utf-8 -*-
"""
看板配置加载模块

功能：
- 从 YAML 文件加载看板配置
- 定义清晰的数据结构（DashboardConfig 及各子配置）
- 文件不存在时使用默认值，读取或解析失败时给出明确错误
"""

import yaml
import os
from typing import Any, Dict, List, Optional
from dataclasses import dataclass, field

DEFAULT_CONFIG_PATH = 'config.yaml'


@dataclass
class ServerConfig:
    """HTTP 服务配置"""
    host: str = '0.0.0.0'
    port: int = 8080
    request_timeout_seconds: float = 0   # 0 表示不设置单次请求超时


@dataclass
class CacheConfig:
    """缓存配置"""
    ttl_minutes: float = 5
    sweep_interval_seconds: float = 60


@dataclass
class RateLimitConfig:
    """Service Quotas API 限流配置"""
    per_second: float = 5
    burst: int = 10


@dataclass
class AWSConfig:
    """AWS 凭证配置（均为空时使用默认凭证链）"""
    access_key: str = ''
    secret_key: str = ''
    profile: str = ''


@dataclass
class DashboardConfig:
    """看板配置的根数据结构"""
    default_region: str = 'us-east-1'
    default_service: str = 'ec2'
    server: ServerConfig = field(default_factory=ServerConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)
    max_concurrency: int = 10          # <= 0 时使用 10
    deterministic_global_dedup: bool = False
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    regions: List[str] = field(default_factory=list)
    aws: AWSConfig = field(default_factory=AWSConfig)
    log_level: str = 'INFO'

    def cache_ttl_seconds(self) -> float:
        return self.cache.ttl_minutes * 60

    def get_port(self) -> int:
        """环境变量 PORT 优先"""
        port = os.getenv('PORT')
        if port:
            return int(port)
        return self.server.port

    def get_log_level(self) -> str:
        """环境变量 LOG_LEVEL 优先"""
        return (os.getenv('LOG_LEVEL') or self.log_level).upper()


def _section(data: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"配置格式错误: '{name}' 必须是字典类型")
    return value


def _parse_config(data: Dict[str, Any]) -> DashboardConfig:
    config = DashboardConfig()

    if 'default_region' in data:
        config.default_region = str(data['default_region'])
    if 'default_service' in data:
        config.default_service = str(data['default_service'])
    if 'max_concurrency' in data:
        config.max_concurrency = int(data['max_concurrency'])
    if 'deterministic_global_dedup' in data:
        config.deterministic_global_dedup = bool(data['deterministic_global_dedup'])
    if 'log_level' in data:
        config.log_level = str(data['log_level'])

    server = _section(data, 'server')
    config.server = ServerConfig(
        host=str(server.get('host', config.server.host)),
        port=int(server.get('port', config.server.port)),
        request_timeout_seconds=float(server.get('request_timeout_seconds', config.server.request_timeout_seconds))
    )

    cache = _section(data, 'cache')
    config.cache = CacheConfig(
        ttl_minutes=float(cache.get('ttl_minutes', config.cache.ttl_minutes)),
        sweep_interval_seconds=float(cache.get('sweep_interval_seconds', config.cache.sweep_interval_seconds))
    )

    rate_limit = _section(data, 'rate_limit')
    config.rate_limit = RateLimitConfig(
        per_second=float(rate_limit.get('per_second', config.rate_limit.per_second)),
        burst=int(rate_limit.get('burst', config.rate_limit.burst))
    )

    aws = _section(data, 'aws')
    config.aws = AWSConfig(
        access_key=aws.get('access_key') or '',
        secret_key=aws.get('secret_key') or '',
        profile=aws.get('profile') or ''
    )

    regions = data.get('regions') or []
    if not isinstance(regions, list):
        raise ValueError("配置格式错误: 'regions' 必须是列表类型")
    config.regions = list(regions)

    return config


def load_config(config_path: Optional[str] = None) -> DashboardConfig:
    """
    从 YAML 文件加载看板配置

    Args:
        config_path: 配置文件路径（默认取环境变量 CONFIG_PATH，再默认 'config.yaml'）

    Returns:
        DashboardConfig 对象（文件不存在时为默认配置）

    Raises:
        IOError: 文件无法读取
        yaml.YAMLError: YAML 解析错误
        ValueError: 配置格式错误
    """
    if config_path is None:
        config_path = os.getenv('CONFIG_PATH', DEFAULT_CONFIG_PATH)

    # 文件不存在时使用默认配置
    if not os.path.exists(config_path):
        return DashboardConfig()

    # 读取文件内容
    try:
        with open(config_path, 'r', encoding='utf-8') as f:
            content = f.read()
    except IOError as e:
        raise IOError(f"无法读取配置文件 {config_path}: {e}")

    # 解析 YAML
    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise yaml.YAMLError(f"YAML 解析失败: {e}")

    if data is None:
        return DashboardConfig()
    if not isinstance(data, dict):
        raise ValueError("配置格式错误: 顶层必须是字典类型")

    try:
        return _parse_config(data)
    except (TypeError, ValueError) as e:
        raise ValueError(f"配置格式错误: {e}")
