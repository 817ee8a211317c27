# -*- coding: utf-8 -*-
"""
配置验证模块

功能：
- 验证配置文件的完整性和正确性
- 验证字段格式和取值范围
"""

from typing import Optional, Tuple

VALID_LOG_LEVELS = ('DEBUG', 'INFO', 'WARN', 'WARNING', 'ERROR', 'CRITICAL')


def validate_config(config) -> Tuple[bool, Optional[str]]:
    """
    验证配置对象

    Args:
        config: DashboardConfig 对象

    Returns:
        (is_valid, error_message) 元组
    """
    port = config.get_port()
    if not 1 <= port <= 65535:
        return False, f"端口超出范围 (1-65535): {port}"

    if config.cache.ttl_minutes <= 0:
        return False, "cache.ttl_minutes 必须为正数"
    if config.cache.sweep_interval_seconds <= 0:
        return False, "cache.sweep_interval_seconds 必须为正数"

    if config.rate_limit.per_second <= 0:
        return False, "rate_limit.per_second 必须为正数"
    if config.rate_limit.burst < 1:
        return False, "rate_limit.burst 必须 >= 1"

    if config.server.request_timeout_seconds < 0:
        return False, "server.request_timeout_seconds 不能为负数"

    if config.get_log_level() not in VALID_LOG_LEVELS:
        return False, f"log_level 必须是以下值之一: {', '.join(VALID_LOG_LEVELS)}"

    # AK/SK 必须成对出现
    if bool(config.aws.access_key) != bool(config.aws.secret_key):
        return False, "aws.access_key 和 aws.secret_key 必须同时配置"

    for idx, region in enumerate(config.regions):
        if not isinstance(region, str) or not region.strip():
            return False, f"regions[{idx}] 必须是非空字符串"

    return True, None
