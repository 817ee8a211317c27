# -*- coding: utf-8 -*-
"""
区域枚举模块

功能：
- 通过 EC2 DescribeRegions 列出当前凭证已启用的区域
"""

import logging
from botocore.exceptions import BotoCoreError, ClientError
from typing import List

from model.quota import Region
from provider.errors import RegionListingError

logger = logging.getLogger(__name__)

# DescribeRegions 调用使用的区域
DISCOVERY_REGION = 'us-east-1'


def list_enabled_regions(client_factory, discovery_region: str = DISCOVERY_REGION) -> List[Region]:
    """
    列出已启用的区域

    Args:
        client_factory: AWSClientFactory 实例
        discovery_region: 发起 DescribeRegions 的区域

    Returns:
        Region 列表（按区域代码排序）

    Raises:
        RegionListingError: 无法枚举区域
    """
    try:
        ec2 = client_factory.client('ec2', discovery_region)
        response = ec2.describe_regions(AllRegions=False)
    except ClientError as e:
        error_code = e.response.get('Error', {}).get('Code', 'Unknown')
        logger.error(f"DescribeRegions 失败: {error_code} - {e}")
        raise RegionListingError(f"failed to list regions: {e}") from e
    except BotoCoreError as e:
        logger.error(f"DescribeRegions 失败（BotoCoreError）: {e}")
        raise RegionListingError(f"failed to list regions: {e}") from e

    regions = [
        Region(code=r['RegionName'], name=r['RegionName'])
        for r in response.get('Regions', [])
        if r.get('RegionName')
    ]
    regions.sort(key=lambda r: r.code)
    logger.info(f"获取到 {len(regions)} 个已启用区域")
    return regions
