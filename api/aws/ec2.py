# -*- coding: utf-8 -*-
"""
EC2/EBS/VPC API 客户端模块

功能：
- 封装 EC2 Describe API 调用（实例、弹性 IP、密钥对、AMI、快照、网关、卷、VPC 等）
- 计算运行中实例的 vCPU 总数
"""

import logging
from collections import Counter
from typing import Dict, Iterable, List, Tuple
from botocore.exceptions import ClientError

from api.aws.base import BaseAWSClient

logger = logging.getLogger(__name__)

# Running On-Demand Standard 实例族（L-1216C47A）
STANDARD_INSTANCE_FAMILIES = ('a', 'c', 'd', 'h', 'i', 'm', 'r', 't', 'z')

# DescribeInstanceTypes 单次最多查询的实例类型数
INSTANCE_TYPES_BATCH_SIZE = 100


def is_instance_in_families(instance_type: str, families: Iterable[str]) -> bool:
    """实例类型格式为 <family><generation>.<size>，按首字母判断实例族"""
    if not instance_type:
        return False
    return instance_type[0].lower() in families


class EC2Client(BaseAWSClient):
    """
    EC2 API 客户端

    功能：
    - 调用 EC2 Describe API 获取资源数量
    - 支持过滤和分页
    """

    service_name = 'ec2'

    def running_instance_type_counts(self, families: Iterable[str]) -> Tuple[Dict[str, int], Dict[str, Dict]]:
        """
        统计运行中实例的类型分布

        Args:
            families: 实例族首字母集合

        Returns:
            (instance_type -> 数量, instance_type -> CpuOptions) 元组
        """
        families = tuple(families)
        type_counts: Counter = Counter()
        cpu_options: Dict[str, Dict] = {}

        paginator = self.client.get_paginator('describe_instances')
        for page in paginator.paginate(Filters=[{'Name': 'instance-state-name', 'Values': ['running']}]):
            for reservation in page.get('Reservations', []):
                for instance in reservation.get('Instances', []):
                    instance_type = instance.get('InstanceType', '')
                    if not is_instance_in_families(instance_type, families):
                        continue
                    type_counts[instance_type] += 1
                    if instance.get('CpuOptions'):
                        cpu_options[instance_type] = instance['CpuOptions']

        logger.debug(f"运行中实例类型分布: {dict(type_counts)}")
        return dict(type_counts), cpu_options

    def describe_instance_type_vcpus(self, instance_types: List[str]) -> Dict[str, int]:
        """
        查询实例类型的默认 vCPU 数（每批 100 个）

        Returns:
            instance_type -> DefaultVCpus
        """
        vcpus: Dict[str, int] = {}
        for start in range(0, len(instance_types), INSTANCE_TYPES_BATCH_SIZE):
            batch = instance_types[start:start + INSTANCE_TYPES_BATCH_SIZE]
            response = self.client.describe_instance_types(InstanceTypes=batch)
            for info in response.get('InstanceTypes', []):
                default_vcpus = info.get('VCpuInfo', {}).get('DefaultVCpus')
                if info.get('InstanceType') and default_vcpus:
                    vcpus[info['InstanceType']] = int(default_vcpus)
        return vcpus

    def count_running_vcpus(self, families: Iterable[str] = STANDARD_INSTANCE_FAMILIES) -> int:
        """
        计算指定实例族运行中实例的 vCPU 总数

        vCPU 优先取 DescribeInstanceTypes 的默认值，其次用 CpuOptions（核数 * 每核线程数），
        两者都没有的实例类型跳过
        """
        type_counts, cpu_options = self.running_instance_type_counts(families)
        if not type_counts:
            return 0

        try:
            vcpu_map = self.describe_instance_type_vcpus(sorted(type_counts))
        except ClientError as e:
            logger.warning(f"DescribeInstanceTypes 失败，使用 CpuOptions 计算 vCPU: {e}")
            vcpu_map = {}

        total = 0
        for instance_type, count in type_counts.items():
            vcpus = vcpu_map.get(instance_type)
            if vcpus:
                total += vcpus * count
                continue
            options = cpu_options.get(instance_type, {})
            if options.get('CoreCount') and options.get('ThreadsPerCore'):
                total += options['CoreCount'] * options['ThreadsPerCore'] * count
                continue
            logger.warning(f"实例类型 {instance_type} 缺少 vCPU 信息，跳过 {count} 个实例")

        return total

    def count_addresses(self) -> int:
        """弹性 IP 数量"""
        response = self.client.describe_addresses()
        return len(response.get('Addresses', []))

    def count_key_pairs(self) -> int:
        """密钥对数量"""
        response = self.client.describe_key_pairs()
        return len(response.get('KeyPairs', []))

    def count_owned_images(self) -> int:
        """本账号拥有的 AMI 数量"""
        return self._count_pages('describe_images', 'Images', Owners=['self'])

    def count_owned_snapshots(self) -> int:
        """本账号拥有的快照数量"""
        return self._count_pages('describe_snapshots', 'Snapshots', OwnerIds=['self'])

    def count_internet_gateways(self) -> int:
        return self._count_pages('describe_internet_gateways', 'InternetGateways')

    def count_nat_gateways(self) -> int:
        """可用或创建中的 NAT 网关数量（不含已删除、失败的）"""
        return self._count_pages(
            'describe_nat_gateways', 'NatGateways',
            item_filter=lambda gw: gw.get('State') in ('available', 'pending')
        )

    def total_volume_size_tib(self, volume_type: str) -> float:
        """
        指定类型 EBS 卷的总容量

        Args:
            volume_type: 卷类型（如 'gp2', 'gp3', 'io1', 'io2'）

        Returns:
            总容量（TiB，配额单位）
        """
        total_size_gib = 0
        paginator = self.client.get_paginator('describe_volumes')
        for page in paginator.paginate(Filters=[{'Name': 'volume-type', 'Values': [volume_type]}]):
            for volume in page.get('Volumes', []):
                total_size_gib += volume.get('Size', 0) or 0

        return total_size_gib / 1024.0

    def count_vpcs(self) -> int:
        return self._count_pages('describe_vpcs', 'Vpcs')

    def count_network_interfaces(self) -> int:
        return self._count_pages('describe_network_interfaces', 'NetworkInterfaces')

    def count_security_groups(self) -> int:
        return self._count_pages('describe_security_groups', 'SecurityGroups')
