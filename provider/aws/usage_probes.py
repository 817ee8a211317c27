# -*- coding: utf-8 -*-
"""
直接探测（direct probe）注册表

功能：
- quota_code -> (service_code, 探测函数) 的分发表
- 探测函数通过资源 API 统计当前使用量
- 启动时构建一次，之后只读，可被多个线程同时读取
"""

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Dict, Iterable, Mapping, Optional

from api.aws.autoscaling import AutoScalingClient
from api.aws.awslambda import LambdaClient
from api.aws.cloudfront import CloudFrontClient
from api.aws.dynamodb import DynamoDBClient
from api.aws.ec2 import EC2Client, STANDARD_INSTANCE_FAMILIES
from api.aws.ecr import ECRClient
from api.aws.eks import EKSClient
from api.aws.elb import ELBClient
from api.aws.iam import IAMClient
from api.aws.messaging import SNSClient, SQSClient
from api.aws.rds import RDSClient
from api.aws.route53 import Route53Client
from api.aws.s3 import S3Client

logger = logging.getLogger(__name__)

# probe(client_factory, region) -> usage
ProbeFunc = Callable[[object, str], float]


@dataclass(frozen=True)
class ResourceProbe:
    """分发表中的一项"""
    quota_code: str
    service_code: str
    description: str
    probe: ProbeFunc

    def __call__(self, client_factory, region: str) -> float:
        return float(self.probe(client_factory, region))


class ProbeRegistry:
    """
    只读的探测函数注册表

    构造后内部映射以 MappingProxyType 暴露，不提供任何修改方法
    """

    def __init__(self, probes: Iterable[ResourceProbe]):
        table: Dict[str, ResourceProbe] = {}
        for probe in probes:
            if probe.quota_code in table:
                raise ValueError(f"重复注册的配额代码: {probe.quota_code}")
            table[probe.quota_code] = probe
        self._probes: Mapping[str, ResourceProbe] = MappingProxyType(table)

    @property
    def probes(self) -> Mapping[str, ResourceProbe]:
        return self._probes

    def get(self, quota_code: str) -> Optional[ResourceProbe]:
        return self._probes.get(quota_code)

    def __contains__(self, quota_code: str) -> bool:
        return quota_code in self._probes

    def __len__(self) -> int:
        return len(self._probes)


def _ebs_storage(volume_type: str) -> ProbeFunc:
    return lambda factory, region: EC2Client(region, factory).total_volume_size_tib(volume_type)


def _load_balancers(lb_type: str) -> ProbeFunc:
    return lambda factory, region: ELBClient(region, factory).count_load_balancers(lb_type)


def build_default_registry() -> ProbeRegistry:
    """构建默认分发表"""
    probes = [
        # EKS
        ResourceProbe('L-1194D53C', 'eks', 'EKS clusters',
                      lambda f, r: EKSClient(r, f).count_clusters()),
        ResourceProbe('L-6D3F50E6', 'eks', 'EKS managed node groups',
                      lambda f, r: EKSClient(r, f).count_nodegroups()),
        ResourceProbe('L-23414FF3', 'eks', 'EKS Fargate profiles',
                      lambda f, r: EKSClient(r, f).count_fargate_profiles()),
        ResourceProbe('L-6E77F4DE', 'eks', 'EKS add-ons',
                      lambda f, r: EKSClient(r, f).count_addons()),

        # EC2
        ResourceProbe('L-1216C47A', 'ec2', 'Running On-Demand Standard instance vCPUs',
                      lambda f, r: EC2Client(r, f).count_running_vcpus(STANDARD_INSTANCE_FAMILIES)),
        ResourceProbe('L-0263D0A3', 'ec2', 'Elastic IP addresses',
                      lambda f, r: EC2Client(r, f).count_addresses()),
        ResourceProbe('L-0E3CBAB9', 'ec2', 'Key pairs',
                      lambda f, r: EC2Client(r, f).count_key_pairs()),
        ResourceProbe('L-0DA580E9', 'ec2', 'AMIs',
                      lambda f, r: EC2Client(r, f).count_owned_images()),
        ResourceProbe('L-309BACF6', 'ec2', 'EBS snapshots',
                      lambda f, r: EC2Client(r, f).count_owned_snapshots()),
        ResourceProbe('L-407747CB', 'ec2', 'Internet gateways',
                      lambda f, r: EC2Client(r, f).count_internet_gateways()),
        ResourceProbe('L-FE5A380F', 'ec2', 'NAT gateways',
                      lambda f, r: EC2Client(r, f).count_nat_gateways()),

        # EBS（单位 TiB）
        ResourceProbe('L-D18FCD1D', 'ebs', 'gp2 storage (TiB)', _ebs_storage('gp2')),
        ResourceProbe('L-7A658B76', 'ebs', 'gp3 storage (TiB)', _ebs_storage('gp3')),
        ResourceProbe('L-FD252861', 'ebs', 'io1 storage (TiB)', _ebs_storage('io1')),
        ResourceProbe('L-09BD8365', 'ebs', 'io2 storage (TiB)', _ebs_storage('io2')),

        # VPC
        ResourceProbe('L-F678F1CE', 'vpc', 'VPCs',
                      lambda f, r: EC2Client(r, f).count_vpcs()),
        ResourceProbe('L-DF5E4CA3', 'vpc', 'Network interfaces',
                      lambda f, r: EC2Client(r, f).count_network_interfaces()),
        ResourceProbe('L-E79EC296', 'vpc', 'Security groups',
                      lambda f, r: EC2Client(r, f).count_security_groups()),

        # ELB
        ResourceProbe('L-53DA6B97', 'elasticloadbalancing', 'Application Load Balancers',
                      _load_balancers('application')),
        ResourceProbe('L-69A177A2', 'elasticloadbalancing', 'Network Load Balancers',
                      _load_balancers('network')),
        ResourceProbe('L-B22855CB', 'elasticloadbalancing', 'Target groups',
                      lambda f, r: ELBClient(r, f).count_target_groups()),

        ResourceProbe('L-CDE20ADC', 'autoscaling', 'Auto Scaling groups',
                      lambda f, r: AutoScalingClient(r, f).count_auto_scaling_groups()),
        ResourceProbe('L-DC2B2D3D', 's3', 'Buckets',
                      lambda f, r: S3Client(r, f).count_buckets()),
        ResourceProbe('L-9FEE3D26', 'lambda', 'Lambda functions',
                      lambda f, r: LambdaClient(r, f).count_functions()),

        # RDS
        ResourceProbe('L-7B6409FD', 'rds', 'DB instances',
                      lambda f, r: RDSClient(r, f).count_db_instances()),
        ResourceProbe('L-952B80B8', 'rds', 'DB clusters',
                      lambda f, r: RDSClient(r, f).count_db_clusters()),

        ResourceProbe('L-F98FE922', 'dynamodb', 'DynamoDB tables',
                      lambda f, r: DynamoDBClient(r, f).count_tables()),
        ResourceProbe('L-5B2E3F44', 'cloudfront', 'CloudFront distributions',
                      lambda f, r: CloudFrontClient(r, f).count_distributions()),
        ResourceProbe('L-ACB674F3', 'route53', 'Public hosted zones',
                      lambda f, r: Route53Client(r, f).count_public_hosted_zones()),

        # IAM
        ResourceProbe('L-4019AD8D', 'iam', 'IAM users',
                      lambda f, r: IAMClient(r, f).count_users()),
        ResourceProbe('L-FE177D64', 'iam', 'IAM roles',
                      lambda f, r: IAMClient(r, f).count_roles()),
        ResourceProbe('L-0DA4ABF3', 'iam', 'IAM groups',
                      lambda f, r: IAMClient(r, f).count_groups()),
        ResourceProbe('L-D0B7243C', 'iam', 'Customer managed policies',
                      lambda f, r: IAMClient(r, f).count_local_policies()),

        ResourceProbe('L-61103206', 'sns', 'SNS topics',
                      lambda f, r: SNSClient(r, f).count_topics()),
        ResourceProbe('L-75826ACE', 'sqs', 'SQS queues',
                      lambda f, r: SQSClient(r, f).count_queues()),
        ResourceProbe('L-CFEB8E8D', 'ecr', 'ECR repositories',
                      lambda f, r: ECRClient(r, f).count_repositories()),
    ]

    registry = ProbeRegistry(probes)
    logger.debug(f"直接探测注册表构建完成，共 {len(registry)} 项")
    return registry
