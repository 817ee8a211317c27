"""Tests for RegionFetcher and ServiceQuotasClient pagination."""

import threading
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError, EndpointConnectionError

from conftest import quota_item, service_quotas_client
from provider.aws.region_fetcher import RegionFetcher, merge_quota_definitions
from provider.aws.service_quotas import ServiceQuotasClient
from provider.aws.usage_probes import ProbeRegistry
from provider.aws.usage_resolver import build_default_resolver
from provider.errors import FetchCancelled, RegionFetchError
from model.quota import QuotaDefinition
from ratelimit.token_bucket import TokenBucketLimiter

REGION = 'eu-west-1'


def throttled(operation):
    return ClientError({'Error': {'Code': 'ThrottlingException', 'Message': 'slow down'}}, operation)


@pytest.fixture
def fetcher(client_factory, fast_limiter):
    resolver = build_default_resolver(client_factory, ProbeRegistry([]))
    return RegionFetcher(client_factory, fast_limiter, resolver)


def test_service_filter_is_case_insensitive(client_factory, fetcher):
    sq = client_factory.register('service-quotas', REGION, service_quotas_client(
        services=[('ec2', 'Amazon EC2'), ('vpc', 'Amazon VPC')],
        defaults={'ec2': [quota_item('L-1', 'EC2 quota')], 'vpc': [quota_item('L-2', 'VPC quota')]},
    ))

    quotas = fetcher.fetch(REGION, 'EC2')

    assert [q.quota_code for q in quotas] == ['L-1']
    assert quotas[0].service_name == 'Amazon EC2'
    assert quotas[0].region == REGION
    sq.list_aws_default_service_quotas.assert_called_once_with(ServiceCode='ec2')


def test_applied_quota_overrides_default_in_place(client_factory, fetcher):
    client_factory.register('service-quotas', REGION, service_quotas_client(
        services=[('ec2', 'Amazon EC2')],
        defaults={'ec2': [quota_item('L-1', 'first', 5), quota_item('L-2', 'second', 10)]},
        applied={'ec2': [quota_item('L-1', 'first', 50), quota_item('L-3', 'third', 1)]},
    ))

    quotas = fetcher.fetch(REGION)

    assert [(q.quota_code, q.value) for q in quotas] == [('L-1', 50.0), ('L-2', 10.0), ('L-3', 1.0)]


def test_merge_keeps_first_position():
    defaults = [QuotaDefinition('A', 'a', 1), QuotaDefinition('B', 'b', 2)]
    applied = [QuotaDefinition('B', 'b', 20), QuotaDefinition('A', 'a', 10)]
    merged = merge_quota_definitions(defaults, applied)
    assert [(d.quota_code, d.value) for d in merged] == [('A', 10), ('B', 20)]


def test_failing_service_is_skipped(client_factory, fetcher):
    sq = client_factory.register('service-quotas', REGION, service_quotas_client(
        services=[('ec2', 'Amazon EC2'), ('vpc', 'Amazon VPC')],
        defaults={'vpc': [quota_item('L-2', 'VPC quota')]},
    ))

    def defaults(ServiceCode, **kwargs):
        if ServiceCode == 'ec2':
            raise throttled('ListAWSDefaultServiceQuotas')
        return {'Quotas': [quota_item('L-2', 'VPC quota')]}

    sq.list_aws_default_service_quotas.side_effect = defaults

    quotas = fetcher.fetch(REGION)

    assert [q.service_code for q in quotas] == ['vpc']


def test_list_services_failure_fails_region(client_factory, fetcher):
    sq = client_factory.register('service-quotas', REGION, service_quotas_client(services=[]))
    sq.list_services.side_effect = throttled('ListServices')

    with pytest.raises(RegionFetchError) as excinfo:
        fetcher.fetch(REGION)
    assert excinfo.value.region == REGION
    assert isinstance(excinfo.value.cause, ClientError)


def test_client_creation_failure_fails_region(client_factory, fetcher):
    client_factory.fail('service-quotas', REGION, EndpointConnectionError(endpoint_url='https://x'))

    with pytest.raises(RegionFetchError):
        fetcher.fetch(REGION)


def test_cancelled_before_start(client_factory, fetcher):
    event = threading.Event()
    event.set()
    with pytest.raises(FetchCancelled):
        fetcher.fetch(REGION, cancel_event=event)


def test_list_services_accessor(client_factory, fetcher):
    client_factory.register('service-quotas', REGION, service_quotas_client(
        services=[('ec2', 'Amazon EC2'), ('s3', 'Amazon S3')]
    ))
    services = fetcher.list_services(REGION)
    assert [s.code for s in services] == ['ec2', 's3']


def test_pagination_acquires_one_token_per_page(client_factory):
    client = MagicMock()
    client.list_service_quotas.side_effect = [
        {'Quotas': [quota_item('L-1', 'a')], 'NextToken': 't1'},
        {'Quotas': [quota_item('L-2', 'b')], 'NextToken': 't2'},
        {'Quotas': [quota_item('L-3', 'c')]},
    ]
    client_factory.register('service-quotas', REGION, client)
    limiter = MagicMock(spec=TokenBucketLimiter)

    quotas = ServiceQuotasClient(REGION, client_factory, limiter).list_applied_quotas('ec2')

    assert [q.quota_code for q in quotas] == ['L-1', 'L-2', 'L-3']
    assert limiter.acquire.call_count == 3
    tokens = [c.kwargs.get('NextToken') for c in client.list_service_quotas.call_args_list]
    assert tokens == [None, 't1', 't2']


def test_usage_metric_is_parsed(client_factory):
    client = MagicMock()
    client.list_aws_default_service_quotas.return_value = {'Quotas': [quota_item(
        'L-1', 'a', usage_metric={
            'MetricNamespace': 'AWS/Usage',
            'MetricName': 'ResourceCount',
            'MetricDimensions': {'Service': 'EC2'},
            'MetricStatisticRecommendation': 'Maximum',
        })]}
    client_factory.register('service-quotas', REGION, client)

    definitions = ServiceQuotasClient(REGION, client_factory, MagicMock()).list_default_quotas('ec2')

    metric = definitions[0].usage_metric
    assert metric.namespace == 'AWS/Usage'
    assert metric.dimensions == {'Service': 'EC2'}
