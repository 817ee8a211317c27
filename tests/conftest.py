"""Shared fixtures: fake boto3 clients and helpers."""

import pytest
from unittest.mock import MagicMock
from prometheus_client import CollectorRegistry

from collector.metrics import QuotaMetrics
from ratelimit.token_bucket import TokenBucketLimiter


class FakeClientFactory:
    """Stands in for AWSClientFactory: one MagicMock per (service, region)."""

    def __init__(self):
        self.clients = {}
        self.errors = {}

    def register(self, service_name, region, client):
        self.clients[(service_name, region)] = client
        return client

    def fail(self, service_name, region, error):
        self.errors[(service_name, region)] = error

    def client(self, service_name, region):
        key = (service_name, region)
        if key in self.errors:
            raise self.errors[key]
        if key not in self.clients:
            self.clients[key] = MagicMock(name=f"{service_name}-{region}")
        return self.clients[key]


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


def quota_item(code, name, value=10.0, global_quota=False, usage_metric=None, unit="None", adjustable=True):
    item = {
        'QuotaCode': code,
        'QuotaName': name,
        'Value': value,
        'Unit': unit,
        'Adjustable': adjustable,
        'GlobalQuota': global_quota,
    }
    if usage_metric is not None:
        item['UsageMetric'] = usage_metric
    return item


def paginator_with(pages):
    paginator = MagicMock()
    paginator.paginate.return_value = iter(pages)
    return paginator


def service_quotas_client(services, defaults=None, applied=None):
    """
    Fake service-quotas client.

    services: list of (code, name); defaults/applied: service_code -> list of quota items
    """
    defaults = defaults or {}
    applied = applied or {}
    client = MagicMock(name="service-quotas")
    client.list_services.return_value = {
        'Services': [{'ServiceCode': code, 'ServiceName': name} for code, name in services]
    }
    client.list_aws_default_service_quotas.side_effect = \
        lambda ServiceCode, **kwargs: {'Quotas': defaults.get(ServiceCode, [])}
    client.list_service_quotas.side_effect = \
        lambda ServiceCode, **kwargs: {'Quotas': applied.get(ServiceCode, [])}
    return client


@pytest.fixture
def client_factory():
    return FakeClientFactory()


@pytest.fixture
def fast_limiter():
    return TokenBucketLimiter(rate_per_second=1000.0, burst=1000)


@pytest.fixture
def registry():
    return CollectorRegistry()


@pytest.fixture
def metrics(registry):
    return QuotaMetrics(registry)


@pytest.fixture
def fake_clock():
    return FakeClock()
