"""Tests for the Flask HTTP layer."""

import json
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError

from cache.cache import MemoryCache
from collector.aggregator import QuotaAggregator
from config.loader import DashboardConfig
from main import create_app, request_cancel_event
from model.quota import FetchResult, Quota, Region, Service
from provider.errors import RegionFetchError, RegionListingError
from service.quota_service import QuotaService


def make_quota(region, code, name, **kwargs):
    return Quota(region=region, service_code='ec2', service_name='Amazon EC2',
                 quota_name=name, quota_code=code, value=20, **kwargs)


@pytest.fixture
def aggregator():
    agg = MagicMock(spec=QuotaAggregator)
    quota = make_quota('us-east-1', 'L-0263D0A3', 'EC2-VPC Elastic IPs')
    quota.apply_usage(5)
    agg.aggregate.return_value = FetchResult.build(
        [quota, make_quota('us-east-1', 'L-X', '<script>alert(1)</script>')], [])
    return agg


@pytest.fixture
def fetcher():
    f = MagicMock()
    f.list_services.return_value = [Service('ec2', 'Amazon EC2')]
    return f


@pytest.fixture
def region_lister():
    return MagicMock(return_value=[Region('us-east-1', 'us-east-1')])


@pytest.fixture
def quota_service(aggregator, fetcher, region_lister, metrics):
    cache = MemoryCache(ttl=300, start_sweeper=False)
    yield QuotaService(cache, aggregator, fetcher, region_lister, metrics=metrics)
    cache.close()


@pytest.fixture
def client(quota_service, metrics):
    app = create_app(quota_service, DashboardConfig(), metrics)
    app.config['TESTING'] = True
    return app.test_client()


def test_index_page(client):
    response = client.get('/')
    assert response.status_code == 200
    assert b'AWS Service Quota Dashboard' in response.data
    assert b'"us-east-1"' in response.data


def test_regions(client):
    data = client.get('/api/regions').get_json()
    assert data == {'regions': [{'code': 'us-east-1', 'name': 'us-east-1'}], 'from_cache': False}
    assert client.get('/api/regions').get_json()['from_cache'] is True


def test_regions_listing_failure(client, region_lister):
    region_lister.side_effect = RegionListingError('failed to list regions: denied')
    response = client.get('/api/regions')
    assert response.status_code == 500
    assert response.get_json() == {'error': 'failed to list regions: denied'}


def test_services_default_region(client, fetcher):
    data = client.get('/api/services').get_json()
    assert data['services'] == [{'code': 'ec2', 'name': 'Amazon EC2'}]
    assert fetcher.list_services.call_args.args[0] == 'us-east-1'


def test_services_failure(client, fetcher):
    cause = ClientError({'Error': {'Code': 'AccessDenied', 'Message': 'no'}}, 'ListServices')
    fetcher.list_services.side_effect = RegionFetchError('eu-west-1', cause)
    assert client.get('/api/services?region=eu-west-1').status_code == 500


def test_quotas(client, aggregator):
    data = client.get('/api/quotas?region=us-east-1&service=ec2').get_json()
    assert data['total'] == 2
    assert data['from_cache'] is False
    assert data['warnings'] == []
    eip = data['quotas'][0]
    assert eip['usage'] == 5.0
    assert eip['usage_percentage'] == 25.0
    assert eip['has_usage_metrics'] is True
    assert eip['global'] is False
    assert aggregator.aggregate.call_args.args[:2] == (['us-east-1'], 'ec2')


def test_quotas_search(client):
    data = client.get('/api/quotas?region=us-east-1&search=elastic').get_json()
    assert [q['quota_code'] for q in data['quotas']] == ['L-0263D0A3']
    assert data['total'] == 1


def test_quotas_invalid_selector(client):
    response = client.get('/api/quotas?region=,,')
    assert response.status_code == 400
    assert 'error' in response.get_json()


def test_refresh(client, aggregator):
    client.get('/api/quotas?region=us-east-1')
    response = client.post('/api/refresh')
    assert response.get_json() == {'message': 'Cache cleared successfully'}
    assert client.get('/api/quotas?region=us-east-1').get_json()['from_cache'] is False
    assert aggregator.aggregate.call_count == 2


def test_export_without_data(client):
    for path in ('/api/export/json', '/api/export/html'):
        response = client.get(path + '?region=us-east-1')
        assert response.status_code == 400
        assert response.get_json() == {'error': 'No data available. Please fetch quotas first.'}


def test_export_json(client):
    client.get('/api/quotas?region=us-east-1&service=ec2')
    response = client.get('/api/export/json?region=us-east-1&service=ec2')

    assert response.status_code == 200
    disposition = response.headers['Content-Disposition']
    assert disposition.startswith('attachment; filename=aws-quotas-')
    assert disposition.endswith('.json')
    body = json.loads(response.data)
    assert body['total'] == 2


def test_export_html_is_escaped(client):
    client.get('/api/quotas?region=us-east-1')
    response = client.get('/api/export/html?region=us-east-1')

    assert response.status_code == 200
    assert response.headers['Content-Disposition'].endswith('.html')
    assert b'EC2-VPC Elastic IPs' in response.data
    assert b'<script>alert(1)</script>' not in response.data
    assert b'&lt;script&gt;' in response.data


def test_config_endpoint(client):
    assert client.get('/api/config').get_json() == {'default_region': 'us-east-1', 'default_service': 'ec2'}


def test_health(client):
    data = client.get('/health').get_json()
    assert data['status'] == 'healthy'
    assert data['cache_sweeper']['running'] is False


def test_metrics(client):
    client.get('/api/quotas?region=us-east-1')
    response = client.get('/metrics')
    assert response.status_code == 200
    assert b'cloud_service_quota_limit' in response.data
    assert b'quota_dashboard_cache_requests_total' in response.data


def test_request_cancel_event_timer():
    with request_cancel_event(0.01) as event:
        assert event.wait(2)
    with request_cancel_event(0) as event:
        assert not event.wait(0.05)
