"""Tests for QuotaService."""

import threading
from unittest.mock import MagicMock

import pytest

from cache.cache import MemoryCache
from collector.aggregator import QuotaAggregator
from model.quota import FetchResult, Quota, Region, Service
from provider.errors import InvalidRequestError, NoCachedDataError, RegionListingError
from service.quota_service import QuotaService, parse_region_selector


def make_quota(region, code, name, service_code='ec2', service_name='Amazon Elastic Compute Cloud (EC2)'):
    return Quota(region=region, service_code=service_code, service_name=service_name,
                 quota_name=name, quota_code=code, value=10)


@pytest.fixture
def cache(fake_clock):
    c = MemoryCache(ttl=300, clock=fake_clock, start_sweeper=False)
    yield c
    c.close()


@pytest.fixture
def aggregator():
    agg = MagicMock(spec=QuotaAggregator)
    agg.aggregate.return_value = FetchResult.build([
        make_quota('us-east-1', 'L-F678F1CE', 'VPCs per Region', 'vpc', 'Amazon Virtual Private Cloud (Amazon VPC)'),
        make_quota('us-east-1', 'L-0263D0A3', 'EC2-VPC Elastic IPs'),
        make_quota('us-east-1', 'L-0E3CBAB9', 'Key pairs'),
    ], [])
    return agg


@pytest.fixture
def region_lister():
    return MagicMock(return_value=[Region('eu-west-1', 'eu-west-1'), Region('us-east-1', 'us-east-1')])


@pytest.fixture
def fetcher():
    f = MagicMock()
    f.list_services.return_value = [Service('ec2', 'Amazon EC2')]
    return f


@pytest.fixture
def service(cache, aggregator, fetcher, region_lister, metrics):
    return QuotaService(cache, aggregator, fetcher, region_lister, metrics=metrics)


def test_miss_then_hit(service, aggregator, registry):
    first = service.query('us-east-1', 'ec2')
    second = service.query('us-east-1', 'ec2')

    assert first.from_cache is False
    assert second.from_cache is True
    assert second.total == len(second.quotas) == 3
    aggregator.aggregate.assert_called_once_with(['us-east-1'], 'ec2', None)
    assert registry.get_sample_value('quota_dashboard_cache_requests_total', {'result': 'hit'}) == 1.0
    assert registry.get_sample_value('quota_dashboard_cache_requests_total', {'result': 'miss'}) == 1.0


def test_cached_quotas_are_copies(service):
    first = service.query('us-east-1')
    first.quotas[0].quota_name = 'mutated'
    second = service.query('us-east-1')
    assert second.quotas[0].quota_name == 'VPCs per Region'


def test_search_is_applied_after_cache(service, aggregator):
    service.query('us-east-1')
    response = service.query('us-east-1', search_term='VPC')

    assert response.from_cache is True
    assert {q.quota_code for q in response.quotas} == {'L-F678F1CE', 'L-0263D0A3'}
    assert response.total == 2
    assert aggregator.aggregate.call_count == 1


def test_search_matches_service_code(service):
    response = service.query('us-east-1', search_term='vpc')
    assert [q.quota_code for q in response.quotas] == ['L-F678F1CE', 'L-0263D0A3']


def test_all_uses_enabled_regions(service, aggregator, region_lister):
    service.query('all')
    service.query('')
    aggregator.aggregate.assert_any_call(['eu-west-1', 'us-east-1'], '', None)
    # region list is cached between the two queries
    region_lister.assert_called_once()


def test_all_uses_configured_regions(cache, aggregator, fetcher, region_lister):
    service = QuotaService(cache, aggregator, fetcher, region_lister, configured_regions=['ap-south-1'])
    service.query('all')
    aggregator.aggregate.assert_called_once_with(['ap-south-1'], '', None)
    region_lister.assert_not_called()


def test_comma_separated_selector(service, aggregator):
    service.query(' us-east-1, ,eu-west-1 ')
    aggregator.aggregate.assert_called_once_with(['us-east-1', 'eu-west-1'], '', None)


def test_empty_selector_is_invalid(service):
    with pytest.raises(InvalidRequestError):
        service.query(' , ')


def test_region_listing_failure_is_hard_error(service, region_lister):
    region_lister.side_effect = RegionListingError('failed to list regions')
    with pytest.raises(RegionListingError):
        service.query('all')


def test_all_regions_failed_not_cached(service, aggregator, cache):
    aggregator.aggregate.return_value = FetchResult.build(
        [], ['failed to fetch quotas for region us-east-1: boom'])

    response = service.query('us-east-1')

    assert response.quotas == []
    assert response.warnings == ['failed to fetch quotas for region us-east-1: boom']
    assert cache.get('quotas:us-east-1:') == (None, False)


def test_partial_failure_is_cached(service, aggregator, cache):
    aggregator.aggregate.return_value = FetchResult.build(
        [make_quota('us-east-1', 'L-1', 'x')], ['failed to fetch quotas for region eu-west-1: boom'])

    service.query('us-east-1,eu-west-1')
    response = service.query('us-east-1,eu-west-1')

    assert response.from_cache is True
    assert response.warnings == ['failed to fetch quotas for region eu-west-1: boom']


def test_cancelled_result_not_cached(service, cache):
    event = threading.Event()
    event.set()
    service.query('us-east-1', cancel_event=event)
    assert cache.get('quotas:us-east-1:') == (None, False)


def test_refresh_clears_cache(service, aggregator):
    service.query('us-east-1')
    service.refresh()
    response = service.query('us-east-1')
    assert response.from_cache is False
    assert aggregator.aggregate.call_count == 2


def test_cache_expiry_refetches(service, aggregator, fake_clock):
    service.query('us-east-1')
    fake_clock.advance(300)
    assert service.query('us-east-1').from_cache is False


def test_get_regions_cached(service, region_lister):
    regions, from_cache = service.get_regions()
    assert [r.code for r in regions] == ['eu-west-1', 'us-east-1']
    assert from_cache is False
    _, from_cache = service.get_regions()
    assert from_cache is True
    region_lister.assert_called_once()


def test_get_services_cached_per_region(service, fetcher):
    services, from_cache = service.get_services('us-east-1')
    assert [s.code for s in services] == ['ec2']
    assert from_cache is False
    assert service.get_services('us-east-1')[1] is True
    assert service.get_services('eu-west-1')[1] is False
    assert fetcher.list_services.call_count == 2


def test_get_cached_quotas(service):
    with pytest.raises(NoCachedDataError) as excinfo:
        service.get_cached_quotas('us-east-1')
    assert str(excinfo.value) == 'No data available. Please fetch quotas first.'

    service.query('us-east-1')
    assert len(service.get_cached_quotas('us-east-1')) == 3


def test_aggregate_passes_through(service, aggregator):
    result = service.aggregate(['us-east-1'], 'ec2')
    assert result is aggregator.aggregate.return_value


def test_fresh_results_update_quota_gauges(service, registry):
    service.query('us-east-1')
    labels = {
        'provider': 'aws', 'region': 'us-east-1', 'service': 'ec2',
        'quota_name': 'Key pairs', 'quota_code': 'L-0E3CBAB9'
    }
    assert registry.get_sample_value('cloud_service_quota_limit', labels) == 10.0


def test_parse_region_selector():
    assert parse_region_selector('a, b,,c ') == ['a', 'b', 'c']
