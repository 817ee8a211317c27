"""Tests for the quota data model."""

from datetime import datetime, timezone

from model.quota import FetchResult, Quota, QuotaDefinition, QuotaResponse, Service, UsageMetric


def test_definition_from_api():
    definition = QuotaDefinition.from_api({
        'QuotaCode': 'L-1', 'QuotaName': 'Things', 'Value': 12, 'Unit': 'Count',
        'Adjustable': True, 'GlobalQuota': True,
        'UsageMetric': {'MetricNamespace': 'AWS/Usage'},
    })
    assert definition.value == 12.0
    assert definition.global_quota is True
    # incomplete descriptor is ignored
    assert definition.usage_metric is None


def test_usage_metric_defaults():
    metric = UsageMetric.from_api({'MetricNamespace': 'AWS/Usage', 'MetricName': 'ResourceCount'})
    assert metric.dimensions == {}
    assert metric.statistic_recommendation == ''


def test_quota_to_dict_keys():
    quota = Quota.from_definition('us-east-1', Service('ec2', 'Amazon EC2'), QuotaDefinition('L-1', 'Things', 50))
    quota.apply_usage(10)
    data = quota.to_dict()
    assert set(data) == {
        'region', 'service_code', 'service_name', 'quota_name', 'quota_code', 'value', 'usage',
        'usage_percentage', 'has_usage_metrics', 'unit', 'adjustable', 'global'
    }
    assert data['usage_percentage'] == 20.0


def test_response_total_matches_quotas():
    result = FetchResult.build([Quota('r', 's', 'S', 'n', 'c')], ['w'])
    response = QuotaResponse(result.copy_quotas(), datetime(2024, 1, 1, tzinfo=timezone.utc), False, list(result.warnings))
    data = response.to_dict()
    assert data['total'] == len(data['quotas']) == 1
    assert data['fetched_at'] == '2024-01-01T00:00:00+00:00'
    assert data['warnings'] == ['w']
