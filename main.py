#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
AWS Service Quota Dashboard 主程序入口

功能：
- 启动 Flask HTTP 服务器
- 暴露配额查询、刷新、导出 API 和看板页面
- 暴露 /metrics 端点供 Prometheus 抓取
- 暴露 /health 健康检查端点
"""

from flask import Flask, jsonify, render_template, request, Response
from prometheus_client import CONTENT_TYPE_LATEST
from botocore.exceptions import BotoCoreError, ClientError
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import partial
import json
import logging
import sys
import threading

# 导入配置
from config.loader import DashboardConfig, load_config
from config.validator import validate_config

# 导入缓存、限流
from cache.cache import MemoryCache
from ratelimit.token_bucket import TokenBucketLimiter

# 导入 AWS Provider
from provider.aws.session import AWSClientFactory
from provider.aws.regions import list_enabled_regions
from provider.aws.region_fetcher import RegionFetcher
from provider.aws.usage_probes import build_default_registry
from provider.aws.usage_resolver import build_default_resolver
from provider.errors import (
    InvalidRequestError, NoCachedDataError, QuotaDashboardError, RegionFetchError, RegionListingError
)

# 导入聚合器、指标、查询服务
from collector import QuotaAggregator, QuotaMetrics
from service.quota_service import QuotaService
from report.html_report import render_quota_report

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# 设置特定模块的日志级别
logging.getLogger('werkzeug').setLevel(logging.WARNING)  # 减少 Flask 日志


@contextmanager
def request_cancel_event(timeout_seconds: float):
    """
    单次请求的取消信号

    timeout_seconds > 0 时启动定时器，超时后触发取消
    """
    cancel_event = threading.Event()
    timer = None
    if timeout_seconds and timeout_seconds > 0:
        timer = threading.Timer(timeout_seconds, cancel_event.set)
        timer.daemon = True
        timer.start()
    try:
        yield cancel_event
    finally:
        if timer is not None:
            timer.cancel()


def _attachment(body: str, mimetype: str, extension: str) -> Response:
    filename = f"aws-quotas-{datetime.now(timezone.utc).strftime('%Y-%m-%d')}.{extension}"
    return Response(
        body,
        mimetype=mimetype,
        headers={'Content-Disposition': f'attachment; filename={filename}'}
    )


def create_app(service: QuotaService, config: DashboardConfig, metrics: QuotaMetrics = None) -> Flask:
    """
    创建 Flask 应用

    Args:
        service: 配额查询服务
        config: 看板配置
        metrics: Prometheus 指标（可选，为空时 /metrics 返回占位内容）
    """
    app = Flask(__name__)
    timeout_seconds = config.server.request_timeout_seconds

    @app.errorhandler(InvalidRequestError)
    @app.errorhandler(NoCachedDataError)
    def handle_bad_request(e):
        return jsonify({'error': str(e)}), 400

    @app.errorhandler(RegionListingError)
    @app.errorhandler(RegionFetchError)
    @app.errorhandler(QuotaDashboardError)
    def handle_dashboard_error(e):
        logger.error(f"请求处理失败: {e}")
        return jsonify({'error': str(e)}), 500

    @app.errorhandler(ClientError)
    @app.errorhandler(BotoCoreError)
    def handle_provider_error(e):
        logger.error(f"AWS API 调用失败: {e}")
        return jsonify({'error': str(e)}), 500

    @app.route('/')
    def index():
        """看板页面"""
        return render_template(
            'index.html',
            default_region=config.default_region,
            default_service=config.default_service
        )

    @app.route('/api/regions')
    def api_regions():
        with request_cancel_event(timeout_seconds) as cancel_event:
            regions, from_cache = service.get_regions(cancel_event)
        return jsonify({'regions': [r.to_dict() for r in regions], 'from_cache': from_cache})

    @app.route('/api/services')
    def api_services():
        region = request.args.get('region') or config.default_region
        with request_cancel_event(timeout_seconds) as cancel_event:
            services, from_cache = service.get_services(region, cancel_event)
        return jsonify({'services': [s.to_dict() for s in services], 'from_cache': from_cache})

    @app.route('/api/quotas')
    def api_quotas():
        """
        配额查询

        参数：region（"all" 或逗号分隔的区域列表）、service、search
        """
        region = request.args.get('region', config.default_region)
        service_filter = request.args.get('service', '')
        search_term = request.args.get('search', '')
        with request_cancel_event(timeout_seconds) as cancel_event:
            response = service.query(region, service_filter, search_term, cancel_event)
        return jsonify(response.to_dict())

    @app.route('/api/refresh', methods=['POST'])
    def api_refresh():
        service.refresh()
        return jsonify({'message': 'Cache cleared successfully'})

    @app.route('/api/export/json')
    def api_export_json():
        region = request.args.get('region', config.default_region)
        service_filter = request.args.get('service', '')
        quotas = service.get_cached_quotas(region, service_filter)
        body = json.dumps({
            'exported_at': datetime.now(timezone.utc).isoformat(),
            'total': len(quotas),
            'quotas': [q.to_dict() for q in quotas]
        }, indent=2)
        return _attachment(body, 'application/json', 'json')

    @app.route('/api/export/html')
    def api_export_html():
        region = request.args.get('region', config.default_region)
        service_filter = request.args.get('service', '')
        quotas = service.get_cached_quotas(region, service_filter)
        body = render_quota_report(quotas, datetime.now(timezone.utc))
        return _attachment(body, 'text/html', 'html')

    @app.route('/api/config')
    def api_config():
        return jsonify({
            'default_region': config.default_region,
            'default_service': config.default_service
        })

    @app.route('/health')
    def health():
        """
        健康检查端点

        返回看板的健康状态
        """
        return {
            'status': 'healthy',
            'cache_entries': len(service.cache),
            'cache_sweeper': service.cache.sweeper_status()
        }, 200

    @app.route('/metrics')
    def metrics_endpoint():
        """
        Prometheus metrics 端点

        格式：Prometheus text format
        """
        if metrics is None:
            return "# Metrics not initialized\n", 200, {'Content-Type': CONTENT_TYPE_LATEST}
        return metrics.get_metrics(), 200, {'Content-Type': CONTENT_TYPE_LATEST}

    return app


def build_service(config: DashboardConfig, metrics: QuotaMetrics = None) -> QuotaService:
    """
    按配置组装查询服务

    客户端工厂 -> 限流器 -> 直接探测注册表 -> 使用量解析器 -> 区域拉取器 -> 聚合器 -> 查询服务
    """
    client_factory = AWSClientFactory(
        access_key=config.aws.access_key or None,
        secret_key=config.aws.secret_key or None,
        profile=config.aws.profile or None,
        max_pool_connections=max(config.max_concurrency, 10) * 2
    )
    limiter = TokenBucketLimiter(rate_per_second=config.rate_limit.per_second, burst=config.rate_limit.burst)
    registry = build_default_registry()
    resolver = build_default_resolver(client_factory, registry, metrics)
    fetcher = RegionFetcher(client_factory, limiter, resolver)
    aggregator = QuotaAggregator(
        fetcher,
        max_concurrency=config.max_concurrency,
        deterministic_dedup=config.deterministic_global_dedup,
        metrics=metrics
    )
    cache = MemoryCache(ttl=config.cache_ttl_seconds(), sweep_interval=config.cache.sweep_interval_seconds)

    return QuotaService(
        cache=cache,
        aggregator=aggregator,
        fetcher=fetcher,
        region_lister=partial(list_enabled_regions, client_factory),
        configured_regions=config.regions,
        metrics=metrics
    )


def main():
    """
    主函数：启动 Flask 服务器

    功能：
    1. 加载并验证配置文件
    2. 组装查询服务和指标
    3. 启动 HTTP 服务器
    """
    logger.info("Starting AWS Service Quota Dashboard...")

    try:
        config = load_config()
    except Exception as e:
        logger.error(f"加载配置失败: {e}")
        sys.exit(1)

    is_valid, error_message = validate_config(config)
    if not is_valid:
        logger.error(f"配置无效: {error_message}")
        sys.exit(1)

    logging.getLogger().setLevel(config.get_log_level())

    metrics = QuotaMetrics()
    service = build_service(config, metrics)
    app = create_app(service, config, metrics)

    port = config.get_port()
    logger.info(f"Starting HTTP server on {config.server.host}:{port}")
    print(f"\n{'=' * 60}")
    print(f"Dashboard 已启动")
    print(f"访问 http://localhost:{port}/ 查看配额看板")
    print(f"访问 http://localhost:{port}/metrics 查看指标")
    print(f"{'=' * 60}\n")
    try:
        app.run(host=config.server.host, port=port, debug=False, threaded=True)
    finally:
        service.cache.close()


if __name__ == '__main__':
    main()
