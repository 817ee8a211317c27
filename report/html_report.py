# -*- coding: utf-8 -*-
"""
HTML 报告模块

功能：
- 把缓存中的配额渲染为独立的 HTML 表格（导出下载使用）
- 通过 Flask 的模板渲染（自动转义），需要在应用上下文中调用
"""

from datetime import datetime
from typing import List
from flask import render_template_string

from model.quota import Quota

REPORT_TEMPLATE = """<!DOCTYPE html>
<html>
<head>
<meta charset="utf-8">
<title>AWS Service Quotas Report</title>
<style>
body { font-family: Arial, sans-serif; margin: 20px; }
table { border-collapse: collapse; width: 100%; }
th, td { border: 1px solid #ddd; padding: 8px; text-align: left; }
th { background-color: #4CAF50; color: white; }
tr:nth-child(even) { background-color: #f2f2f2; }
.high { color: #d32f2f; font-weight: bold; }
</style>
</head>
<body>
<h1>AWS Service Quotas Report</h1>
<p>Generated: {{ generated_at }}</p>
<p>Total quotas: {{ quotas|length }}</p>
<table>
<tr>
<th>Region</th><th>Service</th><th>Quota Name</th><th>Value</th>
<th>Usage</th><th>Usage %</th><th>Unit</th><th>Adjustable</th>
</tr>
{% for q in quotas %}
<tr>
<td>{{ q.region }}</td>
<td>{{ q.service_name }}</td>
<td>{{ q.quota_name }}</td>
<td>{{ '%.2f'|format(q.value) }}</td>
<td>{% if q.has_usage_metrics %}{{ '%.2f'|format(q.usage) }}{% else %}-{% endif %}</td>
<td{% if q.usage_percentage >= 80 %} class="high"{% endif %}>{% if q.has_usage_metrics %}{{ '%.1f'|format(q.usage_percentage) }}%{% else %}-{% endif %}</td>
<td>{{ q.unit }}</td>
<td>{{ 'Yes' if q.adjustable else 'No' }}</td>
</tr>
{% endfor %}
</table>
</body>
</html>
"""


def render_quota_report(quotas: List[Quota], generated_at: datetime) -> str:
    """
    渲染配额 HTML 报告

    Args:
        quotas: 配额列表
        generated_at: 报告生成时间

    Returns:
        HTML 字符串
    """
    return render_template_string(
        REPORT_TEMPLATE,
        quotas=quotas,
        generated_at=generated_at.strftime('%Y-%m-%d %H:%M:%S %Z').strip()
    )
