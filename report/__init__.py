# -*- coding: utf-8 -*-
"""
导出报告模块
"""

from .html_report import render_quota_report
