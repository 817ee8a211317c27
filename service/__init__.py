# -*- coding: utf-8 -*-
"""
查询服务模块
"""

from .quota_service import QuotaService
