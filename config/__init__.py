# -*- coding: utf-8 -*-
"""
配置模块
"""

from .loader import DashboardConfig, load_config
from .validator import validate_config
