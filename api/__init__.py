# -*- coding: utf-8 -*-
"""
云资源 API 客户端模块
"""
