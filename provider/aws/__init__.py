# -*- coding: utf-8 -*-
"""
AWS Provider 模块

功能：
- 区域枚举、Service Quotas 分页拉取
- 单区域配额拉取与使用量解析（直接探测 -> CloudWatch）
"""
