# -*- coding: utf-8 -*-
"""
Provider 模块

功能：
- 云厂商配额、使用量的拉取实现
- 拉取过程中的异常定义
"""
