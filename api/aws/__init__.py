# -*- coding: utf-8 -*-
"""
AWS 资源 API 客户端

功能：
- 每个服务一个客户端，统计配额对应资源的当前数量
- 供直接探测（direct probe）使用量策略调用
"""
