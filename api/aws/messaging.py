# -*- coding: utf-8 -*-
"""
SNS / SQS API 客户端模块

功能：
- 统计 SNS 主题数量
- 统计 SQS 队列数量
"""

from api.aws.base import BaseAWSClient


class SNSClient(BaseAWSClient):
    """SNS API 客户端"""

    service_name = 'sns'

    def count_topics(self) -> int:
        return self._count_pages('list_topics', 'Topics')


class SQSClient(BaseAWSClient):
    """SQS API 客户端"""

    service_name = 'sqs'

    def count_queues(self) -> int:
        return self._count_pages('list_queues', 'QueueUrls')
