# -*- coding: utf-8 -*-
"""
自定义异常

定义项目通用异常类：

- TransportError: 网络/超时/HTTP 状态码失败（仅在 AI 调用阶段重试）
- AuthError: 访问令牌签发失败（向上传播，不在内部重试）
- RequestError: 请求被服务方拒绝（429 以外的 4xx，重试无意义）
- ParseError: 响应结构或数值字段无法解析（按单只股票处理）
- PipelineError: 编排流程整体失败（作业标记为 FAILED）
"""

from typing import Optional


class AnalysisError(Exception):
    """分析错误基类"""

    pass


class TransportError(AnalysisError):
    """传输错误（网络异常、超时、429、5xx）"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class AuthError(AnalysisError):
    """认证错误（令牌签发失败或凭证被拒绝）"""

    pass


class RequestError(AnalysisError):
    """请求错误（服务方拒绝请求，如 400 / 404 / 422）"""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(AnalysisError):
    """解析错误（响应结构异常、数值字段格式错误）"""

    pass


class PipelineError(AnalysisError):
    """分析流程错误"""

    pass


class JobNotFoundError(AnalysisError):
    """分析作业不存在"""

    def __init__(self, job_id: str):
        super().__init__(f"分析作业不存在: {job_id}")
        self.job_id = job_id


class ConfigError(Exception):
    """配置错误"""

    pass
