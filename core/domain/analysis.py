# -*- coding: utf-8 -*-
"""
分析结果实体

定义 AI 投资建议及其持久化记录
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional

# 解析失败时使用的固定摘要
PARSE_FAILURE_SUMMARY = "分析结果解析失败"


class RecommendationStatus(Enum):
    """投资建议（封闭枚举）"""

    BUY = "BUY"
    SELL = "SELL"
    ERROR = "ERROR"

    @property
    def label(self) -> str:
        return {"BUY": "买入", "SELL": "卖出", "ERROR": "解析失败"}[self.value]

    @property
    def emoji(self) -> str:
        return {"BUY": "🟢", "SELL": "🔴", "ERROR": "⚠️"}[self.value]


@dataclass(frozen=True)
class AdvisoryResult:
    """
    AI 投资建议

    recommendation 恒为封闭枚举中的成员；解析失败时为 ERROR，
    此时 confidence 为 0.0，narrative 保留完整的原始响应文本。
    """

    recommendation: RecommendationStatus
    confidence: float  # 置信度 [0, 1]
    summary: str  # 一句话摘要
    narrative: str  # 分析正文（不含结尾的 JSON）

    @classmethod
    def parse_failure(cls, raw_text: str) -> "AdvisoryResult":
        """构造解析失败的结果"""
        return cls(
            recommendation=RecommendationStatus.ERROR,
            confidence=0.0,
            summary=PARSE_FAILURE_SUMMARY,
            narrative=raw_text or "",
        )

    @property
    def is_error(self) -> bool:
        return self.recommendation is RecommendationStatus.ERROR

    def payload(self) -> Dict[str, Any]:
        """结构化部分（与模型输出的 JSON 字段一致）"""
        return {
            "recommendation": self.recommendation.value,
            "confidence": self.confidence,
            "summary": self.summary,
        }


@dataclass
class AnalysisRecord:
    """单只股票的分析记录（持久化对象）"""

    stock_code: str
    stock_name: str
    analysis_date: date
    recommendation: RecommendationStatus
    confidence: float
    summary: str
    narrative: str  # 对应 llm_analysis 字段
    created_at: Optional[datetime] = field(default=None)

    @classmethod
    def from_result(cls, code: str, name: str, analysis_date: date, result: AdvisoryResult) -> "AnalysisRecord":
        return cls(
            stock_code=code,
            stock_name=name,
            analysis_date=analysis_date,
            recommendation=result.recommendation,
            confidence=result.confidence,
            summary=result.summary,
            narrative=result.narrative,
        )
