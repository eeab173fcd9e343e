# -*- coding: utf-8 -*-
"""
投资建议解析器

模型响应约定为「分析正文 + 最后一行 JSON」：
- 以最后一个 "{" 为分界，之前为分析正文，之后为 JSON
- JSON 需包含 recommendation（BUY/SELL）、confidence、summary
- 任何一步失败都返回 ERROR 结果（置信度 0，正文保留完整原始文本），不抛异常
"""

import json
import logging
import math
import re
from typing import Any, Dict, Optional

from core.domain.analysis import AdvisoryResult, RecommendationStatus

logger = logging.getLogger(__name__)

VALID_RECOMMENDATIONS = {RecommendationStatus.BUY.value, RecommendationStatus.SELL.value}

_JSON_BLOCK_RE = re.compile(r"```json[\s\S]*?```", re.IGNORECASE)
_TRAILING_FENCE_RE = re.compile(r"```(?:json)?\s*$", re.IGNORECASE)


class RecommendationParser:
    """投资建议解析器"""

    def parse(self, response_text: str) -> AdvisoryResult:
        """
        解析模型响应

        Args:
            response_text: 模型返回的原始文本

        Returns:
            AdvisoryResult（解析失败时 recommendation 为 ERROR）
        """
        if not response_text or not response_text.strip():
            logger.warning("[Parser] 响应为空")
            return AdvisoryResult.parse_failure(response_text or "")

        json_start = response_text.rfind("{")
        if json_start < 0:
            logger.warning("[Parser] 响应中未找到 JSON")
            return AdvisoryResult.parse_failure(response_text)

        data = self._load_json(response_text[json_start:])
        if data is None:
            return AdvisoryResult.parse_failure(response_text)

        recommendation = str(data.get("recommendation", "")).strip().upper()
        if recommendation not in VALID_RECOMMENDATIONS:
            logger.warning(f"[Parser] 无效的 recommendation: {data.get('recommendation')!r}")
            return AdvisoryResult.parse_failure(response_text)

        confidence = self._parse_confidence(data.get("confidence"))
        if confidence is None:
            logger.warning(f"[Parser] 无效的 confidence: {data.get('confidence')!r}")
            return AdvisoryResult.parse_failure(response_text)

        summary = data.get("summary")
        if not isinstance(summary, str):
            logger.warning(f"[Parser] 无效的 summary: {summary!r}")
            return AdvisoryResult.parse_failure(response_text)

        return AdvisoryResult(
            recommendation=RecommendationStatus(recommendation),
            confidence=confidence,
            summary=summary.strip(),
            narrative=self.clean_narrative(response_text[:json_start]),
        )

    def _load_json(self, json_part: str) -> Optional[Dict[str, Any]]:
        json_end = json_part.rfind("}")
        if json_end < 0:
            logger.warning("[Parser] JSON 不完整")
            return None

        json_str = self._fix_json_string(json_part[: json_end + 1])
        try:
            data = json.loads(json_str)
        except ValueError as e:
            logger.warning(f"[Parser] JSON 解析失败: {e}")
            return None

        if not isinstance(data, dict):
            return None
        return data

    @staticmethod
    def _parse_confidence(value: Any) -> Optional[float]:
        if isinstance(value, bool) or value is None:
            return None
        try:
            confidence = float(value)
        except (TypeError, ValueError):
            return None
        if math.isnan(confidence):
            return None
        return min(max(confidence, 0.0), 1.0)

    @staticmethod
    def _fix_json_string(json_str: str) -> str:
        """修复尾随逗号"""
        json_str = re.sub(r",\s*}", "}", json_str)
        json_str = re.sub(r",\s*]", "]", json_str)
        return json_str

    @staticmethod
    def clean_narrative(text: str) -> str:
        """清理分析正文：移除 ```json 代码块和末尾未闭合的代码块标记"""
        text = _JSON_BLOCK_RE.sub("", text)
        text = _TRAILING_FENCE_RE.sub("", text.rstrip())
        return text.strip()
