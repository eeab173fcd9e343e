# -*- coding: utf-8 -*-
"""
投资建议解析器测试
"""

import json

import pytest

from core.domain.analysis import PARSE_FAILURE_SUMMARY, RecommendationStatus
from infrastructure.ai.parsers import RecommendationParser


@pytest.fixture()
def parser() -> RecommendationParser:
    return RecommendationParser()


class TestRecommendationParser:
    """RecommendationParser 测试"""

    def test_parses_trailing_json(self, parser):
        text = 'Analysis text.\n{"recommendation":"BUY","confidence":0.8,"summary":"ok"}'

        result = parser.parse(text)

        assert result.recommendation is RecommendationStatus.BUY
        assert result.confidence == 0.8
        assert result.summary == "ok"
        assert result.narrative == "Analysis text."

    def test_sell_lowercase_is_accepted(self, parser):
        result = parser.parse('下跌趋势\n{"recommendation": "sell", "confidence": "0.6", "summary": "减仓"}')

        assert result.recommendation is RecommendationStatus.SELL
        assert result.confidence == 0.6

    def test_reparse_of_payload_is_stable(self, parser):
        """重新序列化结构化部分后再次解析，结果不变"""
        first = parser.parse('正文\n{"recommendation":"SELL","confidence":0.35,"summary":"风险偏高"}')

        second = parser.parse(f"{first.narrative}\n{json.dumps(first.payload(), ensure_ascii=False)}")

        assert second == first

    def test_no_json_is_parse_failure(self, parser):
        text = "模型只返回了文字，没有 JSON"

        result = parser.parse(text)

        assert result.recommendation is RecommendationStatus.ERROR
        assert result.confidence == 0.0
        assert result.summary == PARSE_FAILURE_SUMMARY
        assert result.narrative == text

    def test_hold_is_not_in_closed_set(self, parser):
        text = '观望\n{"recommendation":"HOLD","confidence":0.5,"summary":"等待"}'

        result = parser.parse(text)

        assert result.recommendation is RecommendationStatus.ERROR
        assert result.narrative == text

    def test_invalid_json_is_parse_failure(self, parser):
        result = parser.parse('正文\n{"recommendation": BUY, "confidence": }')

        assert result.is_error

    def test_missing_summary_is_parse_failure(self, parser):
        assert parser.parse('x\n{"recommendation":"BUY","confidence":0.9}').is_error

    def test_non_numeric_confidence_is_parse_failure(self, parser):
        assert parser.parse('x\n{"recommendation":"BUY","confidence":"high","summary":"s"}').is_error

    def test_empty_text(self, parser):
        result = parser.parse("")

        assert result.is_error
        assert result.narrative == ""

    def test_confidence_is_clamped(self, parser):
        result = parser.parse('x\n{"recommendation":"BUY","confidence":1.7,"summary":"s"}')

        assert result.confidence == 1.0

    def test_code_fence_and_trailing_comma_tolerated(self, parser):
        text = '走势偏强\n```json\n{"recommendation":"BUY","confidence":0.7,"summary":"突破",}\n```'

        result = parser.parse(text)

        assert result.recommendation is RecommendationStatus.BUY
        assert result.summary == "突破"
        assert result.narrative == "走势偏强"

    def test_clean_narrative_removes_json_blocks(self, parser):
        text = '前文\n```json\n{"a": 1}\n```\n后文'

        assert parser.clean_narrative(text) == "前文\n\n后文"
