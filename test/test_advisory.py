# -*- coding: utf-8 -*-
"""
AI 投资建议客户端、服务商与提示词测试
"""

from datetime import datetime, timedelta
from unittest.mock import MagicMock

import pytest
import requests
from factories import make_dataset, make_result

from common.config import Config
from common.exceptions import AuthError, ConfigError, ParseError, RequestError, TransportError
from core.domain.analysis import RecommendationStatus
from infrastructure.ai import AdvisoryClient, AdvisoryResultCache, ClaudeProvider, OpenAIProvider, create_provider
from infrastructure.ai.prompts import build_analysis_prompt, percent_above_low

GOOD_RESPONSE = '放量上攻，短线偏强。\n{"recommendation":"BUY","confidence":0.8,"summary":"放量突破"}'


class ScriptedProvider:
    """按脚本依次返回文本或抛出异常的假服务商"""

    name = "Fake"

    def __init__(self, *script):
        self.script = list(script)
        self.calls = 0

    def complete(self, prompt):
        self.calls += 1
        step = self.script.pop(0) if len(self.script) > 1 else self.script[0]
        if isinstance(step, Exception):
            raise step
        return step


def make_client(provider, **kwargs) -> AdvisoryClient:
    sleeps = kwargs.pop("sleeps", [])
    return AdvisoryClient(provider, initial_delay=2.0, max_delay=8.0, sleep=sleeps.append, **kwargs)


def mock_http(status_code=200, payload=None):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = str(payload)
    response.json.return_value = payload
    session = MagicMock()
    session.post.return_value = response
    return session


class TestAdvisoryClient:
    """AdvisoryClient 测试"""

    def test_success(self):
        provider = ScriptedProvider(GOOD_RESPONSE)

        result = make_client(provider).analyze(make_dataset())

        assert result.recommendation is RecommendationStatus.BUY
        assert result.summary == "放量突破"
        assert provider.calls == 1

    def test_transient_failures_are_retried_with_backoff(self):
        """前两次超时，第三次成功；等待时间按 2s、4s 递增"""
        provider = ScriptedProvider(TransportError("timeout"), TransportError("429", status_code=429), GOOD_RESPONSE)
        sleeps = []

        result = make_client(provider, sleeps=sleeps).analyze(make_dataset())

        assert result.recommendation is RecommendationStatus.BUY
        assert provider.calls == 3
        assert sleeps == [2.0, 4.0]

    def test_retries_exhausted_raises_transport_error(self):
        provider = ScriptedProvider(TransportError("down"))

        with pytest.raises(TransportError):
            make_client(provider).analyze(make_dataset())
        assert provider.calls == 3

    def test_max_retries_is_configurable(self):
        provider = ScriptedProvider(TransportError("down"))

        with pytest.raises(TransportError):
            make_client(provider, max_retries=0).analyze(make_dataset())
        assert provider.calls == 1

    def test_auth_error_is_not_retried(self):
        provider = ScriptedProvider(AuthError("bad key"))

        with pytest.raises(AuthError):
            make_client(provider).analyze(make_dataset())
        assert provider.calls == 1

    def test_rejected_request_is_posted_once(self):
        """HTTP 400 不是瞬时故障，不进入退避重试"""
        session = mock_http(400, {"error": "invalid max_tokens"})
        provider = OpenAIProvider("sk-xxxxxxxxxxxxxxxx", "gpt-test", session=session)
        sleeps = []

        with pytest.raises(RequestError):
            make_client(provider, sleeps=sleeps).analyze(make_dataset())
        assert session.post.call_count == 1
        assert sleeps == []

    def test_cached_result_skips_provider(self):
        provider = ScriptedProvider(GOOD_RESPONSE)
        client = make_client(provider)
        dataset = make_dataset()

        first = client.analyze(dataset)
        second = client.analyze(dataset)

        assert first == second
        assert provider.calls == 1

    def test_parse_failure_is_not_cached(self):
        provider = ScriptedProvider("没有 JSON 的响应")
        client = make_client(provider)
        dataset = make_dataset()

        result = client.analyze(dataset)
        client.analyze(dataset)

        assert result.recommendation is RecommendationStatus.ERROR
        assert result.narrative == "没有 JSON 的响应"
        assert provider.calls == 2

    def test_cache_key_is_scoped_by_code_and_date(self):
        dataset = make_dataset(code="000660")

        assert AdvisoryClient.cache_key(dataset) == "000660:2024-03-20"

    def test_from_config(self):
        config = Config(llm_max_retries=1, llm_retry_initial_delay=0.5, llm_retry_max_delay=1.0)
        provider = ScriptedProvider(TransportError("down"))
        client = AdvisoryClient.from_config(config, provider)
        client._sleep = lambda seconds: None

        with pytest.raises(TransportError):
            client.analyze(make_dataset())
        assert provider.calls == 2


class TestAdvisoryResultCache:
    """AdvisoryResultCache 测试"""

    def test_entries_expire_after_ttl(self):
        now = [datetime(2024, 3, 20, 9, 0)]
        cache = AdvisoryResultCache(ttl=timedelta(hours=6), clock=lambda: now[0])
        cache.set("005930:2024-03-20", make_result())

        now[0] += timedelta(hours=5, minutes=59)
        assert cache.get("005930:2024-03-20") is not None

        now[0] += timedelta(minutes=1)
        assert cache.get("005930:2024-03-20") is None
        assert len(cache) == 0

    def test_none_is_not_cached(self):
        cache = AdvisoryResultCache()
        cache.set("k", None)

        assert len(cache) == 0


class TestProviders:
    """服务商响应归一化与错误分类测试"""

    def test_claude_extracts_content_text(self):
        session = mock_http(payload={"content": [{"type": "text", "text": "hello "}, {"type": "text", "text": "world"}]})
        provider = ClaudeProvider("sk-ant-xxxxxxxxxxxx", "claude-test", session=session)

        assert provider.complete("prompt") == "hello world"
        url = session.post.call_args.args[0]
        kwargs = session.post.call_args.kwargs
        assert url == "https://api.anthropic.com/v1/messages"
        assert kwargs["headers"]["Authorization"] == "Bearer sk-ant-xxxxxxxxxxxx"
        assert kwargs["json"]["max_tokens"] == 2000
        assert kwargs["json"]["messages"] == [{"role": "user", "content": "prompt"}]
        assert kwargs["timeout"] == 45.0

    def test_gpt_extracts_choice_content(self):
        session = mock_http(payload={"choices": [{"message": {"content": "answer"}}]})
        provider = OpenAIProvider("sk-xxxxxxxxxxxxxxxx", "gpt-test", session=session)

        assert provider.complete("prompt") == "answer"
        assert session.post.call_args.args[0] == "https://api.openai.com/v1/chat/completions"

    def test_rate_limit_is_transport_error(self):
        provider = OpenAIProvider("sk-xxxxxxxxxxxxxxxx", "gpt-test", session=mock_http(429, {"error": "slow down"}))

        with pytest.raises(TransportError) as exc_info:
            provider.complete("prompt")
        assert exc_info.value.status_code == 429

    def test_server_error_is_transport_error(self):
        provider = OpenAIProvider("sk-xxxxxxxxxxxxxxxx", "gpt-test", session=mock_http(503, {"error": "busy"}))

        with pytest.raises(TransportError):
            provider.complete("prompt")

    def test_bad_request_is_request_error(self):
        provider = OpenAIProvider("sk-xxxxxxxxxxxxxxxx", "gpt-test", session=mock_http(400, {"error": "bad model"}))

        with pytest.raises(RequestError) as exc_info:
            provider.complete("prompt")
        assert exc_info.value.status_code == 400

    def test_timeout_is_transport_error(self):
        session = MagicMock()
        session.post.side_effect = requests.Timeout("45s")

        with pytest.raises(TransportError):
            ClaudeProvider("sk-ant-xxxxxxxxxxxx", "claude-test", session=session).complete("prompt")

    def test_unauthorized_is_auth_error(self):
        provider = ClaudeProvider("sk-ant-xxxxxxxxxxxx", "claude-test", session=mock_http(401, {"error": "bad key"}))

        with pytest.raises(AuthError):
            provider.complete("prompt")

    def test_unexpected_shape_is_parse_error(self):
        provider = OpenAIProvider("sk-xxxxxxxxxxxxxxxx", "gpt-test", session=mock_http(payload={"choices": []}))

        with pytest.raises(ParseError):
            provider.complete("prompt")

    def test_create_provider_by_name(self):
        assert isinstance(create_provider(Config(llm_provider="claude")), ClaudeProvider)
        assert isinstance(create_provider(Config(llm_provider="gpt")), OpenAIProvider)

        with pytest.raises(ConfigError):
            create_provider(Config(llm_provider="gemini"))

    def test_placeholder_key_is_unavailable(self):
        assert not ClaudeProvider("your_claude_key", "m").is_available()
        assert ClaudeProvider("sk-ant-xxxxxxxxxxxx", "m").is_available()


class TestPrompt:
    """提示词测试"""

    def test_prompt_is_deterministic(self):
        dataset = make_dataset()

        assert build_analysis_prompt(dataset) == build_analysis_prompt(dataset)

    def test_prompt_contains_identity_quote_and_recent_points(self):
        dataset = make_dataset(count=15)

        prompt = build_analysis_prompt(dataset)

        assert "삼성전자(005930)" in prompt
        assert "71,500" in prompt
        assert "+1.25%" in prompt
        assert "最近 10 个交易日" in prompt
        assert dataset.points[-1].trade_date.isoformat() in prompt
        assert dataset.points[4].trade_date.isoformat() not in prompt
        assert '"recommendation"' in prompt

    def test_percent_above_low(self):
        assert percent_above_low(110.0, 100.0) == pytest.approx(10.0)
        assert percent_above_low(110.0, 0.0) == 0.0
