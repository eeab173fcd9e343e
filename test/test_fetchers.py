# -*- coding: utf-8 -*-
"""
KIS 客户端、成交量排行与日线获取器测试
"""

from datetime import date, datetime, time
from unittest.mock import MagicMock

import pytest
import requests

from common.exceptions import AuthError, ParseError, TransportError
from infrastructure.fetchers.kis_client import KisApiClient
from infrastructure.fetchers.ranking_fetcher import VOLUME_RANK_TR_ID, RankingFetcher
from infrastructure.fetchers.series_fetcher import (
    DAILY_CHART_TR_ID,
    SeriesFetcher,
    last_trading_date,
    window_dates,
)


def rank_row(i: int) -> dict:
    return {
        "mksc_shrn_iscd": f"{i:06d}",
        "hts_kor_isnm": f"종목{i}",
        "stck_prpr": "71,500",
        "prdy_ctrt": "-1.25",
        "acml_vol": str(1000 * i),
        "acml_tr_pbmn": "880000000",
    }


def series_row(day: str, close: str = "71000") -> dict:
    return {
        "stck_bsop_date": day,
        "stck_oprc": "70000",
        "stck_clpr": close,
        "stck_hgpr": "72000",
        "stck_lwpr": "69000",
        "acml_vol": "123456",
    }


class FakeKisClient:
    """按 tr_id 返回预设响应的假客户端"""

    def __init__(self, responses=None, error=None):
        self.responses = responses or {}
        self.error = error
        self.calls = []

    def get(self, path, params, tr_id):
        self.calls.append((path, params, tr_id))
        if self.error is not None:
            raise self.error
        return self.responses[tr_id]


def mock_response(status_code=200, payload=None, json_error=False):
    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    response.text = str(payload)
    if json_error:
        response.json.side_effect = ValueError("not json")
    else:
        response.json.return_value = payload
    if not response.ok:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code}")
    return response


class TestKisApiClient:
    """KisApiClient 测试"""

    def make_client(self, session):
        return KisApiClient("https://kis.example.com/", "app-key", "app-secret", session=session)

    def test_issue_token_posts_credentials(self):
        session = MagicMock()
        session.post.return_value = mock_response(payload={"access_token": "tok", "expires_in": 86400})

        client = self.make_client(session)

        assert client.issue_token() == "tok"
        url = session.post.call_args.args[0]
        body = session.post.call_args.kwargs["json"]
        assert url == "https://kis.example.com/oauth2/tokenP"
        assert body == {"grant_type": "client_credentials", "appkey": "app-key", "appsecret": "app-secret"}

    def test_issue_token_failure_is_auth_error(self):
        session = MagicMock()
        session.post.return_value = mock_response(status_code=403, payload={"error": "denied"})

        with pytest.raises(AuthError):
            self.make_client(session).issue_token()

    def test_issue_token_missing_field_is_auth_error(self):
        session = MagicMock()
        session.post.return_value = mock_response(payload={"msg": "no token"})

        with pytest.raises(AuthError):
            self.make_client(session).issue_token()

    def test_get_sends_auth_headers_and_reuses_token(self):
        session = MagicMock()
        session.post.return_value = mock_response(payload={"access_token": "tok"})
        session.get.return_value = mock_response(payload={"rt_cd": "0", "output": []})

        client = self.make_client(session)
        client.get("/path", {"a": "1"}, "TR001")
        client.get("/path", {"a": "1"}, "TR001")

        assert session.post.call_count == 1
        headers = session.get.call_args.kwargs["headers"]
        assert headers["authorization"] == "Bearer tok"
        assert headers["tr_id"] == "TR001"
        assert headers["custtype"] == "P"
        assert headers["appkey"] == "app-key"

    def test_get_http_error_is_transport_error(self):
        session = MagicMock()
        session.post.return_value = mock_response(payload={"access_token": "tok"})
        session.get.return_value = mock_response(status_code=500, payload={})

        with pytest.raises(TransportError) as exc_info:
            self.make_client(session).get("/path", {}, "TR001")
        assert exc_info.value.status_code == 500

    def test_get_timeout_is_transport_error(self):
        session = MagicMock()
        session.post.return_value = mock_response(payload={"access_token": "tok"})
        session.get.side_effect = requests.Timeout("slow")

        with pytest.raises(TransportError):
            self.make_client(session).get("/path", {}, "TR001")

    def test_get_non_json_is_parse_error(self):
        session = MagicMock()
        session.post.return_value = mock_response(payload={"access_token": "tok"})
        session.get.return_value = mock_response(json_error=True)

        with pytest.raises(ParseError):
            self.make_client(session).get("/path", {}, "TR001")


class TestRankingFetcher:
    """RankingFetcher 测试"""

    def test_keeps_first_ten_in_rank_order(self):
        """15 条排行只保留前 10 条，排名从 1 开始"""
        client = FakeKisClient({VOLUME_RANK_TR_ID: {"output": [rank_row(i) for i in range(1, 16)]}})

        entries = RankingFetcher(client).fetch_top()

        assert len(entries) == 10
        assert [e.rank for e in entries] == list(range(1, 11))
        assert [e.code for e in entries] == [f"{i:06d}" for i in range(1, 11)]
        assert entries[0].current_price == 71500.0
        assert entries[0].change_percent == -1.25
        assert entries[2].trading_volume == 3000
        assert entries[0].trading_amount == 880000000

    def test_fetch_top_n(self):
        client = FakeKisClient({VOLUME_RANK_TR_ID: {"output": [rank_row(i) for i in range(1, 16)]}})

        assert len(RankingFetcher(client).fetch_top(3)) == 3
        assert len(RankingFetcher(client).fetch_top(50)) == 10

    def test_transport_error_degrades_to_empty(self):
        client = FakeKisClient(error=TransportError("down"))

        assert RankingFetcher(client).fetch_top() == []

    def test_malformed_number_degrades_to_empty(self):
        row = rank_row(1)
        row["stck_prpr"] = "N/A"
        client = FakeKisClient({VOLUME_RANK_TR_ID: {"output": [row]}})

        assert RankingFetcher(client).fetch_top() == []

    def test_invalid_code_degrades_to_empty(self):
        row = rank_row(1)
        row["mksc_shrn_iscd"] = "5930"
        client = FakeKisClient({VOLUME_RANK_TR_ID: {"output": [row]}})

        assert RankingFetcher(client).fetch_top() == []

    def test_auth_error_propagates(self):
        client = FakeKisClient(error=AuthError("no token"))

        with pytest.raises(AuthError):
            RankingFetcher(client).fetch_top()


class TestLastTradingDate:
    """最近交易日计算测试"""

    def test_after_close_uses_today(self):
        # 2024-03-20 为周三
        assert last_trading_date(datetime(2024, 3, 20, 16, 0)) == date(2024, 3, 20)

    def test_before_close_uses_previous_day(self):
        assert last_trading_date(datetime(2024, 3, 20, 10, 0)) == date(2024, 3, 19)

    def test_monday_morning_rolls_back_to_friday(self):
        # 周一收盘前 -> 周日 -> 周五
        assert last_trading_date(datetime(2024, 3, 18, 9, 0)) == date(2024, 3, 15)

    def test_saturday_rolls_back_to_friday(self):
        assert last_trading_date(datetime(2024, 3, 16, 18, 0)) == date(2024, 3, 15)

    def test_custom_close_time(self):
        assert last_trading_date(datetime(2024, 3, 20, 15, 0), close_time=time(14, 0)) == date(2024, 3, 20)

    def test_window_dates(self):
        assert window_dates(date(2024, 3, 20), 60) == (date(2024, 1, 21), date(2024, 3, 20))
        assert window_dates(date(2024, 3, 20), 1) == (date(2024, 3, 20), date(2024, 3, 20))


class TestSeriesFetcher:
    """SeriesFetcher 测试"""

    def make_fetcher(self, client):
        return SeriesFetcher(client, clock=lambda: datetime(2024, 3, 20, 16, 0))

    def test_returns_points_sorted_by_date(self):
        rows = [series_row("20240320"), series_row("20240318"), series_row("20240319")]
        client = FakeKisClient({DAILY_CHART_TR_ID: {"output2": rows}})

        points = self.make_fetcher(client).fetch_series("005930", 60)

        assert [p.trade_date for p in points] == [date(2024, 3, 18), date(2024, 3, 19), date(2024, 3, 20)]
        assert points[0].code == "005930"
        assert points[0].volume == 123456

    def test_request_uses_eight_digit_window(self):
        client = FakeKisClient({DAILY_CHART_TR_ID: {"output2": []}})

        self.make_fetcher(client).fetch_series("005930", 60)

        _, params, tr_id = client.calls[0]
        assert tr_id == DAILY_CHART_TR_ID
        assert params["FID_INPUT_ISCD"] == "005930"
        assert params["FID_INPUT_DATE_1"] == "20240121"
        assert params["FID_INPUT_DATE_2"] == "20240320"
        assert params["FID_PERIOD_DIV_CODE"] == "D"

    def test_blank_rows_are_skipped(self):
        rows = [series_row("20240320"), {"stck_bsop_date": "", "stck_clpr": ""}]
        client = FakeKisClient({DAILY_CHART_TR_ID: {"output2": rows}})

        assert len(self.make_fetcher(client).fetch_series("005930", 60)) == 1

    def test_transport_error_degrades_to_empty(self):
        client = FakeKisClient(error=TransportError("timeout"))

        assert self.make_fetcher(client).fetch_series("005930", 60) == []

    def test_bad_row_degrades_to_empty(self):
        client = FakeKisClient({DAILY_CHART_TR_ID: {"output2": [series_row("2024-03-20")]}})

        assert self.make_fetcher(client).fetch_series("005930", 60) == []
