# -*- coding: utf-8 -*-
"""
成交量排行获取器

调用 KIS 成交量排行接口，取前 N 名（最多 10 名）
"""

import logging
from typing import Any, Dict, List, Optional

from common.exceptions import ParseError, TransportError
from core.domain.market import RankEntry
from shared.utils.validators import parse_decimal, parse_integer, validate_stock_code

from .kis_client import KisApiClient

logger = logging.getLogger(__name__)

VOLUME_RANK_PATH = "/uapi/domestic-stock/v1/quotations/volume-rank"
VOLUME_RANK_TR_ID = "FHPST01710000"
MAX_RANK_SIZE = 10

VOLUME_RANK_PARAMS = {
    "FID_COND_MRKT_DIV_CODE": "J",
    "FID_COND_SCR_DIV_CODE": "20171",
    "FID_INPUT_ISCD": "0002",
    "FID_DIV_CLS_CODE": "0",
    "FID_BLNG_CLS_CODE": "0",
    "FID_TRGT_CLS_CODE": "111111111",
    "FID_TRGT_EXLS_CLS_CODE": "000000",
    "FID_INPUT_PRICE_1": "0",
    "FID_INPUT_PRICE_2": "0",
    "FID_VOL_CNT": "0",
    "FID_INPUT_DATE_1": "0",
}


def parse_rank_row(row: Dict[str, Any], rank: int) -> RankEntry:
    """将排行接口的一行转换为 RankEntry"""
    if not isinstance(row, dict):
        raise ParseError(f"排行数据行格式异常: {row!r}")

    code = str(row.get("mksc_shrn_iscd") or "").strip()
    if not validate_stock_code(code):
        raise ParseError(f"排行数据行股票代码无效: {row!r}")

    return RankEntry(
        code=code,
        name=str(row.get("hts_kor_isnm") or "").strip(),
        current_price=parse_decimal(row.get("stck_prpr"), "stck_prpr"),
        change_percent=parse_decimal(row.get("prdy_ctrt"), "prdy_ctrt"),
        trading_volume=parse_integer(row.get("acml_vol"), "acml_vol"),
        trading_amount=parse_integer(row.get("acml_tr_pbmn"), "acml_tr_pbmn"),
        rank=rank,
    )


class RankingFetcher:
    """成交量排行获取器"""

    def __init__(self, client: KisApiClient):
        self._client = client

    def fetch_top(self, n: Optional[int] = None) -> List[RankEntry]:
        """
        获取成交量排行前 n 名

        传输失败或解析失败时返回空列表（记录错误日志）；认证失败向上抛出。

        Args:
            n: 数量（默认且最多 10）

        Returns:
            按排名顺序排列的 RankEntry 列表
        """
        limit = MAX_RANK_SIZE if n is None else max(0, min(n, MAX_RANK_SIZE))

        try:
            payload = self._client.get(VOLUME_RANK_PATH, dict(VOLUME_RANK_PARAMS), VOLUME_RANK_TR_ID)
            rows = payload.get("output") or []
            if not isinstance(rows, list):
                raise ParseError(f"排行数据 output 字段格式异常: {type(rows).__name__}")
            entries = [parse_rank_row(row, i + 1) for i, row in enumerate(rows[:limit])]
        except (TransportError, ParseError) as e:
            logger.error(f"[Ranking] 获取成交量排行失败: {e}")
            return []

        logger.info(f"[Ranking] 获取成交量排行 {len(entries)} 只: {', '.join(e.code for e in entries)}")
        return entries
