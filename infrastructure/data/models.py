# -*- coding: utf-8 -*-
"""
数据模型定义

日线数据、个股快照、AI 分析结果的 ORM 模型
"""

import json
from datetime import datetime

from sqlalchemy import Column, Date, DateTime, Float, Index, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base

from core.domain.analysis import AnalysisRecord, RecommendationStatus

# SQLAlchemy ORM 基类
Base = declarative_base()


class DailyPrice(Base):
    """
    日线数据模型

    同一股票同一日期只保留一条（重复采集时更新）
    """

    __tablename__ = "daily_prices"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # 股票代码（如 005930）
    code = Column(String(12), nullable=False, index=True)

    # 交易日期
    trade_date = Column(Date, nullable=False, index=True)

    # OHLC 数据（韩元）
    open_price = Column(Float)
    close_price = Column(Float)
    high_price = Column(Float)
    low_price = Column(Float)

    volume = Column(Integer)  # 成交量（股）

    created_at = Column(DateTime, default=datetime.now)
    updated_at = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    __table_args__ = (
        UniqueConstraint("code", "trade_date", name="uix_daily_code_date"),
        Index("ix_daily_code_date", "code", "trade_date"),
    )

    def __repr__(self):
        return f"<DailyPrice(code={self.code}, trade_date={self.trade_date}, close={self.close_price})>"


class StockSnapshot(Base):
    """
    个股快照模型

    每次采集时记录排行信息、窗口统计以及日线序列（JSON）
    """

    __tablename__ = "stock_data"

    id = Column(Integer, primary_key=True, autoincrement=True)
    stock_code = Column(String(12), nullable=False, index=True)
    stock_name = Column(String(100))
    current_price = Column(Float)
    change_rate = Column(Float)  # 涨跌幅（%）
    volume = Column(Integer)
    trading_value = Column(Integer)  # 成交额（韩元）
    volume_rank = Column(Integer)
    price_high_52week = Column(Float)
    price_low_52week = Column(Float)
    daily_prices_json = Column(Text)
    analysis_date = Column(Date, nullable=False, index=True)
    created_at = Column(DateTime, default=datetime.now)

    def __repr__(self):
        return f"<StockSnapshot(code={self.stock_code}, date={self.analysis_date}, rank={self.volume_rank})>"

    def daily_prices(self):
        return json.loads(self.daily_prices_json) if self.daily_prices_json else []


class LlmAnalysisResult(Base):
    """AI 分析结果模型"""

    __tablename__ = "llm_analysis_results"

    id = Column(Integer, primary_key=True, autoincrement=True)
    stock_code = Column(String(12), nullable=False, index=True)
    stock_name = Column(String(100))
    analysis_date = Column(Date, nullable=False, index=True)
    llm_analysis = Column(Text)  # 分析正文
    recommendation = Column(String(10), nullable=False)  # BUY / SELL / ERROR
    confidence = Column(Float, default=0.0)
    summary = Column(String(500))
    created_at = Column(DateTime, default=datetime.now, index=True)

    __table_args__ = (Index("ix_llm_code_date", "stock_code", "analysis_date"),)

    def __repr__(self):
        return f"<LlmAnalysisResult(code={self.stock_code}, date={self.analysis_date}, rec={self.recommendation})>"

    @classmethod
    def from_record(cls, record: AnalysisRecord) -> "LlmAnalysisResult":
        return cls(
            stock_code=record.stock_code,
            stock_name=record.stock_name,
            analysis_date=record.analysis_date,
            llm_analysis=record.narrative,
            recommendation=record.recommendation.value,
            confidence=record.confidence,
            summary=record.summary,
            created_at=record.created_at or datetime.now(),
        )

    def to_record(self) -> AnalysisRecord:
        return AnalysisRecord(
            stock_code=self.stock_code,
            stock_name=self.stock_name,
            analysis_date=self.analysis_date,
            recommendation=RecommendationStatus(self.recommendation),
            confidence=self.confidence or 0.0,
            summary=self.summary or "",
            narrative=self.llm_analysis or "",
            created_at=self.created_at,
        )
