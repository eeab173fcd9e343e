# -*- coding: utf-8 -*-
"""
数据库管理器

封装日线数据、个股快照与 AI 分析结果的存取
"""

import logging
from datetime import date, datetime
from typing import List, Optional, Sequence

from sqlalchemy import and_, create_engine, desc, select
from sqlalchemy.orm import Session, sessionmaker

from common.config import get_config
from core.domain.analysis import AnalysisRecord
from core.domain.market import CollectedDataset, SeriesPoint

from .models import Base, DailyPrice, LlmAnalysisResult, StockSnapshot

logger = logging.getLogger(__name__)


class DatabaseManager:
    """
    数据库管理器 - 单例模式

    职责：
    1. 管理数据库连接池
    2. 提供 Session 上下文管理
    3. 封装数据存取操作
    """

    _instance: Optional["DatabaseManager"] = None

    def __new__(cls, *args, **kwargs):
        """单例模式实现"""
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._initialized = False
        return cls._instance

    def __init__(self, db_url: Optional[str] = None):
        """
        初始化数据库管理器

        Args:
            db_url: 数据库连接 URL（可选，默认从配置读取）
        """
        if self._initialized:
            return

        if db_url is None:
            db_url = get_config().get_db_url()

        self._engine = create_engine(
            db_url,
            echo=False,  # 设为 True 可查看 SQL 语句
            pool_pre_ping=True,  # 连接健康检查
        )

        self._SessionLocal = sessionmaker(
            bind=self._engine,
            autocommit=False,
            autoflush=False,
            expire_on_commit=False,
        )

        Base.metadata.create_all(self._engine)

        self._initialized = True
        logger.info(f"数据库初始化完成: {db_url}")

    @classmethod
    def get_instance(cls) -> "DatabaseManager":
        """获取单例实例"""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """重置单例（用于测试）"""
        if cls._instance is not None:
            if getattr(cls._instance, "_initialized", False):
                cls._instance._engine.dispose()
            cls._instance = None

    def get_session(self) -> Session:
        """
        获取数据库 Session

        使用示例:
            with db.get_session() as session:
                # 执行查询
                session.commit()  # 如果需要
        """
        return self._SessionLocal()

    # === 采集数据 ===

    def save_daily_prices(self, code: str, points: Sequence[SeriesPoint]) -> int:
        """
        保存日线数据

        使用 UPSERT 逻辑（存在则更新，不存在则插入）

        Args:
            code: 股票代码
            points: 日线数据点

        Returns:
            新增的记录数
        """
        if not points:
            logger.warning(f"保存数据为空，跳过 {code}")
            return 0

        saved_count = 0

        with self.get_session() as session:
            try:
                for point in points:
                    existing = session.execute(
                        select(DailyPrice).where(and_(DailyPrice.code == code, DailyPrice.trade_date == point.trade_date))
                    ).scalar_one_or_none()

                    if existing:
                        existing.open_price = point.open_price
                        existing.close_price = point.close_price
                        existing.high_price = point.high_price
                        existing.low_price = point.low_price
                        existing.volume = point.volume
                        existing.updated_at = datetime.now()
                    else:
                        session.add(
                            DailyPrice(
                                code=code,
                                trade_date=point.trade_date,
                                open_price=point.open_price,
                                close_price=point.close_price,
                                high_price=point.high_price,
                                low_price=point.low_price,
                                volume=point.volume,
                            )
                        )
                        saved_count += 1

                session.commit()
                logger.debug(f"保存 {code} 日线数据成功，新增 {saved_count} 条")

            except Exception as e:
                session.rollback()
                logger.error(f"保存 {code} 日线数据失败: {e}")
                raise

        return saved_count

    def save_snapshot(self, dataset: CollectedDataset) -> None:
        """保存个股快照"""
        entry = dataset.entry
        with self.get_session() as session:
            try:
                session.add(
                    StockSnapshot(
                        stock_code=entry.code,
                        stock_name=entry.name,
                        current_price=entry.current_price,
                        change_rate=entry.change_percent,
                        volume=entry.trading_volume,
                        trading_value=entry.trading_amount,
                        volume_rank=entry.rank,
                        price_high_52week=dataset.window_high,
                        price_low_52week=dataset.window_low,
                        daily_prices_json=dataset.series_json(),
                        analysis_date=dataset.analysis_date,
                    )
                )
                session.commit()
            except Exception as e:
                session.rollback()
                logger.error(f"保存 {entry.code} 快照失败: {e}")
                raise

    def save_collected(self, datasets: Sequence[CollectedDataset]) -> None:
        """保存采集结果（日线 + 快照）"""
        for dataset in datasets:
            self.save_daily_prices(dataset.code, dataset.points)
            self.save_snapshot(dataset)
        logger.info(f"采集数据已保存: {len(datasets)} 只股票")

    def get_snapshots(self, analysis_date: date) -> List[StockSnapshot]:
        """获取指定日期的个股快照（按排名）"""
        with self.get_session() as session:
            results = (
                session.execute(
                    select(StockSnapshot)
                    .where(StockSnapshot.analysis_date == analysis_date)
                    .order_by(StockSnapshot.volume_rank)
                )
                .scalars()
                .all()
            )
            return list(results)

    # === AI 分析结果 ===

    def save_all(self, records: Sequence[AnalysisRecord]) -> int:
        """
        批量保存分析结果（单个事务）

        Args:
            records: 分析记录

        Returns:
            保存的记录数
        """
        if not records:
            return 0

        with self.get_session() as session:
            try:
                session.add_all([LlmAnalysisResult.from_record(r) for r in records])
                session.commit()
            except Exception as e:
                session.rollback()
                logger.error(f"保存分析结果失败: {e}")
                raise

        logger.info(f"分析结果已保存: {len(records)} 条")
        return len(records)

    def find_by_code_and_date(self, code: str, analysis_date: date) -> Optional[AnalysisRecord]:
        """查询指定股票在指定日期的最新一条分析结果"""
        with self.get_session() as session:
            result = (
                session.execute(
                    select(LlmAnalysisResult)
                    .where(and_(LlmAnalysisResult.stock_code == code, LlmAnalysisResult.analysis_date == analysis_date))
                    .order_by(desc(LlmAnalysisResult.created_at), desc(LlmAnalysisResult.id))
                    .limit(1)
                )
                .scalars()
                .first()
            )
            return result.to_record() if result else None

    def find_top_n_by_date_order_by_recency(self, analysis_date: date, n: int = 10) -> List[AnalysisRecord]:
        """查询指定日期最近的 n 条分析结果（按创建时间倒序）"""
        with self.get_session() as session:
            results = (
                session.execute(
                    select(LlmAnalysisResult)
                    .where(LlmAnalysisResult.analysis_date == analysis_date)
                    .order_by(desc(LlmAnalysisResult.created_at), desc(LlmAnalysisResult.id))
                    .limit(n)
                )
                .scalars()
                .all()
            )
            return [r.to_record() for r in results]

