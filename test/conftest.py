# -*- coding: utf-8 -*-
"""
测试公共夹具

所有测试都不会调用真实 API
"""

import pytest

from infrastructure.data import DatabaseManager


@pytest.fixture()
def db(tmp_path):
    """基于临时 SQLite 文件的数据库管理器"""
    DatabaseManager.reset_instance()
    manager = DatabaseManager(f"sqlite:///{tmp_path / 'test.db'}")
    yield manager
    DatabaseManager.reset_instance()
