# -*- coding: utf-8 -*-
"""
共享组件

项目公共工具函数
"""
