# trans_extract/cli/__init__.py
"""
Trans-Extract CLI 模块入口。
"""

from trans_extract.cli.main import app

__all__ = ["app"]
