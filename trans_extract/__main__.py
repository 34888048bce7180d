# trans_extract/__main__.py
"""支持以 `python -m trans_extract` 的方式运行 CLI。"""

from trans_extract.cli import app

if __name__ == "__main__":
    app()
