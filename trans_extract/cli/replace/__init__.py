# trans_extract/cli/replace/__init__.py
