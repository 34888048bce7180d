# trans_extract/cli/extract/__init__.py
