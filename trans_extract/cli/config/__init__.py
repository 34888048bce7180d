# trans_extract/cli/config/__init__.py
