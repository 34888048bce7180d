# trans_extract/cli/generate/__init__.py
