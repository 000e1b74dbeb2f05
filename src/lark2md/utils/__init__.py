#  Copyright (c) 2025 Tom Villani, Ph.D.
#
# src/lark2md/utils/__init__.py
"""Shared utilities: markdown flavors, front matter, and output helpers."""
