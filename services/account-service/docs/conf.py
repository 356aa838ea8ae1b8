"""Sphinx configuration for the Account Service documentation."""

from __future__ import annotations

import os
import sys

ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
sys.path.insert(0, ROOT_DIR)


project = "Account Service"
release = "0.1.0"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx_autodoc_typehints",
]

autodoc_typehints = "description"
autodoc_mock_imports = ["psycopg", "psycopg_pool", "bcrypt", "prometheus_client"]
exclude_patterns: list[str] = ["_build"]
