import os
import sys
from datetime import date

# Paths -----------------------------------------------------------------------
PROJECT_ROOT = os.path.abspath("..")
PACKAGE_DIR = os.path.join(PROJECT_ROOT, "promptforge")
sys.path.insert(0, PROJECT_ROOT)

# Project information ---------------------------------------------------------
project = "PromptForge Settings"
author = "PromptForge contributors"
copyright = f"{date.today().year}, {author}"

# General configuration -------------------------------------------------------
extensions = [
    "myst_parser",
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",
    "autoapi.extension",
]

exclude_patterns = ["_build", "Thumbs.db", ".DS_Store"]

myst_enable_extensions = ["colon_fence"]

# HTML output -----------------------------------------------------------------
html_theme = "sphinx_rtd_theme"

# AutoAPI (code reference) ----------------------------------------------------
autoapi_type = "python"
autoapi_dirs = [PACKAGE_DIR]
autoapi_root = "reference"
autoapi_add_toctree_entry = True
autoapi_python_class_content = "both"
autoapi_python_use_implicit_namespaces = True

# Autodoc defaults ------------------------------------------------------------
autodoc_typehints = "description"
autodoc_member_order = "bysource"
