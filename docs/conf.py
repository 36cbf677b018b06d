import os
import sys

# Make the package importable without installing
sys.path.insert(0, os.path.abspath(".."))

project   = "marginfx"
copyright = "2025, the marginfx developers"
author    = "the marginfx developers"

extensions = [
    "sphinx.ext.autodoc",
    "sphinx.ext.napoleon",       # NumPy / Google docstring styles
    "sphinx.ext.mathjax",        # derivative formulas in docstrings
    "sphinx_autodoc_typehints",  # render type hints from annotations
    "sphinx_copybutton",         # copy button on code blocks
]

html_theme = "sphinx_rtd_theme"

# autodoc: show members in source order, include type hints in signatures
autodoc_member_order    = "bysource"
autodoc_typehints       = "description"
always_document_param_types = True

# napoleon: plain reStructuredText docstrings with Parameters sections
napoleon_use_param  = True
napoleon_use_rtype  = False
