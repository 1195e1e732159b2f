"""
Export Service - HTTP front end for CV export.

Exposes the CV exporter (paginated PDF, Word, JSON) and the profile
description exports over FastAPI. Chromium is used only for block
measurement; the PDF itself is assembled with reportlab.
"""

from version import __version__
