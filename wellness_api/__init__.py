"""
Top‑level package for the Wellness API.

This file makes ``wellness_api`` a Python package so that modules
within ``app`` can be imported using fully qualified names like
``wellness_api.app.main``.

The package provides no public exports; all functionality lives in
submodules under ``app``.
"""

__all__ = []
