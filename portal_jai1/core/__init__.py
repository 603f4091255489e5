# portal_jai1/core/__init__.py
"""Configuration, logging, metrics and field encryption shared by the API and scripts."""
