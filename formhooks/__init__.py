# formhooks/__init__.py
"""formhooks - forward form submissions to webhooks and keep a delivery log."""

__version__ = "0.1.0"
