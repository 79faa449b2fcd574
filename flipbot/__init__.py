"""
Flipbot

Keeps one futures position aligned with the latest SuperTrend webhook
signal, protected by exchange-side stop-loss and take-profit orders.
"""

__version__ = "1.0.0"
