"""
Webhook Module

Inbound trading signals.
"""
