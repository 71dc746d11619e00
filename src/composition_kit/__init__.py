"""Sender/recipient composition toolkit."""
