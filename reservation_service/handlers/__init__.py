"""Handlers package - inbound request and event entry points."""
