"""Integrations with concrete key sources."""
