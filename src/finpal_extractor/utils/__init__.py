"""Shared normalization and logging helpers."""
