"""Filesystem and pattern helpers."""
