"""Errors parts package.

Prefer importing from ``pagechat.base.errors`` for the stable surface.
"""
