"""Implementation modules for :mod:`pagechat.base.models`."""
