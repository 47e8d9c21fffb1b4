"""Implementation modules for :mod:`pagechat.base.cancellation`."""
