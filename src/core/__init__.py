"""Core domain package for switchboard.

Core contains pattern dispatch, the pending-action confirmation store, the
expiry sweeper and rate limiting, without any Telegram or storage-specific
code, keeping the arbitration logic portable.
"""
