"""
Card Management Backend

A demo card-management service: bearer-token login, credit/debit/virtual
card inspection, transaction limits, autopay and account-wide card settings,
all backed by a concurrency-safe in-memory store.
"""

__version__ = "1.0.0"
