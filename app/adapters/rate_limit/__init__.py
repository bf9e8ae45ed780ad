"""Counter store adapters for rate limiting.

The rate limiter depends only on ``AbstractCounterStore``; Redis is the
shared production store and the in-memory store serves local development and
tests.
"""
