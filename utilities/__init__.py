"""
Shared utilities: configuration, logging, rate limiting, response timing
and webhook verification.
"""
