"""
Core utilities shared across the eventhub API.

This package hosts configuration (env vars, data paths), password hashing,
logging setup and the in-memory rate limiter. Repositories and services
depend on these primitives instead of reading os.environ or hashing inline.
"""
