"""
High-level use cases for the eventhub API.

Each service module orchestrates the stores to implement business rules
(sign up, log in, register for an event, cancel an event).

Routers (FastAPI endpoints) should call these services instead of
coordinating the stores directly.
"""
