"""Event registration backend: JSON-file user/event stores behind a FastAPI API."""
