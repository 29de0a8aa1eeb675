"""Entry point for uvicorn/gunicorn: `uvicorn eventhub.app_factory:create_app --factory`."""
from eventhub.app import create_app

__all__ = ["create_app"]
