"""
FastAPI routers grouped by domain (auth, events).

Each module exposes an APIRouter included by create_app(). Routers read the
stores and services from app.state and translate store errors into HTTP
responses.
"""
