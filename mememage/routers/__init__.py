"""
FastAPI routers grouped by domain (health, auth, memes).

Each module exposes an APIRouter that the application factory includes under
the ``/api`` prefix.
"""
