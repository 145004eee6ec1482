"""
FastAPI routers grouped by service (auth, products).

Each module exposes an APIRouter included by the app factory. Routers only
translate HTTP into service calls; the services hold the rules.
"""
