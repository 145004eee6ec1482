"""Entry points for the combined API and the two standalone services (uvicorn/gunicorn)."""
from marketplace.app import create_app, create_auth_app, create_product_app

app = create_app()

__all__ = ["app", "create_app", "create_auth_app", "create_product_app"]
