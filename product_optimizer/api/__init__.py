"""HTTP API for the Product Optimizer."""

from product_optimizer.api.app import app, create_app

__all__ = ["app", "create_app"]
