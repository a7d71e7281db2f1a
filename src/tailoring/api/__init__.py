"""Tailoring domain API package."""

from tailoring.api.routes import measurement_router, measurement_template_router, order_router, template_router

__all__ = ["order_router", "template_router", "measurement_router", "measurement_template_router"]
