# SPDX-License-Identifier: Apache-2.0

"""
CrisisConnect API - Flask Application Entry Point

This module builds the Flask application with OpenAPI 3.0 support,
configures middleware, and wires the help request service to its store.
"""

import os
import logging
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from flask import jsonify
from flask_openapi3 import OpenAPI, Info, Tag
from observability.config import setup_observability
from observability.middleware import add_observability_middleware

from middleware.error_handler import ErrorHandlerMiddleware, register_custom_error_handlers
from models.requests import DEFAULT_RADIUS_KM
from models.responses import HealthCheckResponse
from services.hal import create_hal_formatter
from services.memory_store import InMemoryRequestStore
from services.mongodb import MongoRequestStore
from services.requests import HelpRequestService
from services.store import RequestStore
from routes.requests import requests_bp

logger = logging.getLogger(__name__)

# OpenAPI info
info = Info(
    title="CrisisConnect API",
    version="1.0.0",
    description="Emergency help request matching with HATEOAS Level-3 support"
)

health_tag = Tag(name="Health", description="System health and status")


def load_config() -> Dict[str, Any]:
    """Application settings from the environment."""
    environment = os.getenv('ENVIRONMENT', 'development')
    return {
        'ENVIRONMENT': environment,
        'DEBUG': environment == 'development',
        'DOCS_ENABLED': os.getenv('DOCS_ENABLED', 'true').lower() == 'true',
        'OTEL_ENABLED': os.getenv('OTEL_ENABLED', 'true').lower() == 'true',
        'SERVICE_VERSION': os.getenv('SERVICE_VERSION', '1.0.0'),
        'STORE_BACKEND': os.getenv('STORE_BACKEND', 'mongodb').lower(),
        'MONGODB_URI': os.getenv('MONGODB_URI', 'mongodb://localhost:27017/crisis_connect_dev'),
        'DEFAULT_RADIUS_KM': float(os.getenv('DEFAULT_RADIUS_KM', str(DEFAULT_RADIUS_KM))),
        'BASE_URL': os.getenv('BASE_URL', 'http://localhost:5000')
    }


def build_store(config: Dict[str, Any]) -> RequestStore:
    """Select the store gateway configured by ``STORE_BACKEND``."""
    backend = config.get('STORE_BACKEND', 'mongodb')
    if backend == 'memory':
        return InMemoryRequestStore()
    if backend == 'mongodb':
        return MongoRequestStore(config.get('MONGODB_URI'))
    raise ValueError(f"Unknown STORE_BACKEND: {backend}")


def create_app(config: Optional[Dict[str, Any]] = None, store: Optional[RequestStore] = None) -> OpenAPI:
    """
    Build the Flask application.

    Args:
        config: Overrides for the environment-derived settings
        store: Store gateway to use instead of the configured backend

    Returns:
        Configured OpenAPI (Flask) application
    """
    settings = load_config()
    settings.update(config or {})

    tracing = setup_observability(settings['ENVIRONMENT'], settings['OTEL_ENABLED'])

    app = OpenAPI(__name__, info=info, doc_ui=settings['DOCS_ENABLED'])
    app.config.update(settings)

    add_observability_middleware(app, instrument=tracing)

    store = store or build_store(settings)
    hal_formatter = create_hal_formatter(settings['BASE_URL'])

    # Make services available to routes
    app.request_store = store
    app.help_request_service = HelpRequestService(store, default_radius_km=settings['DEFAULT_RADIUS_KM'])
    app.hal_formatter = hal_formatter

    ErrorHandlerMiddleware(app, hal_formatter)
    register_custom_error_handlers(app, hal_formatter)

    app.register_api(requests_bp)

    @app.get('/api/healthz', tags=[health_tag], responses={"200": HealthCheckResponse, "503": HealthCheckResponse})
    def health_check():
        """Health check reporting the state of the request store."""
        store_health = store.health_check()
        healthy = store_health.get('status') == 'healthy'

        health_data = {
            "status": "healthy" if healthy else "unhealthy",
            "service": "crisis-connect-api",
            "version": settings['SERVICE_VERSION'],
            "environment": settings['ENVIRONMENT'],
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "dependencies": {
                "store": store_health
            },
            "_links": {
                "self": {"href": f"{settings['BASE_URL'].rstrip('/')}/api/healthz"},
                "requests": {"href": f"{settings['BASE_URL'].rstrip('/')}/api/requests"}
            }
        }

        if not healthy:
            logger.error("Health check failed", extra={"store": store_health})

        return jsonify(health_data), 200 if healthy else 503

    logger.info(
        "Application created",
        extra={"environment": settings['ENVIRONMENT'], "store_backend": type(store).__name__}
    )
    return app


if __name__ == '__main__':
    # Development server
    dev_app = create_app()
    dev_app.run(
        host='0.0.0.0',
        port=int(os.getenv('PORT', 5000)),
        debug=dev_app.config['DEBUG']
    )
