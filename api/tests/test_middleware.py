# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Tests for middleware functionality.
"""

import pytest
from flask import Flask, g, jsonify

from domain.errors import (
    AuthenticationException, ConflictException, ForbiddenException,
    NotFoundException, StoreUnavailableException, ValidationException
)
from middleware.error_handler import ErrorHandlerMiddleware, register_custom_error_handlers
from middleware.identity import extract_user_context, require_identity
from services.hal import HalFormatter


class TestIdentityMiddleware:
    """Test caller identity extraction."""

    def setup_method(self):
        """Set up test fixtures."""
        self.app = Flask(__name__)
        register_custom_error_handlers(self.app, HalFormatter("https://api.example.com"))

        @self.app.route('/whoami')
        @require_identity
        def whoami():
            return jsonify({"userId": g.user_context.user_id, "email": g.user_context.email})

    def test_extract_user_context(self):
        """Test headers become a UserContext."""
        with self.app.test_request_context(
            '/whoami', headers={"X-User-Id": " helper-1 ", "X-User-Email": "h@example.org", "User-Agent": "pytest"}
        ):
            context = extract_user_context()

        assert context.user_id == "helper-1"
        assert context.email == "h@example.org"
        assert context.user_agent == "pytest"

    def test_extract_without_identity(self):
        """Test a missing or blank id yields no context."""
        with self.app.test_request_context('/whoami', headers={"X-User-Id": "   "}):
            assert extract_user_context() is None

    def test_require_identity_success(self):
        """Test decorated routes see the caller."""
        response = self.app.test_client().get('/whoami', headers={"X-User-Id": "owner-1"})

        assert response.status_code == 200
        assert response.get_json() == {"userId": "owner-1", "email": None}

    def test_require_identity_missing(self):
        """Test decorated routes reject anonymous callers."""
        response = self.app.test_client().get('/whoami')

        assert response.status_code == 401
        body = response.get_json()
        assert body["type"].endswith("/authentication-required")
        assert "X-User-Id" in body["detail"]


class TestErrorHandlers:
    """Test exception to problem document mapping."""

    def setup_method(self):
        """Set up test fixtures."""
        self.app = Flask(__name__)
        self.app.config['ENVIRONMENT'] = 'test'
        formatter = HalFormatter("https://api.example.com")
        ErrorHandlerMiddleware(self.app, formatter)
        register_custom_error_handlers(self.app, formatter)

        errors = {
            "validation": ValidationException("Invalid", [{"field": "lat", "message": "bad", "type": "x", "input": 99}]),
            "forbidden": ForbiddenException("Only the owner"),
            "missing": NotFoundException("Help request 1 not found"),
            "conflict": ConflictException("Already claimed", current_status="in-progress"),
            "unavailable": StoreUnavailableException("Store down"),
            "anonymous": AuthenticationException("Missing X-User-Id header"),
        }

        @self.app.route('/raise/<name>')
        def raise_error(name):
            raise errors[name]

        @self.app.route('/boom')
        def boom():
            raise RuntimeError("unexpected")

        self.client = self.app.test_client()

    @pytest.mark.parametrize("name,status,error_type", [
        ("validation", 400, "validation-error"),
        ("anonymous", 401, "authentication-required"),
        ("forbidden", 403, "insufficient-permissions"),
        ("missing", 404, "resource-not-found"),
        ("conflict", 409, "resource-conflict"),
        ("unavailable", 503, "service-unavailable"),
    ])
    def test_typed_exceptions(self, name, status, error_type):
        """Test each typed exception maps to its status and problem type."""
        response = self.client.get(f'/raise/{name}')

        assert response.status_code == status
        body = response.get_json()
        assert body["status"] == status
        assert body["type"] == f"https://api.crisisconnect.org/problems/{error_type}"
        assert body["instance"] == f"/raise/{name}"

    def test_validation_details(self):
        """Test field errors are included."""
        body = self.client.get('/raise/validation').get_json()

        assert body["errors"][0]["field"] == "lat"

    def test_conflict_reports_current_status(self):
        body = self.client.get('/raise/conflict').get_json()

        assert body["currentStatus"] == "in-progress"

    def test_store_unavailable_sets_retry_after(self):
        response = self.client.get('/raise/unavailable')

        assert response.headers["Retry-After"] == "1"

    def test_unknown_route(self):
        """Test Flask 404s use the problem format."""
        response = self.client.get('/nowhere')

        assert response.status_code == 404
        assert response.get_json()["type"].endswith("/resource-not-found")

    def test_method_not_allowed(self):
        response = self.client.post('/boom')

        assert response.status_code == 405
        assert response.get_json()["type"].endswith("/method-not-allowed")

    def test_unexpected_error(self):
        """Test unexpected exceptions become 500 with details outside production."""
        response = self.client.get('/boom')

        assert response.status_code == 500
        assert "RuntimeError" in response.get_json()["detail"]

    def test_unexpected_error_hidden_in_production(self):
        """Test production hides exception details."""
        self.app.config['ENVIRONMENT'] = 'production'

        response = self.client.get('/boom')

        assert response.status_code == 500
        assert response.get_json()["detail"] == "An unexpected error occurred"
