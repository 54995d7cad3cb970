# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Caller identity extraction.

Authentication happens upstream; the gateway forwards the verified identity
in ``X-User-Id`` and, optionally, ``X-User-Email``. This module turns those
headers into a UserContext for request processing.
"""

from functools import wraps
from flask import request, g
from typing import Optional, Callable
from opentelemetry import trace
import logging

from domain.errors import AuthenticationException
from models.entities import UserContext

tracer = trace.get_tracer(__name__)
logger = logging.getLogger(__name__)

USER_ID_HEADER = 'X-User-Id'
USER_EMAIL_HEADER = 'X-User-Email'


def extract_user_context() -> Optional[UserContext]:
    """
    Build a UserContext from the identity headers of the current request.

    Returns:
        UserContext, or None when no user id was supplied
    """
    user_id = (request.headers.get(USER_ID_HEADER) or '').strip()
    if not user_id:
        return None

    email = (request.headers.get(USER_EMAIL_HEADER) or '').strip() or None

    return UserContext(
        user_id=user_id,
        email=email,
        ip_address=request.remote_addr,
        user_agent=request.headers.get('User-Agent', '')
    )


def require_identity(f: Callable) -> Callable:
    """
    Decorator requiring a caller identity on the request.

    Stores the UserContext in ``g.user_context``; raises
    AuthenticationException when the identity header is missing.
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        with tracer.start_as_current_span("identity.middleware.extract") as span:
            user_context = extract_user_context()

            if user_context is None:
                span.set_attribute("identity.result", "missing")
                logger.warning(
                    "Request rejected: missing caller identity",
                    extra={"path": request.path, "method": request.method}
                )
                raise AuthenticationException(f"Missing {USER_ID_HEADER} header")

            g.user_context = user_context
            span.set_attributes({
                "identity.result": "success",
                "user.id": user_context.user_id
            })

        return f(*args, **kwargs)

    return decorated_function
