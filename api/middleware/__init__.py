# SPDX-License-Identifier: Apache-2.0

"""
Middleware package for request processing.

This package contains middleware components for caller identity and
error-to-problem-document mapping in the CrisisConnect API.
"""
