# SPDX-License-Identifier: Apache-2.0

"""
Domain logic package for the CrisisConnect platform.

This package contains pure business logic functions with no side effects:
distance computation, proximity ranking, lifecycle rules, statistics and
input validation. All domain functions are testable without external
dependencies.
"""
