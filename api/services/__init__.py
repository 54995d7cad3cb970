# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Services package - Store gateways, lifecycle orchestration and side effects.
"""

from .store import RequestStore, UpdateOutcome, UpdateResult, COLLECTION_NAME
from .mongodb import MongoRequestStore
from .memory_store import InMemoryRequestStore
from .requests import HelpRequestService
from .hal import HalFormatter, create_hal_formatter

__all__ = [
    "RequestStore",
    "UpdateOutcome",
    "UpdateResult",
    "COLLECTION_NAME",
    "MongoRequestStore",
    "InMemoryRequestStore",
    "HelpRequestService",
    "HalFormatter",
    "create_hal_formatter"
]
