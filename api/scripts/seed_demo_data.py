#!/usr/bin/env python3
# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
Seed a development database with demo help requests around Chennai.

Creates a handful of requests through the lifecycle service, then claims and
resolves some of them so every status shows up in /api/requests/stats.
"""

import sys
import os
import logging

# Add the parent directory to the path so we can import from api
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models.entities import UserContext
from services.mongodb import MongoRequestStore
from services.requests import HelpRequestService

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)

logger = logging.getLogger(__name__)

DEMO_REQUESTS = [
    {"name": "Lakshmi R", "members": 4, "description": "Ground floor flooded, need evacuation",
     "address": "T. Nagar, Chennai", "lat": 13.0418, "lon": 80.2341},
    {"name": "Arjun K", "members": 2, "description": "Elderly parents need medicines",
     "address": "Velachery, Chennai", "lat": 12.9815, "lon": 80.2180},
    {"name": "Meena S", "members": 6, "description": "Out of drinking water",
     "address": "Adyar, Chennai", "lat": 13.0012, "lon": 80.2565},
    {"name": "Ravi P", "members": 3, "description": "Power outage, infant at home",
     "address": "Anna Nagar, Chennai", "lat": 13.0850, "lon": 80.2101},
    {"name": "Farah N", "members": 1, "description": "Stranded on rooftop",
     "address": "Tambaram, Chennai", "lat": 12.9249, "lon": 80.1000},
]

DEMO_OWNER = UserContext(user_id="demo-requester", email="requester@example.org")
DEMO_HELPER = "demo-helper"


def seed(service: HelpRequestService):
    """Create demo requests and move some of them through the lifecycle."""
    created = [service.create_request(payload, DEMO_OWNER) for payload in DEMO_REQUESTS]

    service.claim_request(created[0].id, DEMO_HELPER)
    service.claim_request(created[1].id, DEMO_HELPER)
    service.resolve_request(created[1].id)
    service.cancel_request(created[2].id, DEMO_OWNER.user_id)

    return created


def main():
    """Seed demo data into the configured MongoDB database."""
    store = MongoRequestStore()
    try:
        health = store.health_check()
        if health['status'] != 'healthy':
            logger.error(f"MongoDB is not healthy: {health}")
            sys.exit(1)

        service = HelpRequestService(store)
        created = seed(service)
        logger.info(f"Seeded {len(created)} help requests into {store.database_name}.{store.collection_name}")

        stats = service.get_stats()
        logger.info(f"Current stats: {stats.model_dump(by_alias=True)}")

    except Exception as e:
        logger.error(f"Failed to seed demo data: {e}")
        sys.exit(1)
    finally:
        store.close_connection()


if __name__ == "__main__":
    main()
