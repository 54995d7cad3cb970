# -*- coding: utf-8 -*-
# SPDX-License-Identifier: Apache-2.0

"""
MongoDB store gateway for help requests, with connection pooling.
"""

import os
import logging
from typing import List, Dict, Optional, Any, Iterable
from pymongo import MongoClient, ASCENDING, ReturnDocument
from pymongo.collection import Collection
from pymongo.database import Database
from pymongo.errors import (
    ConnectionFailure,
    ExecutionTimeout,
    WTimeoutError
)
from bson import ObjectId
from bson.errors import InvalidId

from domain.errors import StoreUnavailableException
from models.base import utcnow
from .store import COLLECTION_NAME, RequestStore, UpdateOutcome, UpdateResult

logger = logging.getLogger(__name__)

# Failures worth retrying from the caller's point of view. ConnectionFailure
# covers AutoReconnect, NetworkTimeout and ServerSelectionTimeoutError.
TRANSIENT_ERRORS = (ConnectionFailure, ExecutionTimeout, WTimeoutError)


class MongoRequestStore(RequestStore):
    """Help request store backed by a MongoDB collection."""

    def __init__(self, connection_string: str = None, database_name: str = None,
                 collection_name: str = None):
        """Initialize MongoDB store with connection pooling."""
        self.connection_string = connection_string or os.getenv(
            'MONGODB_URI',
            'mongodb://localhost:27017/crisis_connect_dev'
        )
        self.database_name = database_name or os.getenv('MONGODB_DATABASE', 'crisis_connect_dev')
        self.collection_name = collection_name or os.getenv('MONGODB_COLLECTION', COLLECTION_NAME)
        self._client: Optional[MongoClient] = None
        self._database: Optional[Database] = None

        # Connection pool settings
        self.max_pool_size = int(os.getenv('MONGODB_MAX_POOL_SIZE', '10'))
        self.min_pool_size = int(os.getenv('MONGODB_MIN_POOL_SIZE', '1'))
        self.max_idle_time_ms = int(os.getenv('MONGODB_MAX_IDLE_TIME_MS', '30000'))
        self.server_selection_timeout_ms = int(os.getenv('MONGODB_SERVER_SELECTION_TIMEOUT_MS', '5000'))

        logger.info(f"MongoDB store initialized for {self.database_name}.{self.collection_name}")

    @property
    def client(self) -> MongoClient:
        """Get MongoDB client with connection pooling."""
        if self._client is None:
            # Connection is lazy; the first operation surfaces failures
            self._client = MongoClient(
                self.connection_string,
                maxPoolSize=self.max_pool_size,
                minPoolSize=self.min_pool_size,
                maxIdleTimeMS=self.max_idle_time_ms,
                serverSelectionTimeoutMS=self.server_selection_timeout_ms,
                retryWrites=True,
                retryReads=True,
                tz_aware=True
            )
        return self._client

    @property
    def database(self) -> Database:
        """Get MongoDB database."""
        if self._database is None:
            self._database = self.client[self.database_name]
        return self._database

    @property
    def collection(self) -> Collection:
        """Get the help requests collection."""
        return self.database[self.collection_name]

    def close_connection(self) -> None:
        """Close MongoDB connection."""
        if self._client:
            self._client.close()
            self._client = None
            self._database = None
            logger.info("MongoDB connection closed")

    def health_check(self) -> Dict[str, Any]:
        """Check MongoDB connection health."""
        try:
            result = self.client.admin.command('ping')
            server_info = self.client.server_info()

            return {
                'status': 'healthy',
                'ping': result.get('ok') == 1,
                'version': server_info.get('version'),
                'database': self.database_name,
                'connection_pool_size': self.max_pool_size
            }
        except Exception as e:
            logger.error(f"MongoDB health check failed: {e}")
            return {
                'status': 'unhealthy',
                'error': str(e),
                'database': self.database_name
            }

    def _validate_object_id(self, doc_id: str) -> ObjectId:
        """Validate and convert string ID to ObjectId."""
        try:
            return ObjectId(doc_id)
        except (InvalidId, TypeError):
            raise ValueError(f"Invalid ObjectId format: {doc_id}")

    def _unavailable(self, operation: str, error: Exception) -> StoreUnavailableException:
        logger.error(f"MongoDB {operation} failed on {self.collection_name}: {error}")
        return StoreUnavailableException(f"Request store unavailable during {operation}")

    @staticmethod
    def _to_public(document: Optional[Dict]) -> Optional[Dict]:
        """Convert ObjectId to string id for the service layer."""
        if document is None:
            return None
        if "_id" in document:
            document["id"] = str(document["_id"])
            del document["_id"]
        return document

    def _find_sorted(self, query: Dict) -> List[Dict]:
        cursor = self.collection.find(query).sort([("createdAt", ASCENDING), ("_id", ASCENDING)])
        return [self._to_public(doc) for doc in cursor]

    # Gateway operations

    def insert(self, document: Dict[str, Any]) -> str:
        """Insert a new help request; the store assigns the id."""
        document = {key: value for key, value in document.items() if key not in ("id", "_id")}
        now = utcnow()
        document.setdefault("createdAt", now)
        document.setdefault("updatedAt", document["createdAt"])
        document["_id"] = ObjectId()

        try:
            result = self.collection.insert_one(document)
        except TRANSIENT_ERRORS as e:
            raise self._unavailable("insert", e)

        logger.info(f"Created document in {self.collection_name}: {result.inserted_id}")
        return str(result.inserted_id)

    def find_by_id(self, request_id: str) -> Optional[Dict[str, Any]]:
        try:
            object_id = self._validate_object_id(request_id)
        except ValueError as e:
            logger.debug(f"Invalid document ID {request_id}: {e}")
            return None

        try:
            document = self.collection.find_one({"_id": object_id})
        except TRANSIENT_ERRORS as e:
            raise self._unavailable("find_by_id", e)

        if document is None:
            logger.debug(f"Document {request_id} not found in {self.collection_name}")
        return self._to_public(document)

    def find_by_owner(self, owner_id: str) -> List[Dict[str, Any]]:
        try:
            return self._find_sorted({"ownerId": owner_id})
        except TRANSIENT_ERRORS as e:
            raise self._unavailable("find_by_owner", e)

    def find_by_helper(self, helper_id: str) -> List[Dict[str, Any]]:
        try:
            return self._find_sorted({"helperId": helper_id})
        except TRANSIENT_ERRORS as e:
            raise self._unavailable("find_by_helper", e)

    def find_all_excluding_statuses(self, statuses: Iterable[str]) -> List[Dict[str, Any]]:
        excluded = [str(status) for status in statuses]
        query = {"status": {"$nin": excluded}} if excluded else {}

        try:
            documents = self._find_sorted(query)
        except TRANSIENT_ERRORS as e:
            raise self._unavailable("find_all_excluding_statuses", e)

        logger.debug(f"Found {len(documents)} documents in {self.collection_name} excluding {excluded}")
        return documents

    def conditional_update_status(
        self,
        request_id: str,
        expected_status: str,
        new_status: str,
        fields: Optional[Dict[str, Any]] = None
    ) -> UpdateResult:
        """Compare-and-set on status, executed atomically by find_one_and_update."""
        try:
            object_id = self._validate_object_id(request_id)
        except ValueError:
            return UpdateResult(UpdateOutcome.NOT_FOUND)

        updates = dict(fields or {})
        updates["status"] = new_status

        try:
            document = self.collection.find_one_and_update(
                {"_id": object_id, "status": expected_status},
                {"$set": updates},
                return_document=ReturnDocument.AFTER
            )
            if document is not None:
                logger.info(
                    f"Updated document {request_id} in {self.collection_name}: "
                    f"{expected_status} -> {new_status}"
                )
                return UpdateResult(UpdateOutcome.SUCCESS, document=self._to_public(document))

            # Only used to tell "missing" from "wrong state"; the write above
            # is the arbiter
            current = self.collection.find_one({"_id": object_id}, {"status": 1})
        except TRANSIENT_ERRORS as e:
            raise self._unavailable("conditional_update_status", e)

        if current is None:
            return UpdateResult(UpdateOutcome.NOT_FOUND)

        logger.warning(
            f"Conditional update rejected for {request_id}: expected {expected_status}, "
            f"found {current.get('status')}"
        )
        return UpdateResult(UpdateOutcome.PRECONDITION_FAILED, current_status=current.get("status"))

    def delete(self, request_id: str) -> bool:
        try:
            object_id = self._validate_object_id(request_id)
        except ValueError:
            return False

        try:
            result = self.collection.delete_one({"_id": object_id})
        except TRANSIENT_ERRORS as e:
            raise self._unavailable("delete", e)

        if result.deleted_count > 0:
            logger.warning(f"Hard deleted document {request_id} in {self.collection_name}")
            return True

        logger.warning(f"No document deleted for {request_id} in {self.collection_name}")
        return False

    def count_by_status(self) -> Dict[str, int]:
        pipeline = [{"$group": {"_id": "$status", "count": {"$sum": 1}}}]

        try:
            results = list(self.collection.aggregate(pipeline))
        except TRANSIENT_ERRORS as e:
            raise self._unavailable("count_by_status", e)

        return {str(row["_id"]): int(row["count"]) for row in results}

    # Index Management

    def create_indexes(self) -> None:
        """Create performance indexes for the help requests collection."""
        try:
            logger.info("Creating MongoDB indexes...")

            self.collection.create_index([("status", ASCENDING), ("createdAt", ASCENDING)])
            self.collection.create_index([("ownerId", ASCENDING), ("createdAt", ASCENDING)])
            self.collection.create_index([("helperId", ASCENDING), ("createdAt", ASCENDING)])

            logger.info("MongoDB indexes created successfully")

        except Exception as e:
            logger.error(f"Failed to create MongoDB indexes: {e}")
            raise
