"""
Firebase service for Firestore operations
"""

from __future__ import annotations
import asyncio
import json
import logging
import os
from typing import Any, Callable, Dict, Iterable, List, Optional

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as gcp_exceptions

from app.config import settings
from app.exceptions import DuplicateKeyError

logger = logging.getLogger(__name__)


class FirebaseService:
    """Service for Firebase operations"""

    _instance = None
    _db = None

    def __new__(cls):
        """Singleton pattern to ensure only one Firebase instance"""
        if cls._instance is None:
            cls._instance = super(FirebaseService, cls).__new__(cls)
        return cls._instance

    @property
    def db(self):
        """Firestore client, created on first use"""
        if FirebaseService._db is None:
            self._initialize_firebase()
            FirebaseService._db = firestore.client()
        return FirebaseService._db

    def _initialize_firebase(self):
        """Initialize Firebase Admin SDK with credentials"""
        try:
            # Check if already initialized
            firebase_admin.get_app()
            logger.info("Firebase already initialized")
        except ValueError:
            options = {}
            if settings.FIREBASE_PROJECT_ID:
                options["projectId"] = settings.FIREBASE_PROJECT_ID

            if settings.DEV_MODE and settings.FIREBASE_EMULATOR_HOST:
                # Use emulator for development
                os.environ["FIRESTORE_EMULATOR_HOST"] = settings.FIREBASE_EMULATOR_HOST
                firebase_admin.initialize_app(options=options or None)
                logger.info("Firebase initialized with emulator: %s",
                            settings.FIREBASE_EMULATOR_HOST)
                return

            if settings.FIREBASE_CREDENTIALS_JSON:
                try:
                    cred = credentials.Certificate(
                        json.loads(settings.FIREBASE_CREDENTIALS_JSON))
                except json.JSONDecodeError as e:
                    logger.error("Error parsing FIREBASE_CREDENTIALS_JSON: %s", e)
                    raise
                logger.info(
                    "Firebase initialized with credentials from FIREBASE_CREDENTIALS_JSON")
            else:
                # Fallback to file path
                cred = credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH)
                logger.info("Firebase initialized with credentials from %s",
                            settings.FIREBASE_CREDENTIALS_PATH)

            firebase_admin.initialize_app(cred, options or None)
            logger.info("Firebase Admin SDK initialization successful.")

    # ============================================
    # DOCUMENT OPERATIONS
    # ============================================

    async def get_document(self, collection: str, doc_id: str) -> Optional[Dict[str, Any]]:
        """Return the document data, or None if it does not exist"""
        try:
            doc = await asyncio.to_thread(self.db.collection(collection).document(doc_id).get)
        except gcp_exceptions.InvalidArgument:
            # ids such as "__x__" are reserved by Firestore and can never exist
            logger.debug("Invalid document id %r in %s", doc_id, collection)
            return None
        return doc.to_dict() if doc.exists else None

    async def get_documents(self, collection: str, doc_ids: Iterable[str]) -> Dict[str, Dict[str, Any]]:
        """Fetch several documents at once; missing ids are left out"""
        ids = [i for i in dict.fromkeys(doc_ids) if i]
        if not ids:
            return {}
        coll = self.db.collection(collection)
        refs = [coll.document(i) for i in ids]

        def _get_all():
            return {doc.id: doc.to_dict() for doc in self.db.get_all(refs) if doc.exists}

        return await asyncio.to_thread(_get_all)

    async def find_one(
        self, collection: str, field: str, value: Any
    ) -> Optional[tuple[str, Dict[str, Any]]]:
        """Return (id, data) of the first document where field == value"""
        query = self.db.collection(collection).where(field, "==", value).limit(1)

        def _first():
            for doc in query.stream():
                return doc.id, doc.to_dict()
            return None

        return await asyncio.to_thread(_first)

    async def create_document_with_unique_key(
        self,
        collection: str,
        data: Dict[str, Any],
        key_collection: str,
        key: str,
    ) -> str:
        """
        Create a document together with a reservation document keyed by `key`.

        Both writes happen in one transaction. If `key_collection/key` already
        exists the transaction is aborted with DuplicateKeyError and nothing
        is written.

        Returns:
            The generated document id
        """
        doc_ref = self.db.collection(collection).document()
        key_ref = self.db.collection(key_collection).document(key)

        @firestore.transactional
        def _create(transaction):
            if key_ref.get(transaction=transaction).exists:
                raise DuplicateKeyError(key)
            transaction.create(key_ref, {"documentId": doc_ref.id})
            transaction.create(doc_ref, data)

        try:
            await asyncio.to_thread(_create, self.db.transaction())
        except gcp_exceptions.AlreadyExists as e:
            # lost a race with a concurrent create of the same key
            raise DuplicateKeyError(key) from e
        return doc_ref.id

    async def update_document(
        self, collection: str, doc_id: str, data: Dict[str, Any]
    ) -> Optional[Dict[str, Any]]:
        """Apply a partial update; returns the updated document or None if missing"""
        ref = self.db.collection(collection).document(doc_id)
        try:
            await asyncio.to_thread(ref.update, data)
        except gcp_exceptions.NotFound:
            return None
        doc = await asyncio.to_thread(ref.get)
        return doc.to_dict() if doc.exists else None

    async def increment_field(
        self, collection: str, doc_id: str, field: str, amount: int = 1
    ) -> Optional[Dict[str, Any]]:
        """Atomically add `amount` to a numeric field"""
        return await self.update_document(
            collection, doc_id, {field: firestore.Increment(amount)}
        )

    async def transform_document(
        self,
        collection: str,
        doc_id: str,
        mutate: Callable[[Dict[str, Any]], Dict[str, Any]],
    ) -> Optional[Dict[str, Any]]:
        """
        Read-check-write a single document inside one Firestore transaction.

        `mutate` receives the current document data and returns the fields to
        update. Any exception it raises aborts the transaction and propagates.
        Firestore retries the whole function when a concurrent write touches
        the same document, so `mutate` must be free of side effects.

        Returns:
            The document data after the update, or None if it does not exist
        """
        ref = self.db.collection(collection).document(doc_id)

        @firestore.transactional
        def _run(transaction):
            snapshot = ref.get(transaction=transaction)
            if not snapshot.exists:
                return None
            current = snapshot.to_dict()
            updates = mutate(dict(current))
            if updates:
                transaction.update(ref, updates)
            return {**current, **updates}

        return await asyncio.to_thread(_run, self.db.transaction())

    async def delete_documents(self, paths: Iterable[tuple[str, str]]) -> None:
        """Delete (collection, id) pairs in one batch"""
        batch = self.db.batch()
        for collection, doc_id in paths:
            batch.delete(self.db.collection(collection).document(doc_id))
        await asyncio.to_thread(batch.commit)

    # ============================================
    # GENERIC QUERY OPERATIONS
    # ============================================
    async def query_collection(
        self,
        collection_name: str,
        filters: Optional[List[tuple]] = None,
        order_by: Optional[str] = None,
        direction: str = firestore.Query.ASCENDING,
        limit: Optional[int] = None,
    ) -> List[tuple[str, Dict[str, Any]]]:
        """
        Queries a Firestore collection with filters and ordering.

        Args:
            collection_name: The name of the Firestore collection.
            filters: A list of (field, op, value) tuples, or a {field: value}
                     dict which defaults to '==' comparison.
            order_by: The field to order the results by.
            direction: The order direction ('ASCENDING' or 'DESCENDING').
            limit: The maximum number of documents to return.

        Returns:
            A list of (document_id, document_data) tuples.
        """
        query = self.db.collection(collection_name)

        if filters:
            if isinstance(filters, dict):
                filters = [(k, "==", v) for k, v in filters.items()]
            for f in filters:
                if len(f) != 3:
                    raise ValueError(
                        f"Invalid filter format: {f}. Expected (field, op, value)")
                query = query.where(f[0], f[1], f[2])

        if order_by:
            query = query.order_by(order_by, direction=direction)
        if limit:
            query = query.limit(limit)

        def _get_stream_data(q):
            return [(doc.id, doc.to_dict()) for doc in q.stream()]

        return await asyncio.to_thread(_get_stream_data, query)


# Global Firebase service instance
firebase_service = FirebaseService()
