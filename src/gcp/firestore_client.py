"""Firestore client for document reads and writes.

Wraps the Firestore client of a Firebase app. The underlying client is
created on first use, so constructing this class touches no credentials
and opens no connections.
"""

import logging
from typing import Any, Optional

from firebase_admin import App, firestore
from google.cloud.firestore import Client, CollectionReference, FieldFilter

logger = logging.getLogger(__name__)


class FirestoreClient:
    """Client for reading and writing documents in Firestore."""

    def __init__(self, app: App):
        """Initialize Firestore client.

        Args:
            app: firebase_admin app whose project and credential are used
        """
        self.app = app
        self._db: Optional[Client] = None

    @property
    def db(self) -> Client:
        """The google.cloud.firestore client, created on first access."""
        if self._db is None:
            self._db = firestore.client(app=self.app)
            logger.info(f"Created Firestore client for project {self._db.project}")
        return self._db

    def collection(self, name: str) -> CollectionReference:
        return self.db.collection(name)

    def get_document(self, collection: str, doc_id: str) -> Optional[dict]:
        """Get a document by ID.

        Args:
            collection: Collection name
            doc_id: Document identifier

        Returns:
            Document data or None if not found
        """
        doc = self.collection(collection).document(doc_id).get()
        if doc.exists:
            return {"id": doc.id, **doc.to_dict()}
        return None

    def set_document(self, collection: str, doc_id: str, data: dict, merge: bool = False) -> dict:
        """Create or overwrite a document.

        Args:
            collection: Collection name
            doc_id: Document identifier
            data: Document fields
            merge: Merge into an existing document instead of replacing it

        Returns:
            Written document data
        """
        self.collection(collection).document(doc_id).set(data, merge=merge)
        logger.info(f"Wrote {collection}/{doc_id}")
        return {"id": doc_id, **data}

    def add_document(self, collection: str, data: dict) -> dict:
        """Create a document with a generated ID.

        Returns:
            Written document data including the generated ID
        """
        _, doc_ref = self.collection(collection).add(data)
        logger.info(f"Added {collection}/{doc_ref.id}")
        return {"id": doc_ref.id, **data}

    def update_document(self, collection: str, doc_id: str, updates: dict) -> bool:
        """Update fields of a document.

        Returns:
            True if updated, False if document not found
        """
        doc_ref = self.collection(collection).document(doc_id)
        if not doc_ref.get().exists:
            return False

        doc_ref.update(updates)
        logger.info(f"Updated {collection}/{doc_id}")
        return True

    def delete_document(self, collection: str, doc_id: str) -> bool:
        """Delete a document.

        Returns:
            True if deleted, False if document not found
        """
        doc_ref = self.collection(collection).document(doc_id)
        if not doc_ref.get().exists:
            return False

        doc_ref.delete()
        logger.info(f"Deleted {collection}/{doc_id}")
        return True

    def query(self, collection: str, field: str, op: str, value: Any, limit: Optional[int] = None) -> list[dict]:
        """Get documents where a field matches a condition.

        Args:
            collection: Collection name
            field: Field path to filter on
            op: Comparison operator ("==", "<", "array-contains", ...)
            value: Value to compare against
            limit: Maximum number of documents

        Returns:
            List of matching documents
        """
        query = self.collection(collection).where(filter=FieldFilter(field, op, value))
        if limit is not None:
            query = query.limit(limit)
        return [{"id": doc.id, **doc.to_dict()} for doc in query.stream()]

    def list_documents(self, collection: str) -> list[dict]:
        """Get all documents in a collection."""
        docs = self.collection(collection).stream()
        return [{"id": doc.id, **doc.to_dict()} for doc in docs]
