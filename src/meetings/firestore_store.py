"""
Firestore-backed meeting store
"""
import logging
import os
from typing import Any, Dict, List, Optional

from google.api_core import exceptions as google_exceptions
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.oauth2 import service_account

from config.settings import Config
from src.meetings.meeting_store import MeetingStore, meeting_from_record
from src.meetings.models import Meeting
from utils.errors import NotFoundError, PersistenceError

logger = logging.getLogger(__name__)


class FirestoreMeetingStore(MeetingStore):
    """One document per meeting in the ``meetings`` collection"""

    def __init__(self, client, collection: str = Config.MEETINGS_COLLECTION):
        self.client = client
        self.collection_name = collection

    @classmethod
    def from_config(cls, config: Config) -> "FirestoreMeetingStore":
        """Create the Firestore client (emulator, key file or default credentials)"""
        if config.FIRESTORE_EMULATOR_HOST:
            # The client library picks the emulator up from the environment
            os.environ.setdefault("FIRESTORE_EMULATOR_HOST", config.FIRESTORE_EMULATOR_HOST)
            client = firestore.Client(project=config.PROJECT_ID)
        elif config.SERVICE_ACCOUNT_PATH:
            key_path = os.path.abspath(os.path.expanduser(config.SERVICE_ACCOUNT_PATH))
            credentials = service_account.Credentials.from_service_account_file(key_path)
            client = firestore.Client(project=config.PROJECT_ID or credentials.project_id,
                                      credentials=credentials)
        else:
            client = firestore.Client(project=config.PROJECT_ID)

        logger.info(f"✅ Firestore initialized (project={config.PROJECT_ID}, "
                    f"emulator={config.FIRESTORE_EMULATOR_HOST or 'none'})")
        return cls(client, config.MEETINGS_COLLECTION)

    @property
    def collection(self):
        return self.client.collection(self.collection_name)

    def _snapshot_to_meeting(self, snapshot) -> Meeting:
        return meeting_from_record(snapshot.id, snapshot.to_dict() or {})

    def create(self, record: Dict[str, Any]) -> Meeting:
        try:
            doc_ref = self.collection.document()
            document = dict(record)
            document.update({
                "id": doc_ref.id,
                "createdAt": firestore.SERVER_TIMESTAMP,
                "updatedAt": firestore.SERVER_TIMESTAMP,
            })
            doc_ref.set(document)
            logger.info(f"Created meeting document with ID: {doc_ref.id}")

            # Read back so the server timestamps are resolved
            return self._snapshot_to_meeting(doc_ref.get())
        except google_exceptions.GoogleAPICallError as e:
            raise PersistenceError(f"Failed to create meeting document: {e}") from e

    def get(self, meeting_id: str) -> Optional[Meeting]:
        try:
            snapshot = self.collection.document(meeting_id).get()
        except google_exceptions.GoogleAPICallError as e:
            raise PersistenceError(f"Failed to read meeting {meeting_id}: {e}") from e

        if not snapshot.exists:
            return None
        return self._snapshot_to_meeting(snapshot)

    def update(self, meeting_id: str, changes: Dict[str, Any]) -> Meeting:
        doc_ref = self.collection.document(meeting_id)
        document = dict(changes)
        document["updatedAt"] = firestore.SERVER_TIMESTAMP
        try:
            doc_ref.update(document)
            return self._snapshot_to_meeting(doc_ref.get())
        except google_exceptions.NotFound as e:
            raise NotFoundError(f"Meeting {meeting_id} not found") from e
        except google_exceptions.GoogleAPICallError as e:
            raise PersistenceError(f"Failed to update meeting {meeting_id}: {e}") from e

    def delete(self, meeting_id: str) -> None:
        try:
            self.collection.document(meeting_id).delete()
            logger.info(f"Deleted meeting with ID: {meeting_id} from Firestore")
        except google_exceptions.GoogleAPICallError as e:
            raise PersistenceError(f"Failed to delete meeting {meeting_id}: {e}") from e

    def list(self, user_id: Optional[str] = None) -> List[Meeting]:
        query = self.collection
        if user_id:
            query = query.where(filter=FieldFilter("userId", "==", user_id))
        query = query.order_by("createdAt", direction=firestore.Query.DESCENDING)

        try:
            return [self._snapshot_to_meeting(snapshot) for snapshot in query.stream()]
        except google_exceptions.GoogleAPICallError as e:
            raise PersistenceError(f"Failed to list meetings: {e}") from e
