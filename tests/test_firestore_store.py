from datetime import datetime, timedelta, timezone

import pytest
from google.api_core import exceptions as google_exceptions
from google.cloud import firestore

from src.meetings.firestore_store import FirestoreMeetingStore
from src.meetings.models import MeetingStatus
from utils.errors import NotFoundError, PersistenceError

BASE_TIME = datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)


class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = data

    @property
    def exists(self):
        return self._data is not None

    def to_dict(self):
        return dict(self._data) if self._data is not None else None


class FakeDocument:
    def __init__(self, collection, doc_id):
        self.collection = collection
        self.id = doc_id

    def _resolve(self, data):
        resolved = {}
        for key, value in data.items():
            if value is firestore.SERVER_TIMESTAMP:
                value = self.collection.next_timestamp()
            resolved[key] = value
        return resolved

    def set(self, data):
        self.collection.check_failure()
        self.collection.documents[self.id] = self._resolve(data)

    def get(self):
        self.collection.check_failure()
        return FakeSnapshot(self.id, self.collection.documents.get(self.id))

    def update(self, data):
        self.collection.check_failure()
        if self.id not in self.collection.documents:
            raise google_exceptions.NotFound(f"No document to update: {self.id}")
        self.collection.documents[self.id].update(self._resolve(data))

    def delete(self):
        self.collection.check_failure()
        self.collection.documents.pop(self.id, None)


class FakeQuery:
    def __init__(self, collection, filters=None, order=None):
        self.collection = collection
        self.filters = filters or []
        self.order = order

    def where(self, filter=None):
        return FakeQuery(self.collection, self.filters + [filter], self.order)

    def order_by(self, field_path, direction=None):
        return FakeQuery(self.collection, self.filters, (field_path, direction))

    def stream(self):
        self.collection.check_failure()
        self.collection.queries.append(self)
        items = list(self.collection.documents.items())
        for field_filter in self.filters:
            assert field_filter.op_string == "=="
            items = [(doc_id, data) for doc_id, data in items
                     if data.get(field_filter.field_path) == field_filter.value]
        if self.order is not None:
            field_path, direction = self.order
            items.sort(key=lambda item: item[1][field_path],
                       reverse=direction == firestore.Query.DESCENDING)
        for doc_id, data in items:
            yield FakeSnapshot(doc_id, dict(data))


class FakeCollection(FakeQuery):
    def __init__(self):
        super().__init__(self)
        self.documents = {}
        self.queries = []
        self.error = None
        self._ids = 0
        self._ticks = 0

    def next_timestamp(self):
        self._ticks += 1
        return BASE_TIME + timedelta(seconds=self._ticks)

    def check_failure(self):
        if self.error is not None:
            raise self.error

    def document(self, doc_id=None):
        if doc_id is None:
            self._ids += 1
            doc_id = f"doc{self._ids:03d}"
        return FakeDocument(self, doc_id)


class FakeFirestoreClient:
    def __init__(self):
        self.collections = {}

    def collection(self, name):
        return self.collections.setdefault(name, FakeCollection())


def _record(title="Quarterly Planning", user_id=None):
    record = {
        "title": title,
        "description": "Roadmap review",
        "dateTime": datetime(2025, 1, 1, 10, 0, tzinfo=timezone.utc),
        "participants": ["alice@example.com"],
        "status": "scheduled",
        "calendarEventId": "evt123",
        "meetLink": "https://meet.google.com/abc-defg-hij",
    }
    if user_id:
        record["userId"] = user_id
    return record


@pytest.fixture
def firestore_client():
    return FakeFirestoreClient()


@pytest.fixture
def firestore_store(firestore_client):
    return FirestoreMeetingStore(firestore_client, "meetings")


def test_create_writes_document_with_server_timestamps(firestore_store, firestore_client):
    meeting = firestore_store.create(_record())

    document = firestore_client.collection("meetings").documents[meeting.id]
    assert document["id"] == meeting.id
    assert document["title"] == "Quarterly Planning"
    assert isinstance(document["createdAt"], datetime)

    assert meeting.created_at == document["createdAt"]
    assert meeting.status is MeetingStatus.SCHEDULED
    assert meeting.calendar_event_id == "evt123"
    assert meeting.meet_link == "https://meet.google.com/abc-defg-hij"


def test_get(firestore_store):
    created = firestore_store.create(_record())

    assert firestore_store.get(created.id) == created
    assert firestore_store.get("missing") is None


def test_update_overwrites_fields_and_bumps_updated_at(firestore_store):
    created = firestore_store.create(_record())

    updated = firestore_store.update(created.id, {"title": "Renamed", "participants": []})

    assert updated.title == "Renamed"
    assert updated.participants == []
    assert updated.meet_link == created.meet_link
    assert updated.created_at == created.created_at
    assert updated.updated_at > created.updated_at


def test_update_missing_document(firestore_store):
    with pytest.raises(NotFoundError):
        firestore_store.update("missing", {"title": "Renamed"})


def test_delete(firestore_store):
    created = firestore_store.create(_record())

    firestore_store.delete(created.id)

    assert firestore_store.get(created.id) is None


def test_list_is_ordered_by_created_at_descending(firestore_store, firestore_client):
    first = firestore_store.create(_record("First"))
    second = firestore_store.create(_record("Second"))

    assert [m.id for m in firestore_store.list()] == [second.id, first.id]

    query = firestore_client.collection("meetings").queries[-1]
    assert query.order == ("createdAt", firestore.Query.DESCENDING)
    assert query.filters == []


def test_list_filters_by_user(firestore_store, firestore_client):
    mine = firestore_store.create(_record("Mine", user_id="u-1"))
    firestore_store.create(_record("Theirs", user_id="u-2"))

    assert [m.id for m in firestore_store.list(user_id="u-1")] == [mine.id]

    field_filter = firestore_client.collection("meetings").queries[-1].filters[0]
    assert (field_filter.field_path, field_filter.op_string, field_filter.value) == ("userId", "==", "u-1")


@pytest.mark.parametrize("operation", [
    lambda store: store.create(_record()),
    lambda store: store.get("doc001"),
    lambda store: store.update("doc001", {"title": "x"}),
    lambda store: store.delete("doc001"),
    lambda store: store.list(),
])
def test_backend_failures_become_persistence_errors(firestore_store, firestore_client, operation):
    firestore_client.collection("meetings").error = google_exceptions.ServiceUnavailable("backend down")

    with pytest.raises(PersistenceError):
        operation(firestore_store)
