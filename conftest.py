# conftest.py
"""
테스트 공용 픽스처.

FakeFirestore 는 서비스가 사용하는 Firestore 클라이언트 API의 일부만 메모리에서 흉내 냅니다.
- collection().document().get/set/create/update/delete
- collection().order_by().limit().stream(), collection().where().stream()
- collection().on_snapshot() : 쓰기가 일어날 때마다 같은 스레드에서 콜백 호출
- hook(collection, op, fn) : 해당 작업 직전에 fn 실행 (예외를 던지면 장애 주입)
"""
import copy
import itertools
from unittest.mock import MagicMock

import pytest
from flask_jwt_extended import create_access_token
from google.api_core.exceptions import AlreadyExists, NotFound

from meydan import create_app


class FakeSnapshot:
    def __init__(self, doc_id, data):
        self.id = doc_id
        self._data = copy.deepcopy(data)
        self.exists = data is not None

    def to_dict(self):
        return copy.deepcopy(self._data)


class FakeWatch:
    def __init__(self, collection, callback):
        self.collection = collection
        self.callback = callback
        self.active = True

    def unsubscribe(self):
        self.active = False
        self.collection.watches.remove(self)


class FakeDocumentRef:
    def __init__(self, collection, doc_id):
        self.collection = collection
        self.id = doc_id

    @property
    def _docs(self):
        return self.collection.docs

    def get(self, transaction=None):
        self.collection.db.run_hook(self.collection.name, 'get')
        return FakeSnapshot(self.id, self._docs.get(self.id))

    def set(self, data):
        self.collection.db.run_hook(self.collection.name, 'set')
        self._docs[self.id] = copy.deepcopy(data)
        self.collection.notify()

    def create(self, data):
        self.collection.db.run_hook(self.collection.name, 'create')
        if self.id in self._docs:
            raise AlreadyExists(f"Document already exists: {self.collection.name}/{self.id}")
        self._docs[self.id] = copy.deepcopy(data)
        self.collection.notify()

    def update(self, data):
        self.collection.db.run_hook(self.collection.name, 'update')
        if self.id not in self._docs:
            raise NotFound(f"No document to update: {self.collection.name}/{self.id}")
        self._docs[self.id].update(copy.deepcopy(data))
        self.collection.notify()

    def delete(self):
        self.collection.db.run_hook(self.collection.name, 'delete')
        self._docs.pop(self.id, None)
        self.collection.notify()


class FakeQuery:
    def __init__(self, collection, filters=(), order=None, limit_count=None):
        self.collection = collection
        self.filters = tuple(filters)
        self.order = order
        self.limit_count = limit_count

    def where(self, field_path=None, op_string=None, value=None, filter=None):
        if filter is not None:
            field_path, op_string, value = filter.field_path, filter.op_string, filter.value
        assert op_string == '==', "FakeQuery only supports equality filters"
        return FakeQuery(self.collection, self.filters + ((field_path, value),), self.order, self.limit_count)

    def order_by(self, field_path, direction="ASCENDING"):
        return FakeQuery(self.collection, self.filters, (field_path, direction), self.limit_count)

    def limit(self, count):
        return FakeQuery(self.collection, self.filters, self.order, count)

    def stream(self):
        self.collection.db.run_hook(self.collection.name, 'stream')
        return iter(self._snapshots())

    def _snapshots(self):
        items = [
            (doc_id, data) for doc_id, data in self.collection.docs.items()
            if all(data.get(f) == v for f, v in self.filters)
        ]
        if self.order:
            field_path, direction = self.order
            items.sort(key=lambda item: item[1][field_path], reverse=direction == "DESCENDING")
        if self.limit_count is not None:
            items = items[:self.limit_count]
        return [FakeSnapshot(doc_id, data) for doc_id, data in items]


class FakeCollection(FakeQuery):
    def __init__(self, db, name):
        super().__init__(self)
        self.db = db
        self.name = name
        self.docs = {}
        self.watches = []

    def document(self, doc_id=None):
        return FakeDocumentRef(self, doc_id or f"{self.name}-{next(self.db.ids)}")

    def on_snapshot(self, callback):
        watch = FakeWatch(self, callback)
        self.watches.append(watch)
        # 실제 Firestore처럼 구독 직후 현재 상태를 한 번 전달
        callback(self._snapshots(), [], None)
        return watch

    def notify(self):
        for watch in list(self.watches):
            watch.callback(self._snapshots(), [], None)


class FakeFirestore:
    def __init__(self):
        self.collections = {}
        self.hooks = {}
        self.ids = itertools.count(1)

    def collection(self, name):
        if name not in self.collections:
            self.collections[name] = FakeCollection(self, name)
        return self.collections[name]

    def hook(self, collection, op, fn):
        self.hooks[(collection, op)] = fn

    def fail(self, collection, op, exc):
        def _raise():
            raise exc
        self.hook(collection, op, _raise)

    def clear_hooks(self):
        self.hooks.clear()

    def run_hook(self, collection, op):
        fn = self.hooks.get((collection, op))
        if fn is not None:
            fn()

    def seed(self, collection, doc_id, data):
        self.collection(collection).docs[doc_id] = copy.deepcopy(data)

    def docs(self, collection):
        return self.collection(collection).docs


class FakeBlob:
    def __init__(self, bucket, name):
        self.bucket = bucket
        self.name = name

    @property
    def public_url(self):
        return f"https://storage.googleapis.com/{self.bucket.name}/{self.name}"

    def generate_signed_url(self, version, expiration, method, content_type):
        return f"https://signed.example/{self.bucket.name}/{self.name}?method={method}"

    def upload_from_string(self, data, content_type=None):
        self.bucket.objects[self.name] = data

    def delete(self):
        if self.bucket.delete_error is not None:
            raise self.bucket.delete_error
        if self.name not in self.bucket.objects:
            raise NotFound(f"No such object: {self.bucket.name}/{self.name}")
        del self.bucket.objects[self.name]


class FakeBucket:
    def __init__(self, name="meydan-media"):
        self.name = name
        self.objects = {}
        self.delete_error = None

    def blob(self, name):
        return FakeBlob(self, name)


@pytest.fixture
def fake_db():
    return FakeFirestore()


@pytest.fixture
def fake_bucket():
    return FakeBucket()


@pytest.fixture
def openai_client():
    client = MagicMock()
    client.chat.completions.create.return_value.choices = [
        MagicMock(message=MagicMock(content="  Sunset vibes #travel #sunset  "))
    ]
    return client


@pytest.fixture
def app(fake_db, fake_bucket, openai_client):
    app = create_app('testing', db=fake_db, bucket=fake_bucket, openai_client=openai_client)
    yield app
    app.services['sessions'].close_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def auth_headers(app):
    def _headers(user_id="viewer-1", email="viewer@example.com"):
        with app.app_context():
            token = create_access_token(identity=user_id, additional_claims={"email": email})
        return {"Authorization": f"Bearer {token}"}
    return _headers
