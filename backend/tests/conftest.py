"""
Shared fixtures: in-memory stand-in for the Motor collection, patched
Cloudinary calls and an httpx client bound to the ASGI app.
"""

import copy
import re
import uuid

import cloudinary.uploader
import httpx
import pytest
import pytest_asyncio


# ═══════════════════════════════════════════════════════════════
# IN-MEMORY COLLECTION
# ═══════════════════════════════════════════════════════════════

def _matches_condition(value, condition):
    if not isinstance(condition, dict):
        return value == condition
    for op, arg in condition.items():
        if op == "$regex":
            flags = re.IGNORECASE if "i" in condition.get("$options", "") else 0
            if not isinstance(value, str) or not re.search(arg, value, flags):
                return False
        elif op == "$options":
            continue
        elif op == "$exists":
            if (value is not None) != arg:
                return False
        elif op == "$nin":
            if value in arg:
                return False
        elif op == "$ne":
            if value == arg:
                return False
        else:
            raise NotImplementedError(op)
    return True


def matches(doc, query):
    return all(_matches_condition(doc.get(field), cond) for field, cond in query.items())


def project(doc, projection):
    doc = copy.deepcopy(doc)
    if projection and projection.get("_id") == 0:
        doc.pop("_id", None)
    return doc


class FakeCursor:
    def __init__(self, docs):
        self._docs = docs
        self._skip = 0
        self._limit = 0

    def sort(self, field, direction=1):
        self._docs = sorted(self._docs, key=lambda d: d.get(field) or "", reverse=direction == -1)
        return self

    def skip(self, n):
        self._skip = n
        return self

    def limit(self, n):
        self._limit = n
        return self

    async def to_list(self, length=None):
        docs = self._docs[self._skip:]
        if self._limit:
            docs = docs[:self._limit]
        if length:
            docs = docs[:length]
        return docs


class FakeCollection:
    def __init__(self, events):
        self.docs = []
        self.events = events

    def find(self, query=None, projection=None):
        return FakeCursor([project(d, projection) for d in self.docs if matches(d, query or {})])

    async def find_one(self, query, projection=None):
        for doc in self.docs:
            if matches(doc, query):
                return project(doc, projection)
        return None

    async def insert_one(self, doc):
        # Motor adds _id to the inserted dict
        doc["_id"] = uuid.uuid4().hex
        self.docs.append(copy.deepcopy(doc))
        self.events.append(("db_insert", doc["id"]))

    async def update_one(self, query, update):
        for doc in self.docs:
            if matches(doc, query):
                doc.update(copy.deepcopy(update["$set"]))
                self.events.append(("db_update", doc["id"]))
                return

    async def delete_one(self, query):
        for doc in list(self.docs):
            if matches(doc, query):
                self.docs.remove(doc)
                self.events.append(("db_delete", doc["id"]))
                return

    async def count_documents(self, query):
        return sum(1 for d in self.docs if matches(d, query))

    def aggregate(self, pipeline):
        docs = list(self.docs)
        for stage in pipeline:
            if "$match" in stage:
                docs = [d for d in docs if matches(d, stage["$match"])]
            elif "$group" in stage:
                key_spec = stage["$group"]["_id"]
                groups = {}
                for d in docs:
                    key = tuple((name, d.get(ref[1:])) for name, ref in key_spec.items())
                    groups[key] = groups.get(key, 0) + 1
                docs = [{"_id": dict(key), "count": count} for key, count in groups.items()]
            else:
                raise NotImplementedError(stage)
        return FakeCursor(docs)


class FakeDB:
    def __init__(self):
        self.events = []
        self.prospect_details = FakeCollection(self.events)


# ═══════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════

@pytest.fixture
def fake_db(monkeypatch):
    import routes.prospects
    import services.chart_data

    fake = FakeDB()
    monkeypatch.setattr(routes.prospects, "db", fake)
    monkeypatch.setattr(services.chart_data, "db", fake)
    return fake


@pytest.fixture
def cloudinary_calls(monkeypatch, fake_db):
    """Records upload/destroy calls in the same event list as the DB"""
    state = {"fail_upload": False, "fail_destroy": False, "uploads": [], "destroys": []}

    def fake_upload(path, **options):
        if state["fail_upload"]:
            raise RuntimeError("cloudinary unavailable")
        with open(path, "rb") as f:
            content = f.read()
        public_id = f"{options['folder']}/{uuid.uuid4().hex[:8]}"
        state["uploads"].append({"path": path, "content": content, "options": options})
        fake_db.events.append(("upload", public_id))
        return {"secure_url": f"https://res.cloudinary.com/demo/raw/upload/{public_id}", "public_id": public_id}

    def fake_destroy(public_id, **options):
        fake_db.events.append(("destroy", public_id))
        state["destroys"].append({"public_id": public_id, "options": options})
        if state["fail_destroy"]:
            raise RuntimeError("cloudinary unavailable")
        return {"result": "ok"}

    monkeypatch.setattr(cloudinary.uploader, "upload", fake_upload)
    monkeypatch.setattr(cloudinary.uploader, "destroy", fake_destroy)
    return state


@pytest_asyncio.fixture
async def api(fake_db, cloudinary_calls):
    from server import app

    transport = httpx.ASGITransport(app=app, raise_app_exceptions=False)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def make_prospect(**overrides):
    """A stored prospect document with every field filled"""
    doc = {
        "id": str(uuid.uuid4()),
        "month": "March",
        "quarter": "Q1",
        "prospect": "Acme",
        "geo": "EMEA",
        "lob": "Banking",
        "call1": {"checked": True, "notes": "intro done"},
        "call2": {"checked": False, "notes": "follow-up"},
        "call3": {"checked": False, "notes": ""},
        "coreOfferings": "Cloud",
        "primaryNeed": "Migration",
        "secondaryNeed": "Support",
        "category": "Finance",
        "categoryOther": "",
        "trace": "Inbound",
        "salesSpoc": "J. Doe",
        "oppId": "OPP-1700000000000",
        "oppDetails": "Phase 1",
        "deck": "",
        "deckPublicId": "",
        "rag": "Green",
        "remark": "",
        "createdAt": "2026-01-15T10:00:00+00:00",
        "updatedAt": "2026-01-15T10:00:00+00:00",
    }
    doc.update(overrides)
    return doc


@pytest.fixture
def prospect_factory():
    return make_prospect
