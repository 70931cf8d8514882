import random
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient

from quizium.db.vault import DocumentNotFoundError
from quizium.models.document import Document
from quizium.models.setup import SpacedRepetitionSettings, Topic
from quizium.services.study import StudyService

NOW = datetime(2024, 5, 10, 12, 0, 0, tzinfo=timezone.utc)


class MemoryStore:
    """Document store over a dict of path -> text."""

    def __init__(self, notes: dict[str, str] | None = None):
        self.notes = dict(notes or {})
        self.writes: list[str] = []

    async def list_documents(self):
        return [
            Document(path=path, title=path.rsplit("/", 1)[-1].removesuffix(".md"))
            for path in sorted(self.notes)
        ]

    async def read_text(self, doc):
        if doc.path not in self.notes:
            raise DocumentNotFoundError(doc.path)
        return self.notes[doc.path]

    async def write_text(self, doc, text):
        if doc.path not in self.notes:
            raise DocumentNotFoundError(doc.path)
        self.notes[doc.path] = text
        self.writes.append(doc.path)


@pytest.fixture
def topics():
    return [
        Topic(hashtag="#math", name="Math"),
        Topic(hashtag="#geo", name="Geography"),
    ]


@pytest.fixture
def store():
    return MemoryStore(
        {
            "math.md": (
                "#math\n"
                "\n"
                "[Q]2+2?\n"
                "[A]4\n"
                "\n"
                "[Q]3*3?\n"
                "[A]9\n"
                "[B]6\n"
                "[B]8\n"
                "[B]12\n"
            ),
            "geo.md": (
                "#geo\n"
                "\n"
                "<!--QZ:2024-05-09T12:00:00.000Z,moderate-->\n"
                "[Q]Capital of France?\n"
                "[A]Paris\n"
                "[H]On the Seine\n"
                "\n"
                "<!--QZ:2024-05-01T12:00:00.000Z,easy-->\n"
                "[Q]Capital of Spain?\n"
                "[A]Madrid\n"
            ),
            "untagged.md": "[Q]Ignored?\n[A]Yes\n",
        }
    )


@pytest.fixture
def study(store, topics):
    return StudyService(
        store,
        topics=topics,
        spaced_settings=SpacedRepetitionSettings(),
        rng=random.Random(1234),
        clock=lambda: NOW,
    )


@pytest.fixture
def vault(tmp_path):
    return tmp_path / "vault"


@pytest.fixture
def client(vault, tmp_path, monkeypatch):
    from quizium import app
    from quizium.config import settings

    monkeypatch.setattr(settings, "vault_dir", vault)
    monkeypatch.setattr(settings, "data_dir", tmp_path / "data")

    with TestClient(app) as test_client:
        yield test_client
