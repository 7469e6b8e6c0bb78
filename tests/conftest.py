"""
Shared pytest fixtures.

LingQ and AnkiConnect are replaced by small in-process aiohttp apps, so the
real clients are exercised end to end without network access.
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

# Project root on sys.path for the entry-point modules
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from lingqsync.config import Config  # noqa: E402
from lingqsync.models import LingQ  # noqa: E402


def lingq_payload(
    pk: int,
    term: str = "hund",
    fragment: str = "Jeg har en hund",
    status: int = 0,
    extended_status: Optional[int] = None,
    hints: Optional[List[str]] = None,
    tags: Optional[List[str]] = None,
) -> Dict[str, Any]:
    """A LingQ card as the LingQ API returns it."""
    return {
        "pk": pk,
        "term": term,
        "fragment": fragment,
        "status": status,
        "extended_status": extended_status,
        "hints": [
            {"term": term, "text": text, "locale": "en"} for text in (hints or ["dog"])
        ],
        "tags": tags or [],
    }


def make_lingq(pk: int, **kwargs: Any) -> LingQ:
    return LingQ.from_dict(lingq_payload(pk, **kwargs))


def anki_note_payload(note_id: int, lingq_id: Any, front: str = "<b>hund</b>") -> Dict[str, Any]:
    """A note as AnkiConnect's notesInfo returns it."""
    return {
        "noteId": note_id,
        "modelName": "LingQ",
        "tags": ["lingq"],
        "cards": [note_id * 10],
        "fields": {
            "Front": {"value": front, "order": 0},
            "Back": {"value": "dog", "order": 1},
            "Term": {"value": "hund", "order": 2},
            "LingQ": {"value": str(lingq_id), "order": 3},
        },
    }


class FakeLingQ:
    """Paginated LingQ API serving ``total`` generated cards and lessons."""

    def __init__(self) -> None:
        self.total_cards = 0
        self.total_lessons = 0
        self.fail_on_page: Optional[int] = None
        self.requests: List[Dict[str, str]] = []

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_get("/api/v2/languages/", self.languages)
        app.router.add_get("/api/v2/{lang}/cards/", self.cards)
        app.router.add_get("/api/v2/{lang}/lessons/", self.lessons)
        return app

    def _page(self, request: web.Request, total: int, make) -> web.Response:
        query = dict(request.query)
        query["auth"] = request.headers.get("Authorization", "")
        query["path"] = request.path
        self.requests.append(query)
        page = int(request.query["page"])
        page_size = int(request.query["page_size"])
        if self.fail_on_page == page:
            return web.Response(status=500, text="boom")
        start = (page - 1) * page_size
        results = [make(i + 1) for i in range(start, min(start + page_size, total))]
        return web.json_response({"count": total, "results": results})

    async def cards(self, request: web.Request) -> web.Response:
        return self._page(request, self.total_cards, lambda pk: lingq_payload(pk, term=f"term{pk}"))

    async def lessons(self, request: web.Request) -> web.Response:
        return self._page(
            request,
            self.total_lessons,
            lambda pk: {
                "id": pk,
                "collectionId": 100,
                "collectionTitle": "Course",
                "title": f"Lesson {pk}",
                "viewsCount": pk,
            },
        )

    async def languages(self, request: web.Request) -> web.Response:
        return web.json_response([{"code": "da", "title": "Danish"}, {"code": "de", "title": "German"}])


class FakeAnkiConnect:
    """AnkiConnect endpoint keeping notes in memory."""

    def __init__(self) -> None:
        self.notes: Dict[int, Dict[str, Any]] = {}
        self.reject_ids: set = set()
        self.error: Optional[str] = None
        self.actions: List[Dict[str, Any]] = []
        self._next_id = 1000

    def app(self) -> web.Application:
        app = web.Application()
        app.router.add_post("/", self.handle)
        return app

    def add_existing(self, lingq_id: Any) -> int:
        self._next_id += 1
        self.notes[self._next_id] = anki_note_payload(self._next_id, lingq_id)
        return self._next_id

    async def handle(self, request: web.Request) -> web.Response:
        body = await request.json()
        self.actions.append(body)
        if self.error is not None:
            return web.json_response({"result": None, "error": self.error})
        action = body["action"]
        params = body.get("params", {})
        if action == "version":
            result: Any = 6
        elif action == "findNotes":
            result = sorted(self.notes)
        elif action == "notesInfo":
            result = [self.notes[i] for i in params["notes"] if i in self.notes]
        elif action == "addNotes":
            result = []
            for note in params["notes"]:
                lingq_id = int(note["fields"]["LingQ"])
                if lingq_id in self.reject_ids:
                    result.append(None)
                    continue
                self._next_id += 1
                self.notes[self._next_id] = anki_note_payload(
                    self._next_id, lingq_id, front=note["fields"]["Front"]
                )
                result.append(self._next_id)
        elif action in ("updateNoteFields", "deleteNotes", "removeTags"):
            result = None
        else:
            return web.json_response({"result": None, "error": f"unsupported action {action}"})
        return web.json_response({"result": result, "error": None})


@pytest.fixture
async def lingq_api():
    fake = FakeLingQ()
    server = TestServer(fake.app())
    await server.start_server()
    fake.url = str(server.make_url("/api/v2"))
    yield fake
    await server.close()


@pytest.fixture
async def anki_api():
    fake = FakeAnkiConnect()
    server = TestServer(fake.app())
    await server.start_server()
    fake.url = str(server.make_url("/"))
    yield fake
    await server.close()


@pytest.fixture
async def json_server():
    """Start servers answering every request with a fixed JSON body; returns base URLs."""
    servers = []

    async def start(body: Any, status: int = 200) -> str:
        async def handler(request: web.Request) -> web.Response:
            return web.json_response(body, status=status)

        app = web.Application()
        app.router.add_route("*", "/{tail:.*}", handler)
        server = TestServer(app)
        await server.start_server()
        servers.append(server)
        return str(server.make_url("/"))

    yield start
    for server in servers:
        await server.close()


@pytest.fixture
def config(tmp_path):
    return Config(
        lingq_api_key="test-key",
        lingq_lang="da",
        lingq_page_size=100,
        cache_dir=str(tmp_path / "cache"),
    )


@pytest.fixture
def live_config(tmp_path, lingq_api, anki_api):
    """Config pointing at the fake servers."""
    return Config(
        lingq_api_key="test-key",
        lingq_lang="da",
        lingq_page_size=100,
        lingq_url=lingq_api.url,
        anki_url=anki_api.url,
        cache_dir=str(tmp_path / "cache"),
        timeout=10,
    )
