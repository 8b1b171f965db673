"""Tests for the Notion REST client, with the HTTP session stubbed out."""

import pytest
import requests

import config
from models import Collection
from notion_store import NotionStore, StoreError, create_store, equals_filter

TEAM_PAGE = {
    "object": "page",
    "id": "59833787-2cf9-4fdf-8782-e53db20768a5",
    "properties": {
        "Name": {"id": "title", "type": "title", "title": [{"type": "text", "plain_text": "Rockets"}]},
        "Challenge1": {
            "id": "abc",
            "type": "relation",
            "relation": [{"id": "c1c1c1c1-0000-0000-0000-000000000001"}],
            "has_more": False,
        },
        "Created": {"id": "d", "type": "created_time", "created_time": "2024-05-01T10:00:00.000Z"},
    },
}


class FakeResponse:
    def __init__(self, status_code=200, body=None):
        self.status_code = status_code
        self._body = body

    def json(self):
        if self._body is None:
            raise ValueError("No JSON object could be decoded")
        return self._body


@pytest.fixture
def session():
    s = requests.Session()
    s.sent = []
    s.responses = []

    def fake_request(method, url, json=None, timeout=None):
        s.sent.append({"method": method, "url": url, "json": json, "timeout": timeout})
        response = s.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    s.request = fake_request
    return s


@pytest.fixture
def store(session):
    return NotionStore(
        token="secret_abcdefghijkl",
        database_ids={Collection.TEAMS: "teams-db", Collection.CHALLENGES: "challenges-db"},
        api_url="https://api.notion.test/v1/",
        notion_version="2022-06-28",
        timeout=5,
        session=session,
    )


def test_session_headers(store, session):
    assert session.headers["Authorization"] == "Bearer secret_abcdefghijkl"
    assert session.headers["Notion-Version"] == "2022-06-28"


def test_equals_filter_text_and_number():
    assert equals_filter("Name", "Rockets") == {"property": "Name", "rich_text": {"equals": "Rockets"}}
    assert equals_filter("id", 3) == {"property": "id", "number": {"equals": 3.0}}


def test_query_by_filter_posts_to_collection_database(store, session):
    session.responses.append(FakeResponse(body={"object": "list", "results": [TEAM_PAGE], "has_more": False}))

    pages = store.query_by_filter(Collection.TEAMS, "Name", "Rockets")

    sent = session.sent[0]
    assert sent["method"] == "POST"
    assert sent["url"] == "https://api.notion.test/v1/databases/teams-db/query"
    assert sent["json"] == {"filter": {"property": "Name", "rich_text": {"equals": "Rockets"}}}
    assert sent["timeout"] == 5
    assert [p.id for p in pages] == [TEAM_PAGE["id"]]


def test_query_by_filter_number_on_challenges(store, session):
    session.responses.append(FakeResponse(body={"results": []}))

    assert store.query_by_filter(Collection.CHALLENGES, "ID", 7.0) == []
    assert session.sent[0]["url"].endswith("/databases/challenges-db/query")
    assert session.sent[0]["json"] == {"filter": {"property": "ID", "number": {"equals": 7.0}}}


def test_query_all_sends_page_size(store, session):
    session.responses.append(FakeResponse(body={"results": [TEAM_PAGE]}))

    pages = store.query_all(Collection.TEAMS, 100)

    assert session.sent[0]["json"] == {"page_size": 100}
    assert pages[0].title() == "Rockets"


def test_get_by_id_parses_typed_properties(store, session):
    session.responses.append(FakeResponse(body=TEAM_PAGE))

    page = store.get_by_id(TEAM_PAGE["id"])

    assert session.sent[0]["method"] == "GET"
    assert session.sent[0]["url"] == f"https://api.notion.test/v1/pages/{TEAM_PAGE['id']}"
    assert page.properties["Challenge1"].relation_ids() == ["c1c1c1c1-0000-0000-0000-000000000001"]
    assert page.properties["Created"].first_text() is None


def test_http_error_carries_notion_code(store, session):
    session.responses.append(FakeResponse(
        status_code=400,
        body={"object": "error", "status": 400, "code": "validation_error",
              "message": "Could not find property with name or id: Team"},
    ))

    with pytest.raises(StoreError) as excinfo:
        store.query_by_filter(Collection.TEAMS, "Team", "Rockets")

    assert excinfo.value.status_code == 400
    assert excinfo.value.code == "validation_error"
    assert "Could not find property" in str(excinfo.value)


def test_http_error_without_json_body(store, session):
    session.responses.append(FakeResponse(status_code=502))

    with pytest.raises(StoreError) as excinfo:
        store.get_by_id("page-1")

    assert excinfo.value.status_code == 502
    assert str(excinfo.value) == "HTTP 502"


def test_transport_error_becomes_store_error(store, session):
    session.responses.append(requests.ConnectionError("connection refused"))

    with pytest.raises(StoreError) as excinfo:
        store.query_all(Collection.TEAMS)

    assert excinfo.value.status_code is None
    assert isinstance(excinfo.value.__cause__, requests.ConnectionError)


def test_invalid_json_becomes_store_error(store, session):
    session.responses.append(FakeResponse(status_code=200))
    with pytest.raises(StoreError):
        store.get_by_id("page-1")


def test_unexpected_page_shape_becomes_store_error(store, session):
    session.responses.append(FakeResponse(body={"object": "page", "properties": {}}))
    with pytest.raises(StoreError):
        store.get_by_id("page-1")


def test_unconfigured_collection(session):
    store = NotionStore(token="t", database_ids={Collection.TEAMS: "teams-db"}, session=session)
    with pytest.raises(StoreError):
        store.query_all(Collection.CHALLENGES)
    assert session.sent == []


@pytest.fixture
def notion_settings(monkeypatch):
    monkeypatch.setattr(config, "NOTION_TOKEN", "secret_abcdefghijkl")
    monkeypatch.setattr(config, "TEAMS_DB_ID", "teams-db")
    monkeypatch.setattr(config, "CHALLENGES_DB_ID", "challenges-db")


def test_create_store_requires_token(notion_settings, monkeypatch):
    monkeypatch.setattr(config, "NOTION_TOKEN", "")

    with pytest.raises(RuntimeError) as excinfo:
        create_store()

    assert "NOTION_TOKEN" in str(excinfo.value)
    assert "TEAMS_DB_ID" not in str(excinfo.value)


def test_create_store_names_every_missing_database(notion_settings, monkeypatch):
    monkeypatch.setattr(config, "TEAMS_DB_ID", "")
    monkeypatch.setattr(config, "CHALLENGES_DB_ID", "")

    with pytest.raises(RuntimeError, match="TEAMS_DB_ID, CHALLENGES_DB_ID"):
        create_store()


def test_create_store_maps_collections(notion_settings):
    store = create_store()

    assert store.database_ids == {Collection.TEAMS: "teams-db", Collection.CHALLENGES: "challenges-db"}
    assert store.session.headers["Authorization"] == "Bearer secret_abcdefghijkl"
    store.close()
