import pytest
import requests

from content_ingest.errors import ConfigError, FetchFailure, SourceResponseError, UnexpectedPayloadError
from content_ingest.services.catalog_fetch import fetch_catalog_works

from conftest import FakeResponse, FakeSession


def _page(count: int, start: int = 0, total: int | None = None) -> dict:
    items = [{"content_id": f"id{start + i}", "title": f"Title {start + i}", "url": "u"} for i in range(count)]
    result = {"status": 200, "items": items}
    if total is not None:
        result["total_count"] = total
    return {"result": result}


def test_requires_credentials(settings) -> None:
    settings.catalog_api_id = ""

    with pytest.raises(ConfigError):
        fetch_catalog_works(settings)


def test_single_page(settings) -> None:
    session = FakeSession(FakeResponse(200, json_data=_page(3)))

    works = fetch_catalog_works(settings, session=session)

    assert [w["content_id"] for w in works] == ["id0", "id1", "id2"]
    assert all("fetched_at" in w for w in works)
    params = session.calls[0][2]["params"]
    assert params["api_id"] == "api-id"
    assert params["offset"] == 1
    assert params["hits"] == 20


def test_paginates_until_short_page(settings) -> None:
    settings.catalog_hits_per_page = 2
    settings.catalog_max_pages = 5
    session = FakeSession(
        FakeResponse(200, json_data=_page(2, 0)),
        FakeResponse(200, json_data=_page(2, 2)),
        FakeResponse(200, json_data=_page(1, 4)),
    )

    works = fetch_catalog_works(settings, session=session)

    assert len(works) == 5
    assert [c[2]["params"]["offset"] for c in session.calls] == [1, 3, 5]


def test_stops_at_total_count(settings) -> None:
    settings.catalog_hits_per_page = 2
    settings.catalog_max_pages = 5
    session = FakeSession(FakeResponse(200, json_data=_page(2, 0, total=2)))

    works = fetch_catalog_works(settings, session=session)

    assert len(works) == 2
    assert len(session.calls) == 1


def test_non_2xx_fails(settings) -> None:
    session = FakeSession(FakeResponse(401, reason="Unauthorized"))

    with pytest.raises(SourceResponseError):
        fetch_catalog_works(settings, session=session)


def test_network_failure_surfaces_after_retries(settings) -> None:
    settings.fetch_retries = 1
    session = FakeSession(requests.ConnectionError("down"))

    with pytest.raises(FetchFailure):
        fetch_catalog_works(settings, session=session)

    assert len(session.calls) == 2


def test_unexpected_payload_fails(settings) -> None:
    session = FakeSession(FakeResponse(200, json_data=["not", "an", "envelope"]))

    with pytest.raises(UnexpectedPayloadError, match="envelope"):
        fetch_catalog_works(settings, session=session)


def test_items_must_be_a_list(settings) -> None:
    session = FakeSession(FakeResponse(200, json_data={"result": {"items": "nope"}}))

    with pytest.raises(UnexpectedPayloadError, match="not a list"):
        fetch_catalog_works(settings, session=session)


def test_non_json_body_fails(settings) -> None:
    session = FakeSession(FakeResponse(200, content=b"<html>maintenance</html>"))

    with pytest.raises(UnexpectedPayloadError, match="not JSON"):
        fetch_catalog_works(settings, session=session)
