import json
from types import SimpleNamespace

import pytest
from crawlpage.models import Page
from crawlpage.serialization import decode_headers, is_blank, to_int


PAGE_HTML = """
<html><body>
    <a href="/b">B</a>
    <a href="/a">A</a>
    <a href="http://other.org/">Other</a>
</body></html>
"""


def make_page():
    page = Page(
        url="http://example.com/",
        code=200,
        headers={"content-type": "text/html", "server": "nginx"},
        body=PAGE_HTML,
        depth=2,
        referer="http://example.com/start",
        response_time=150,
    )
    page.user_data.category = "gear"
    page.user_data.score = 3
    return page


def test_to_dict_keys_in_order():
    assert list(make_page().to_dict()) == [
        "url", "headers", "body", "links", "code", "depth",
        "referer", "redirect_to", "response_time", "fetched", "user_data",
    ]


def test_to_dict_computes_links():
    data = make_page().to_dict()
    assert data["links"] == ["http://example.com/a", "http://example.com/b"]


def test_to_dict_blank_fields():
    page = Page(url="http://example.com/")
    page.user_data = None
    data = page.to_dict()
    assert data["referer"] == ""
    assert data["redirect_to"] == ""
    assert data["user_data"] == {}
    assert data["fetched"] is False


def test_round_trip_through_dict():
    page = make_page()
    restored = Page.from_dict(page.to_dict())

    assert restored.url == page.url
    assert restored.headers == page.headers
    assert restored.body == page.body
    assert restored.links == page.links
    assert restored.code == 200
    assert restored.depth == 2
    assert restored.referer == "http://example.com/start"
    assert restored.redirect_to is None
    assert restored.response_time == 150
    assert restored.fetched is True
    assert vars(restored.user_data) == {"category": "gear", "score": 3}


def test_round_trip_through_json():
    page = make_page()
    restored = Page.from_json(page.to_json())

    assert restored.url == page.url
    assert restored.headers == page.headers
    assert restored.body == page.body
    assert restored.links == page.links
    assert restored.code == 200
    assert restored.response_time == 150
    assert vars(restored.user_data) == {"category": "gear", "score": 3}


def test_redirect_to_survives_round_trip():
    page = Page(url="http://example.com/", code=302, redirect_to="/moved")
    restored = Page.from_dict(page.to_dict())
    assert restored.redirect_to == "http://example.com/moved"


def test_to_json_drops_empty_values():
    page = Page(url="http://example.com/", code=200, body="")
    data = json.loads(page.to_json())
    assert "body" not in data
    assert "user_data" not in data
    assert "links" not in data
    assert "referer" not in data
    assert "redirect_to" not in data
    assert "response_time" not in data
    assert data == {"url": "http://example.com/", "code": 200, "depth": 0, "fetched": True}


def test_to_json_drops_headers_without_content_type():
    page = Page(url="http://example.com/", headers={"server": "nginx"})
    assert "headers" not in json.loads(page.to_json())


def test_to_json_keeps_headers_with_content_type():
    data = json.loads(make_page().to_json())
    assert data["headers"] == {"content-type": ["text/html"], "server": ["nginx"]}


def test_to_json_decodes_bytes_body():
    page = Page(url="http://example.com/", code=200, headers={"content-type": "text/plain"}, body=b"caf\xc3\xa9")
    assert json.loads(page.to_json())["body"] == "café"


def test_from_dict_minimal():
    page = Page.from_dict({"url": "http://example.com/"})
    assert page.headers == {"content-type": [""]}
    assert page.body is None
    assert page.links == []
    assert page.code == 0
    assert page.depth == 0
    assert page.response_time == 0
    assert page.redirect_to is None
    assert page.user_data is None
    assert page.fetched is None


def test_from_dict_malformed_numbers_become_zero():
    page = Page.from_dict({"url": "http://example.com/", "code": "abc", "depth": None, "response_time": "12"})
    assert page.code == 0
    assert page.depth == 0
    assert page.response_time == 12


def test_from_dict_restored_links_are_not_recomputed():
    page = Page.from_dict({
        "url": "http://example.com/",
        "headers": {"content-type": ["text/html"]},
        "body": PAGE_HTML,
        "links": ["http://example.com/z"],
    })
    assert page.links == ["http://example.com/z"]


def test_from_dict_headers_as_json_string():
    page = Page.from_dict({"url": "http://example.com/", "headers": '{"content-type": ["text/plain"]}'})
    assert page.content_type == "text/plain"


@pytest.mark.parametrize("blob", ["not json", "[1, 2]"])
def test_from_dict_unreadable_headers_fall_back_to_defaults(blob, caplog):
    page = Page.from_dict({"url": "http://example.com/", "headers": blob})
    assert page.headers == {"content-type": [""]}
    assert "using defaults" in caplog.text


def test_user_data_absent_vs_empty():
    page = Page(url="http://example.com/")
    # an empty bag is written out as {} and comes back as an empty bag ...
    assert Page.from_dict(page.to_dict()).user_data == SimpleNamespace()
    # ... but JSON drops it, so it comes back unset
    assert Page.from_json(page.to_json()).user_data is None


@pytest.mark.parametrize("value,expected", [(None, True), ("", True), (b"", True), ([], True), ({}, True),
                                            (0, False), (False, False), ("x", False), ([1], False)])
def test_is_blank(value, expected):
    assert is_blank(value) is expected


@pytest.mark.parametrize("value,expected", [("7", 7), (7.9, 7), (None, 0), ("x", 0), ("", 0)])
def test_to_int(value, expected):
    assert to_int(value) == expected


def test_decode_headers_defaults():
    assert decode_headers(None) == {"content-type": [""]}
    assert decode_headers({}) == {"content-type": [""]}
