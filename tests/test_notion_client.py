"""Tests for Notion client."""

import pytest
from unittest.mock import Mock, patch

from notion_client.errors import RequestTimeoutError

from notion_tools.config.config_schema import NotionConfig
from notion_tools.notion.client import NotionClient
from notion_tools.notion.errors import is_transient_error, is_unsupported_block_error

from conftest import make_api_error


@pytest.fixture
def mock_notion_sdk():
    """Mock notion_client.Client."""
    with patch("notion_tools.notion.client.Client") as mock:
        yield mock


@pytest.fixture
def notion_client(mock_notion_sdk):
    """Create NotionClient with mocked SDK."""
    return NotionClient(api_key="test-api-key", rate_limit_delay=0, retry_backoff=0)


class TestNotionClient:
    """Tests for NotionClient."""

    def test_init(self, mock_notion_sdk):
        """Test client initialization."""
        client = NotionClient(api_key="test-key", rate_limit_delay=0.5)
        mock_notion_sdk.assert_called_once_with(auth="test-key")
        assert client.rate_limit_delay == 0.5

    def test_init_requires_key_or_sdk(self):
        with pytest.raises(ValueError):
            NotionClient()

    def test_from_config(self, mock_notion_sdk):
        config = NotionConfig(api_key="secret", rate_limit_delay=0.1, max_retries=5)
        client = NotionClient.from_config(config)
        mock_notion_sdk.assert_called_once_with(auth="secret")
        assert client.max_retries == 5
        assert client.rate_limit_delay == 0.1

    def test_get_page(self, notion_client):
        """Test fetching a page."""
        mock_page = {"id": "page-123", "properties": {}}
        notion_client.client.pages.retrieve.return_value = mock_page

        result = notion_client.get_page("page-123")

        notion_client.client.pages.retrieve.assert_called_once_with(page_id="page-123")
        assert result == mock_page

    def test_rate_limit_sleeps_before_each_call(self, mock_notion_sdk):
        client = NotionClient(api_key="key", rate_limit_delay=0.35)
        with patch("notion_tools.notion.client.time.sleep") as sleep:
            client.get_page("p1")
            client.get_page("p2")
        assert sleep.call_count == 2
        sleep.assert_called_with(0.35)

    def test_retries_transient_errors(self, notion_client):
        """Server errors are retried until the call succeeds."""
        notion_client.client.pages.retrieve.side_effect = [
            make_api_error(502, "bad_gateway"),
            make_api_error(429, "rate_limited"),
            {"id": "page-1"},
        ]

        assert notion_client.get_page("page-1") == {"id": "page-1"}
        assert notion_client.client.pages.retrieve.call_count == 3

    def test_gives_up_after_max_retries(self, notion_client):
        notion_client.client.pages.retrieve.side_effect = make_api_error(503, "service_unavailable")

        with pytest.raises(Exception):
            notion_client.get_page("page-1")
        assert notion_client.client.pages.retrieve.call_count == 3

    def test_permanent_errors_are_not_retried(self, notion_client):
        notion_client.client.pages.update.side_effect = make_api_error(400, "validation_error")

        with pytest.raises(Exception):
            notion_client.update_page("page-1", {"Content64_9": {"rich_text": []}})
        assert notion_client.client.pages.update.call_count == 1

    def test_backoff_grows_linearly(self, mock_notion_sdk):
        client = NotionClient(api_key="key", rate_limit_delay=0, max_retries=3, retry_backoff=2)
        client.client.pages.retrieve.side_effect = make_api_error(502, "bad_gateway")

        with patch("time.sleep") as sleep:
            with pytest.raises(Exception):
                client.get_page("page-1")

        waits = [c.args[0] for c in sleep.call_args_list]
        assert waits == [2, 4]

    def test_last_error_is_raised_unchanged(self, notion_client):
        error = make_api_error(503, "service_unavailable")
        notion_client.client.pages.retrieve.side_effect = error

        with pytest.raises(type(error)) as excinfo:
            notion_client.get_page("page-1")
        assert excinfo.value is error

    def test_max_retries_override(self, notion_client):
        notion_client.client.pages.update.side_effect = make_api_error(500, "internal_server_error")

        with pytest.raises(Exception):
            notion_client.update_page("page-1", {}, max_retries=1)
        assert notion_client.client.pages.update.call_count == 1

    def test_iter_block_children_handles_pagination(self, notion_client):
        """Test that all listing pages are fetched with the returned cursor."""
        notion_client.client.blocks.children.list.side_effect = [
            {"results": [{"id": "block-1"}], "has_more": True, "next_cursor": "cursor-1"},
            {"results": [{"id": "block-2"}], "has_more": False, "next_cursor": None},
        ]

        blocks = list(notion_client.iter_block_children("page-123"))

        assert [b["id"] for b in blocks] == ["block-1", "block-2"]
        calls = notion_client.client.blocks.children.list.call_args_list
        assert calls[0].kwargs["start_cursor"] is None
        assert calls[1].kwargs["start_cursor"] == "cursor-1"

    def test_query_database_paginates(self, notion_client):
        notion_client.client.databases.query.side_effect = [
            {"results": [{"id": "p1"}, {"id": "p2"}], "has_more": True, "next_cursor": "c"},
            {"results": [{"id": "p3"}], "has_more": False, "next_cursor": None},
        ]

        pages = list(notion_client.query_database("db-1", page_size=2))

        assert [p["id"] for p in pages] == ["p1", "p2", "p3"]
        notion_client.client.databases.query.assert_called_with(
            database_id="db-1", start_cursor="c", page_size=2
        )

    def test_search_pages_uses_object_filter(self, notion_client):
        notion_client.client.search.return_value = {"results": [{"id": "p1"}], "has_more": False}

        pages = list(notion_client.search_pages())

        assert pages == [{"id": "p1"}]
        kwargs = notion_client.client.search.call_args.kwargs
        assert kwargs["filter"] == {"property": "object", "value": "page"}
        assert "query" not in kwargs

    def test_append_children_after_sibling(self, notion_client):
        notion_client.client.blocks.children.append.return_value = {"results": []}

        notion_client.append_children("parent", [{"type": "paragraph"}], after="sibling")

        notion_client.client.blocks.children.append.assert_called_once_with(
            block_id="parent", children=[{"type": "paragraph"}], after="sibling"
        )

    def test_update_block_spreads_payload(self, notion_client):
        notion_client.update_block("b1", {"to_do": {"rich_text": [], "checked": True}})

        notion_client.client.blocks.update.assert_called_once_with(
            block_id="b1", to_do={"rich_text": [], "checked": True}
        )


class TestFindDatabase:
    """Tests for locating the blog database by name."""

    def test_prefers_title_match(self, notion_client):
        notion_client.client.search.return_value = {
            "results": [
                {"id": "db-other", "title": [{"plain_text": "Tasks"}]},
                {"id": "db-blog", "title": [{"plain_text": "My Blog Posts"}]},
            ],
            "has_more": False,
        }

        assert notion_client.find_database("Blogs") == "db-blog"

    def test_falls_back_to_first_result(self, notion_client):
        notion_client.client.search.return_value = {
            "results": [{"id": "db-1", "title": [{"plain_text": "Articles"}]}],
            "has_more": False,
        }

        assert notion_client.find_database("Blogs") == "db-1"

    def test_returns_none_without_results(self, notion_client):
        notion_client.client.search.return_value = {"results": [], "has_more": False}

        assert notion_client.find_database("Blogs") is None


class TestErrorClassification:
    def test_server_errors_are_transient(self):
        assert is_transient_error(make_api_error(500))
        assert is_transient_error(make_api_error(504))
        assert is_transient_error(make_api_error(429, "rate_limited"))

    def test_client_errors_are_permanent(self):
        assert not is_transient_error(make_api_error(400))
        assert not is_transient_error(make_api_error(404, "object_not_found"))
        assert not is_transient_error(ValueError("boom"))

    def test_timeout_is_transient(self):
        assert is_transient_error(RequestTimeoutError())

    def test_unsupported_block_error(self):
        error = make_api_error(400, message="Block type ai_block is not supported via the API.")
        assert is_unsupported_block_error(error)
        assert not is_unsupported_block_error(make_api_error(400, message="body failed validation"))


def test_mock_sdk_can_be_injected():
    sdk = Mock()
    client = NotionClient(sdk=sdk, rate_limit_delay=0)
    client.delete_block("b1")
    sdk.blocks.delete.assert_called_once_with(block_id="b1")
