"""Tests for the NotebookLM export and media sync workflow."""

import csv
import json

import pytest

from notion_tools.workflows.notebooklm import (
    CSV_HEADER,
    INSTRUCTIONS_FILE,
    MANIFEST_FILE,
    NotebookLMWorkflow,
)

from conftest import make_api_error, make_page


def read_json(path):
    return json.loads(path.read_text(encoding="utf-8"))


@pytest.fixture
def output_dir(tmp_path):
    return tmp_path / "out"


@pytest.fixture
def workflow(client, output_dir, tmp_path):
    return NotebookLMWorkflow(
        client,
        output_dir=output_dir,
        processed_dir=tmp_path / "processed",
        site_base_url="https://blog.example.com/",
        min_content_length=20,
    )


@pytest.fixture
def exported(fake_sdk, workflow):
    """Two pages pulled into the output directory."""
    for page_id, title in (("p1", "First Post"), ("p2", "Second Post")):
        fake_sdk.add_page(make_page(page_id, title))
        fake_sdk.add_block(page_id, "heading_2", "Section")
        fake_sdk.add_block(page_id, "paragraph", f"Body of {title.lower()} with enough words.")
    return workflow.pull(fake_sdk.search_results["page"])


class TestPull:
    def test_writes_markdown_metadata_and_manifest(self, exported, output_dir):
        assert len(exported.exported) == 2

        markdown = (output_dir / "first-post.md").read_text(encoding="utf-8")
        assert markdown.startswith("# First Post\n\n**Blog URL:** https://blog.example.com/first-post\n")
        assert "## Section\nBody of first post with enough words." in markdown

        metadata = read_json(output_dir / "first-post.json")
        assert metadata["id"] == "p1"
        assert metadata["slug"] == "first-post"
        assert metadata["has_media"] is False

        manifest = read_json(output_dir / MANIFEST_FILE)
        assert manifest["total_pages"] == 2
        assert manifest["exported"] == 2
        assert [p["slug"] for p in manifest["pages"]] == ["first-post", "second-post"]

    def test_pages_with_media_skipped_unless_forced(self, fake_sdk, workflow, output_dir):
        page = make_page(
            "p1",
            "Has Video",
            VideoLink={"type": "url", "url": "https://video"},
        )
        fake_sdk.add_block("p1", "paragraph", "Plenty of body text for the export here.")

        assert workflow.pull([page]).skipped == 1
        assert not (output_dir / "has-video.md").exists()

        assert len(workflow.pull([page], force=True).exported) == 1
        assert (output_dir / "has-video.md").exists()

    def test_short_pages_skipped(self, fake_sdk, workflow):
        fake_sdk.add_block("p1", "paragraph", "Tiny.")

        result = workflow.pull([make_page("p1", "Tiny")])

        assert result.skipped == 1
        assert result.exported == []

    def test_slug_property_wins(self, fake_sdk, workflow, output_dir):
        page = make_page(
            "p1", "Some Title", Slug={"type": "rich_text", "rich_text": [{"plain_text": "custom-slug"}]}
        )
        fake_sdk.add_block("p1", "paragraph", "Plenty of body text for the export here.")

        workflow.pull([page])

        assert (output_dir / "custom-slug.md").exists()

    def test_slug_with_separators_stays_in_output_dir(self, fake_sdk, workflow, output_dir):
        page = make_page(
            "p1", "Some Title", Slug={"type": "rich_text", "rich_text": [{"plain_text": "drafts/2024/post"}]}
        )
        fake_sdk.add_block("p1", "paragraph", "Plenty of body text for the export here.")

        workflow.pull([page])

        assert (output_dir / "drafts-2024-post.md").exists()
        assert (output_dir / "drafts-2024-post.json").exists()
        assert not (output_dir / "drafts").exists()


class TestMediaRoundTrip:
    def test_list_unprocessed_and_record(self, exported, workflow, output_dir):
        workflow.write_instructions()

        assert [u["slug"] for u in workflow.list_unprocessed()] == ["first-post", "second-post"]

        media = workflow.record_media("first-post", audio_url="https://a/1.mp3")

        assert media["video_url"] is None
        assert read_json(output_dir / "first-post.media.json")["audio_url"] == "https://a/1.mp3"
        assert [u["title"] for u in workflow.list_unprocessed()] == ["Second Post"]

    def test_record_requires_a_url(self, workflow):
        with pytest.raises(ValueError):
            workflow.record_media("first-post")

    def test_record_rejects_path_separators(self, workflow, output_dir):
        with pytest.raises(ValueError):
            workflow.record_media("../escaped", audio_url="https://a/1.mp3")
        assert not (output_dir.parent / "escaped.media.json").exists()

    def test_sync_updates_page_and_archives_sidecar(self, exported, workflow, fake_sdk, output_dir, tmp_path):
        workflow.record_media("first-post", audio_url="https://a/1.mp3", video_url="https://v/1.mp4")

        stats = workflow.sync()

        assert stats.processed == 1
        assert fake_sdk.page_updates == [
            ("p1", {"VideoLink": {"url": "https://v/1.mp4"}, "AudioLink": {"url": "https://a/1.mp3"}})
        ]
        assert not (output_dir / "first-post.media.json").exists()
        assert (tmp_path / "processed" / "first-post.media.json").exists()

    def test_sync_failure_keeps_sidecar(self, exported, workflow, fake_sdk, output_dir):
        workflow.record_media("second-post", video_url="https://v/2.mp4")
        fake_sdk.fail("pages.update", "p2", make_api_error(400, message="VideoLink missing"))

        stats = workflow.sync()

        assert stats.failed == 1
        assert (output_dir / "second-post.media.json").exists()

    def test_sidecar_without_urls_is_skipped(self, exported, workflow, fake_sdk, output_dir):
        (output_dir / "first-post.media.json").write_text(
            json.dumps({"slug": "first-post", "audio_url": None, "video_url": ""}), encoding="utf-8"
        )

        stats = workflow.sync()

        assert stats.skipped == 1
        assert fake_sdk.page_updates == []

    def test_sync_with_nothing_to_do(self, workflow):
        assert workflow.sync().total == 0


class TestCsv:
    def test_generate_csv(self, exported, workflow, output_dir):
        workflow.write_instructions()
        workflow.record_media("second-post", video_url="https://v/2.mp4")

        path = workflow.generate_csv()

        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.reader(f))
        assert rows[0] == CSV_HEADER
        assert rows[1] == [
            "First Post",
            "first-post",
            "first-post.md",
            "https://blog.example.com/first-post",
            "Pending",
            "",
            "",
        ]
        assert rows[2][4:] == ["Processed", "", "https://v/2.mp4"]
        assert len(rows) == 3
        assert INSTRUCTIONS_FILE not in path.read_text(encoding="utf-8")

    def test_import_csv(self, exported, workflow, output_dir):
        path = workflow.generate_csv()
        with open(path, newline="", encoding="utf-8") as f:
            rows = list(csv.DictReader(f))
        rows[0]["AudioURL"] = "https://a/1.mp3"
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.DictWriter(f, fieldnames=CSV_HEADER)
            writer.writeheader()
            writer.writerows(rows)

        assert workflow.import_csv() == 1
        assert read_json(output_dir / "first-post.media.json")["audio_url"] == "https://a/1.mp3"
        assert not (output_dir / "second-post.media.json").exists()

    def test_import_requires_media_columns(self, workflow, tmp_path):
        path = tmp_path / "bad.csv"
        path.write_text("Title,Slug\nA,a\n", encoding="utf-8")

        with pytest.raises(ValueError):
            workflow.import_csv(path)
