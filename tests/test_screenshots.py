"""Tests for screenshot storage.

**Feature: trading-journal**
"""

import base64
import tempfile
from pathlib import Path

import pytest

from tradejournal.config import JournalConfig
from tradejournal.db.screenshots import ScreenshotStore

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
TRADE_ID = "a1b2c3d4-e5f6-4890-9bcd-ef1234567890"


@pytest.fixture
def screenshots():
    """Create a screenshot store in a temporary directory."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield ScreenshotStore(JournalConfig(base_dir=Path(tmpdir)))


class TestSaveScreenshot:
    """
    **Feature: trading-journal, Property 25: Screenshot Storage**

    *For any* image saved, the returned path is relative to the data
    directory and points at the stored bytes.
    """

    def test_save_bytes_for_trade(self, screenshots: ScreenshotStore):
        response = screenshots.save_screenshot("chart.png", PNG_BYTES, trade_id=TRADE_ID)

        assert response.success, response.error
        path = response.data["path"]
        assert path.startswith(f"screenshots/{TRADE_ID}/")
        assert path.endswith("_chart.png")
        assert (screenshots.data_dir / path).read_bytes() == PNG_BYTES

    def test_unlinked(self, screenshots: ScreenshotStore):
        path = screenshots.save_screenshot("chart.PNG", PNG_BYTES).data["path"]
        assert path.startswith("screenshots/unlinked/")

    @pytest.mark.parametrize(
        "payload",
        [
            base64.b64encode(PNG_BYTES).decode(),
            "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode(),
        ],
    )
    def test_save_base64(self, screenshots: ScreenshotStore, payload: str):
        path = screenshots.save_screenshot("chart.png", payload).data["path"]
        assert (screenshots.data_dir / path).read_bytes() == PNG_BYTES

    def test_directory_parts_of_filename_dropped(self, screenshots: ScreenshotStore):
        path = screenshots.save_screenshot("../../evil/chart.png", PNG_BYTES).data["path"]

        assert path.startswith("screenshots/unlinked/")
        assert ".." not in path

    @pytest.mark.parametrize(
        "filename,data,trade_id",
        [
            ("notes.txt", PNG_BYTES, None),
            ("", PNG_BYTES, None),
            ("chart.png", b"", None),
            ("chart.png", "%%% not base64 %%%", None),
            ("chart.png", 12345, None),
            ("chart.png", PNG_BYTES, "../escape"),
        ],
    )
    def test_rejects_bad_input(self, screenshots: ScreenshotStore, filename, data, trade_id):
        response = screenshots.save_screenshot(filename, data, trade_id=trade_id)

        assert not response.success
        assert response.error_kind == "ValidationError"
        assert response.error.startswith("Failed to save screenshot")


class TestListAndDeleteScreenshots:
    """
    **Feature: trading-journal, Property 26: Screenshot Listing and Deletion**

    *For any* saved screenshot, it is listed until deleted, and delete
    only touches files inside the screenshots directory.
    """

    def test_list_empty(self, screenshots: ScreenshotStore):
        response = screenshots.list_screenshots()
        assert response.success
        assert response.data == []

    def test_list_then_delete(self, screenshots: ScreenshotStore):
        path = screenshots.save_screenshot("chart.png", PNG_BYTES, trade_id=TRADE_ID).data["path"]

        listed = screenshots.list_screenshots().data
        assert [info.path for info in listed] == [path]
        assert listed[0].size == len(PNG_BYTES)

        assert screenshots.delete_screenshot(path).success
        assert screenshots.list_screenshots().data == []

    def test_delete_missing(self, screenshots: ScreenshotStore):
        response = screenshots.delete_screenshot("screenshots/unlinked/nope.png")

        assert not response.success
        assert response.error == "Failed to delete screenshot: Screenshot not found"

    @pytest.mark.parametrize("path", ["trades/2025/x.json", "../outside.png", "", None])
    def test_delete_outside_rejected(self, screenshots: ScreenshotStore, path):
        response = screenshots.delete_screenshot(path)

        assert not response.success
        assert response.error_kind == "ValidationError"
