"""Screenshot files referenced by trades.

Screenshots are stored under ``data/screenshots/<trade id|unlinked>/``
and are archived by backups like any other data file. Deleting a trade
does not delete its screenshots; callers do that explicitly.
"""

import base64
import binascii
import logging
import re
import time
from datetime import datetime, timezone
from pathlib import Path, PurePath
from typing import Any, Optional

from tradejournal.config import JournalConfig
from tradejournal.db.envelope import api_operation
from tradejournal.errors import NotFoundError, ValidationError
from tradejournal.models import ScreenshotInfo

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".gif", ".webp")
UNLINKED_DIRNAME = "unlinked"

_DATA_URL_PREFIX = re.compile(r"^data:[\w/+.-]+;base64,")
_TRADE_ID_PATTERN = re.compile(r"^[A-Za-z0-9-]+$")


class ScreenshotStore:
    """Save, list and delete screenshot images."""

    def __init__(self, config: JournalConfig):
        self.config = config
        self.data_dir = config.data_dir
        self.screenshots_dir = config.screenshots_dir

    @api_operation("save screenshot")
    def save_screenshot(
        self, filename: Any, data: Any, trade_id: Optional[str] = None
    ) -> dict:
        """Store an image.

        Args:
            filename: Original file name; only its base name is kept.
            data: Raw bytes, or a base64 string (``data:`` URLs accepted).
            trade_id: Trade the screenshot belongs to, if any.

        Returns:
            ``{"path": ...}`` relative to the data directory, the form
            stored in ``Trade.screenshots``.
        """
        if not isinstance(filename, str) or not filename.strip():
            raise ValidationError("Invalid screenshot filename provided")
        name = PurePath(filename.replace("\\", "/")).name
        if not name.lower().endswith(IMAGE_EXTENSIONS):
            raise ValidationError(
                f"Unsupported screenshot type: {name} (expected {', '.join(IMAGE_EXTENSIONS)})"
            )
        if trade_id is not None and (
            not isinstance(trade_id, str) or not _TRADE_ID_PATTERN.match(trade_id)
        ):
            raise ValidationError("Invalid trade ID provided")

        content = self._decode(data)

        target_dir = self.screenshots_dir / (trade_id or UNLINKED_DIRNAME)
        target_dir.mkdir(parents=True, exist_ok=True)
        target = target_dir / f"{int(time.time() * 1000)}_{name}"
        target.write_bytes(content)

        relative = target.relative_to(self.data_dir).as_posix()
        logger.info("Saved screenshot %s (%d bytes)", relative, len(content))
        return {"path": relative}

    @api_operation("delete screenshot")
    def delete_screenshot(self, path: Any) -> str:
        """Delete a stored screenshot.

        Args:
            path: Path relative to the data directory, as returned by save.
        """
        target = self._resolve(path)
        if not target.is_file():
            raise NotFoundError("Screenshot not found")
        target.unlink()
        logger.info("Deleted screenshot %s", path)
        return path

    @api_operation("list screenshots")
    def list_screenshots(self) -> list[ScreenshotInfo]:
        """List stored screenshots, newest first."""
        if not self.screenshots_dir.exists():
            return []
        screenshots = []
        for path in self.screenshots_dir.rglob("*"):
            if not path.is_file() or not path.name.lower().endswith(IMAGE_EXTENSIONS):
                continue
            stat = path.stat()
            screenshots.append(ScreenshotInfo(
                path=path.relative_to(self.data_dir).as_posix(),
                name=path.name,
                size=stat.st_size,
                created=datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc),
            ))
        screenshots.sort(key=lambda s: s.created, reverse=True)
        return screenshots

    def _resolve(self, path: Any) -> Path:
        if not isinstance(path, str) or not path.strip():
            raise ValidationError("Invalid screenshot path provided")
        root = self.screenshots_dir.resolve()
        target = (self.data_dir / path).resolve()
        if root not in target.parents:
            raise ValidationError("Screenshot path is outside the screenshots directory")
        return target

    @staticmethod
    def _decode(data: Any) -> bytes:
        if isinstance(data, (bytes, bytearray)):
            content = bytes(data)
        elif isinstance(data, str):
            try:
                content = base64.b64decode(_DATA_URL_PREFIX.sub("", data), validate=True)
            except (binascii.Error, ValueError) as e:
                raise ValidationError("Screenshot data is not valid base64") from e
        else:
            raise ValidationError("Invalid screenshot data provided")
        if not content:
            raise ValidationError("Screenshot data is empty")
        return content
