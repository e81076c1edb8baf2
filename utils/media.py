import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

SIDES = ("front", "back")
MEDIA_EXTENSIONS = {
    "audio": ".m4a",
    "photo": ".jpg",
}


def _check(side: str, kind: str) -> None:
    if side not in SIDES:
        raise ValueError(f"side must be one of {', '.join(SIDES)}")
    if kind not in MEDIA_EXTENSIONS:
        raise ValueError(f"kind must be one of {', '.join(MEDIA_EXTENSIONS)}")


class MediaStore:
    """Audio recordings and photos attached to card sides, stored as files named after the card id."""

    def __init__(self, directory: Path):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, card_id: str, side: str, kind: str) -> Path:
        _check(side, kind)
        return self.directory / f"{card_id}_{side}{MEDIA_EXTENSIONS[kind]}"

    def media_path(self, card_id: str, side: str, kind: str) -> Optional[Path]:
        path = self._path(card_id, side, kind)
        return path if path.is_file() else None

    def has_media(self, card_id: str, side: str, kind: str) -> bool:
        return self.media_path(card_id, side, kind) is not None

    def save_media(self, card_id: str, side: str, kind: str, data: bytes) -> Path:
        path = self._path(card_id, side, kind)
        tmp_path = path.with_suffix(path.suffix + ".tmp")
        tmp_path.write_bytes(data)
        tmp_path.replace(path)
        logger.info("Saved %s for card %s (%s, %d bytes)", kind, card_id, side, len(data))
        return path

    def delete_media(self, card_id: str, side: str, kind: str) -> bool:
        path = self._path(card_id, side, kind)
        if not path.exists():
            return False
        path.unlink(missing_ok=True)
        return True

    def delete_all_media(self, card_id: str) -> int:
        removed = 0
        for side in SIDES:
            for kind in MEDIA_EXTENSIONS:
                if self.delete_media(card_id, side, kind):
                    removed += 1
        if removed:
            logger.info("Removed %d media files for card %s", removed, card_id)
        return removed

    def presence(self, card_id: str) -> dict:
        """{side: {kind: bool}} for every side and kind."""
        return {
            side: {kind: self.has_media(card_id, side, kind) for kind in MEDIA_EXTENSIONS}
            for side in SIDES
        }
