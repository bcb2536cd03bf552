import logging
import os
import threading
from typing import Dict, Optional

from backend.data_url import encode_bytes, sniff_image_mime
from backend.prompts import HoodieColor

logger = logging.getLogger("hoodie_portrait_studio.templates")

TEMPLATE_EXTENSIONS = (".png", ".jpg", ".jpeg", ".webp")

# Paste the output of TemplateStore.export_source() here to change the defaults
DEFAULT_TEMPLATES: Dict[HoodieColor, Optional[str]] = {
    HoodieColor.GREEN: None,
    HoodieColor.BLACK: None,
    HoodieColor.WHITE: None,
}


class TemplateStore:
    """Reference hoodie image per color, held for the life of the process."""

    def __init__(self, defaults: Optional[Dict[HoodieColor, Optional[str]]] = None):
        source = DEFAULT_TEMPLATES if defaults is None else defaults
        self._templates: Dict[HoodieColor, Optional[str]] = {c: source.get(c) for c in HoodieColor}
        self._lock = threading.Lock()

    def get(self, color: HoodieColor) -> Optional[str]:
        return self._templates[HoodieColor(color)]

    def replace(self, color: HoodieColor, data_url: Optional[str]) -> None:
        color = HoodieColor(color)
        with self._lock:
            self._templates[color] = data_url
        logger.info("template replaced color=%s len=%s", color.value, len(data_url or ""))

    def snapshot(self) -> Dict[HoodieColor, Optional[str]]:
        with self._lock:
            return dict(self._templates)

    def load_dir(self, path: str) -> int:
        """Seed templates from ``<color>.<ext>`` files in ``path``.

        Returns how many colors were loaded. Unknown file names are skipped.
        """
        if not path or not os.path.isdir(path):
            logger.warning("templates dir not found: %s", path)
            return 0
        by_name = {c.value.lower(): c for c in HoodieColor}
        loaded = 0
        for name in sorted(os.listdir(path)):
            stem, ext = os.path.splitext(name)
            color = by_name.get(stem.lower())
            if color is None or ext.lower() not in TEMPLATE_EXTENSIONS:
                continue
            with open(os.path.join(path, name), "rb") as f:
                raw = f.read()
            self.replace(color, encode_bytes(sniff_image_mime(raw), raw))
            loaded += 1
        return loaded

    def export_source(self) -> str:
        lines = ["DEFAULT_TEMPLATES: Dict[HoodieColor, Optional[str]] = {"]
        for color, data_url in self.snapshot().items():
            lines.append(f"    HoodieColor.{color.name}: {data_url!r},")
        lines.append("}")
        return "\n".join(lines) + "\n"
