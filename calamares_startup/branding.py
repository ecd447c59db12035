from __future__ import annotations

import enum
import logging
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import BrandingError
from .global_storage import GlobalStorage
from .lib.descriptors import load_yaml_mapping

logger = logging.getLogger(__name__)


class ImageEntry(str, enum.Enum):
    PRODUCT_LOGO = "productLogo"
    PRODUCT_ICON = "productIcon"
    PRODUCT_WELCOME = "productWelcome"


class WindowExpansion(str, enum.Enum):
    NORMAL = "normal"
    FULLSCREEN = "fullscreen"
    NO_EXPAND = "noexpand"


class Branding:
    """Parsed branding.desc.

    The link to global storage is made once, after the job queue exists.
    """

    def __init__(
        self,
        descriptor_path: Path,
        *,
        component_name: str,
        strings: Dict[str, str],
        images: Dict[ImageEntry, Path],
        style: Dict[str, str],
        slideshow: List[Path],
        expansion: WindowExpansion,
    ):
        self.descriptor_path = descriptor_path
        self.component_name = component_name
        self.strings = strings
        self.images = images
        self.style = style
        self.slideshow = slideshow
        self.expansion = expansion
        self._globals: Optional[GlobalStorage] = None

    @property
    def globals(self) -> Optional[GlobalStorage]:
        return self._globals

    def string(self, key: str) -> str:
        return self.strings.get(key, "")

    def image_path(self, kind: ImageEntry) -> Optional[Path]:
        return self.images.get(kind)

    def window_maximize(self) -> bool:
        return self.expansion is WindowExpansion.FULLSCREEN

    def set_globals(self, storage: GlobalStorage) -> None:
        if self._globals is not None and self._globals is not storage:
            raise RuntimeError("Branding is already linked to a different global storage")
        self._globals = storage
        storage.insert("branding", dict(self.strings))


def _string_map(raw: Any, key: str) -> Dict[str, str]:
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise BrandingError(f"{key} must be a mapping")
    return {str(k): str(v) for k, v in raw.items()}


def _image_file(base: Path, value: Any, key: str) -> Path:
    p = Path(str(value))
    if not p.is_absolute():
        p = base / p
    if not p.exists():
        raise BrandingError(f"image {key} not found: {p}")
    return p


def load_branding(path: Path) -> Branding:
    try:
        raw = load_yaml_mapping(path)
    except ValueError as e:
        raise BrandingError(str(e)) from e

    base = path.parent
    name = str(raw.get("componentName") or "").strip()
    if name != base.name:
        raise BrandingError(
            f"componentName {name!r} does not match branding directory {base.name!r}"
        )

    try:
        expansion = WindowExpansion(str(raw.get("windowExpanding", "normal")))
    except ValueError as e:
        raise BrandingError(f"unknown windowExpanding {raw.get('windowExpanding')!r}") from e

    image_raw = _string_map(raw.get("images"), "images")
    images: Dict[ImageEntry, Path] = {}
    for entry in ImageEntry:
        if entry.value in image_raw:
            images[entry] = _image_file(base, image_raw[entry.value], entry.value)

    slideshow_raw = raw.get("slideshow") or []
    if isinstance(slideshow_raw, str):
        slideshow = [base / slideshow_raw]
    elif isinstance(slideshow_raw, list):
        slideshow = [_image_file(base, s, "slideshow") for s in slideshow_raw]
    else:
        raise BrandingError("slideshow must be a path or a list of images")

    branding = Branding(
        path,
        component_name=name,
        strings=_string_map(raw.get("strings"), "strings"),
        images=images,
        style=_string_map(raw.get("style"), "style"),
        slideshow=slideshow,
        expansion=expansion,
    )
    logger.debug("Branding %s loaded from %s", name, path)
    return branding
