from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class GlobalStorage:
    """Process-wide key/value map shared by branding and every module.

    Single-threaded access only. Writers must not overlap; anything that
    adds real concurrency has to serialize writes itself.
    """

    def __init__(self) -> None:
        self._data: Dict[str, Any] = {}

    def contains(self, key: str) -> bool:
        return key in self._data

    def insert(self, key: str, value: Any) -> None:
        logger.debug("Global storage: set %s", key)
        self._data[key] = value

    def value(self, key: str, default: Optional[Any] = None) -> Any:
        return self._data.get(key, default)

    def keys(self) -> List[str]:
        return list(self._data)
