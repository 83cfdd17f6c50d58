"""Which feature modules are enabled for this deployment."""

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Union

_EXTENSION = re.compile(r"\.(py|ts|js)$")


def _parse(raw: Union[str, Iterable[str]]) -> List[str]:
    items = raw.split(",") if isinstance(raw, str) else list(raw)
    names: List[str] = []
    for item in items:
        name = str(item).strip()
        if name and name not in names:
            names.append(name)
    return names


class PluginFilter:
    """Allow-list of feature names. No list at all means everything is enabled."""

    def __init__(self, enabled: Optional[Union[str, Iterable[str]]] = None) -> None:
        names = _parse(enabled) if enabled is not None else []
        self._enabled: Optional[List[str]] = names or None

    def is_enabled(self, name: str) -> bool:
        if self._enabled is None:
            return True
        return _EXTENSION.sub("", name) in self._enabled

    def enabled_plugins(self) -> Optional[List[str]]:
        """Names in configured order, or None when all plugins are enabled."""

        if self._enabled is None:
            return None
        return list(self._enabled)
