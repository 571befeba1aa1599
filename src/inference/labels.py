"""
Class label table.

Loaded once at startup and shared read-only by every decode call.
Accepted files:
- JSON object keyed by stringified index: {"0": "person", "1": "bicycle"}
- JSON list: ["person", "bicycle", ...]
- Plain text label map, one label per line (line number is the index)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Union


def fallback_label(class_index: Union[int, float]) -> str:
    return f"Class {class_index}"


class LabelTable:
    """Immutable index -> label mapping with a synthesized fallback."""

    def __init__(self, labels: Optional[Mapping[Any, str]] = None):
        table: Dict[int, str] = {}
        for key, value in (labels or {}).items():
            if value is None or value == "":
                continue
            try:
                table[int(key)] = str(value)
            except (TypeError, ValueError):
                logging.warning(f"Ignoring non-numeric label key: {key!r}")
        self._labels = MappingProxyType(table)

    def lookup(self, class_index: int) -> str:
        """Resolve a label; unknown indices get "Class {index}"."""
        label = self._labels.get(class_index)
        return label if label else fallback_label(class_index)

    def __getitem__(self, class_index: int) -> str:
        return self.lookup(class_index)

    def __contains__(self, class_index: object) -> bool:
        return class_index in self._labels

    def __len__(self) -> int:
        return len(self._labels)

    @classmethod
    def from_json(cls, data: Union[Dict[str, Any], list]) -> "LabelTable":
        """Adapter: Create from parsed JSON (object or list)."""
        if isinstance(data, list):
            return cls(dict(enumerate(data)))
        if isinstance(data, dict):
            return cls(data)
        raise ValueError(f"Unsupported label data type: {type(data).__name__}")

    @classmethod
    def load(cls, path: Union[str, Path]) -> "LabelTable":
        """
        Load a label file (.json or plain text).

        Raises:
            FileNotFoundError: If the file does not exist.
            ValueError: If the JSON payload is neither an object nor a list.
        """
        path = Path(path)
        text = path.read_text(encoding="utf-8")
        if path.suffix.lower() == ".json":
            table = cls.from_json(json.loads(text))
        else:
            lines = [line.strip() for line in text.splitlines()]
            table = cls({i: line for i, line in enumerate(lines) if line and line != "???"})
        logging.info(f"Loaded {len(table)} labels from {path}")
        return table
