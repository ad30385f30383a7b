"""
Filter preset storage.

Presets are named snapshots of an ActivityFilter. The insight engine only
consumes them through the PresetStore interface and does not care where they
live.
"""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from activity_insights.core.exceptions import DataValidationError
from activity_insights.data.schema import ActivityFilter, FilterPreset

logger = logging.getLogger(__name__)


class PresetStore(ABC):
    """
    Abstract preset store.

    Saving an existing name replaces that preset and moves it to the end of
    the listing; deleting an unknown name is a no-op.
    """

    @abstractmethod
    def list(self) -> List[FilterPreset]:
        pass

    @abstractmethod
    def save(self, name: str, filters: ActivityFilter) -> FilterPreset:
        pass

    @abstractmethod
    def delete(self, name: str) -> None:
        pass

    def get(self, name: str) -> Optional[FilterPreset]:
        """Look up a preset by name (used to apply it)."""
        name = name.strip()
        return next((p for p in self.list() if p.name == name), None)


def _make_preset(name: str, filters: ActivityFilter) -> FilterPreset:
    name = (name or "").strip()
    if not name:
        raise DataValidationError("Preset name must not be blank")
    try:
        return FilterPreset(name=name, filters=filters)
    except ValidationError as e:
        raise DataValidationError(f"Invalid preset {name!r}: {e}") from e


class InMemoryPresetStore(PresetStore):
    """Preset store that lives for the lifetime of the process."""

    def __init__(self) -> None:
        self._presets: Dict[str, FilterPreset] = {}

    def list(self) -> List[FilterPreset]:
        return list(self._presets.values())

    def save(self, name: str, filters: ActivityFilter) -> FilterPreset:
        preset = _make_preset(name, filters)
        self._presets.pop(preset.name, None)
        self._presets[preset.name] = preset
        return preset

    def delete(self, name: str) -> None:
        self._presets.pop(name.strip(), None)


class JsonFilePresetStore(PresetStore):
    """
    Preset store persisted as a JSON list of {"name", "filters"} objects.

    A missing file is an empty store. A corrupt file is also read as empty
    (with a warning) and is overwritten on the next save.
    """

    def __init__(self, filepath: Union[str, Path]):
        self.filepath = Path(filepath)

    def list(self) -> List[FilterPreset]:
        return list(self._load().values())

    def save(self, name: str, filters: ActivityFilter) -> FilterPreset:
        preset = _make_preset(name, filters)
        presets = self._load()
        presets.pop(preset.name, None)
        presets[preset.name] = preset
        self._write(presets)
        return preset

    def delete(self, name: str) -> None:
        presets = self._load()
        if presets.pop(name.strip(), None) is not None:
            self._write(presets)

    def _load(self) -> Dict[str, FilterPreset]:
        if not self.filepath.exists():
            return {}

        try:
            raw = json.loads(self.filepath.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Ignoring unreadable preset file %s: %s", self.filepath, e)
            return {}

        if not isinstance(raw, list):
            logger.warning("Ignoring preset file %s: expected a JSON list", self.filepath)
            return {}

        presets: Dict[str, FilterPreset] = {}
        for idx, item in enumerate(raw):
            try:
                preset = FilterPreset.model_validate(item)
            except ValidationError as e:
                logger.warning("Skipping invalid preset at index %d: %s", idx, e)
                continue
            presets.pop(preset.name, None)
            presets[preset.name] = preset
        return presets

    def _write(self, presets: Dict[str, FilterPreset]) -> None:
        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        payload = [p.model_dump(mode="json", exclude_none=True) for p in presets.values()]
        self.filepath.write_text(json.dumps(payload, indent=2), encoding="utf-8")
