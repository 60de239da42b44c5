"""
JsonRegistryAdapter - Implements IRegistryRepository on a single JSON file.

The file holds a JSON array of donor objects, indented for humans.
A missing, empty or unparseable file is reset to [] rather than failing the
caller: the registry is a secondary log, the payment itself was already
verified upstream. Single writer only; there is no cross-process locking.
"""

import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List

from ..domain.entities.donor import Donor
from ..domain.interfaces.i_registry_repository import (
    IRegistryRepository,
    SaveRegistryResult,
)

logger = logging.getLogger(__name__)

EMPTY_REGISTRY = "[]"


class RegistryCorruptionError(ValueError):
    """The registry file exists but does not hold a donor array."""


def _parse_registry(text: str) -> List[Donor]:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as e:
        raise RegistryCorruptionError(f"invalid JSON: {e}") from e
    if not isinstance(raw, list):
        raise RegistryCorruptionError(
            f"expected a JSON array at the root, got {type(raw).__name__}"
        )
    try:
        donors = [Donor.from_dict(row) for row in raw]
    except (ValueError, TypeError) as e:
        raise RegistryCorruptionError(f"malformed donor record: {e}") from e
    for donor in donors:
        if donor.missing_timestamps:
            logger.warning(
                f"[Registry] Donor {donor.email} has a null or missing timestamp, keeping as-is"
            )
    return donors


def _serialize_registry(donors: List[Donor]) -> str:
    return json.dumps([d.to_dict() for d in donors], indent=2, ensure_ascii=False)


class JsonRegistryAdapter(IRegistryRepository):
    """File-backed donor registry. Blocking I/O runs in a worker thread."""

    def __init__(self, path: str):
        self.path = Path(path)

    async def load(self) -> List[Donor]:
        return await asyncio.to_thread(self._load_sync)

    async def save(self, donors: List[Donor]) -> SaveRegistryResult:
        return await asyncio.to_thread(self._save_sync, donors)

    # ── Sync implementations ──────────────────────────────────────────────

    def _load_sync(self) -> List[Donor]:
        try:
            if not self.path.exists():
                logger.info(f"[Registry] Creating empty registry at {self.path}")
                self._write_text(EMPTY_REGISTRY)
                return []

            text = self.path.read_text(encoding="utf-8")
            if not text.strip():
                self._write_text(EMPTY_REGISTRY)
                return []

            donors = _parse_registry(text)
            logger.debug(f"[Registry] Loaded {len(donors)} donor(s) from {self.path}")
            return donors

        except (RegistryCorruptionError, OSError, UnicodeDecodeError) as e:
            logger.error(f"[Registry] Error loading {self.path}, resetting to []: {e}")
            self._reset()
            return []

    def _save_sync(self, donors: List[Donor]) -> SaveRegistryResult:
        try:
            self._write_text(_serialize_registry(donors))
            logger.debug(f"[Registry] Saved {len(donors)} donor(s) to {self.path}")
            return SaveRegistryResult(success=True, donor_count=len(donors))
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"[Registry] Error saving {self.path}: {e}")
            return SaveRegistryResult(
                success=False,
                donor_count=len(donors),
                error=str(e),
            )

    # ── Private helpers ───────────────────────────────────────────────────

    def _reset(self) -> None:
        try:
            self._write_text(EMPTY_REGISTRY)
        except OSError as e:
            logger.error(f"[Registry] Could not reset {self.path}: {e}")

    def _write_text(self, text: str) -> None:
        """Write via a sibling temp file so a crash never leaves a truncated registry."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(tmp_name, self.path)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
            raise
