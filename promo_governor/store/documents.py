"""
Document Store — whole-document JSON read/replace over one data directory.

Reads are fail-soft: a missing or unparsable document logs a warning and
yields the caller's default. Schema mismatches degrade as narrowly as
possible: one bad field or list entry is dropped, not the whole document.
Writes replace the whole document atomically and propagate I/O errors.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Set, Type, TypeVar, Union

from pydantic import BaseModel, TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)

GOVERNANCE = "governance.json"
PROMO = "promo.json"
PROMO_QUEUE = "promo-queue.json"
OVERRIDES = "overrides.json"
WORTHY = "worthy.json"
FEEDBACK_SUMMARY = "feedback-summary.json"
OPS_HISTORY = "ops-history.json"
BASELINE = "baseline.json"
EXPERIMENTS = "experiments.json"
RECOMMENDATIONS = "recommendations.json"
DECISIONS_OUTPUT = "promo-decisions.json"
PATCH_AUDIT_OUTPUT = "recommendation-patch.json"


def _prune_invalid(data: Any, exc: ValidationError) -> Optional[Dict[str, Any]]:
    """
    Copy of data without whatever exc rejected, or None if nothing matched.

    A rejected entry of a list-valued field is dropped on its own; any other
    rejected top-level field is dropped whole.
    """
    if not isinstance(data, dict):
        return None
    bad_fields: Set[str] = set()
    bad_entries: Dict[str, Set[int]] = {}
    for err in exc.errors():
        loc = err["loc"]
        if not loc or loc[0] not in data:
            continue
        field = loc[0]
        if len(loc) > 1 and isinstance(loc[1], int) and isinstance(data[field], list):
            bad_entries.setdefault(field, set()).add(loc[1])
        else:
            bad_fields.add(field)
    if not bad_fields and not bad_entries:
        return None

    pruned = {}
    for key, value in data.items():
        if key in bad_fields:
            continue
        if key in bad_entries:
            value = [v for i, v in enumerate(value) if i not in bad_entries[key]]
        pruned[key] = value
    return pruned


class DocumentStore:
    """JSON documents addressed by file name inside data_dir."""

    def __init__(self, data_dir: Union[str, Path]):
        self.data_dir = Path(data_dir)

    def path_for(self, name: str) -> Path:
        return self.data_dir / name

    def read_raw(self, name: str, default: Any = None) -> Any:
        """Parsed JSON, or default when the document is absent or malformed."""
        path = self.path_for(name)
        try:
            with path.open("r", encoding="utf-8") as fh:
                return json.load(fh)
        except FileNotFoundError:
            logger.debug("%s absent, using default", name)
            return default
        except (OSError, ValueError) as exc:
            logger.warning("%s unreadable (%s), using default", name, exc)
            return default

    def load(self, name: str, model: Type[M], default: Optional[M] = None) -> M:
        """
        Read name and validate it as model, degrading field by field.

        A field (or list entry) that fails validation is dropped so the
        model default applies to it alone; every valid field is kept. Only a
        document that fails as a whole falls back to default.
        """
        fallback = default if default is not None else model()
        data = self.read_raw(name)
        if data is None:
            return fallback
        while True:
            try:
                return model.model_validate(data)
            except ValidationError as exc:
                pruned = _prune_invalid(data, exc)
                if pruned is None:
                    logger.warning(
                        "%s does not match %s (%d errors), using default",
                        name, model.__name__, exc.error_count(),
                    )
                    return fallback
                logger.warning(
                    "%s: %d invalid values dropped, defaults apply to them",
                    name, exc.error_count(),
                )
                data = pruned

    def load_list(self, name: str, item_type: Any) -> List[Any]:
        """A JSON array validated entry by entry; invalid entries are skipped."""
        raw = self.read_raw(name)
        if raw is None:
            return []
        if not isinstance(raw, list):
            logger.warning("%s is not a JSON array, using default", name)
            return []
        adapter = TypeAdapter(item_type)
        items = []
        for index, entry in enumerate(raw):
            try:
                items.append(adapter.validate_python(entry))
            except ValidationError as exc:
                logger.warning(
                    "%s: skipping entry %d (%d errors)", name, index, exc.error_count(),
                )
        return items

    def load_mapping(self, name: str, value_type: Any) -> Dict[str, Any]:
        """A JSON object validated value by value; invalid values are skipped."""
        raw = self.read_raw(name)
        if raw is None:
            return {}
        if not isinstance(raw, dict):
            logger.warning("%s is not a JSON object, using default", name)
            return {}
        adapter = TypeAdapter(value_type)
        values = {}
        for key, entry in raw.items():
            try:
                values[key] = adapter.validate_python(entry)
            except ValidationError as exc:
                logger.warning(
                    "%s: skipping %r (%d errors)", name, key, exc.error_count(),
                )
        return values

    def write(self, name: str, document: Any) -> Path:
        """Replace name with document in a single atomic write."""
        path = self.path_for(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        payload = json.dumps(document, indent=2) + "\n"
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload)
            os.replace(tmp, path)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
        logger.info("wrote %s", path)
        return path
