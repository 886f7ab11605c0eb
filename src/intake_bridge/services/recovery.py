"""Local persistence for the intake client.

One JSON file holds three independent entries:

- ``lastSurvey``: a copy of the last successful submission. Written after
  every successful submit and only read back when someone asks for it;
  nothing restores it automatically.
- ``surveyDraft``: the in-progress form, without attachments. Saved while
  the user edits, merged back when the form opens, deleted after a
  successful submit.
- ``scriptUrl``: an endpoint override, saved only after a directory fetch
  through it returned live data.
"""

from __future__ import annotations

import dataclasses
import json
import os
from pathlib import Path
from typing import Any, Protocol

from intake_bridge.constants import API_URL_KEY, DRAFT_KEY, RECOVERY_KEY
from intake_bridge.core.types import SurveyForm

# Attachments are too large for the draft entry
_DRAFT_FIELDS = tuple(
    f.name for f in dataclasses.fields(SurveyForm) if f.name != "attachments"
)


def form_to_draft(form: SurveyForm) -> dict[str, Any]:
    """Serializable form state, attachments excluded."""
    draft: dict[str, Any] = {}
    for name in _DRAFT_FIELDS:
        value = getattr(form, name)
        draft[name] = list(value) if isinstance(value, tuple) else value
    return draft


def form_from_draft(draft: dict[str, Any] | None, **prefill: Any) -> SurveyForm:
    """Merge defaults, then ``draft``, then non-``None`` ``prefill`` values.

    Unknown keys in the draft are ignored, so drafts written by an older
    version still load.
    """
    values = {k: v for k, v in (draft or {}).items() if k in _DRAFT_FIELDS}
    values.update({k: v for k, v in prefill.items() if v is not None})
    return SurveyForm(**values)


class RecoveryStore(Protocol):
    def save(self, payload: dict[str, Any]) -> None: ...

    def load(self) -> dict[str, Any] | None: ...

    def save_draft(self, form: SurveyForm) -> None: ...

    def load_draft(self) -> dict[str, Any] | None: ...

    def clear_draft(self) -> None: ...

    def save_api_url(self, url: str) -> None: ...

    def load_api_url(self) -> str | None: ...


class JSONRecoveryStore:
    """Keyed JSON file store.

    Uses copy-on-write: write to a temp file and rename for atomicity.
    File shape: ``{"lastSurvey": {...}, "surveyDraft": {...}, "scriptUrl": "..."}``
    """

    def __init__(self, path: str | os.PathLike[str], key: str = RECOVERY_KEY) -> None:
        self._path = Path(path)
        self._key = key

    @property
    def path(self) -> Path:
        return self._path

    # --- last successful submission ---

    def save(self, payload: dict[str, Any]) -> None:
        self._put(self._key, payload)

    def load(self) -> dict[str, Any] | None:
        entry = self._read_all().get(self._key)
        return entry if isinstance(entry, dict) else None

    # --- in-progress draft ---

    def save_draft(self, form: SurveyForm) -> None:
        self._put(DRAFT_KEY, form_to_draft(form))

    def load_draft(self) -> dict[str, Any] | None:
        entry = self._read_all().get(DRAFT_KEY)
        return entry if isinstance(entry, dict) else None

    def clear_draft(self) -> None:
        data = self._read_all()
        if data.pop(DRAFT_KEY, None) is not None:
            self._write_all(data)

    # --- endpoint override ---

    def save_api_url(self, url: str) -> None:
        self._put(API_URL_KEY, url)

    def load_api_url(self) -> str | None:
        entry = self._read_all().get(API_URL_KEY)
        return entry if isinstance(entry, str) and entry else None

    def _put(self, key: str, value: Any) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def _write_all(self, data: dict[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp.write_text(json.dumps(data, indent=2), encoding="utf-8")
        tmp.replace(self._path)

    def _read_all(self) -> dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            result = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError):
            return {}
        return result if isinstance(result, dict) else {}
