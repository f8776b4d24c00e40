"""Session state store - the single owner of mutable session data.

Every mutator works on a copy of the state, bumps the version counter by
one, writes the copy to disk, and only then makes it current. A failed
write leaves the in-memory state exactly as it was.

Several processes may share one state file. Reads and mutations first
adopt any newer version another process has written, so each change is
applied on top of the latest saved state.
"""

from __future__ import annotations
import json
import logging
import os
import tempfile
import threading
from pathlib import Path
from typing import Callable, Optional

from war_council.errors import NoDraftError, PersistenceError, ValidationError
from war_council.models.session import (
    ChatEntry,
    Draft,
    HistoryEntry,
    HistoryKind,
    ResponsePayload,
    SessionState,
)

logger = logging.getLogger(__name__)


def _require(value: Optional[str], field: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field} required")
    return value


def _prepend_history(state: SessionState, advisor_id: str, entry: HistoryEntry) -> None:
    state.history.setdefault(advisor_id, []).insert(0, entry)


class SessionStore:
    """Versioned, persisted session state."""

    def __init__(self, path: Optional[Path] = None):
        self.path = path
        self._lock = threading.RLock()
        self._seen: Optional[tuple[int, int]] = None
        self._state = self._load()

    # ===== Persistence =====

    def _signature(self) -> Optional[tuple[int, int]]:
        """(mtime_ns, size) of the state file, or None when there is none."""
        if self.path is None:
            return None
        try:
            st = self.path.stat()
        except FileNotFoundError:
            return None
        return st.st_mtime_ns, st.st_size

    def _read(self) -> Optional[SessionState]:
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            return SessionState(**{**SessionState().model_dump(), **raw})
        except Exception:
            logger.warning("Failed to read state from %s", self.path, exc_info=True)
            return None

    def _load(self) -> SessionState:
        if self.path is None or not self.path.exists():
            return SessionState()
        self._seen = self._signature()
        state = self._read()
        if state is None:
            logger.warning("Starting fresh session state")
            return SessionState()
        return state

    def _refresh(self) -> None:
        """Adopt the file's state if another process wrote a newer version.

        Caller holds the lock.
        """
        signature = self._signature()
        if signature is None or signature == self._seen:
            return
        disk = self._read()
        self._seen = signature
        if disk is not None and disk.updated_index > self._state.updated_index:
            logger.debug("state reloaded from %s -> updated_index=%d", self.path, disk.updated_index)
            self._state = disk

    def _save(self, state: SessionState) -> None:
        if self.path is None:
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(dir=self.path.parent, prefix=".state-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    f.write(state.model_dump_json(indent=2))
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise PersistenceError(f"Failed to persist session state to {self.path}: {e}") from e
        self._seen = self._signature()

    def _mutate(self, action: str, change: Callable[[SessionState], None]) -> SessionState:
        """Apply `change` to a copy of the latest state, bump the version, persist, then commit."""
        with self._lock:
            self._refresh()
            candidate = self._state.model_copy(deep=True)
            change(candidate)
            candidate.updated_index = self._state.updated_index + 1
            self._save(candidate)
            self._state = candidate
            logger.info("state %s -> updated_index=%d", action, candidate.updated_index)
            return candidate.model_copy(deep=True)

    # ===== Reads =====

    @property
    def state(self) -> SessionState:
        """A detached copy of the current state."""
        with self._lock:
            self._refresh()
            return self._state.model_copy(deep=True)

    @property
    def updated_index(self) -> int:
        with self._lock:
            self._refresh()
            return self._state.updated_index

    def history(self, advisor_id: str) -> list[HistoryEntry]:
        """Past drafts and commits for one advisor, newest first."""
        with self._lock:
            self._refresh()
            return list(self._state.history.get(advisor_id, []))

    def chat(self) -> list[ChatEntry]:
        with self._lock:
            self._refresh()
            return [e.model_copy() for e in self._state.chat]

    def support_indicator(self, advisor_id: str) -> Optional[int]:
        """Draft support if rated, else the last spoken support, else None."""
        with self._lock:
            self._refresh()
            return self._state.support_indicator(advisor_id)

    # ===== Mutations =====

    def record_input(self, speaker: str, text: str, target_name: Optional[str] = None) -> ChatEntry:
        """Append a chat line and make it the last input."""
        _require(speaker, "from")
        _require(text, "text")
        entry = ChatEntry(speaker=speaker, target_name=target_name or None, text=text)

        def change(state: SessionState) -> None:
            state.chat.append(entry)
            state.last_input = entry

        self._mutate("input", change)
        return entry

    def set_plan(self, speaker: str, text: Optional[str]) -> str:
        """Replace the plan text. An empty text clears the plan."""
        _require(speaker, "from")
        plan = text or ""

        def change(state: SessionState) -> None:
            state.plan_text = plan
            state.last_input = ChatEntry(speaker=speaker, text=plan)

        self._mutate("plan", change)
        return plan

    def record_draft(self, advisor_id: str, payload: ResponsePayload) -> Draft:
        """Store a fresh draft and log it in the advisor's history."""
        _require(advisor_id, "councilorId")
        draft = Draft(support=payload.support, speech=payload.speech)

        def change(state: SessionState) -> None:
            state.drafts[advisor_id] = draft
            _prepend_history(state, advisor_id, HistoryEntry(
                kind=HistoryKind.DRAFT,
                support=draft.support,
                speech=draft.speech,
                ts=draft.ts,
            ))

        self._mutate("response", change)
        return draft

    def commit_draft(self, advisor_id: str) -> Draft:
        """Move the current draft into the spoken record and support score."""
        _require(advisor_id, "councilorId")
        with self._lock:
            self._refresh()
            draft = self._state.drafts.get(advisor_id)
            if draft is None:
                raise NoDraftError(advisor_id)
            committed = Draft(support=draft.support, speech=draft.speech)

            def change(state: SessionState) -> None:
                state.last_spoken[advisor_id] = committed
                state.support[advisor_id] = committed.support
                _prepend_history(state, advisor_id, HistoryEntry(
                    kind=HistoryKind.COMMIT,
                    support=committed.support,
                    speech=committed.speech,
                    ts=committed.ts,
                ))

            self._mutate("commit", change)
        return committed

    def append_history(self, advisor_id: str, kind: HistoryKind, payload: ResponsePayload) -> HistoryEntry:
        """Prepend an entry to one advisor's history."""
        _require(advisor_id, "councilorId")
        entry = HistoryEntry(kind=kind, support=payload.support, speech=payload.speech)
        self._mutate("history", lambda state: _prepend_history(state, advisor_id, entry))
        return entry

    def add_world_update(self, notice: str) -> None:
        """Publish a world-update notice to every advisor's context."""
        _require(notice, "text")
        self._mutate("world_update", lambda state: state.world_updates.append(notice))

    def reset(self) -> SessionState:
        """Replace the whole state with a fresh default, keeping the version moving."""

        def change(state: SessionState) -> None:
            fresh = SessionState()
            for field in SessionState.model_fields:
                setattr(state, field, getattr(fresh, field))

        return self._mutate("reset", change)
