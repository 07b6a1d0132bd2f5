"""Session subcontext: chat sessions, their messages and their files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import ValidationError

from neuroshell.errors import (
    DuplicateNameError,
    InvalidNameError,
    NotFoundError,
    PersistenceError,
)
from neuroshell.models import DEFAULT_SYSTEM_PROMPT, ChatSession, Message

if TYPE_CHECKING:
    from neuroshell.context.context import NeuroContext

log = logging.getLogger(__name__)


def validate_session_name(name: str) -> None:
    """Raise ``InvalidNameError`` if *name* cannot name a session."""
    if not name:
        raise InvalidNameError("session name cannot be empty")
    if any(c in name for c in "\n\r\t"):
        raise InvalidNameError("session name cannot contain newlines or tabs")
    if name != name.strip(" "):
        raise InvalidNameError("session name cannot start or end with spaces")


class SessionSubcontext:
    """Session operations over the context's session table.

    Sessions are returned as deep copies; all mutation goes through this
    class so the name index and the active flag stay consistent.
    """

    def __init__(self, context: NeuroContext):
        self._ctx = context
        self._table = context.session_table

    # Lookup

    def _require(self, session_id: str) -> ChatSession:
        session = self._table.sessions.get(session_id)
        if session is None:
            raise NotFoundError(f"session with ID {session_id} not found")
        return session

    def get_session(self, session_id: str) -> ChatSession:
        with self._table.lock:
            return self._require(session_id).model_copy(deep=True)

    def get_session_by_name(self, name: str) -> ChatSession:
        with self._table.lock:
            session_id = self._table.names.id_for(name)
            if session_id is None:
                raise NotFoundError(f"session with name {name} not found")
            return self._require(session_id).model_copy(deep=True)

    def get_active_session(self) -> ChatSession:
        with self._table.lock:
            if not self._table.active_id:
                raise NotFoundError("no active session")
            return self._require(self._table.active_id).model_copy(deep=True)

    def active_session_id(self) -> str:
        with self._table.lock:
            return self._table.active_id

    def list_sessions(self) -> list[ChatSession]:
        with self._table.lock:
            return [s.model_copy(deep=True) for s in self._table.sessions.values()]

    def session_name_to_id(self) -> dict[str, str]:
        with self._table.lock:
            return self._table.names.name_to_id()

    def session_count(self) -> int:
        with self._table.lock:
            return len(self._table.sessions)

    # Lifecycle

    def create_session(self, name: str, system_prompt: str = "") -> ChatSession:
        """Create a session and make it the active one.

        Raises:
            InvalidNameError: If *name* fails validation.
            DuplicateNameError: If another session already uses *name*.
        """
        validate_session_name(name)
        session_id = self._ctx.new_id()
        now = self._ctx.now()
        session = ChatSession(
            id=session_id,
            name=name,
            system_prompt=system_prompt or DEFAULT_SYSTEM_PROMPT,
            created_at=now,
            updated_at=now,
            is_active=True,
        )
        with self._table.lock:
            if self._table.names.has_name(name):
                raise DuplicateNameError("session", name)
            self._deactivate_current()
            self._table.sessions[session_id] = session
            self._table.names.bind(name, session_id)
            self._table.active_id = session_id
            result = session.model_copy(deep=True)
        log.debug("created session %s (%s)", name, session_id)
        return result

    def set_active_session(self, session_id: str) -> None:
        with self._table.lock:
            session = self._require(session_id)
            self._deactivate_current()
            session.is_active = True
            self._table.active_id = session_id
        log.debug("activated session %s", session_id)

    def _deactivate_current(self) -> None:
        previous = self._table.sessions.get(self._table.active_id)
        if previous is not None:
            previous.is_active = False

    def delete_session(self, session_id: str) -> None:
        with self._table.lock:
            self._require(session_id)
            del self._table.sessions[session_id]
            self._table.names.unbind_id(session_id)
            if self._table.active_id == session_id:
                self._table.active_id = ""
        log.debug("deleted session %s", session_id)

    def rename_session(self, session_id: str, new_name: str) -> None:
        validate_session_name(new_name)
        now = self._ctx.now()
        with self._table.lock:
            session = self._require(session_id)
            owner = self._table.names.id_for(new_name)
            if owner is not None and owner != session_id:
                raise DuplicateNameError("session", new_name)
            session.name = new_name
            session.updated_at = now
            self._table.names.rename(session_id, new_name)

    def copy_session(self, source_id: str, target_name: str) -> ChatSession:
        """Copy a session under a new name; the copy's messages get fresh ids."""
        validate_session_name(target_name)
        with self._table.lock:
            source = self._require(source_id).model_copy(deep=True)
        new_id = self._ctx.new_id()
        now = self._ctx.now()
        messages = [
            msg.model_copy(update={"id": self._ctx.new_id()}) for msg in source.messages
        ]
        copied = ChatSession(
            id=new_id,
            name=target_name,
            system_prompt=source.system_prompt,
            messages=messages,
            created_at=now,
            updated_at=now,
            is_active=False,
        )
        with self._table.lock:
            if self._table.names.has_name(target_name):
                raise DuplicateNameError("session", target_name)
            self._table.sessions[new_id] = copied
            self._table.names.bind(target_name, new_id)
            return copied.model_copy(deep=True)

    # Messages

    def add_user_message(self, session_id: str, content: str) -> Message:
        return self._add_message(session_id, "user", content)

    def add_assistant_message(self, session_id: str, content: str) -> Message:
        return self._add_message(session_id, "assistant", content)

    def _add_message(self, session_id: str, role: str, content: str) -> Message:
        now = self._ctx.now()
        message = Message(id=self._ctx.new_id(), role=role, content=content, timestamp=now)
        with self._table.lock:
            session = self._require(session_id)
            session.messages.append(message)
            session.updated_at = now
            return message.model_copy()

    def get_messages(self, session_id: str) -> list[Message]:
        with self._table.lock:
            return [m.model_copy() for m in self._require(session_id).messages]

    def update_message(self, session_id: str, message_id: str, content: str) -> None:
        now = self._ctx.now()
        with self._table.lock:
            session = self._require(session_id)
            for message in session.messages:
                if message.id == message_id:
                    message.content = content
                    session.updated_at = now
                    return
        raise NotFoundError(f"message with ID {message_id} not found in session {session_id}")

    def delete_message(self, session_id: str, message_id: str) -> None:
        now = self._ctx.now()
        with self._table.lock:
            session = self._require(session_id)
            for index, message in enumerate(session.messages):
                if message.id == message_id:
                    del session.messages[index]
                    session.updated_at = now
                    return
        raise NotFoundError(f"message with ID {message_id} not found in session {session_id}")

    def get_last_message(self, session_id: str) -> Message:
        with self._table.lock:
            session = self._require(session_id)
            if not session.messages:
                raise NotFoundError("no messages in session")
            return session.messages[-1].model_copy()

    def message_count(self, session_id: str) -> int:
        with self._table.lock:
            session = self._table.sessions.get(session_id)
            return len(session.messages) if session is not None else 0

    def get_system_prompt(self, session_id: str) -> str:
        with self._table.lock:
            return self._require(session_id).system_prompt

    def set_system_prompt(self, session_id: str, system_prompt: str) -> None:
        now = self._ctx.now()
        with self._table.lock:
            session = self._require(session_id)
            session.system_prompt = system_prompt
            session.updated_at = now

    # Search

    def find_session_by_name_prefix(self, prefix: str) -> ChatSession:
        with self._table.lock:
            session_id = self._table.names.id_for(prefix)
            if session_id is None:
                session_id = next(
                    (
                        self._table.names.id_for(name)
                        for name in self._table.names.names()
                        if name.startswith(prefix)
                    ),
                    None,
                )
            if session_id is None:
                raise NotFoundError(f"no session found with name prefix: {prefix}")
            return self._require(session_id).model_copy(deep=True)

    def find_session_by_id_prefix(self, prefix: str) -> ChatSession:
        with self._table.lock:
            if prefix in self._table.sessions:
                return self._table.sessions[prefix].model_copy(deep=True)
            for session_id in sorted(self._table.sessions):
                if session_id.startswith(prefix):
                    return self._table.sessions[session_id].model_copy(deep=True)
        raise NotFoundError(f"no session found with ID prefix: {prefix}")

    def get_latest_session(self) -> ChatSession:
        with self._table.lock:
            if not self._table.sessions:
                raise NotFoundError("no sessions available")
            latest = max(self._table.sessions.values(), key=lambda s: s.updated_at)
            return latest.model_copy(deep=True)

    # History shortcuts

    def get_nth_recent_message(self, n: int) -> str:
        """Return the content of the *n*-th most recent message (1 = latest)."""
        messages = self._active_messages(n)
        return messages[len(messages) - n].content

    def get_nth_chronological_message(self, n: int) -> str:
        """Return the content of the *n*-th message in order (1 = first)."""
        messages = self._active_messages(n)
        return messages[n - 1].content

    def _active_messages(self, n: int) -> list[Message]:
        if n < 1:
            raise ValueError(f"invalid message index {n}: must be >= 1")
        with self._table.lock:
            if not self._table.active_id:
                raise NotFoundError("no active session")
            session = self._table.sessions.get(self._table.active_id)
            if session is None:
                raise NotFoundError(f"active session {self._table.active_id} not found")
            messages = list(session.messages)
        if not messages:
            raise NotFoundError("session has no messages")
        if n > len(messages):
            raise NotFoundError(
                f"message index {n} out of bounds: session has only {len(messages)} messages"
            )
        return messages

    # Persistence

    def save_session(self, session_id: str) -> Path:
        """Write the session to ``<config dir>/sessions/<id>.json``."""
        path = self._ctx.configuration.sessions_dir() / f"{session_id}.json"
        self.export_session(session_id, path)
        return path

    def load_session(self, session_id: str) -> ChatSession:
        """Read ``<config dir>/sessions/<id>.json`` into the session table.

        Raises:
            NotFoundError: If no file exists for *session_id*.
            DuplicateNameError: If another session already uses the stored name.
            PersistenceError: If the file cannot be read or decoded.
        """
        path = self._ctx.configuration.sessions_dir() / f"{session_id}.json"
        if not path.exists():
            raise NotFoundError(f"session file not found: {path}")
        session = _read_session_file(path)
        with self._table.lock:
            existing = self._table.names.id_for(session.name)
            if existing is not None and existing != session.id:
                raise DuplicateNameError("session", session.name)
            session.is_active = session.id == self._table.active_id
            self._table.sessions[session.id] = session
            self._table.names.bind(session.name, session.id)
            return session.model_copy(deep=True)

    def export_session(self, session_id: str, path: Path | str) -> None:
        with self._table.lock:
            payload = self._require(session_id).model_dump_json(indent=2)
        _write_session_file(Path(path), payload)

    def import_session(self, path: Path | str) -> ChatSession:
        """Load a session file as a new, inactive session.

        The imported session gets a fresh id and timestamps.  A clashing
        name is suffixed with ``:v1``, ``:v2`` and so on.
        """
        session = _read_session_file(Path(path))
        session.id = self._ctx.new_id()
        now = self._ctx.now()
        session.created_at = now
        session.updated_at = now
        session.is_active = False
        with self._table.lock:
            original_name = session.name
            counter = 1
            while self._table.names.has_name(session.name):
                session.name = f"{original_name}:v{counter}"
                counter += 1
            self._table.sessions[session.id] = session
            self._table.names.bind(session.name, session.id)
            result = session.model_copy(deep=True)
        log.debug("imported session %s from %s", result.name, path)
        return result

    def list_saved_session_ids(self) -> list[str]:
        directory = self._ctx.configuration.sessions_dir()
        if not directory.is_dir():
            return []
        return sorted(p.stem for p in directory.glob("*.json"))


def _write_session_file(path: Path, payload: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(payload + "\n")
    except OSError as exc:
        raise PersistenceError(f"failed to write session file: {exc}") from exc
    log.debug("wrote session file %s", path)


def _read_session_file(path: Path) -> ChatSession:
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise PersistenceError(f"failed to read session file: {exc}") from exc
    try:
        return ChatSession.model_validate_json(raw)
    except ValidationError as exc:
        raise PersistenceError(f"failed to parse session file {path}: {exc}") from exc
