"""
Domain cache abstraction.

A domain cache is the client-side mirror of one entity type. It holds the
last confirmed state, a loading phase and a structured error slot, and only
changes after the authoritative backend confirms a call (confirm-then-apply).

Implementations:
- CharacterCache: single-slot cache (state/character.py)
- CollectionCache subclasses: TaskCache, HabitCache, QuestCache,
  AchievementCache

Failures never escape as exceptions. They are normalized into CacheError,
stored in the error slot, and the operation returns None/False so callers
inspect ``cache.error`` instead of catching.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from enum import Enum
from typing import Any, Callable, ClassVar, Generic, TypeVar

from pydantic import BaseModel

from ..remote.base import RemoteBackend
from .event_bus import EventBus, EventType
from .schema import CacheError, ErrorCode, LoadingPhase

logger = logging.getLogger(__name__)

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)
E = TypeVar("E", bound=Enum)


class Mutation(str, Enum):
    """Kinds of single-call writes a cache can confirm."""
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


def normalize_error(exc: BaseException, code: ErrorCode, fallback: str) -> CacheError:
    """
    Turn any failure from the boundary into a CacheError.

    Exceptions carrying their own ``error_code`` (local consistency checks)
    keep it; everything else is filed under the step's code.
    """
    message = getattr(exc, "message", None) or str(exc) or fallback
    return CacheError(message=message, code=getattr(exc, "error_code", None) or code)


class DomainCache(Generic[T]):
    """
    Confirmed-state mirror for one domain.

    Subclasses set the class attributes naming their list command and error
    code, and implement ``_empty`` and ``_parse_snapshot``.

    Updates are applied in completion order of the underlying calls. Two
    overlapping loads leave whichever response arrived last. Pass
    ``serialize_writes=True`` to queue same-domain calls behind a lock so
    issuance order wins instead.
    """

    domain: ClassVar[str] = ""
    LOAD_COMMAND: ClassVar[str] = ""
    LOAD_ERROR: ClassVar[ErrorCode] = ErrorCode.INVALID_INPUT
    LOAD_FAILURE: ClassVar[str] = "Failed to load"

    def __init__(
        self,
        backend: RemoteBackend,
        bus: EventBus | None = None,
        *,
        serialize_writes: bool = False,
    ):
        self._backend = backend
        self._bus = bus or EventBus()
        self._data: T = self._empty()
        self._phase = LoadingPhase.IDLE
        self._error: CacheError | None = None
        self._version = 0
        self._lock = asyncio.Lock() if serialize_writes else None

    # ─── Subclass hooks ──────────────────────────────────────────

    def _empty(self) -> T:
        raise NotImplementedError

    def _parse_snapshot(self, raw: Any) -> T:
        raise NotImplementedError

    # ─── Read-only state ─────────────────────────────────────────

    @property
    def phase(self) -> LoadingPhase:
        return self._phase

    @property
    def error(self) -> CacheError | None:
        return self._error

    @property
    def version(self) -> int:
        """Bumped on every state change. Derived views key memos on it."""
        return self._version

    @property
    def is_loading(self) -> bool:
        return self._phase == LoadingPhase.LOADING

    @property
    def bus(self) -> EventBus:
        return self._bus

    # ─── Operations ──────────────────────────────────────────────

    async def load(self) -> bool:
        """
        Replace the cached snapshot with the server's list.

        On failure the previous snapshot is kept and the error slot is set.

        Returns:
            True if the snapshot was replaced
        """
        result = await self._confirm(
            self.LOAD_COMMAND,
            None,
            code=self.LOAD_ERROR,
            failure=self.LOAD_FAILURE,
            parse=self._parse_snapshot,
            apply=self._replace,
        )
        return result is not None

    def clear_error(self) -> None:
        """Dismiss the current error without touching data."""
        if self._error is not None:
            self._error = None
            self._touch()

    def reset(self) -> None:
        """Drop everything back to the empty idle state (tests, re-init)."""
        self._data = self._empty()
        self._phase = LoadingPhase.IDLE
        self._error = None
        self._version += 1
        self._bus.emit(EventType.CACHE_RESET, domain=self.domain, version=self._version)

    def fail_validation(self, message: str, code: ErrorCode = ErrorCode.INVALID_INPUT) -> None:
        """Record a local validation error. No remote call is made."""
        logger.info(f"{self.domain}: rejected locally: {message}")
        self._error = CacheError(message=message, code=code)
        self._touch()

    def _coerce(self, enum_cls: type[E], value: Any, label: str) -> E | None:
        """Enum member for ``value``, or None after recording INVALID_INPUT."""
        try:
            return enum_cls(value)
        except ValueError:
            self.fail_validation(f"Unknown {label}: {value}")
            return None

    # ─── Round trip ──────────────────────────────────────────────

    def _write_guard(self):
        return self._lock if self._lock is not None else contextlib.nullcontext()

    async def _confirm(
        self,
        command: str,
        payload: dict | None,
        *,
        code: ErrorCode,
        failure: str,
        parse: Callable[[Any], Any],
        apply: Callable[[Any], Any] | None = None,
        track_phase: bool = True,
    ) -> Any:
        """
        Issue one call and apply its result only once confirmed.

        ``parse`` validates the raw result and may raise; nothing is applied
        until it succeeds. ``apply`` then performs the whole-value update.

        Args:
            command: Remote command name
            payload: Request payload
            code: Error code recorded on failure
            failure: Fallback message when the rejection carries none
            parse: Raw result -> validated value
            apply: Validated value -> return value (None to leave data alone)
            track_phase: Whether this call moves the loading phase

        Returns:
            apply's return value (or the parsed value), None on failure
        """
        async with self._write_guard():
            if track_phase:
                self._phase = LoadingPhase.LOADING
            self._error = None
            self._touch()

            try:
                raw = await self._backend.invoke(command, payload)
                value = parse(raw)
            except Exception as exc:
                self._error = normalize_error(exc, code, failure)
                if track_phase:
                    self._phase = LoadingPhase.ERROR
                logger.warning(f"{self.domain}: {command} failed: {self._error}")
                self._touch()
                self._bus.emit(
                    EventType.CACHE_ERROR,
                    domain=self.domain,
                    command=command,
                    code=code.value,
                    message=self._error.message,
                )
                return None

            result = apply(value) if apply is not None else value
            if track_phase:
                self._phase = LoadingPhase.SUCCESS
            self._touch()
            return result

    def _replace(self, value: T) -> T:
        self._data = value
        return value

    def _touch(self) -> None:
        self._version += 1
        self._bus.emit(EventType.CACHE_CHANGED, domain=self.domain, version=self._version)


class CollectionCache(DomainCache[list[M]]):
    """
    Cache holding a list of entities keyed by ``id``.

    ``MUTATIONS`` maps each Mutation to its default (command, error code,
    fallback message) so ``mutate(op, payload)`` works generically.
    """

    model: ClassVar[type[BaseModel]]
    MUTATIONS: ClassVar[dict[Mutation, tuple[str, ErrorCode, str]]] = {}
    ID_KEY: ClassVar[str] = "id"  # Payload key holding the target id

    def _empty(self) -> list[M]:
        return []

    def _parse_snapshot(self, raw: Any) -> list[M]:
        return self._parse_list(raw)

    def _parse_list(self, raw: Any) -> list[M]:
        if raw is None:
            return []
        if not isinstance(raw, list):
            raise TypeError(f"Expected a list from {self.LOAD_COMMAND}, got {type(raw).__name__}")
        return [self.model.model_validate(item) for item in raw]

    @property
    def items(self) -> list[M]:
        """Snapshot of the cached collection."""
        return list(self._data)

    def get(self, entity_id: int) -> M | None:
        return next((e for e in self._data if e.id == entity_id), None)

    def __len__(self) -> int:
        return len(self._data)

    async def mutate(
        self,
        op: Mutation,
        payload: dict | None = None,
        *,
        command: str | None = None,
        code: ErrorCode | None = None,
        failure: str | None = None,
    ) -> Any:
        """
        Confirm a single create/update/delete and merge it into the list.

        - CREATE inserts the returned entity at the front (newest first)
        - UPDATE replaces the entity with the same id in place
        - DELETE filters the target id out

        Returns:
            The confirmed entity (create/update), the removed id (delete),
            or None on failure
        """
        default_command, default_code, default_failure = self.MUTATIONS.get(
            op, (None, ErrorCode.INVALID_INPUT, "Request failed"),
        )
        command = command or default_command
        if command is None:
            raise ValueError(f"{self.domain} cache has no command for {op.value}")

        code = code or default_code
        failure = failure or default_failure

        if op == Mutation.DELETE:
            target_id = (payload or {}).get(self.ID_KEY)
            return await self._confirm(
                command, payload,
                code=code, failure=failure,
                parse=lambda _raw: target_id,
                apply=self._remove,
            )

        apply = self._prepend if op == Mutation.CREATE else self._replace_by_id
        return await self._confirm(
            command, payload,
            code=code, failure=failure,
            parse=self.model.model_validate,
            apply=apply,
        )

    # ─── Whole-value merges ──────────────────────────────────────

    def _prepend(self, entity: M) -> M:
        self._data = [entity, *self._data]
        return entity

    def _replace_by_id(self, entity: M) -> M:
        self._data = [entity if e.id == entity.id else e for e in self._data]
        return entity

    def _remove(self, entity_id: int) -> int:
        self._data = [e for e in self._data if e.id != entity_id]
        return entity_id
