"""Bounded linear undo/redo log of replacements.

``current_index`` points at the last applied record: records at or before it
can be undone, records after it can be redone. Adding a record while redo
records exist discards them. At capacity the oldest record is evicted.
"""

from __future__ import annotations

import time

from workoutgen.models import Exercise, HistoryStatus, ReplacementRecord

DEFAULT_MAX_HISTORY = 50


class ReplacementHistory:
    def __init__(self, max_history: int = DEFAULT_MAX_HISTORY):
        if max_history < 1:
            raise ValueError("max_history must be at least 1")
        self._records: list[ReplacementRecord] = []
        self._current_index = -1
        self.max_history = max_history

    @property
    def capacity(self) -> int:
        return self.max_history

    @property
    def size(self) -> int:
        return len(self._records)

    @property
    def current_index(self) -> int:
        return self._current_index

    @property
    def records(self) -> tuple[ReplacementRecord, ...]:
        return tuple(self._records)

    def add(self, position: int, old_exercise: Exercise, new_exercise: Exercise) -> ReplacementRecord:
        """Append a record, dropping the redo tail and evicting past capacity."""
        del self._records[self._current_index + 1 :]

        record = ReplacementRecord(
            position=position,
            old_exercise=old_exercise.snapshot(),
            new_exercise=new_exercise.snapshot(),
            timestamp=time.time(),
        )
        self._records.append(record)

        overflow = len(self._records) - self.max_history
        if overflow > 0:
            del self._records[:overflow]

        self._current_index = len(self._records) - 1
        return record

    def can_undo(self) -> bool:
        return self._current_index >= 0

    def can_redo(self) -> bool:
        return self._current_index < len(self._records) - 1

    def peek_undo(self) -> ReplacementRecord | None:
        return self._records[self._current_index] if self.can_undo() else None

    def peek_redo(self) -> ReplacementRecord | None:
        return self._records[self._current_index + 1] if self.can_redo() else None

    def step_back(self) -> ReplacementRecord | None:
        record = self.peek_undo()
        if record is not None:
            self._current_index -= 1
        return record

    def step_forward(self) -> ReplacementRecord | None:
        record = self.peek_redo()
        if record is not None:
            self._current_index += 1
        return record

    def clear(self) -> None:
        self._records = []
        self._current_index = -1

    def status(self) -> HistoryStatus:
        return HistoryStatus(
            can_undo=self.can_undo(),
            can_redo=self.can_redo(),
            size=self.size,
            capacity=self.capacity,
        )
