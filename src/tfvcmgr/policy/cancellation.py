"""Cooperative cancellation for policy evaluation."""

from __future__ import annotations

import threading

from tfvcmgr.errors import PolicyEvaluationCancelledError


class CancellationToken:
    """
    A flag any thread can set and the evaluating thread polls.

    Cancellation is one-way: once cancelled, a token stays cancelled.
    """

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise PolicyEvaluationCancelledError()
