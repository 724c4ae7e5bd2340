"""Cooperative cancellation for long evaluations."""

import threading


class CancellationToken:
    """Flag shared between the caller and the integrator workers.

    Workers poll :meth:`is_cancelled` between time steps only; a step that
    has started always runs to completion.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def __repr__(self) -> str:
        return f"CancellationToken(cancelled={self.is_cancelled()})"
