"""Engine configuration for notesync.

:class:`NoteSyncConfig` is a plain dataclass that captures every tuneable
knob exposed by the package.  Instances are passed to
:class:`~notesync.notes_api.AsyncNotesTransport`,
:class:`~notesync.engine.SyncEngine` and :class:`~notesync.session.NotesSession`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal

SAVE_ORDERINGS: tuple[str, ...] = ("last_arrived", "last_issued")
"""Accepted values for :attr:`NoteSyncConfig.save_ordering`."""


@dataclass
class NoteSyncConfig:
    """Complete configuration for a notes session.

    Every parameter has a sensible default; a session against the default
    local backend needs no arguments at all.

    Parameters
    ----------
    base_url:
        Root URL of the notes backend.
    notes_path:
        Collection path relative to ``base_url``.  Individual notes live at
        ``{notes_path}/{id}``.
    timeout_seconds:
        HTTP request timeout in seconds.
    http_proxy:
        Optional HTTP/HTTPS proxy URL.
    retry_max_attempts:
        Total attempts per request (including the first).  ``1`` disables
        retries, which matches a plain fetch-and-report client.
    retry_base_delay:
        Base delay (seconds) for exponential backoff.
    retry_max_delay:
        Upper cap (seconds) on computed backoff delay.
    retry_jitter:
        Scale each backoff delay randomly to 50-100 % of its value.
    draft_title:
        Title given to optimistic drafts and sent with the create call.
    save_ordering:
        Policy for overlapping saves of the same note.

        * ``"last_arrived"`` -- the response that arrives last wins.
        * ``"last_issued"`` -- only the response to the most recently
          issued save is applied; older responses are discarded.
    metrics:
        Optional :class:`~notesync.observability.MetricsHook` backend.
    """

    # ── Remote ──────────────────────────────────────────────────────────
    base_url: str = "http://localhost:3001"

    notes_path: str = "/notes"

    # ── HTTP ────────────────────────────────────────────────────────────
    timeout_seconds: float = 30.0

    http_proxy: str | None = None

    # ── Retry ───────────────────────────────────────────────────────────
    retry_max_attempts: int = 1

    retry_base_delay: float = 0.5

    retry_max_delay: float = 10.0

    retry_jitter: bool = True

    # ── Engine ──────────────────────────────────────────────────────────
    draft_title: str = "Untitled"

    save_ordering: Literal["last_arrived", "last_issued"] = "last_arrived"

    # ── Observability ──────────────────────────────────────────────────
    metrics: Any | None = None

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if not self.base_url:
            raise ValueError("base_url must not be empty")
        if not self.notes_path.startswith("/"):
            raise ValueError(f"notes_path must start with '/', got {self.notes_path!r}")
        if self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be > 0, got {self.timeout_seconds}")
        if self.retry_max_attempts < 1:
            raise ValueError(f"retry_max_attempts must be >= 1, got {self.retry_max_attempts}")
        if self.retry_base_delay < 0:
            raise ValueError(f"retry_base_delay must be >= 0, got {self.retry_base_delay}")
        if self.retry_max_delay < 0:
            raise ValueError(f"retry_max_delay must be >= 0, got {self.retry_max_delay}")
        if self.save_ordering not in SAVE_ORDERINGS:
            raise ValueError(
                f"save_ordering must be one of {SAVE_ORDERINGS}, got {self.save_ordering!r}"
            )
