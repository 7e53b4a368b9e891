"""Report rendering as a cancellable, timeout-bounded unit of work.

Rendering may be CPU-bound, so it runs in a worker thread. The caller gets
either the complete document or an explicit failure; partial output is
never returned.

Renderers receive a threading.Event and must check it between sections.
When the timeout fires or the caller is cancelled the event is set, the
renderer stops at the next check and its output is discarded.
"""

import asyncio
import json
import threading
import time
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol

from space_compliance_engine.errors import ComplianceEngineError
from space_compliance_engine.observability import get_logger
from space_compliance_engine.reporting.blocks import Report
from space_compliance_engine.settings import Settings, get_settings

logger = get_logger(__name__)


class RenderCancelled(ComplianceEngineError):
    """Raised by a renderer that observed the cancellation event."""


class RenderFailure(StrEnum):
    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    ERROR = "error"


class ReportRenderer(Protocol):
    """Turns a Report into a complete document."""

    media_type: str

    def render(self, report: Report, cancel_event: threading.Event) -> bytes:
        """Render the report, raising RenderCancelled once cancel_event is set."""
        ...


@dataclass(frozen=True)
class RenderOutcome:
    """Result of one render: complete bytes, or an explicit failure.

    Attributes:
        report_id: Id of the rendered report.
        media_type: Media type of content.
        content: Complete document; None on failure.
        failure: Failure kind; None on success.
        detail: Failure detail.
        duration_ms: Wall-clock render time.
    """

    report_id: str
    media_type: str
    content: bytes | None = None
    failure: RenderFailure | None = None
    detail: str = ""
    duration_ms: float = 0.0

    @property
    def ok(self) -> bool:
        return self.failure is None


class JsonReportRenderer:
    """Renders a Report to UTF-8 JSON, one section at a time."""

    media_type = "application/json"

    def __init__(self, indent: int | None = None) -> None:
        self._indent = indent

    def render(self, report: Report, cancel_event: threading.Event) -> bytes:
        data = report.to_dict()
        sections = []
        for section in data["sections"]:
            if cancel_event.is_set():
                raise RenderCancelled(f"Rendering of {report.metadata.report_id} was cancelled")
            sections.append(section)
        document = {"metadata": data["metadata"], "sections": sections}
        return json.dumps(document, indent=self._indent, ensure_ascii=False).encode("utf-8")


async def render_report(
    report: Report,
    renderer: ReportRenderer | None = None,
    timeout_seconds: float | None = None,
    settings: Settings | None = None,
) -> RenderOutcome:
    """Render a report in a worker thread under a hard timeout.

    Args:
        report: Assembled report.
        renderer: Renderer to use; defaults to JsonReportRenderer.
        timeout_seconds: Timeout override; defaults to settings.render_timeout_seconds.
        settings: Service settings.

    Returns:
        RenderOutcome with the complete bytes, or a timeout / error failure.

    Raises:
        asyncio.CancelledError: If the awaiting task is cancelled. The renderer
            is signalled to stop before the cancellation propagates.
    """
    renderer = renderer or JsonReportRenderer()
    timeout = timeout_seconds if timeout_seconds is not None else (settings or get_settings()).render_timeout_seconds
    cancel_event = threading.Event()
    report_id = report.metadata.report_id
    start_time = time.monotonic()

    def _elapsed_ms() -> float:
        return round((time.monotonic() - start_time) * 1000, 2)

    try:
        content = await asyncio.wait_for(
            asyncio.to_thread(renderer.render, report, cancel_event),
            timeout=timeout,
        )
    except TimeoutError:
        cancel_event.set()
        logger.warning("Report render timed out", report_id=report_id, timeout_seconds=timeout)
        return RenderOutcome(
            report_id=report_id,
            media_type=renderer.media_type,
            failure=RenderFailure.TIMEOUT,
            detail=f"Render exceeded {timeout}s",
            duration_ms=_elapsed_ms(),
        )
    except asyncio.CancelledError:
        cancel_event.set()
        logger.warning("Report render cancelled by caller", report_id=report_id)
        raise
    except RenderCancelled as exc:
        return RenderOutcome(
            report_id=report_id,
            media_type=renderer.media_type,
            failure=RenderFailure.CANCELLED,
            detail=exc.message,
            duration_ms=_elapsed_ms(),
        )
    except Exception as exc:
        logger.error("Report render failed", report_id=report_id, error=str(exc), exc_info=True)
        return RenderOutcome(
            report_id=report_id,
            media_type=renderer.media_type,
            failure=RenderFailure.ERROR,
            detail=str(exc),
            duration_ms=_elapsed_ms(),
        )

    logger.info("Report rendered", report_id=report_id, size_bytes=len(content), duration_ms=_elapsed_ms())
    return RenderOutcome(
        report_id=report_id,
        media_type=renderer.media_type,
        content=content,
        duration_ms=_elapsed_ms(),
    )
