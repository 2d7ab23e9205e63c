# Role: Analytics sink boundary. Events are fire-and-forget: emit() never lets a sink failure reach the user.

from __future__ import annotations

from typing import Any, Dict, Optional, Protocol

from alumni_bot.utils.logger import get_logger

log = get_logger("analytics")


class AnalyticsSink(Protocol):
    async def log_event(self, identity: Optional[str], event: str, data: Dict[str, Any]) -> None: ...

    async def log_error(self, error: BaseException, context: Dict[str, Any]) -> None: ...


class LoggingAnalyticsSink:
    async def log_event(self, identity: Optional[str], event: str, data: Dict[str, Any]) -> None:
        log.info("event=%s identity=%s data=%s", event, identity, data)

    async def log_error(self, error: BaseException, context: Dict[str, Any]) -> None:
        log.error("error=%r context=%s", error, context)


async def emit(sink: Optional[AnalyticsSink], identity: Optional[str], event: str, **data: Any) -> None:
    if sink is None:
        return
    try:
        await sink.log_event(identity, event, data)
    except Exception:
        log.exception("Analytics sink failed for event=%s", event)


async def report_error(sink: Optional[AnalyticsSink], error: BaseException, **context: Any) -> None:
    if sink is None:
        return
    try:
        await sink.log_error(error, context)
    except Exception:
        log.exception("Analytics sink failed while reporting %r", error)
