"""
Practice telemetry: one single-line JSON record per event on the
``numberpath.telemetry`` logger.

Events: ``api_call`` (from ``instrument``), ``session`` (batch built, with
the session level and number range), ``attempt`` (answer graded, with the
competency and error type) and ``level_change`` (stored session level moved).
"""
import time
import json
import logging
import asyncio
from typing import Optional
from functools import wraps

logger = logging.getLogger("numberpath.telemetry")


def emit_event(event: str, *, route: str, version: str, learner_id: Optional[str] = None,
               competency_id: Optional[str] = None, error_type: Optional[str] = None,
               level: Optional[float] = None, number_range: Optional[int] = None,
               latency_ms: Optional[int] = None, ok: Optional[bool] = None,
               count: Optional[int] = None):
    payload = {
        "event": event,
        "route": route,
        "version": version,
        "learner_id": learner_id,
        "competency_id": competency_id,
        "error_type": error_type,
        "level": level,
        "number_range": number_range,
        "latency_ms": latency_ms,
        "ok": ok,
        "count": count,
        "ts": time.time(),
    }
    logger.info("telemetry=%s", json.dumps(payload, separators=(",", ":")))


def emit_level_change(learner_id: str, before: Optional[int], after: Optional[int], *, route: str, version: str):
    """Emit ``level_change`` when an answer moved the stored session level; ``count`` is the step."""
    if after is None or (before or 1) == after:
        return
    emit_event("level_change", route=route, version=version, learner_id=learner_id,
               level=after, count=after - (before or 1))


def instrument(route: str, version: str):
    def deco(fn):
        if asyncio.iscoroutinefunction(fn):
            @wraps(fn)
            async def wrapped_async(*args, **kwargs):
                t0 = time.time()
                ok = True
                err = None
                try:
                    return await fn(*args, **kwargs)
                except Exception as e:
                    ok = False
                    err = e.__class__.__name__
                    raise
                finally:
                    dt = int((time.time() - t0) * 1000)
                    emit_event("api_call", route=route, version=version, latency_ms=dt, ok=ok,
                               error_type=err, learner_id=kwargs.get("learner_id"))
            return wrapped_async

        @wraps(fn)
        def wrapped(*args, **kwargs):
            t0 = time.time()
            ok = True
            err = None
            try:
                return fn(*args, **kwargs)
            except Exception as e:
                ok = False
                err = e.__class__.__name__
                raise
            finally:
                dt = int((time.time() - t0) * 1000)
                emit_event("api_call", route=route, version=version, latency_ms=dt, ok=ok,
                           error_type=err, learner_id=kwargs.get("learner_id"))
        return wrapped
    return deco
