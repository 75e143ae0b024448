"""
One-shot consent flow for consent-gated orientation sensors.

Some platforms only deliver orientation events after the user explicitly
grants access, and only accept the request from inside a user action
(tap, click, key press). Requests made automatically on load are rejected
by those platforms, so the gate never requests on its own.

State machine:
    UNKNOWN → PENDING → GRANTED
                      ↘ DENIED   (also on error/rejection)

- Exactly one request can be in flight; request() while PENDING is a no-op
- GRANTED and DENIED are terminal for the lifetime of the gate
- Listeners are notified on every transition

Usage:
    gate = PermissionGate(platform.request_permission)
    gate.add_listener(lambda status: print(status))

    # From a user action handler running on the event loop
    status = await gate.request()
    # or, from a synchronous callback
    gate.on_user_action()
"""

import asyncio
import logging
from enum import Enum
from typing import Awaitable, Callable, List, Optional

log = logging.getLogger("effect.permission")


class PermissionStatus(Enum):
    UNKNOWN = "unknown"
    PENDING = "pending"
    GRANTED = "granted"
    DENIED = "denied"


StatusListener = Callable[[PermissionStatus], None]


class PermissionGate:
    """Manages the orientation permission request for one effect instance."""

    def __init__(
        self,
        request_fn: Callable[[], Awaitable[str]],
        telemetry=None,
    ) -> None:
        """
        Args:
            request_fn: Platform coroutine function answering "granted" or "denied"
            telemetry: Optional EffectTelemetryLogger for permission outcomes
        """
        self._request_fn = request_fn
        self.telemetry = telemetry
        self.status = PermissionStatus.UNKNOWN
        self.requests_started = 0
        self.last_error: Optional[BaseException] = None
        self._listeners: List[StatusListener] = []
        self._task: Optional[asyncio.Task] = None

    def add_listener(self, callback: StatusListener) -> None:
        self._listeners.append(callback)

    def remove_listener(self, callback: StatusListener) -> None:
        if callback in self._listeners:
            self._listeners.remove(callback)

    @property
    def is_terminal(self) -> bool:
        return self.status in (PermissionStatus.GRANTED, PermissionStatus.DENIED)

    async def request(self) -> PermissionStatus:
        """
        Ask the platform for orientation access.

        Must be called from a user action. Returns the current status
        without asking again when a request is already pending or a final
        answer is known.
        """
        if self.status is not PermissionStatus.UNKNOWN:
            return self.status

        self.requests_started += 1
        self._set_status(PermissionStatus.PENDING)

        try:
            answer = await self._request_fn()
        except asyncio.CancelledError:
            self.last_error = None
            log.warning("[Permission] Request aborted, using pointer fallback")
            self._set_status(PermissionStatus.DENIED, reason="aborted")
            raise
        except Exception as e:
            self.last_error = e
            log.warning(f"[Permission] Request failed: {e!r}, using pointer fallback")
            self._set_status(PermissionStatus.DENIED, reason=f"error: {e}")
            return self.status

        if str(answer).lower() == PermissionStatus.GRANTED.value:
            self._set_status(PermissionStatus.GRANTED)
        else:
            log.info(f"[Permission] Platform answered {answer!r}, using pointer fallback")
            self._set_status(PermissionStatus.DENIED, reason=f"answer: {answer}")
        return self.status

    def on_user_action(self) -> Optional[asyncio.Task]:
        """
        Schedule request() from a synchronous user-action callback.

        Returns:
            The scheduled task, or None when nothing was scheduled (request
            already pending/answered, or no running event loop).
        """
        if self.status is not PermissionStatus.UNKNOWN:
            return None
        if self._task is not None and not self._task.done():
            return None
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            log.error("[Permission] No running event loop, cannot request permission")
            return None
        self._task = loop.create_task(self.request())
        return self._task

    def _set_status(self, status: PermissionStatus, reason: Optional[str] = None) -> None:
        previous = self.status
        self.status = status
        log.info(f"[Permission] {previous.value} -> {status.value}")

        if self.telemetry is not None:
            self.telemetry.log_permission(status.value, previous.value, reason)

        for callback in list(self._listeners):
            try:
                callback(status)
            except Exception as e:
                log.error(f"[Permission] Listener failed on {status.value}: {e}")
