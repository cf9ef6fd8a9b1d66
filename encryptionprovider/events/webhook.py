"""Generic JSON webhook event recorder.

Posts each ChangeNotification as a JSON body to a configured HTTP endpoint.
Delivery runs as a background task on the running loop.
"""

from __future__ import annotations

import asyncio

import httpx
import structlog

from encryptionprovider.events.recorder import EventRecorder
from encryptionprovider.models.events import ChangeNotification

_log = structlog.get_logger(component="events.webhook")


class WebhookEventRecorder(EventRecorder):
    """Delivers events by POSTing a JSON payload to a configurable URL.

    Args:
        url:       Full endpoint URL (must be HTTPS in production).
        headers:   Optional extra headers (e.g. Authorization).
        timeout:   HTTP request timeout in seconds. Defaults to 10.
        transport: Optional httpx transport, used by tests.
    """

    def __init__(
        self,
        url: str,
        headers: dict[str, str] | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        if not url:
            raise ValueError("Webhook url must not be empty")
        self._url = url
        self._headers = headers or {}
        self._timeout = timeout
        self._transport = transport
        self._pending: set[asyncio.Task[bool]] = set()

    @property
    def recorder_name(self) -> str:
        return "webhook"

    def record(self, notification: ChangeNotification) -> bool:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            _log.warning("webhook_event_dropped", reason=notification.reason, detail="no running event loop")
            return False
        task = loop.create_task(self.send(notification))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)
        return True

    async def stop(self) -> None:
        """Wait for in-flight deliveries."""
        if self._pending:
            await asyncio.gather(*self._pending, return_exceptions=True)

    async def send(self, notification: ChangeNotification) -> bool:
        """POST *notification* as JSON. Returns True on a 2xx response."""
        payload = self._build_payload(notification)
        request_headers = {
            "Content-Type": "application/json",
            **self._headers,
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
                response = await client.post(
                    self._url,
                    json=payload,
                    headers=request_headers,
                )
                if response.is_success:
                    return True
                _log.warning(
                    "webhook_non_2xx_response",
                    status_code=response.status_code,
                    body=response.text[:200],
                    reason=notification.reason,
                )
                return False
        except httpx.TimeoutException:
            _log.warning("webhook_request_timeout", reason=notification.reason, url=self._url)
            return False
        except httpx.HTTPError as exc:
            _log.warning("webhook_http_error", error=str(exc), reason=notification.reason)
            return False

    def _build_payload(self, notification: ChangeNotification) -> dict[str, object]:
        """Serialise *notification* to a plain dict for JSON encoding."""
        return {
            "reason": notification.reason,
            "message": notification.message,
            "type": notification.event_type.value,
            "emitted_at": notification.emitted_at.isoformat(),
            "resources": list(notification.resources),
        }
