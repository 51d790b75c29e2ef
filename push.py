"""
Push notification delivery.

Messages are posted to an FCM-style HTTP gateway. Delivery is fire and
forget: a failed push is logged and never fails the request that caused it.
"""
import logging
from typing import Optional

import httpx

import config

logger = logging.getLogger(__name__)

DEFAULT_TITLE = "SkillSwap"
DEFAULT_BODY = "You have a new notification"


class PushSender:
    def __init__(self, endpoint: Optional[str] = None, server_key: Optional[str] = None,
                 client: Optional[httpx.Client] = None, timeout: float = 5.0):
        self.endpoint = endpoint if endpoint is not None else config.PUSH_ENDPOINT
        self.server_key = server_key if server_key is not None else config.PUSH_SERVER_KEY
        self.client = client or httpx.Client(timeout=timeout)

    @property
    def enabled(self) -> bool:
        return bool(self.endpoint)

    def build_message(self, token: str, title: Optional[str], body: Optional[str],
                      data: Optional[dict] = None) -> dict:
        return {
            "to": token,
            "notification": {
                "title": title or DEFAULT_TITLE,
                "body": body or DEFAULT_BODY,
                "tag": "skillswap-notification",
            },
            # gateways only accept string values in the data payload
            "data": {k: str(v) for k, v in (data or {}).items()},
        }

    def send(self, token: Optional[str], title: Optional[str], body: Optional[str],
             data: Optional[dict] = None) -> bool:
        if not token or not self.enabled:
            return False
        headers = {"Content-Type": "application/json"}
        if self.server_key:
            headers["Authorization"] = f"key={self.server_key}"
        try:
            response = self.client.post(self.endpoint, json=self.build_message(token, title, body, data),
                                        headers=headers)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning("Push delivery failed: %s", e)
            return False
        return True


_sender: Optional[PushSender] = None


def get_sender() -> PushSender:
    global _sender
    if _sender is None:
        _sender = PushSender()
    return _sender


def set_sender(sender: Optional[PushSender]) -> None:
    global _sender
    _sender = sender
