# Device push notifications for trade participants
import os
from typing import Dict, Iterable, List

import httpx

from portal.config import (
    ONESIGNAL_API_URL,
    ONESIGNAL_APP_ID,
    ONESIGNAL_REST_API_KEY,
    TESTING,
)


class PushService:
    """
    Centralized push service using OneSignal
    """

    def __init__(self, app_id=None, api_key=None, api_url=None, timeout=None):
        self.app_id = app_id or ONESIGNAL_APP_ID
        self.api_key = api_key or ONESIGNAL_REST_API_KEY
        self.api_url = api_url or ONESIGNAL_API_URL
        self.timeout = timeout or float(os.getenv("OUTBOUND_TIMEOUT_SECONDS", "10"))

        if TESTING and app_id is None:
            self.disabled = True
            print("⚠️ PushService running in TEST MODE - notifications are not sent")
            return
        self.disabled = not (self.app_id and self.api_key)
        if self.disabled:
            print("⚠️ ONESIGNAL_APP_ID / ONESIGNAL_REST_API_KEY not set - push disabled")

    def send(self, player_ids: Iterable[str], title: str, body: str) -> Dict:
        """
        Send one notification to every device id given

        Args:
            player_ids: OneSignal player ids of the recipients' devices
            title: Notification heading
            body: Notification text

        Returns:
            Dict with 'success' boolean and 'recipients', 'skipped' or 'error'
        """
        recipients: List[str] = sorted({p for p in player_ids if p})
        if not recipients:
            return {"success": True, "skipped": True, "recipients": 0}
        if self.disabled:
            return {"success": False, "skipped": True, "error": "Push disabled"}

        response = httpx.post(
            self.api_url,
            json={
                "app_id": self.app_id,
                "include_player_ids": recipients,
                "headings": {"en": title},
                "contents": {"en": body},
            },
            headers={
                "Authorization": f"Basic {self.api_key}",
                "Content-Type": "application/json",
            },
            timeout=self.timeout,
        )

        if response.status_code >= 400:
            return {
                "success": False,
                "status_code": response.status_code,
                "error": response.text,
            }

        payload = response.json()
        if payload.get("errors"):
            return {"success": False, "error": payload["errors"]}

        return {
            "success": True,
            "recipients": len(recipients),
            "notification_id": payload.get("id"),
        }


push_service = PushService()
