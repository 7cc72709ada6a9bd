# src/pulse/integrations/slack.py
"""
Slack Web API Client

Request/response wrapper over the handful of Slack methods the dispatcher
needs. Slack answers HTTP 200 with ``{"ok": false, "error": "..."}`` on
failure; those become ChatError unless the caller lists the error code as
acceptable.
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://slack.com/api"

# Slack error codes that are outcomes, not failures
NAME_TAKEN = "name_taken"
ALREADY_IN_CHANNEL = "already_in_channel"
USERS_NOT_FOUND = "users_not_found"


class ChatError(Exception):
    """Raised when the chat API rejects a request or is unreachable."""

    def __init__(self, method: str, error: str):
        self.method = method
        self.error = error
        super().__init__(f"Slack {method} failed: {error}")


class SlackClient:
    """
    Client for posting to and managing Slack channels.

    Usage:
        slack = SlackClient(token="xoxb-...")
        slack.post_message("C0123", "Hello", blocks=[...])
        channel_id = slack.ensure_channel("proj-website", topic="Website rebuild")
    """

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        http: Optional[httpx.Client] = None,
    ):
        if not token and http is None:
            raise ValueError("Slack bot token not provided. Set SLACK_BOT_TOKEN env or pass token.")
        self._http = http or httpx.Client(
            base_url=api_url.rstrip("/") + "/",
            headers={"Authorization": f"Bearer {token}"},
            timeout=timeout,
        )

    def close(self) -> None:
        self._http.close()

    def call(
        self,
        method: str,
        payload: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, Any]] = None,
        allowed_errors: Iterable[str] = (),
    ) -> Dict[str, Any]:
        """
        Invoke a Web API method.

        JSON ``payload`` goes in a POST body; ``params`` alone makes a GET.
        Returns the decoded response, including ``ok: false`` responses whose
        error is in ``allowed_errors``.
        """
        try:
            if payload is not None:
                response = self._http.post(method, json=payload)
            else:
                response = self._http.get(method, params=params or {})
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            raise ChatError(method, str(e)) from e
        except ValueError as e:
            raise ChatError(method, f"invalid JSON: {e}") from e

        if not data.get("ok"):
            error = data.get("error", "unknown_error")
            if error in allowed_errors:
                logger.debug(f"Slack {method} returned tolerated error: {error}")
                return data
            raise ChatError(method, error)
        return data

    # =========================================================================
    # MESSAGES
    # =========================================================================

    def post_message(self, channel: str, text: str, blocks: Optional[List[Dict[str, Any]]] = None) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"channel": channel, "text": text}
        if blocks:
            payload["blocks"] = blocks
        data = self.call("chat.postMessage", payload)
        logger.info(f"Posted Slack message to {channel}: {text[:60]}")
        return data

    # =========================================================================
    # CHANNELS
    # =========================================================================

    def create_channel(self, name: str, is_private: bool = False) -> str:
        """
        Create a channel and return its id.

        A name that already exists resolves to the existing channel.
        """
        data = self.call(
            "conversations.create",
            {"name": name, "is_private": is_private},
            allowed_errors=(NAME_TAKEN,),
        )
        if data.get("ok"):
            channel_id = data["channel"]["id"]
            logger.info(f"Created Slack channel #{name} ({channel_id})")
            return channel_id

        existing = self.find_channel(name)
        if not existing:
            raise ChatError("conversations.create", f"{NAME_TAKEN} but #{name} not found in channel list")
        logger.info(f"Slack channel #{name} already exists ({existing})")
        return existing

    def list_channels(self, limit: int = 200) -> List[Dict[str, Any]]:
        """List channels, following pagination cursors."""
        channels: List[Dict[str, Any]] = []
        cursor = None
        while True:
            params: Dict[str, Any] = {
                "limit": limit,
                "exclude_archived": "true",
                "types": "public_channel,private_channel",
            }
            if cursor:
                params["cursor"] = cursor
            data = self.call("conversations.list", params=params)
            channels.extend(data.get("channels") or [])
            cursor = (data.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                return channels

    def find_channel(self, name: str) -> Optional[str]:
        for channel in self.list_channels():
            if channel.get("name") == name:
                return channel.get("id")
        return None

    def set_topic(self, channel: str, topic: str) -> None:
        self.call("conversations.setTopic", {"channel": channel, "topic": topic[:250]})

    def invite(self, channel: str, user_ids: List[str]) -> bool:
        """Invite users; users already present count as success."""
        if not user_ids:
            return False
        data = self.call(
            "conversations.invite",
            {"channel": channel, "users": ",".join(user_ids)},
            allowed_errors=(ALREADY_IN_CHANNEL,),
        )
        if not data.get("ok"):
            logger.info(f"Users already in channel {channel}")
        return True

    # =========================================================================
    # USERS
    # =========================================================================

    def lookup_user_id(self, email: str) -> Optional[str]:
        """Slack user id for an email, or None if no such user."""
        data = self.call("users.lookupByEmail", params={"email": email}, allowed_errors=(USERS_NOT_FOUND,))
        if not data.get("ok"):
            logger.warning(f"No Slack user found for {email}")
            return None
        return data["user"]["id"]

    def ensure_channel(self, name: str, topic: Optional[str] = None, member_emails: Iterable[str] = ()) -> str:
        """Create or find a channel, set its topic, and invite members by email."""
        channel_id = self.create_channel(name)
        if topic:
            self.set_topic(channel_id, topic)

        user_ids = []
        for email in member_emails:
            user_id = self.lookup_user_id(email)
            if user_id:
                user_ids.append(user_id)
        if user_ids:
            self.invite(channel_id, user_ids)
        return channel_id
