"""
Business hours for the support desk.

Pure functions over a ``SupportChatConfig``; no Django imports, so the chat
client evaluates the same rules the server does.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

# datetime.weekday() values
SATURDAY = 5
SUNDAY = 6


class SupportChatConfig:
    FIELDS = ('enabled', 'hours_start', 'hours_end', 'timezone', 'offline_message', 'welcome_message')

    def __init__(
        self,
        enabled: bool = True,
        hours_start: int = 9,
        hours_end: int = 17,
        timezone: str = 'America/Los_Angeles',
        offline_message: str = 'Support is currently offline.',
        welcome_message: str = 'Hi! How can we help you today?',
    ) -> None:
        self.enabled = bool(enabled)
        self.hours_start = int(hours_start)
        self.hours_end = int(hours_end)
        self.timezone = timezone
        self.offline_message = offline_message
        self.welcome_message = welcome_message

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SupportChatConfig':
        return cls(**{key: data[key] for key in cls.FIELDS if key in data})

    def to_dict(self) -> Dict[str, Any]:
        return {key: getattr(self, key) for key in self.FIELDS}

    def __eq__(self, other):
        return isinstance(other, SupportChatConfig) and self.to_dict() == other.to_dict()

    def __repr__(self):
        return f"SupportChatConfig({self.to_dict()!r})"


def is_online(config: Optional[SupportChatConfig], now: Optional[datetime] = None) -> bool:
    """Whether the desk is staffed at ``now`` (weekdays, hours_start <= hour < hours_end)"""
    if config is None or not config.enabled:
        return False

    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    try:
        local = now.astimezone(ZoneInfo(config.timezone or 'America/Los_Angeles'))
    except (ZoneInfoNotFoundError, ValueError):
        # Unknown zones never hide the desk
        return True

    if local.weekday() in (SATURDAY, SUNDAY):
        return False
    return config.hours_start <= local.hour < config.hours_end


def greeting(config: Optional[SupportChatConfig], now: Optional[datetime] = None) -> str:
    if config is None:
        return ''
    return config.welcome_message if is_online(config, now) else config.offline_message
