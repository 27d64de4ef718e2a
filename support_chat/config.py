import logging
from typing import Any, Dict

from django.conf import settings
from rest_framework import serializers

from mirart.exceptions import transient_on_db_error

from .hours import SupportChatConfig
from .models import SiteSetting

logger = logging.getLogger(__name__)

SUPPORT_CHAT_CONFIG_KEY = 'support_chat_config'
USER_CHAT_ENABLED_KEY = 'user_chat_enabled'


class SupportChatConfigSerializer(serializers.Serializer):
    enabled = serializers.BooleanField(required=False)
    hours_start = serializers.IntegerField(required=False, min_value=0, max_value=23)
    hours_end = serializers.IntegerField(required=False, min_value=1, max_value=24)
    timezone = serializers.CharField(required=False, max_length=64)
    offline_message = serializers.CharField(required=False, max_length=500)
    welcome_message = serializers.CharField(required=False, max_length=500)

    def validate(self, attrs):
        start = attrs.get('hours_start')
        end = attrs.get('hours_end')
        if start is not None and end is not None and start >= end:
            raise serializers.ValidationError({'hours_end': 'Must be later than hours_start.'})
        return attrs


def _get_setting(key: str, default: Any) -> Any:
    row = SiteSetting.objects.filter(key=key).first()
    return row.value if row is not None else default


def _put_setting(key: str, value: Any) -> None:
    SiteSetting.objects.update_or_create(key=key, defaults={'value': value})


@transient_on_db_error
def get_support_chat_config() -> SupportChatConfig:
    """Stored support chat config merged over SUPPORT_CHAT_DEFAULTS"""
    data: Dict[str, Any] = dict(settings.SUPPORT_CHAT_DEFAULTS)
    stored = _get_setting(SUPPORT_CHAT_CONFIG_KEY, {})
    if isinstance(stored, dict):
        data.update(stored)
    return SupportChatConfig.from_dict(data)


@transient_on_db_error
def save_support_chat_config(data: Dict[str, Any]) -> SupportChatConfig:
    """Validate a full or partial config and store the merged result"""
    serializer = SupportChatConfigSerializer(data=data)
    serializer.is_valid(raise_exception=True)

    merged = get_support_chat_config().to_dict()
    merged.update(serializer.validated_data)
    if merged['hours_start'] >= merged['hours_end']:
        raise serializers.ValidationError({'hours_end': 'Must be later than hours_start.'})

    _put_setting(SUPPORT_CHAT_CONFIG_KEY, merged)
    logger.info(f"Support chat config updated: {merged}")
    return SupportChatConfig.from_dict(merged)


@transient_on_db_error
def get_user_chat_enabled() -> bool:
    return bool(_get_setting(USER_CHAT_ENABLED_KEY, False))


@transient_on_db_error
def set_user_chat_enabled(enabled: bool) -> bool:
    _put_setting(USER_CHAT_ENABLED_KEY, bool(enabled))
    logger.info(f"User chat enabled set to {bool(enabled)}")
    return bool(enabled)
