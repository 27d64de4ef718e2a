from django.test import TestCase, override_settings
from rest_framework.exceptions import ValidationError

from support_chat.config import (
    get_support_chat_config,
    get_user_chat_enabled,
    save_support_chat_config,
    set_user_chat_enabled,
)
from support_chat.models import SiteSetting

DEFAULTS = {
    'enabled': True,
    'hours_start': 9,
    'hours_end': 17,
    'timezone': 'America/Los_Angeles',
    'offline_message': 'Support is currently offline.',
    'welcome_message': 'Hi! How can we help you today?',
}


@override_settings(SUPPORT_CHAT_DEFAULTS=DEFAULTS)
class SupportChatConfigStorageTest(TestCase):
    def test_defaults_without_stored_config(self):
        self.assertEqual(get_support_chat_config().to_dict(), DEFAULTS)

    def test_stored_values_override_defaults(self):
        SiteSetting.objects.create(key='support_chat_config', value={'hours_start': 8, 'timezone': 'UTC'})

        config = get_support_chat_config()

        self.assertEqual(config.hours_start, 8)
        self.assertEqual(config.timezone, 'UTC')
        self.assertEqual(config.hours_end, 17)

    def test_partial_save_merges(self):
        save_support_chat_config({'offline_message': 'Back Monday'})

        config = get_support_chat_config()
        self.assertEqual(config.offline_message, 'Back Monday')
        self.assertEqual(config.welcome_message, DEFAULTS['welcome_message'])

    def test_save_rejects_inverted_hours(self):
        with self.assertRaises(ValidationError):
            save_support_chat_config({'hours_start': 18, 'hours_end': 9})

        with self.assertRaises(ValidationError):
            save_support_chat_config({'hours_start': 17})

        self.assertFalse(SiteSetting.objects.exists())

    def test_save_rejects_out_of_range_hour(self):
        with self.assertRaises(ValidationError):
            save_support_chat_config({'hours_end': 25})

    def test_user_chat_flag(self):
        self.assertFalse(get_user_chat_enabled())

        set_user_chat_enabled(True)
        self.assertTrue(get_user_chat_enabled())

        set_user_chat_enabled(False)
        self.assertFalse(get_user_chat_enabled())
        self.assertEqual(SiteSetting.objects.filter(key='user_chat_enabled').count(), 1)
