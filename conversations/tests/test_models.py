from django.db import IntegrityError, transaction
from django.test import TestCase

from conversations.models import Conversation, ConversationMessage
from listings.models import Listing
from users.models import User


class ConversationModelTest(TestCase):
    def setUp(self):
        self.artist = User.objects.create(user_id='artist_1', username='painter')
        self.listing = Listing.objects.create(artist=self.artist, title='Blue Harbour')

    def test_conversation_id_is_generated(self):
        conversation = Conversation.objects.create(participant_a='a', participant_b='b')

        self.assertTrue(conversation.conversation_id.startswith('conv_'))
        self.assertEqual(len(conversation.conversation_id), len('conv_') + 12)

    def test_ordered_pair_is_symmetric(self):
        self.assertEqual(Conversation.ordered_pair('zed', 'amy'), ('amy', 'zed'))
        self.assertEqual(Conversation.ordered_pair('amy', 'zed'), ('amy', 'zed'))

    def test_participant_helpers(self):
        conversation = Conversation.objects.create(participant_a='amy', participant_b='zed')

        self.assertTrue(conversation.has_participant('amy'))
        self.assertFalse(conversation.has_participant('bob'))
        self.assertEqual(conversation.other_participant('amy'), 'zed')
        self.assertEqual(conversation.other_participant('zed'), 'amy')

    def test_unscoped_pair_is_unique(self):
        Conversation.objects.create(participant_a='amy', participant_b='zed')

        with self.assertRaises(IntegrityError), transaction.atomic():
            Conversation.objects.create(participant_a='amy', participant_b='zed')

    def test_scoped_pair_is_unique_per_listing(self):
        Conversation.objects.create(participant_a='amy', participant_b='zed', subject_listing=self.listing)

        with self.assertRaises(IntegrityError), transaction.atomic():
            Conversation.objects.create(participant_a='amy', participant_b='zed', subject_listing=self.listing)

    def test_scoped_and_unscoped_threads_coexist(self):
        Conversation.objects.create(participant_a='amy', participant_b='zed')
        Conversation.objects.create(participant_a='amy', participant_b='zed', subject_listing=self.listing)

        self.assertEqual(Conversation.objects.count(), 2)

    def test_message_read_state(self):
        conversation = Conversation.objects.create(participant_a='amy', participant_b='zed')
        message = ConversationMessage.objects.create(conversation=conversation, sender_id='amy', body='Hi')

        self.assertFalse(message.is_read)
        self.assertIsNotNone(message.created_at)
