import threading
from unittest.mock import patch

from django.db import OperationalError, connection
from django.test import TestCase, TransactionTestCase, skipUnlessDBFeature

from conversations.models import Conversation, ConversationMessage
from conversations.store import ConversationStore, clean_body
from listings.models import Listing
from mirart.exceptions import (
    EmptyMessage,
    InvalidParticipant,
    NotFound,
    NotParticipant,
    TransientIOFailure,
)
from users.models import User


class CleanBodyTest(TestCase):
    def test_trims_whitespace(self):
        self.assertEqual(clean_body('  Hi  '), 'Hi')

    def test_blank_bodies_are_rejected(self):
        for body in ['', '   ', '\n\t', None]:
            with self.assertRaises(EmptyMessage):
                clean_body(body)

    def test_markup_is_stripped(self):
        self.assertEqual(clean_body('<b>Hi</b> there'), 'Hi there')

    def test_markup_only_body_is_empty(self):
        with self.assertRaises(EmptyMessage):
            clean_body('<b></b>')

    def test_plain_text_symbols_are_kept(self):
        self.assertEqual(clean_body('Tom & Jerry print, 5 < 10 USD?'), 'Tom & Jerry print, 5 < 10 USD?')
        self.assertEqual(clean_body('<i>3 > 2</i> & "quoted"'), '3 > 2 & "quoted"')


class ConversationStoreTest(TestCase):
    def setUp(self):
        self.store = ConversationStore()
        self.alice = User.objects.create(user_id='alice', username='alice', first_name='Alice', last_name='Smith')
        self.bob = User.objects.create(user_id='bob', username='bob', business_name='Bob Ceramics')
        self.carol = User.objects.create(user_id='carol', username='carol', email='carol@example.com')
        self.listing = Listing.objects.create(
            artist=self.bob, title='Stoneware Bowl', primary_image_url='https://img.example.com/bowl.jpg'
        )

    def _conversation(self, listing_id=None, body='Hello'):
        conversation, _, _ = self.store.create_conversation('alice', 'bob', body, listing_id)
        return conversation

    def test_create_conversation_with_first_message(self):
        conversation, message, created = self.store.create_conversation('alice', 'bob', 'Hello')

        self.assertTrue(created)
        self.assertEqual(conversation.participants, ('alice', 'bob'))
        self.assertEqual(message.sender_id, 'alice')
        self.assertEqual(message.body, 'Hello')
        self.assertEqual(conversation.last_message_at, message.created_at)

    def test_create_is_get_or_create(self):
        first, _, created_first = self.store.create_conversation('alice', 'bob', 'Hello', self.listing.id)
        second, _, created_second = self.store.create_conversation('alice', 'bob', 'Still there?', self.listing.id)

        self.assertTrue(created_first)
        self.assertFalse(created_second)
        self.assertEqual(first.conversation_id, second.conversation_id)
        self.assertEqual(
            [m.body for m in self.store.fetch_messages(first.conversation_id, 'alice')],
            ['Hello', 'Still there?'],
        )

    def test_pair_is_unordered(self):
        first = self._conversation()
        second, _, created = self.store.create_conversation('bob', 'alice', 'Hi Alice')

        self.assertFalse(created)
        self.assertEqual(first.conversation_id, second.conversation_id)

    def test_subject_and_unscoped_threads_are_distinct(self):
        unscoped = self._conversation()
        scoped = self._conversation(listing_id=self.listing.id)

        self.assertNotEqual(unscoped.conversation_id, scoped.conversation_id)
        self.assertEqual(Conversation.objects.count(), 2)

    def test_cannot_message_self(self):
        with self.assertRaises(InvalidParticipant):
            self.store.create_conversation('alice', 'alice', 'Hello')

        self.assertEqual(Conversation.objects.count(), 0)

    def test_create_with_blank_body(self):
        with self.assertRaises(EmptyMessage):
            self.store.create_conversation('alice', 'bob', '   ')

        self.assertEqual(Conversation.objects.count(), 0)

    def test_create_with_unknown_recipient(self):
        with self.assertRaises(NotFound):
            self.store.create_conversation('alice', 'nobody', 'Hello')

    def test_create_with_unknown_listing(self):
        with self.assertRaises(NotFound):
            self.store.create_conversation('alice', 'bob', 'Hello', listing_id=9999)

        self.assertEqual(Conversation.objects.count(), 0)

    def test_lost_create_race_joins_existing_conversation(self):
        winner = Conversation.objects.create(participant_a='alice', participant_b='bob')
        real_find = ConversationStore._find_conversation
        calls = []

        def find_after_race(store, a, b, listing):
            calls.append((a, b))
            if len(calls) == 1:
                return None
            return real_find(store, a, b, listing)

        with patch.object(ConversationStore, '_find_conversation', find_after_race):
            conversation, message, created = self.store.create_conversation('bob', 'alice', 'hello')

        self.assertFalse(created)
        self.assertEqual(conversation.pk, winner.pk)
        self.assertEqual(message.conversation_id, winner.pk)
        self.assertEqual(Conversation.objects.count(), 1)
        self.assertEqual(len(calls), 2)

    def test_repeat_create_from_either_side_reuses_conversation(self):
        first, _, _ = self.store.create_conversation('alice', 'bob', 'hello')
        second, _, _ = self.store.create_conversation('bob', 'alice', 'hello')

        self.assertEqual(first.pk, second.pk)
        self.assertEqual(first.messages.count(), 2)

    def test_plain_text_body_round_trips(self):
        conversation = self._conversation(body='Tom & Jerry print, 5 < 10 USD?')

        messages = self.store.fetch_messages(conversation.conversation_id, 'bob')

        self.assertEqual(messages[0].body, 'Tom & Jerry print, 5 < 10 USD?')

    def test_fetch_messages_in_send_order(self):
        conversation = self._conversation(body='one')
        self.store.send_message(conversation.conversation_id, 'bob', 'two')
        self.store.send_message(conversation.conversation_id, 'alice', 'three')

        messages = self.store.fetch_messages(conversation.conversation_id, 'bob')

        self.assertEqual([m.body for m in messages], ['one', 'two', 'three'])
        self.assertEqual([m.sender_id for m in messages], ['alice', 'bob', 'alice'])

    def test_alternating_senders_unread_counts(self):
        conversation = self._conversation(body='one')
        self.store.send_message(conversation.conversation_id, 'bob', 'two')
        self.store.send_message(conversation.conversation_id, 'alice', 'three')

        self.assertEqual(self.store.unread_count(conversation.conversation_id, 'bob'), 2)
        self.assertEqual(self.store.unread_count(conversation.conversation_id, 'alice'), 1)

    def test_fetch_has_no_side_effects(self):
        conversation = self._conversation()
        self.store.fetch_messages(conversation.conversation_id, 'bob')

        self.assertEqual(self.store.unread_count(conversation.conversation_id, 'bob'), 1)

    def test_send_appends_unread_message(self):
        conversation = self._conversation()
        message = self.store.send_message(conversation.conversation_id, 'bob', 'Hi')

        messages = self.store.fetch_messages(conversation.conversation_id, 'alice')
        self.assertEqual(messages[-1].pk, message.pk)
        self.assertIsNotNone(messages[-1].created_at)
        self.assertIsNone(messages[-1].read_at)

        conversation.refresh_from_db()
        self.assertEqual(conversation.last_message_at, message.created_at)

    def test_send_whitespace_body(self):
        conversation = self._conversation()

        with self.assertRaises(EmptyMessage):
            self.store.send_message(conversation.conversation_id, 'alice', '   ')

        self.assertEqual(ConversationMessage.objects.count(), 1)

    def test_send_to_unknown_conversation(self):
        with self.assertRaises(NotFound):
            self.store.send_message('conv_missing', 'alice', 'Hi')

    def test_non_participant_is_refused(self):
        conversation = self._conversation()
        conversation_id = conversation.conversation_id

        with self.assertRaises(NotParticipant):
            self.store.fetch_messages(conversation_id, 'carol')
        with self.assertRaises(NotParticipant):
            self.store.mark_read(conversation_id, 'carol')
        with self.assertRaises(NotParticipant):
            self.store.send_message(conversation_id, 'carol', 'Let me in')

    def test_mark_read_is_idempotent(self):
        conversation = self._conversation(body='one')
        self.store.send_message(conversation.conversation_id, 'alice', 'two')
        self.store.send_message(conversation.conversation_id, 'bob', 'reply')

        self.assertEqual(self.store.mark_read(conversation.conversation_id, 'bob'), 2)
        self.assertEqual(self.store.unread_count(conversation.conversation_id, 'bob'), 0)
        self.assertEqual(self.store.mark_read(conversation.conversation_id, 'bob'), 0)
        # Bob's own message stays unread for Alice
        self.assertEqual(self.store.unread_count(conversation.conversation_id, 'alice'), 1)

    def test_list_conversations_summary(self):
        conversation = self._conversation(listing_id=self.listing.id, body='Is the bowl available?')

        summaries = self.store.list_conversations('bob')

        self.assertEqual(len(summaries), 1)
        summary = summaries[0]
        self.assertEqual(summary.conversation_id, conversation.conversation_id)
        self.assertEqual(summary.other_user['display_name'], 'Alice Smith')
        self.assertEqual(summary.listing_summary['title'], 'Stoneware Bowl')
        self.assertEqual(summary.listing_summary['image_url'], 'https://img.example.com/bowl.jpg')
        self.assertEqual(summary.last_message_body, 'Is the bowl available?')
        self.assertEqual(summary.last_message_sender_id, 'alice')
        self.assertEqual(summary.unread_count, 1)

    def test_list_conversations_newest_first(self):
        older = self._conversation()
        newer, _, _ = self.store.create_conversation('alice', 'carol', 'Hello Carol')

        self.assertEqual(
            [c.conversation_id for c in self.store.list_conversations('alice')],
            [newer.conversation_id, older.conversation_id],
        )

        self.store.send_message(older.conversation_id, 'bob', 'Bump')
        self.assertEqual(
            [c.conversation_id for c in self.store.list_conversations('alice')],
            [older.conversation_id, newer.conversation_id],
        )

    def test_list_conversations_for_stranger_is_empty(self):
        self._conversation()
        self.assertEqual(self.store.list_conversations('carol'), [])

    def test_unread_total(self):
        self._conversation()
        self.store.create_conversation('carol', 'bob', 'Hi Bob')

        self.assertEqual(self.store.unread_total('bob'), 2)
        self.assertEqual(self.store.unread_total('alice'), 0)

    def test_database_outage_is_transient(self):
        with patch.object(ConversationStore, '_get_conversation', side_effect=OperationalError('connection refused')):
            with self.assertRaises(TransientIOFailure):
                self.store.fetch_messages('conv_any', 'alice')


@skipUnlessDBFeature('has_select_for_update')
class ConcurrentCreateTest(TransactionTestCase):
    """Both sides open the chat at the same moment"""

    def setUp(self):
        User.objects.create(user_id='alice', username='alice')
        User.objects.create(user_id='bob', username='bob')

    def test_simultaneous_creates_share_one_conversation(self):
        barrier = threading.Barrier(2)
        results, errors = [], []

        def create(sender_id, recipient_id):
            try:
                barrier.wait(5)
                results.append(ConversationStore().create_conversation(sender_id, recipient_id, 'hello'))
            except Exception as e:
                errors.append(e)
            finally:
                connection.close()

        threads = [
            threading.Thread(target=create, args=('alice', 'bob')),
            threading.Thread(target=create, args=('bob', 'alice')),
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(10)

        self.assertEqual(errors, [])
        self.assertEqual(len(results), 2)
        self.assertEqual(Conversation.objects.count(), 1)
        self.assertEqual(ConversationMessage.objects.count(), 2)
        self.assertEqual(sorted(created for _, _, created in results), [False, True])
