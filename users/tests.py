from unittest.mock import patch

from django.core.cache import cache
from django.test import TestCase
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APITestCase

from mirart.jwt_utils import generate_test_token

from .directory import UserDirectory
from .models import User


class UserModelTest(TestCase):
    def test_display_name_fallbacks(self):
        user = User(user_id='u1', username='handle', first_name='Jo', last_name='March',
                    business_name='March Prints', email='jo@example.com')
        self.assertEqual(user.display_name, 'March Prints')

        user.business_name = ''
        self.assertEqual(user.display_name, 'Jo March')

        user.first_name = user.last_name = ''
        self.assertEqual(user.display_name, 'jo@example.com')

        user.email = None
        self.assertEqual(user.display_name, 'handle')


class UserDirectoryTest(TestCase):
    def setUp(self):
        cache.clear()
        self.directory = UserDirectory()
        User.objects.create(user_id='u1', username='janedoe', first_name='Jane', last_name='Doe',
                            email='jane@example.com')
        User.objects.create(user_id='u2', username='jdoe_art', business_name='Doe Studio')
        User.objects.create(user_id='u3', username='sam', email='sam@doe.org')
        User.objects.create(user_id='u4', username='doe_gone', is_active=False)

    def test_search_matches_every_name_field(self):
        results = self.directory.search_users('doe')

        self.assertEqual([u['id'] for u in results], ['u1', 'u2', 'u3'])

    def test_search_is_case_insensitive(self):
        results = self.directory.search_users('STUDIO')

        self.assertEqual([u['id'] for u in results], ['u2'])
        self.assertEqual(results[0]['display_name'], 'Doe Studio')

    def test_search_excludes_caller(self):
        results = self.directory.search_users('doe', exclude_user_id='u1')

        self.assertNotIn('u1', [u['id'] for u in results])

    def test_short_query_returns_nothing(self):
        self.assertEqual(self.directory.search_users('d'), [])
        self.assertEqual(self.directory.search_users('  '), [])

    def test_limit_is_applied(self):
        self.assertEqual(len(self.directory.search_users('doe', limit=1)), 1)

    def test_search_results_are_cached(self):
        self.directory.search_users('doe')
        User.objects.create(user_id='u5', username='doe_new')

        self.assertEqual(len(self.directory.search_users('doe')), 3)

    def test_cache_outage_falls_back_to_database(self):
        with patch('users.directory.cache') as broken_cache:
            broken_cache.get.side_effect = ConnectionError('redis down')
            broken_cache.set.side_effect = ConnectionError('redis down')
            results = self.directory.search_users('doe')

        self.assertEqual(len(results), 3)

    def test_get_identities(self):
        identities = self.directory.get_identities(['u1', 'u3', 'missing'])

        self.assertEqual(set(identities), {'u1', 'u3'})
        self.assertEqual(identities['u1']['display_name'], 'Jane Doe')
        self.assertIsNone(self.directory.get_identity('missing'))

    def test_exists_ignores_inactive_users(self):
        self.assertTrue(self.directory.exists('u1'))
        self.assertFalse(self.directory.exists('u4'))


class UserEndpointsTest(APITestCase):
    def setUp(self):
        cache.clear()
        User.objects.create(user_id='u1', username='janedoe', first_name='Jane', last_name='Doe')
        User.objects.create(user_id='u2', username='jdoe_art', business_name='Doe Studio')
        token = generate_test_token('u1')
        self.client.credentials(HTTP_AUTHORIZATION=f'Bearer {token}')

    def test_search_endpoint(self):
        response = self.client.get(reverse('users:user-search'), {'q': 'doe'})

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['query'], 'doe')
        self.assertEqual(response.data['total'], 1)
        self.assertEqual(response.data['users'][0]['id'], 'u2')

    def test_search_limit_is_capped(self):
        response = self.client.get(reverse('users:user-search'), {'q': 'doe', 'limit': 500})

        self.assertEqual(response.data['limit'], 50)

    def test_identity_endpoint(self):
        response = self.client.get(reverse('users:user-identity', kwargs={'user_id': 'u2'}))

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data['display_name'], 'Doe Studio')

    def test_unknown_identity(self):
        response = self.client.get(reverse('users:user-identity', kwargs={'user_id': 'ghost'}))

        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)
        self.assertEqual(response.data, {'error': 'User not found', 'code': 'not_found'})
