from django.test import TestCase

from mirart.exceptions import NotFound
from users.models import User

from .catalog import get_listing, summarize
from .models import Listing


class ListingCatalogTest(TestCase):
    def setUp(self):
        artist = User.objects.create(user_id='artist_1', username='painter')
        self.listing = Listing.objects.create(artist=artist, title='Night Market',
                                              primary_image_url='https://img.example.com/night.jpg')

    def test_summary(self):
        self.assertEqual(summarize(get_listing(self.listing.id)), {
            'id': self.listing.id,
            'title': 'Night Market',
            'image_url': 'https://img.example.com/night.jpg',
        })

    def test_summary_without_image(self):
        self.listing.primary_image_url = ''
        self.listing.save()

        self.assertIsNone(summarize(get_listing(self.listing.id))['image_url'])

    def test_unknown_listing(self):
        for listing_id in [9999, 'abc', None]:
            with self.assertRaises(NotFound):
                get_listing(listing_id)
