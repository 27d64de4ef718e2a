from typing import Dict

from mirart.exceptions import NotFound

from .models import Listing


def get_listing(listing_id) -> Listing:
    try:
        return Listing.objects.get(pk=listing_id)
    except (Listing.DoesNotExist, ValueError, TypeError):
        raise NotFound(f'Listing {listing_id} not found')


def summarize(listing: Listing) -> Dict:
    """Title and thumbnail shown as a conversation's subject"""
    return {
        'id': listing.id,
        'title': listing.title,
        'image_url': listing.primary_image_url or None,
    }
