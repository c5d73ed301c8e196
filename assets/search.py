""" Search assets in the store """
from typing import Optional, Dict, Any
from decimal import Decimal
import logging

from database import MarketplaceStore
from .exceptions import to_decimal

logger = logging.getLogger(__name__)

def search(
        store: MarketplaceStore,
        query: Optional[str] = None,
        price_min: Optional[str] = None,
        price_max: Optional[str] = None,
        status: Optional[str] = None
    ) -> Dict[str, Any]:
        """Search assets with various filters.

        Args:
            store: The marketplace store to search
            query: Optional text matched case-insensitively in name and description
            price_min: Optional inclusive lower price bound
            price_max: Optional inclusive upper price bound
            status: Optional asset status to filter by

        Returns:
            Dict containing:
                - results: Matching assets
                - count: Number of matches
                - query: The filters as received

        Raises:
            ValidationError: If a price bound is not a number
        """
        min_price = to_decimal(price_min, 'priceMin') if price_min not in (None, '') else None
        max_price = to_decimal(price_max, 'priceMax') if price_max not in (None, '') else None

        results = list(store.assets)

        if query:
            needle = query.lower()
            results = [
                a for a in results
                if needle in a['name'].lower() or needle in a['description'].lower()
            ]

        if min_price is not None:
            results = [a for a in results if Decimal(a['price']) >= min_price]

        if max_price is not None:
            results = [a for a in results if Decimal(a['price']) <= max_price]

        if status:
            results = [a for a in results if a['status'] == status]

        logger.debug("Search %r returned %d assets", query, len(results))
        return {
            'results': [dict(a) for a in results],
            'count': len(results),
            'query': {
                'q': query,
                'price_min': price_min,
                'price_max': price_max,
                'status': status
            }
        }
