"""Sales module for marketplace purchases.

This module handles purchase bookkeeping and sales analytics. A purchase
reserves supply from a tokenized asset and records a completed sale; no
payment is collected and nothing is transferred on chain.
"""
import logging
import uuid
from decimal import Decimal
from typing import Dict, List, Optional, Any

from config import settings_conf
from database import MarketplaceStore
from assets import (
    STATUS_TOKENIZED, ValidationError, NotFoundError, ConflictError,
    CapacityError, total_revenue, format_amount, utcnow
)

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_METHOD = 'crypto'
DEFAULT_SALES_LIMIT = 50
SALE_STATUS_COMPLETED = 'completed'

ENDPOINTS = {
    'deploy': 'POST /deploy-contract',
    'create_asset': 'POST /assets',
    'tokenize': 'POST /tokenize/{asset_id}',
    'buy': 'POST /buy/{asset_id}',
    'browse': 'GET /assets',
    'search': 'GET /search?q=...',
    'sales': 'GET /sales'
}

def _matches_buyer(sale: Dict[str, Any], address: str) -> bool:
    return sale['buyer'].lower() == address.lower()

class SaleManager:
    """Manages purchases and sales queries."""

    def __init__(self, store: MarketplaceStore, settings: Optional[Dict[str, Any]] = None) -> None:
        """Initialize sale manager.

        Args:
            store: The marketplace store holding assets and sales
            settings: Optional settings dict. If not provided, uses settings.conf.
        """
        self.store = store
        self.settings = settings if settings is not None else settings_conf

    @property
    def currency(self) -> str:
        return self.settings['currency']

    async def buy(
        self,
        asset_id: str,
        buyer: Optional[str],
        quantity: int = 1,
        payment_method: Optional[str] = None
    ) -> Dict:
        """Buy copies of a tokenized asset.

        The supply check, the supply decrement and the sale record happen under
        the asset's lock, so concurrent purchases cannot oversell.

        Args:
            asset_id: The asset ID
            buyer: Buyer address (free-form, not validated against a chain)
            quantity: Number of copies, must be positive
            payment_method: Optional payment tag, defaults to 'crypto'

        Returns:
            Dict containing the sale, an asset summary and the revenue

        Raises:
            ValidationError: If buyer is missing or quantity is not a positive integer
            NotFoundError: If asset doesn't exist
            ConflictError: If asset is not tokenized
            CapacityError: If available supply is below quantity
        """
        if not buyer or not str(buyer).strip():
            raise ValidationError('Buyer address is required')
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            raise ValidationError('quantity must be a positive integer')

        asset = self.store.find_asset(asset_id)
        if asset is None:
            raise NotFoundError('Asset not found')

        async with self.store.lock_for(asset_id):
            if asset['status'] != STATUS_TOKENIZED:
                raise ConflictError(
                    'Asset not tokenized yet',
                    tip=f"Use POST /tokenize/{asset_id} first"
                )

            available = asset['available_supply']
            if available < quantity:
                raise CapacityError(asset['name'], available, quantity)

            unit_price = Decimal(asset['price'])
            total_price = unit_price * quantity

            sale = {
                'id': str(uuid.uuid4()),
                'asset_id': asset_id,
                'buyer': buyer,
                'quantity': quantity,
                'price_per_unit': asset['price'],
                'total_price': format_amount(total_price),
                'payment_method': payment_method or DEFAULT_PAYMENT_METHOD,
                'timestamp': utcnow(),
                'tx_hash': f"sim_tx_{uuid.uuid4().hex}",  # Simulated, no payment is taken
                'status': SALE_STATUS_COMPLETED
            }

            asset['available_supply'] = available - quantity
            asset['sold_count'] += quantity
            self.store.sales.append(sale)

        await self.store.save_sales()
        await self.store.save_assets()

        logger.info(
            f"SALE COMPLETED: \"{asset['name']}\" x{quantity} sold to {buyer[:10]}... "
            f"for {format_amount(total_price)} {self.currency}"
        )

        return {
            'sale': dict(sale),
            'asset': {
                'id': asset_id,
                'name': asset['name'],
                'remaining_supply': asset['available_supply'],
                'total_sold': asset['sold_count']
            },
            'revenue': f"{format_amount(total_price)} {self.currency}"
        }

    async def list_sales(self, buyer: Optional[str] = None, limit: int = DEFAULT_SALES_LIMIT) -> Dict[str, Any]:
        """Get sales history, newest first.

        Args:
            buyer: Optional buyer address (case-insensitive exact match)
            limit: Maximum number of sales to return

        Returns:
            Dict containing the sales plus marketplace-wide totals

        Raises:
            ValidationError: If limit is negative
        """
        if limit < 0:
            raise ValidationError('limit must not be negative')

        sales: List[Dict[str, Any]] = list(self.store.sales)
        if buyer:
            sales = [s for s in sales if _matches_buyer(s, buyer)]

        sales.sort(key=lambda s: s['timestamp'], reverse=True)

        return {
            'sales': [dict(s) for s in sales[:limit]],
            'total_sales': len(self.store.sales),
            'total_revenue': f"{format_amount(total_revenue(self.store.sales))} {self.currency}"
        }

    async def sales_by_buyer(self, address: str) -> Dict[str, Any]:
        """Get one buyer's sales with spend totals."""
        sales = [dict(s) for s in self.store.sales if _matches_buyer(s, address)]

        return {
            'sales': sales,
            'buyer_stats': {
                'total_purchases': len(sales),
                'total_spent': f"{format_amount(total_revenue(sales))} {self.currency}",
                'total_items': sum(s['quantity'] for s in sales)
            }
        }

    async def get_health(self) -> Dict[str, Any]:
        """Get a snapshot of marketplace status and stats."""
        assets = self.store.assets
        sales = self.store.sales

        # Most sold asset; earliest created wins ties
        popular = max(assets, key=lambda a: a['sold_count'], default=None)
        popular_name = popular['name'] if popular and popular['sold_count'] > 0 else 'None'

        return {
            'status': 'Marketplace running!',
            'contract_address': self.store.contract_address,
            'network': self.settings['network_name'],
            'stats': {
                'assets_created': len(assets),
                'assets_tokenized': sum(1 for a in assets if a['status'] == STATUS_TOKENIZED),
                'total_sales': len(sales),
                'total_nfts_sold': sum(s['quantity'] for s in sales),
                'total_revenue': f"{format_amount(total_revenue(sales))} {self.currency}",
                'popular_asset': popular_name
            },
            'endpoints': ENDPOINTS
        }


# Export public interface
__all__ = [
    'SaleManager',
    'DEFAULT_PAYMENT_METHOD',
    'DEFAULT_SALES_LIMIT',
    'SALE_STATUS_COMPLETED'
]
