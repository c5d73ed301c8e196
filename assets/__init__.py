"""Assets module for managing marketplace assets.

This module provides functionality for:
- Creating assets with price and supply configuration
- Tokenizing assets through the chain gateway
- Listing, sorting and searching assets
- Deploying the collection contract assets are minted into
"""

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Any, Iterable
from urllib.parse import quote

from config import settings_conf
from database import MarketplaceStore
from chain import ChainGateway, ChainError
from .exceptions import (
    MarketplaceError, ValidationError, NotFoundError, ConflictError,
    CapacityError, TransactionError, to_decimal
)
from .metadata import build_token_metadata
from .search import search

logger = logging.getLogger(__name__)

# Asset lifecycle
STATUS_CREATED = 'created'
STATUS_TOKENIZED = 'tokenized'
ASSET_STATUSES = {STATUS_CREATED, STATUS_TOKENIZED}

PLACEHOLDER_IMAGE = 'https://via.placeholder.com/400x400/8b5cf6/ffffff?text={name}'

def utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()

def format_amount(amount: Decimal) -> str:
    """Render an amount as a plain decimal string, never in exponent form."""
    return format(amount, 'f')

def total_revenue(sales: Iterable[Dict[str, Any]]) -> Decimal:
    """Sum the total_price of sales."""
    return sum((Decimal(s['total_price']) for s in sales), Decimal('0'))

def _gateway_tip(error: ChainError) -> str:
    message = str(error).lower()
    if 'insufficient funds' in message:
        return 'Ensure your wallet has enough ETH on Sepolia testnet'
    if 'nonce' in message:
        return 'There may be pending transactions. Please wait and try again.'
    return 'Check your wallet has enough ETH for gas fees on Sepolia testnet'

class AssetManager:
    """Manager class for handling asset operations."""

    def __init__(
        self,
        store: MarketplaceStore,
        gateway: Optional[ChainGateway] = None,
        settings: Optional[Dict[str, Any]] = None
    ):
        """Initialize the asset manager.

        Args:
            store: The marketplace store holding assets and sales
            gateway: Optional chain gateway, required for tokenize and deploy
            settings: Optional settings dict. If not provided, uses settings.conf.
        """
        self.store = store
        self.gateway = gateway
        self.settings = settings if settings is not None else settings_conf

    @property
    def currency(self) -> str:
        return self.settings['currency']

    def _require_asset(self, asset_id: str) -> Dict[str, Any]:
        asset = self.store.find_asset(asset_id)
        if asset is None:
            raise NotFoundError('Asset not found')
        return asset

    def _require_gateway(self) -> ChainGateway:
        if self.gateway is None:
            raise TransactionError(
                'Chain gateway not configured',
                tip='Set gateway_url and secret_key in settings.conf'
            )
        return self.gateway

    async def create_asset(
        self,
        name: Optional[str],
        description: Optional[str],
        image_url: Optional[str] = None,
        price: Optional[Any] = None,
        max_supply: Optional[int] = None,
        owner: Optional[str] = None
    ) -> Dict[str, Any]:
        """Create a new asset.

        Args:
            name: Name of the asset
            description: Description of the asset
            image_url: Optional image reference, defaults to a placeholder
            price: Optional unit price, defaults to default_price
            max_supply: Optional maximum supply, defaults to default_max_supply
            owner: Optional owning address, defaults to the marketplace wallet

        Returns:
            The created asset record

        Raises:
            ValidationError: If name or description is missing, or price/supply is invalid
        """
        if not name or not str(name).strip() or not description or not str(description).strip():
            raise ValidationError('Name and description are required')

        if price in (None, ''):
            price = self.settings['default_price']
        unit_price = to_decimal(price, 'price')
        if unit_price <= 0:
            raise ValidationError('price must be positive')

        if max_supply is None:
            max_supply = self.settings['default_max_supply']
        if isinstance(max_supply, bool) or not isinstance(max_supply, int) or max_supply < 1:
            raise ValidationError('maxSupply must be a positive integer')

        asset = {
            'id': str(uuid.uuid4()),
            'name': name,
            'description': description,
            'image_url': image_url or PLACEHOLDER_IMAGE.format(name=quote(name)),
            'price': format_amount(unit_price),
            'max_supply': max_supply,
            'sold_count': 0,
            'available_supply': 0,  # Set on tokenization
            'owner': owner or self.settings['backend_wallet_address'] or 'marketplace',
            'status': STATUS_CREATED,
            'created_at': utcnow()
        }

        self.store.assets.append(asset)
        await self.store.save_assets()
        logger.info(f"Created asset: {name} - Price: {asset['price']} {self.currency}")

        return dict(asset)

    async def tokenize(self, asset_id: str, initial_supply: Optional[int] = None) -> Dict[str, Any]:
        """Mint an asset's supply on chain.

        Args:
            asset_id: The asset ID
            initial_supply: Optional number of copies to mint, defaults to max_supply

        Returns:
            Dict containing the updated asset, token_id, transaction_hash,
            supply, metadata and explorer_url

        Raises:
            NotFoundError: If asset doesn't exist
            ConflictError: If asset is already tokenized or no contract is deployed
            ValidationError: If initial_supply is outside 1..max_supply
            TransactionError: If the gateway fails the mint
        """
        asset = self._require_asset(asset_id)

        async with self.store.lock_for(asset_id):
            if asset['status'] == STATUS_TOKENIZED:
                raise ConflictError('Asset already tokenized')

            contract_address = self.store.contract_address
            if not contract_address:
                raise ConflictError(
                    'Deploy contract first!',
                    tip='Use POST /deploy-contract endpoint'
                )

            supply = asset['max_supply'] if initial_supply is None else initial_supply
            if isinstance(supply, bool) or not isinstance(supply, int) or not 1 <= supply <= asset['max_supply']:
                raise ValidationError(
                    f"initialSupply must be between 1 and {asset['max_supply']}"
                )

            gateway = self._require_gateway()
            metadata = build_token_metadata(asset, self.currency)
            receiver = self.settings['backend_wallet_address'] or asset['owner']

            logger.info(f"Tokenizing \"{asset['name']}\" with supply {supply}...")
            try:
                # Mint to the marketplace wallet; buyers draw down the supply
                tx = await asyncio.to_thread(gateway.mint, {
                    'contract_address': contract_address,
                    'receiver': receiver,
                    'metadata': metadata,
                    'supply': supply
                })
            except ChainError as e:
                logger.error(f"Tokenization of {asset_id} failed: {e}")
                raise TransactionError(str(e) or 'Transaction failed', tip=_gateway_tip(e))

            asset['status'] = STATUS_TOKENIZED
            token_id = tx.get('token_id')
            asset['token_id'] = str(asset_id if token_id is None else token_id)
            asset['available_supply'] = supply
            asset['transaction_hash'] = tx.get('transaction_hash')
            asset['contract_address'] = contract_address
            asset['tokenized_at'] = utcnow()

        await self.store.save_assets()
        logger.info(f"Tokenized \"{asset['name']}\" - TX: {asset['transaction_hash']}")

        explorer = self.settings['explorer_url']
        return {
            'asset': dict(asset),
            'token_id': asset['token_id'],
            'transaction_hash': asset['transaction_hash'],
            'supply': supply,
            'metadata': metadata,
            'explorer_url': f"{explorer}/tx/{asset['transaction_hash']}" if asset['transaction_hash'] else None
        }

    async def get_asset(self, asset_id: str) -> Dict[str, Any]:
        """Get an asset by ID with its sales history.

        Raises:
            NotFoundError: If asset doesn't exist
        """
        asset = self._require_asset(asset_id)
        history = self.store.sales_for_asset(asset_id)

        return {
            'asset': dict(asset),
            'sales_history': [dict(s) for s in history],
            'total_sold': sum(s['quantity'] for s in history),
            'total_revenue': format_amount(total_revenue(history))
        }

    async def list_assets(
        self,
        status: Optional[str] = None,
        sort_by: Optional[str] = 'created'
    ) -> Dict[str, Any]:
        """Get all assets with marketplace stats.

        Args:
            status: Optional status to filter by
            sort_by: 'price' (ascending), 'popular' (most sold first) or
                     'created' (newest first, the default)

        Returns:
            Dict containing assets, stats and the active contract address
        """
        assets: List[Dict[str, Any]] = [dict(a) for a in self.store.assets]

        if status:
            assets = [a for a in assets if a['status'] == status]

        if sort_by == 'price':
            assets.sort(key=lambda a: Decimal(a['price']))
        elif sort_by == 'popular':
            assets.sort(key=lambda a: a['sold_count'], reverse=True)
        else:
            assets.sort(key=lambda a: a['created_at'], reverse=True)

        all_assets = self.store.assets
        stats = {
            'total': len(all_assets),
            'created': sum(1 for a in all_assets if a['status'] == STATUS_CREATED),
            'tokenized': sum(1 for a in all_assets if a['status'] == STATUS_TOKENIZED),
            'total_sales': len(self.store.sales),
            'total_revenue': format_amount(total_revenue(self.store.sales))
        }

        return {
            'assets': assets,
            'stats': stats,
            'contract_address': self.store.contract_address
        }

    async def search(
        self,
        query: Optional[str] = None,
        price_min: Optional[str] = None,
        price_max: Optional[str] = None,
        status: Optional[str] = None
    ) -> Dict[str, Any]:
        """Search assets by text, price range and status."""
        return search(
            self.store,
            query=query,
            price_min=price_min,
            price_max=price_max,
            status=status
        )

    async def deploy_contract(self) -> Dict[str, Any]:
        """Deploy the collection contract assets are minted into.

        Returns:
            Dict containing contract_address, deployer and explorer_url

        Raises:
            TransactionError: If the gateway fails the deployment
        """
        gateway = self._require_gateway()
        deployer = self.settings['backend_wallet_address'] or None

        logger.info("Deploying collection contract...")
        try:
            address = await asyncio.to_thread(gateway.deploy, {
                'name': self.settings['collection_name'],
                'symbol': self.settings['collection_symbol'],
                'contract_uri': self.settings['contract_uri'],
                'primary_sale_recipient': deployer
            })
        except ChainError as e:
            logger.error(f"Deploy error: {e}")
            raise TransactionError(
                str(e) or 'Deployment failed',
                tip='Make sure you have ETH on Sepolia testnet!'
            )

        self.store.contract_address = address
        logger.info(f"Contract deployed: {address}")

        return {
            'contract_address': address,
            'deployer': deployer,
            'explorer_url': f"{self.settings['explorer_url']}/address/{address}"
        }

    async def gas_prices(self) -> Dict[str, Any]:
        """Get current gas prices for the configured network.

        Raises:
            TransactionError: If the gas price can't be fetched
        """
        gateway = self._require_gateway()
        try:
            wei = await asyncio.to_thread(gateway.gas_price)
        except ChainError as e:
            logger.error(f"Gas price error: {e}")
            raise TransactionError('Could not fetch gas prices')

        gwei = Decimal(wei) / Decimal(10 ** 9)
        optimized = max(Decimal(1), gwei * Decimal('0.9'))
        # Plain transfer is 21000 gas
        transfer_cost = gwei * 21000 / Decimal(10 ** 9)

        return {
            'network': self.settings['network_name'],
            'current_gas_price': {
                'wei': str(wei),
                'gwei': f"{gwei:.2f}"
            },
            'optimized_gas_price': f"{optimized:.2f}",
            'estimated_transfer_cost': f"{transfer_cost:.8f} {self.currency}",
            'recommendation': 'Good time to transact' if gwei < 50 else 'Gas prices are high, consider waiting'
        }


# Export public interface
__all__ = [
    'AssetManager',
    'MarketplaceError',
    'ValidationError',
    'NotFoundError',
    'ConflictError',
    'CapacityError',
    'TransactionError',
    'STATUS_CREATED',
    'STATUS_TOKENIZED',
    'ASSET_STATUSES',
    'total_revenue',
    'format_amount',
    'search'
]
