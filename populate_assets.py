"""Script to populate the marketplace with demo assets.

This script:
- Creates a handful of assets at different price points and supplies
- Tokenizes them when a collection contract is configured
- Records a few purchases against the tokenized assets
"""

import asyncio
import logging
from typing import Dict, Any

from config import settings_conf
from database import init_db, close
from chain import create_gateway
from assets import AssetManager, MarketplaceError
from sales import SaleManager

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

# Demo data for assets
ASSETS_DATA = [
    {
        "name": "Hackathon Genesis Art",
        "description": "First piece minted at the hackathon",
        "price": "0.002",
        "max_supply": 30,
        "initial_supply": 15
    },
    {
        "name": "Pixel Badge",
        "description": "Attendee badge, one per wallet",
        "price": "0.0005",
        "max_supply": 200,
        "initial_supply": 200
    },
    {
        "name": "Judges' Pick Trophy",
        "description": "Limited trophy edition for the winning team",
        "price": "0.01",
        "max_supply": 5,
        "initial_supply": 5
    }
]

# Demo purchases: (asset index, buyer, quantity)
PURCHASES = [
    (0, "0x1111111111111111111111111111111111111111", 3),
    (1, "0x2222222222222222222222222222222222222222", 1),
    (1, "0x1111111111111111111111111111111111111111", 2),
    (2, "0x3333333333333333333333333333333333333333", 1)
]

async def create_and_tokenize(
    asset_manager: AssetManager,
    asset_data: Dict[str, Any],
    tokenize: bool
) -> Dict[str, Any]:
    """Create an asset and mint it when a contract is available.

    Args:
        asset_manager: The asset manager instance
        asset_data: Data for the asset
        tokenize: Whether to mint the asset after creating it

    Returns:
        The asset record
    """
    asset = await asset_manager.create_asset(
        name=asset_data["name"],
        description=asset_data["description"],
        price=asset_data["price"],
        max_supply=asset_data["max_supply"]
    )
    if not tokenize:
        return asset

    result = await asset_manager.tokenize(asset['id'], asset_data["initial_supply"])
    logger.info(f"Minted {result['supply']} of {asset['name']} (tx: {result['transaction_hash']})")
    return result['asset']

async def main():
    """Create the demo assets and purchases."""

    logger.info("Loading marketplace store...")
    store = init_db(settings_conf)

    try:
        asset_manager = AssetManager(store, create_gateway(settings_conf), settings_conf)
        sale_manager = SaleManager(store, settings_conf)

        tokenize = bool(store.contract_address)
        if not tokenize:
            logger.warning("No contract_address configured; assets will be created but not minted")

        logger.info("Creating assets...")
        created = []
        for asset_data in ASSETS_DATA:
            created.append(await create_and_tokenize(asset_manager, asset_data, tokenize))

        if tokenize:
            logger.info("Recording purchases...")
            for index, buyer, quantity in PURCHASES:
                try:
                    result = await sale_manager.buy(created[index]['id'], buyer, quantity)
                    logger.info(f"{buyer[:10]}... bought {quantity}x {created[index]['name']} for {result['revenue']}")
                except MarketplaceError as e:
                    logger.error(f"Purchase failed: {e}")

        health = await sale_manager.get_health()
        logger.info(f"Marketplace stats: {health['stats']}")

    finally:
        await close(store)

if __name__ == "__main__":
    asyncio.run(main())
