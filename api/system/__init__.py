"""System health, contract deployment and gas price endpoints."""

import logging
from fastapi import APIRouter, Depends

from assets import AssetManager, MarketplaceError
from sales import SaleManager
from ..dependencies import get_asset_manager, get_sale_manager

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(tags=["System"])

@router.get("/health")
async def get_health(manager: SaleManager = Depends(get_sale_manager)):
    """Get marketplace status and stats."""
    try:
        return await manager.get_health()
    except MarketplaceError:
        raise
    except Exception as e:
        logger.exception("Health check failed")
        raise MarketplaceError(f"Internal server error: {str(e)}")

@router.post("/deploy-contract")
async def deploy_contract(manager: AssetManager = Depends(get_asset_manager)):
    """Deploy the collection contract assets are minted into.

    Replaces any contract address already in use; assets tokenized earlier
    keep the address they were minted under.
    """
    try:
        result = await manager.deploy_contract()
        return {
            "success": True,
            **result,
            "message": "Contract deployed! Now create and tokenize assets"
        }
    except MarketplaceError:
        raise
    except Exception as e:
        logger.exception("Deploy contract failed")
        raise MarketplaceError(f"Internal server error: {str(e)}")

@router.get("/gas-price")
async def get_gas_price(manager: AssetManager = Depends(get_asset_manager)):
    """Get current network gas prices."""
    try:
        return await manager.gas_prices()
    except MarketplaceError:
        raise
    except Exception as e:
        logger.exception("Gas price lookup failed")
        raise MarketplaceError(f"Internal server error: {str(e)}")
