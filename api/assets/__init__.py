"""Asset API endpoints."""

import logging
from fastapi import APIRouter, Query, Depends, Body
from typing import Optional
from decimal import Decimal
from pydantic import BaseModel, ConfigDict, Field

from assets import AssetManager, MarketplaceError
from ..dependencies import get_asset_manager

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(tags=["Assets"])

# Model definitions
class CreateAssetRequest(BaseModel):
    """Request model for creating an asset."""
    model_config = ConfigDict(populate_by_name=True)

    name: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = Field(None, alias="imageUrl")
    price: Optional[Decimal] = None
    max_supply: Optional[int] = Field(None, alias="maxSupply")
    owner: Optional[str] = None

class TokenizeRequest(BaseModel):
    """Request model for tokenizing an asset."""
    model_config = ConfigDict(populate_by_name=True)

    initial_supply: Optional[int] = Field(None, alias="initialSupply")

@router.post("/assets")
async def create_asset(
    request: CreateAssetRequest,
    manager: AssetManager = Depends(get_asset_manager)
):
    """Create a new asset in the created state."""
    try:
        asset = await manager.create_asset(
            name=request.name,
            description=request.description,
            image_url=request.image_url,
            price=request.price,
            max_supply=request.max_supply,
            owner=request.owner
        )
        return {
            "success": True,
            "asset": asset,
            "message": f"Asset created! Use POST /tokenize/{asset['id']} to mint it"
        }
    except MarketplaceError:
        raise
    except Exception as e:
        logger.exception("Create asset failed")
        raise MarketplaceError(f"Internal server error: {str(e)}")

@router.post("/tokenize/{asset_id}")
async def tokenize_asset(
    asset_id: str,
    request: Optional[TokenizeRequest] = Body(None),
    manager: AssetManager = Depends(get_asset_manager)
):
    """Mint an asset's supply through the chain gateway."""
    try:
        result = await manager.tokenize(
            asset_id,
            initial_supply=request.initial_supply if request else None
        )
        return {
            "success": True,
            "token_id": result['token_id'],
            "transaction_hash": result['transaction_hash'],
            "supply": result['supply'],
            "metadata": result['metadata'],
            "explorer_url": result['explorer_url'],
            "asset": result['asset'],
            "message": f"Minted {result['supply']} copies of {result['asset']['name']}"
        }
    except MarketplaceError:
        raise
    except Exception as e:
        logger.exception(f"Tokenize {asset_id} failed")
        raise MarketplaceError(f"Internal server error: {str(e)}")

@router.get("/assets")
async def list_assets(
    status: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    manager: AssetManager = Depends(get_asset_manager)
):
    """Get all assets, optionally filtered by status and sorted.

    sortBy is one of price, popular or created (the default).
    """
    try:
        return await manager.list_assets(status=status, sort_by=sort_by)
    except MarketplaceError:
        raise
    except Exception as e:
        logger.exception("List assets failed")
        raise MarketplaceError(f"Internal server error: {str(e)}")

@router.get("/assets/{asset_id}")
async def get_asset(
    asset_id: str,
    manager: AssetManager = Depends(get_asset_manager)
):
    """Get one asset with its sales history."""
    try:
        return await manager.get_asset(asset_id)
    except MarketplaceError:
        raise
    except Exception as e:
        logger.exception(f"Get asset {asset_id} failed")
        raise MarketplaceError(f"Internal server error: {str(e)}")

@router.get("/search")
async def search_assets(
    q: Optional[str] = Query(None),
    price_min: Optional[str] = Query(None, alias="priceMin"),
    price_max: Optional[str] = Query(None, alias="priceMax"),
    status: Optional[str] = Query(None),
    manager: AssetManager = Depends(get_asset_manager)
):
    """Search assets by text, price range and status."""
    try:
        return await manager.search(
            query=q,
            price_min=price_min,
            price_max=price_max,
            status=status
        )
    except MarketplaceError:
        raise
    except Exception as e:
        logger.exception("Search failed")
        raise MarketplaceError(f"Internal server error: {str(e)}")
