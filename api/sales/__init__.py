"""Sales API endpoints."""

import logging
from fastapi import APIRouter, Query, Depends
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from assets import MarketplaceError
from sales import SaleManager, DEFAULT_SALES_LIMIT
from ..dependencies import get_sale_manager

logger = logging.getLogger(__name__)

# Create router
router = APIRouter(tags=["Sales"])

class BuyRequest(BaseModel):
    """Request model for buying an asset."""
    model_config = ConfigDict(populate_by_name=True)

    buyer: Optional[str] = None
    quantity: int = 1
    payment_method: Optional[str] = Field(None, alias="paymentMethod")

@router.post("/buy/{asset_id}")
async def buy_asset(
    asset_id: str,
    request: BuyRequest,
    manager: SaleManager = Depends(get_sale_manager)
):
    """Buy copies of a tokenized asset."""
    try:
        result = await manager.buy(
            asset_id,
            buyer=request.buyer,
            quantity=request.quantity,
            payment_method=request.payment_method
        )
        return {
            "success": True,
            **result,
            "message": f"Purchased {request.quantity}x {result['asset']['name']}"
        }
    except MarketplaceError:
        raise
    except Exception as e:
        logger.exception(f"Buy {asset_id} failed")
        raise MarketplaceError(f"Internal server error: {str(e)}")

@router.get("/sales")
async def list_sales(
    buyer: Optional[str] = Query(None),
    limit: int = Query(DEFAULT_SALES_LIMIT),
    manager: SaleManager = Depends(get_sale_manager)
):
    """Get sales history, newest first."""
    try:
        return await manager.list_sales(buyer=buyer, limit=limit)
    except MarketplaceError:
        raise
    except Exception as e:
        logger.exception("List sales failed")
        raise MarketplaceError(f"Internal server error: {str(e)}")

@router.get("/sales/buyer/{address}")
async def sales_by_buyer(
    address: str,
    manager: SaleManager = Depends(get_sale_manager)
):
    """Get one buyer's purchases and spend totals."""
    try:
        return await manager.sales_by_buyer(address)
    except MarketplaceError:
        raise
    except Exception as e:
        logger.exception(f"Sales for buyer {address} failed")
        raise MarketplaceError(f"Internal server error: {str(e)}")
