"""Request dependencies handing the app's store and gateway to route handlers."""
from fastapi import Request

from database import MarketplaceStore
from assets import AssetManager
from sales import SaleManager

def get_store(request: Request) -> MarketplaceStore:
    return request.app.state.store

def get_asset_manager(request: Request) -> AssetManager:
    state = request.app.state
    return AssetManager(state.store, state.gateway, state.settings)

def get_sale_manager(request: Request) -> SaleManager:
    state = request.app.state
    return SaleManager(state.store, state.settings)
