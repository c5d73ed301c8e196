"""Shared fixtures: isolated stores, a fake chain gateway and managers."""

from typing import Any, Dict, List, Optional

import pytest
import pytest_asyncio

from config import DEFAULTS
from config.lib.load_settings_conf import validate_settings
from database import MarketplaceStore
from chain import GatewayResponseError
from assets import AssetManager
from sales import SaleManager

CONTRACT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
BACKEND_WALLET = "0x742d35Cc6634C0532925a3b8D93C0dd4B7c4f2ca"
BUYER_ADDRESS = "0xAbC0000000000000000000000000000000000001"

class FakeGateway:
    """Chain gateway that records calls instead of sending transactions."""

    def __init__(self, wei: int = 20 * 10 ** 9):
        self.deployed: List[Dict[str, Any]] = []
        self.minted: List[Dict[str, Any]] = []
        self.wei = wei
        self.error: Optional[Exception] = None

    def fail_with(self, message: str) -> None:
        self.error = GatewayResponseError(message)

    def deploy(self, params: Dict[str, Any]) -> str:
        if self.error:
            raise self.error
        self.deployed.append(params)
        return CONTRACT_ADDRESS

    def mint(self, params: Dict[str, Any]) -> Dict[str, Any]:
        if self.error:
            raise self.error
        self.minted.append(params)
        token_id = len(self.minted) - 1
        return {
            'transaction_hash': f"0x{token_id + 1:064x}",
            'token_id': str(token_id)
        }

    def gas_price(self) -> int:
        if self.error:
            raise self.error
        return self.wei

@pytest.fixture
def settings() -> Dict[str, Any]:
    """Validated default settings with an in-memory store."""
    return validate_settings(dict(
        DEFAULTS,
        data_dir='',
        backend_wallet_address=BACKEND_WALLET
    ))

@pytest.fixture
def store() -> MarketplaceStore:
    """In-memory store with a collection contract already deployed."""
    return MarketplaceStore(contract_address=CONTRACT_ADDRESS)

@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()

@pytest.fixture
def asset_manager(store, gateway, settings) -> AssetManager:
    return AssetManager(store, gateway, settings)

@pytest.fixture
def sale_manager(store, settings) -> SaleManager:
    return SaleManager(store, settings)

@pytest_asyncio.fixture
async def tokenized_asset(asset_manager) -> Dict[str, Any]:
    """Asset priced 0.002 with 15 of 30 copies minted."""
    asset = await asset_manager.create_asset(
        name="Hackathon Genesis Art",
        description="First piece minted at the hackathon",
        price="0.002",
        max_supply=30
    )
    result = await asset_manager.tokenize(asset['id'], initial_supply=15)
    return result['asset']
