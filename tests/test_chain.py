"""Tests for the Thirdweb chain gateway."""

import pytest
import requests
from unittest.mock import MagicMock, patch

from chain import (
    ThirdwebGateway,
    create_gateway,
    GatewayConnectionError,
    GatewayAuthError,
    GatewayResponseError
)

CONTRACT_ADDRESS = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
WALLET = "0x742d35Cc6634C0532925a3b8D93C0dd4B7c4f2ca"

def make_response(status_code=200, body=None, text=""):
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if isinstance(body, Exception):
        response.json.side_effect = body
    else:
        response.json.return_value = body
    return response

@pytest.fixture
def gateway():
    return ThirdwebGateway(
        gateway_url="https://engine.example.com/",
        secret_key="sk_test",
        backend_wallet_address=WALLET,
        chain="sepolia",
        rpc_url="https://rpc.example.com",
        timeout=5
    )

def test_session_headers(gateway):
    """Test auth headers on the gateway session."""
    assert gateway.url == "https://engine.example.com"
    assert gateway.session.headers["authorization"] == "Bearer sk_test"
    assert gateway.session.headers["x-backend-wallet-address"] == WALLET

def test_deploy(gateway):
    """Test deploying an edition contract."""
    response = make_response(body={"result": {"deployedAddress": CONTRACT_ADDRESS, "queueId": "q1"}})
    with patch.object(gateway.session, "post", return_value=response) as post:
        address = gateway.deploy({
            "name": "Hackathon Buyable Assets",
            "symbol": "HACK",
            "contract_uri": "https://example.com/contract.json",
            "primary_sale_recipient": None
        })

    assert address == CONTRACT_ADDRESS
    url = post.call_args.args[0]
    payload = post.call_args.kwargs["json"]
    assert url == "https://engine.example.com/deploy/sepolia/prebuilts/edition"
    assert payload["contractMetadata"]["symbol"] == "HACK"
    assert payload["contractMetadata"]["primary_sale_recipient"] == WALLET
    assert payload["contractMetadata"]["external_link"] == "https://example.com/contract.json"
    assert post.call_args.kwargs["timeout"] == 5

def test_deploy_without_address(gateway):
    """Test a deployment answer missing the contract address."""
    response = make_response(body={"result": {"queueId": "q1"}})
    with patch.object(gateway.session, "post", return_value=response):
        with pytest.raises(GatewayResponseError):
            gateway.deploy({"name": "n", "symbol": "s"})

def test_mint(gateway):
    """Test minting a token with supply."""
    response = make_response(body={"result": {"queueId": "q42"}})
    with patch.object(gateway.session, "post", return_value=response) as post:
        tx = gateway.mint({
            "contract_address": CONTRACT_ADDRESS,
            "receiver": WALLET,
            "metadata": {"name": "Hackathon Genesis Art"},
            "supply": 15
        })

    assert tx == {"transaction_hash": "q42", "queue_id": "q42", "token_id": None}
    url = post.call_args.args[0]
    payload = post.call_args.kwargs["json"]
    assert url == f"https://engine.example.com/contract/sepolia/{CONTRACT_ADDRESS}/erc1155/mint-to"
    assert payload["receiver"] == WALLET
    assert payload["metadataWithSupply"]["supply"] == "15"

def test_mint_with_transaction_hash(gateway):
    """Test the transaction hash wins over the queue id."""
    response = make_response(body={"result": {"queueId": "q1", "transactionHash": "0xabc", "tokenId": "7"}})
    with patch.object(gateway.session, "post", return_value=response):
        tx = gateway.mint({"contract_address": CONTRACT_ADDRESS, "receiver": WALLET, "metadata": {}, "supply": 1})

    assert tx["transaction_hash"] == "0xabc"
    assert tx["token_id"] == "7"

@pytest.mark.parametrize("side_effect,error", [
    (requests.exceptions.Timeout("slow"), GatewayConnectionError),
    (requests.exceptions.ConnectionError("refused"), GatewayConnectionError)
])
def test_connection_errors(gateway, side_effect, error):
    """Test transport failures."""
    with patch.object(gateway.session, "post", side_effect=side_effect):
        with pytest.raises(error):
            gateway.deploy({"name": "n", "symbol": "s"})

@pytest.mark.parametrize("response,error", [
    (make_response(401, {"error": {"message": "Unauthorized"}}), GatewayAuthError),
    (make_response(500, {"error": {"message": "insufficient funds"}}), GatewayResponseError),
    (make_response(200, ValueError("no json"), text="<html>"), GatewayResponseError),
    (make_response(200, ["not", "an", "object"]), GatewayResponseError),
    (make_response(200, {"result": None}), GatewayResponseError)
])
def test_response_errors(gateway, response, error):
    """Test error answers from the gateway."""
    with patch.object(gateway.session, "post", return_value=response):
        with pytest.raises(error):
            gateway.mint({"contract_address": CONTRACT_ADDRESS, "receiver": WALLET, "metadata": {}, "supply": 1})

def test_error_message_is_kept(gateway):
    """Test the gateway's error message reaches the caller."""
    response = make_response(400, {"error": {"message": "insufficient funds for gas"}})
    with patch.object(gateway.session, "post", return_value=response):
        with pytest.raises(GatewayResponseError) as exc:
            gateway.deploy({"name": "n", "symbol": "s"})
    assert "insufficient funds for gas" in str(exc.value)

def test_gas_price(gateway):
    """Test reading the gas price over JSON-RPC."""
    response = make_response(body={"jsonrpc": "2.0", "id": 1, "result": "0x4a817c800"})
    with patch("chain.requests.post", return_value=response) as post:
        assert gateway.gas_price() == 20_000_000_000

    payload = post.call_args.kwargs["json"]
    assert payload["method"] == "eth_gasPrice"
    assert post.call_args.args[0] == "https://rpc.example.com"

def test_gas_price_rpc_error(gateway):
    """Test a JSON-RPC error answer."""
    response = make_response(body={"jsonrpc": "2.0", "id": 1, "error": {"code": -32000, "message": "boom"}})
    with patch("chain.requests.post", return_value=response):
        with pytest.raises(GatewayResponseError):
            gateway.gas_price()

@pytest.mark.parametrize("body", [
    ["bad"],
    {"jsonrpc": "2.0", "id": 1},
    {"jsonrpc": "2.0", "id": 1, "result": None},
    {"jsonrpc": "2.0", "id": 1, "error": "boom"},
    {"jsonrpc": "2.0", "id": 1, "result": "not-hex"},
    {"jsonrpc": "2.0", "id": 1, "result": 12}
])
def test_gas_price_malformed_reply(gateway, body):
    """Test malformed JSON-RPC replies raise gateway errors."""
    with patch("chain.requests.post", return_value=make_response(body=body)):
        with pytest.raises(GatewayResponseError):
            gateway.gas_price()

def test_gas_price_without_rpc_url():
    """Test gas price with no RPC endpoint configured."""
    gateway = ThirdwebGateway("https://engine.example.com", "", "")
    with pytest.raises(GatewayConnectionError):
        gateway.gas_price()

def test_create_gateway(settings):
    """Test building the gateway from settings."""
    settings["secret_key"] = "sk_live"
    gateway = create_gateway(settings)

    assert gateway.url == settings["gateway_url"]
    assert gateway.chain == "sepolia"
    assert gateway.timeout == settings["gateway_timeout"]
    assert gateway.session.headers["authorization"] == "Bearer sk_live"
