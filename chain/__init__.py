"""Chain gateway module for deploying collections and minting tokens.

The marketplace never signs transactions itself. It talks to a Thirdweb Engine
compatible REST service that holds the backend wallet, and to a JSON-RPC endpoint
for read-only chain queries.
"""
import logging
from typing import Any, Dict, Optional, Protocol

import requests

logger = logging.getLogger(__name__)

class ChainError(Exception):
    """Base exception for gateway errors"""
    def __init__(self, message: str, code: Optional[int] = None, method: Optional[str] = None):
        self.code = code
        self.method = method
        super().__init__(f"Gateway Error [{code}] in {method}: {message}" if code else message)

class GatewayConnectionError(ChainError):
    """Raised when the gateway cannot be reached"""
    pass

class GatewayAuthError(ChainError):
    """Raised when the gateway rejects our credentials"""
    pass

class GatewayResponseError(ChainError):
    """Raised when the gateway answers with an error or an unexpected payload"""
    pass

class ChainGateway(Protocol):
    """Capabilities the marketplace needs from a chain."""

    def deploy(self, params: Dict[str, Any]) -> str:
        """Deploy a collection contract and return its address."""
        ...

    def mint(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Mint tokens and return a reference with at least 'transaction_hash'."""
        ...

    def gas_price(self) -> int:
        """Current gas price in wei."""
        ...

class ThirdwebGateway:
    """Chain gateway backed by a Thirdweb Engine compatible service.

    Collections are deployed as ERC1155 editions so a single token id can carry
    the supply that buyers draw down.
    """

    def __init__(
        self,
        gateway_url: str,
        secret_key: str,
        backend_wallet_address: str,
        chain: str = 'sepolia',
        rpc_url: Optional[str] = None,
        timeout: int = 30
    ):
        self.url = gateway_url.rstrip('/')
        self.chain = chain
        self.rpc_url = rpc_url
        self.timeout = timeout
        self.backend_wallet_address = backend_wallet_address

        # Initialize session with auth
        self.session = requests.Session()
        self.session.headers['content-type'] = 'application/json'
        if secret_key:
            self.session.headers['authorization'] = f"Bearer {secret_key}"
        if backend_wallet_address:
            self.session.headers['x-backend-wallet-address'] = backend_wallet_address

        # JSON-RPC request ID counter
        self._request_id = 0

    def _get_request_id(self) -> int:
        """Get unique request ID"""
        self._request_id += 1
        return self._request_id

    def _post(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        """POST to the gateway and return the 'result' member of its answer.

        Raises:
            GatewayConnectionError: Gateway could not be reached
            GatewayAuthError: Secret key or wallet rejected
            GatewayResponseError: Gateway returned an error
        """
        url = f"{self.url}{path}"
        try:
            response = self.session.post(url, json=payload, timeout=self.timeout)
        except requests.exceptions.Timeout as e:
            raise GatewayConnectionError(
                f"Request timed out after {self.timeout} seconds", method=path
            ) from e
        except requests.exceptions.ConnectionError as e:
            raise GatewayConnectionError(
                f"Failed to connect to chain gateway at {self.url}", method=path
            ) from e
        except requests.exceptions.RequestException as e:
            raise GatewayConnectionError(f"Request failed: {str(e)}", method=path) from e

        if response.status_code in (401, 403):
            raise GatewayAuthError(
                "Authentication failed - check secret_key/backend_wallet_address",
                code=response.status_code,
                method=path
            )

        try:
            body = response.json()
        except ValueError as e:
            raise GatewayResponseError(
                f"Invalid response format: {response.text[:200]}",
                code=response.status_code,
                method=path
            ) from e

        if not isinstance(body, dict):
            raise GatewayResponseError("Response is not an object", method=path)

        if response.status_code >= 400 or body.get('error'):
            error = body.get('error') or {}
            message = error.get('message') if isinstance(error, dict) else str(error)
            raise GatewayResponseError(
                message or f"HTTP {response.status_code}",
                code=response.status_code,
                method=path
            )

        if not isinstance(body.get('result'), dict):
            raise GatewayResponseError("Response has no result", method=path)
        return body['result']

    def _rpc(self, method: str, *params) -> Any:
        """Make a JSON-RPC call against the chain's RPC endpoint."""
        if not self.rpc_url:
            raise GatewayConnectionError("No rpc_url configured", method=method)

        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": list(params),
            "id": self._get_request_id()
        }
        try:
            response = requests.post(self.rpc_url, json=payload, timeout=self.timeout)
            response.raise_for_status()
            result = response.json()
        except requests.exceptions.RequestException as e:
            raise GatewayConnectionError(f"RPC request failed: {str(e)}", method=method) from e
        except ValueError as e:
            raise GatewayResponseError(f"Invalid response format: {str(e)}", method=method) from e

        if not isinstance(result, dict):
            raise GatewayResponseError("Response is not an object", method=method)

        if result.get('error'):
            error = result['error']
            if not isinstance(error, dict):
                raise GatewayResponseError(str(error), method=method)
            raise GatewayResponseError(
                error.get('message', 'Unknown error'),
                code=error.get('code', -1),
                method=method
            )

        if result.get('result') is None:
            raise GatewayResponseError("Response has no result", method=method)
        return result['result']

    def deploy(self, params: Dict[str, Any]) -> str:
        """Deploy an edition contract.

        Args:
            params: Dict containing name, symbol, contract_uri and
                    primary_sale_recipient

        Returns:
            The deployed contract address
        """
        metadata = {
            'name': params['name'],
            'symbol': params['symbol'],
            'primary_sale_recipient': params.get('primary_sale_recipient') or self.backend_wallet_address,
        }
        if params.get('contract_uri'):
            metadata['external_link'] = params['contract_uri']

        logger.info(f"Deploying edition contract {params['name']} ({params['symbol']}) on {self.chain}")
        result = self._post(
            f"/deploy/{self.chain}/prebuilts/edition",
            {'contractMetadata': metadata}
        )
        address = result.get('deployedAddress')
        if not address:
            raise GatewayResponseError(
                f"Deployment queued ({result.get('queueId')}) but no address returned",
                method='deploy'
            )
        return address

    def mint(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Mint a new token id with the given supply.

        Args:
            params: Dict containing contract_address, receiver, metadata and supply

        Returns:
            Dict with transaction_hash (the queue id until the gateway reports
            the hash), queue_id and, when known, token_id
        """
        result = self._post(
            f"/contract/{self.chain}/{params['contract_address']}/erc1155/mint-to",
            {
                'receiver': params['receiver'],
                'metadataWithSupply': {
                    'metadata': params['metadata'],
                    'supply': str(params['supply'])
                }
            }
        )
        queue_id = result.get('queueId')
        return {
            'transaction_hash': result.get('transactionHash') or queue_id,
            'queue_id': queue_id,
            'token_id': result.get('tokenId')
        }

    def gas_price(self) -> int:
        """Current gas price in wei"""
        result = self._rpc('eth_gasPrice')
        try:
            return int(result, 16)
        except (TypeError, ValueError) as e:
            raise GatewayResponseError(
                f"Invalid gas price: {result!r}", method='eth_gasPrice'
            ) from e

def create_gateway(settings: Optional[Dict[str, Any]] = None) -> ThirdwebGateway:
    """Build the gateway described by settings.conf."""
    if settings is None:
        from config import settings_conf
        settings = settings_conf

    return ThirdwebGateway(
        gateway_url=settings['gateway_url'],
        secret_key=settings['secret_key'],
        backend_wallet_address=settings['backend_wallet_address'],
        chain=settings['chain'],
        rpc_url=settings.get('rpc_url') or None,
        timeout=settings['gateway_timeout']
    )

# Export public interface
__all__ = [
    'ChainGateway',
    'ThirdwebGateway',
    'create_gateway',
    'ChainError',
    'GatewayConnectionError',
    'GatewayAuthError',
    'GatewayResponseError'
]
