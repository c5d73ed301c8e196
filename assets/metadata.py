"""Token metadata for minted assets.

Builds the ERC1155 metadata document the chain gateway stores for a token:
name, description, image and a list of display attributes.
"""
from typing import Any, Dict


def build_token_metadata(asset: Dict[str, Any], currency: str = 'ETH') -> Dict[str, Any]:
    """Describe an asset as token metadata.

    Args:
        asset: The asset record being tokenized
        currency: Currency label shown next to the price

    Returns:
        Metadata dict with name, description, image and attributes
    """
    description = (
        f"{asset['description']}\n\n"
        f"Price: {asset['price']} {currency}\n"
        f"Max Supply: {asset['max_supply']}\n"
        f"Asset ID: {asset['id']}"
    )

    return {
        'name': asset['name'],
        'description': description,
        'image': asset['image_url'],
        'attributes': [
            {'trait_type': 'Asset ID', 'value': asset['id']},
            {'trait_type': 'Price', 'value': f"{asset['price']} {currency}"},
            {'trait_type': 'Max Supply', 'value': str(asset['max_supply'])},
            {'trait_type': 'Created', 'value': asset['created_at']},
            {'trait_type': 'Category', 'value': 'Buyable Asset'}
        ]
    }
