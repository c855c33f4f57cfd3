from typing import Union

from src.addresses.models import AddressBase


def format_address(address: Union[AddressBase, dict]) -> str:
    """Formate une adresse sur une ligne (adresse figée dans la commande)."""
    if isinstance(address, dict):
        data = address
    else:
        data = address.model_dump()
    parts = [
        data.get("neighbourhood"),
        data.get("nearest_landmark"),
        data.get("city"),
        data.get("province"),
        data.get("zipcode"),
        data.get("country"),
    ]
    return ", ".join(str(p).strip() for p in parts if p and str(p).strip())
