"""Property catalog: the listings GuestPulse knows by name and address."""

import logging
from typing import List, Optional

import yaml

from .models import Property

logger = logging.getLogger(__name__)

DEFAULT_PROPERTIES = [
    Property(id="1", name="Downtown Luxury Loft", address="123 Main St", city="San Francisco"),
    Property(id="2", name="Cozy Marina Apartment", address="456 Harbor Blvd", city="San Francisco"),
    Property(id="3", name="Modern SoMa Studio", address="789 Tech Way", city="San Francisco"),
]


def load_properties(path: Optional[str] = None) -> List[Property]:
    """Load properties from a YAML file, falling back to the built-in catalog.

    The file holds a ``properties`` list of mappings with ``id``, ``name``,
    ``address`` and ``city``.
    """
    if not path:
        return list(DEFAULT_PROPERTIES)

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
        properties = [
            Property(
                id=str(item["id"]),
                name=str(item["name"]),
                address=str(item.get("address", "")),
                city=str(item.get("city", "")),
            )
            for item in data.get("properties", [])
        ]
    except (OSError, yaml.YAMLError, KeyError, TypeError, AttributeError) as e:
        logger.warning(f"Failed to load properties from {path}: {e}. Using defaults.")
        return list(DEFAULT_PROPERTIES)

    if not properties:
        logger.warning(f"No properties found in {path}. Using defaults.")
        return list(DEFAULT_PROPERTIES)

    logger.info(f"Loaded {len(properties)} properties from {path}")
    return properties


def find_property(properties: List[Property], property_id: str) -> Optional[Property]:
    return next((p for p in properties if p.id == property_id), None)
