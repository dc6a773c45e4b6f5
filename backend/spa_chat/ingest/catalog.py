"""Load business configuration and the service catalog from YAML."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from spa_chat.db.catalog import CatalogRepository
from spa_chat.models.entities import BusinessConfig, Service, ServiceAlias


@dataclass(slots=True)
class CatalogDocument:
    business: BusinessConfig | None
    services: list[Service] = field(default_factory=list)
    aliases: list[ServiceAlias] = field(default_factory=list)


def parse_catalog(raw: Any) -> CatalogDocument:
    """Validate the catalog mapping.

    Expected shape::

        business: {name, phone, email, address, hours: {...}, policies: {...}}
        services:
          - {id, name, duration, price_from, description, aliases: [..]}

    Raises:
        ValueError: on a missing or malformed field.
    """
    if not isinstance(raw, dict):
        raise ValueError("catalog must be a mapping")
    business_raw = raw.get("business")
    business = None
    if business_raw is not None:
        if not isinstance(business_raw, dict) or not business_raw.get("name"):
            raise ValueError("business needs at least a name")
        business = BusinessConfig.from_mapping(business_raw)

    services: list[Service] = []
    aliases: list[ServiceAlias] = []
    for position, item in enumerate(raw.get("services") or []):
        try:
            service = Service(
                id=str(item["id"]),
                name=str(item["name"]),
                duration=int(item["duration"]),
                price_from=float(item["price_from"]),
                description=str(item.get("description") or ""),
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise ValueError(f"service #{position} is invalid: {exc}") from exc
        services.append(service)
        aliases.extend(ServiceAlias(service_id=service.id, alias=str(alias)) for alias in item.get("aliases") or [])
    return CatalogDocument(business=business, services=services, aliases=aliases)


def load_catalog(path: Path, catalog: CatalogRepository) -> CatalogDocument:
    """Replace the stored catalog (and business config, if present) with the file's contents."""
    with path.expanduser().open("r", encoding="utf-8") as fh:
        document = parse_catalog(yaml.safe_load(fh) or {})
    if document.business is not None:
        catalog.save_business_config(document.business)
    catalog.replace_services(document.services, document.aliases)
    return document


__all__ = ["CatalogDocument", "parse_catalog", "load_catalog"]
