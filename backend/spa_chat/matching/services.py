"""Service mention detection in free text."""

from __future__ import annotations

from typing import Sequence

from spa_chat.models.entities import Service, ServiceAlias
from spa_chat.utils.text import simplify


def find_service(text: str, services: Sequence[Service], aliases: Sequence[ServiceAlias] = ()) -> Service | None:
    """Resolve the service a message talks about.

    Tried in order: alias table, id/name containment, then the largest
    count of whole name words found in the text (first in catalog order on ties).
    """
    normalized = simplify(text)
    if not normalized or not services:
        return None
    by_id = {service.id: service for service in services}

    for alias in aliases:
        phrase = simplify(alias.alias)
        if phrase and phrase in normalized and alias.service_id in by_id:
            return by_id[alias.service_id]

    for service in services:
        if simplify(service.id) in normalized or simplify(service.name) in normalized:
            return service

    words = set(normalized.split())
    best: Service | None = None
    best_score = 0
    for service in services:
        tokens = simplify(service.name).split()
        score = sum(1 for token in tokens if token in words)
        if score > best_score:
            best, best_score = service, score
    return best


__all__ = ["find_service"]
