"""Catalog, local-answer, and booking routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Response

from spa_chat.api.dependencies import get_booking_relay, get_business_loader, get_catalog, get_intent_rules
from spa_chat.booking.relay import BookingRelay
from spa_chat.core.errors import NotFound
from spa_chat.db.catalog import CatalogRepository
from spa_chat.matching.answers import answer_locally
from spa_chat.matching.intents import IntentRule
from spa_chat.models.dto import (
    AssistRequest,
    AssistResponse,
    BookingRequest,
    BookingResponse,
    BusinessOut,
    HoursOut,
    PoliciesOut,
    ServiceOut,
)
from spa_chat.models.entities import Booking, BusinessConfig, Service, ServiceAlias
from spa_chat.rag.business import BusinessConfigLoader

router = APIRouter()


@router.post("/assist", response_model=AssistResponse, summary="Classify a message and answer locally if possible")
def assist(
    request: AssistRequest,
    catalog: CatalogRepository = Depends(get_catalog),
    loader: BusinessConfigLoader = Depends(get_business_loader),
    rules: tuple[IntentRule, ...] = Depends(get_intent_rules),
) -> AssistResponse:
    aliases = catalog.list_aliases()
    result = answer_locally(request.text, loader.get(), catalog.list_services(), aliases, rules)
    return AssistResponse(
        intent=result.intent.value,
        service=_service_out(result.service, aliases) if result.service else None,
        answer=result.answer,
    )


@router.get("/services", response_model=list[ServiceOut], summary="List bookable services")
def list_services(catalog: CatalogRepository = Depends(get_catalog)) -> list[ServiceOut]:
    aliases = catalog.list_aliases()
    return [_service_out(service, aliases) for service in catalog.list_services()]


@router.get("/business", response_model=BusinessOut, summary="Current business configuration")
def get_business(loader: BusinessConfigLoader = Depends(get_business_loader)) -> BusinessOut:
    config = loader.get()
    if config is None:
        raise NotFound("Business config not found")
    return _business_out(config, loader.loaded_at)


@router.post("/business/refresh", response_model=BusinessOut, summary="Reload the business configuration")
def refresh_business(loader: BusinessConfigLoader = Depends(get_business_loader)) -> BusinessOut:
    config = loader.refresh()
    if config is None:
        raise NotFound("Business config not found")
    return _business_out(config, loader.loaded_at)


@router.post("/bookings", response_model=BookingResponse, summary="Relay a booking request")
def create_booking(
    request: BookingRequest,
    response: Response,
    catalog: CatalogRepository = Depends(get_catalog),
    relay: BookingRelay = Depends(get_booking_relay),
) -> BookingResponse:
    service_name = request.service_name
    if not service_name:
        known = {service.id: service.name for service in catalog.list_services()}
        service_name = known.get(request.service_id, "")
    outcome = relay.submit(
        Booking(
            service_id=request.service_id,
            service_name=service_name,
            date=request.date,
            name=request.name,
            email=request.email,
            phone=request.phone,
            notes=request.notes,
            transcript=request.transcript,
            source=request.source,
        )
    )
    if not outcome.ok:
        response.status_code = 502
    return BookingResponse(ok=outcome.ok, status=outcome.status)


def _service_out(service: Service, aliases: list[ServiceAlias]) -> ServiceOut:
    return ServiceOut(
        id=service.id,
        name=service.name,
        duration=service.duration,
        price_from=service.price_from,
        description=service.description,
        aliases=[alias.alias for alias in aliases if alias.service_id == service.id],
    )


def _business_out(config: BusinessConfig, loaded_at: int | None) -> BusinessOut:
    return BusinessOut(
        name=config.name,
        phone=config.phone,
        email=config.email,
        address=config.address,
        hours=HoursOut(mon_fri=config.hours.mon_fri, sat=config.hours.sat, sun=config.hours.sun),
        policies=PoliciesOut(cancellation=config.policies.cancellation, late=config.policies.late),
        loaded_at=loaded_at,
    )


__all__ = ["router"]
