"""Distance lookup and shipping quote endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException, status

from ...errors import ProviderError
from ...schemas.shipping import DistanceRequest, DistanceResponse, QuoteRequest, QuoteResponse
from ...services.providers.registry import default_registry
from ...services.shipping.service import ShippingCalculator

router = APIRouter(prefix="/shipping", tags=["shipping"])


@router.post("/distance", response_model=DistanceResponse, status_code=status.HTTP_200_OK)
def calculate_distance(payload: DistanceRequest) -> DistanceResponse:
    registry = default_registry()
    if payload.provider not in registry:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown distance provider '{payload.provider}'.",
        )
    try:
        origin = payload.origin.to_location()
        destination = payload.destination.to_location()
        if not origin.is_valid or not destination.is_valid:
            raise ValueError("Origin and destination must be valid locations.")
        result = registry.get(payload.provider).calculate_distance(destination, origin, payload.provider_settings)
        distance = result.raise_for_error()
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except ProviderError as exc:
        logging.warning(f"Distance lookup through {payload.provider} failed: {exc.message}")
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=exc.message) from exc
    except Exception as exc:
        logging.exception(f"Error calculating distance: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to calculate distance: {str(exc)}",
        ) from exc

    return DistanceResponse(
        provider=payload.provider,
        distance=distance.to_dict(),
        km=distance.in_km(),
        mi=distance.in_mi(),
    )


@router.post("/quote", response_model=QuoteResponse, status_code=status.HTTP_200_OK)
def quote(payload: QuoteRequest) -> QuoteResponse:
    """Price a delivery; ``available`` is false when the method cannot be offered."""
    registry = default_registry()
    if payload.method.api_provider not in registry:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown distance provider '{payload.method.api_provider}'.",
        )
    try:
        calculator = ShippingCalculator(payload.method, registry=registry)
        result = calculator.calculate(payload.destination.to_location(), payload.order.to_context())
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error calculating shipping quote: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to calculate shipping quote: {str(exc)}",
        ) from exc

    if result is None:
        return QuoteResponse(available=False)
    return QuoteResponse(
        available=True,
        cost=result.cost,
        label=result.label,
        distance=result.distance.to_dict(),
        provider=result.provider,
    )
