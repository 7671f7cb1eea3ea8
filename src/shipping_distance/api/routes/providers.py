"""Distance provider listing and settings validation."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, HTTPException, status

from ...schemas.shipping import ProviderSummary, ProviderValidationResponse, ValidationIssueModel
from ...services.providers.registry import default_registry

router = APIRouter(prefix="/providers", tags=["providers"])


@router.get("", response_model=list[ProviderSummary], status_code=status.HTTP_200_OK)
def list_providers() -> list[ProviderSummary]:
    return [ProviderSummary(**provider.describe()) for provider in default_registry()]


@router.post("/{slug}/validate", response_model=ProviderValidationResponse, status_code=status.HTTP_200_OK)
def validate_provider(slug: str, provider_settings: dict[str, Any] = Body(default={})) -> ProviderValidationResponse:
    """Check provider settings, including one live request with the given credentials."""
    registry = default_registry()
    if slug not in registry:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown distance provider '{slug}'.")
    try:
        issues = registry.get(slug).validate_settings(provider_settings)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except Exception as exc:
        logging.exception(f"Error validating {slug} settings: {exc}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=f"Failed to validate provider settings: {str(exc)}",
        ) from exc
    return ProviderValidationResponse(
        provider=slug,
        valid=not issues,
        issues=[ValidationIssueModel(**issue.to_dict()) for issue in issues],
    )
