"""Catalog router - services, payment methods and responsibles"""

import logging

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from ...auth import get_current_actor
from ...database import get_db
from .schemas import (
    PaymentMethodResponse,
    ResponsibleResponse,
    ServiceCreate,
    ServiceResponse,
    ServiceUpdate,
)
from .service import CatalogService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Catalog"])


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    """Dependency injection for CatalogService"""
    return CatalogService(db)


# ============================================================================
# SERVICES
# ============================================================================


@router.get("/services", response_model=list[ServiceResponse])
def get_services(service: CatalogService = Depends(get_catalog_service)):
    """Get the services catalog"""
    return [ServiceResponse.model_validate(s) for s in service.get_services()]


@router.post(
    "/services",
    response_model=ServiceResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_current_actor)],
)
def create_service(data: ServiceCreate, service: CatalogService = Depends(get_catalog_service)):
    return ServiceResponse.model_validate(service.create_service(data))


@router.put("/services/{service_id}", response_model=ServiceResponse, dependencies=[Depends(get_current_actor)])
def update_service(
    service_id: int, data: ServiceUpdate, service: CatalogService = Depends(get_catalog_service)
):
    return ServiceResponse.model_validate(service.update_service(service_id, data))


@router.delete("/services/{service_id}", dependencies=[Depends(get_current_actor)])
def delete_service(service_id: int, service: CatalogService = Depends(get_catalog_service)):
    """Delete a service; tasks that used it lose the link"""
    return service.delete_service(service_id)


# ============================================================================
# READ-ONLY LISTINGS
# ============================================================================


@router.get("/paymentmethods", response_model=list[PaymentMethodResponse])
def get_payment_methods(service: CatalogService = Depends(get_catalog_service)):
    return [PaymentMethodResponse.model_validate(p) for p in service.get_payment_methods()]


@router.get("/responsibles", response_model=list[ResponsibleResponse])
def get_responsibles(service: CatalogService = Depends(get_catalog_service)):
    return [ResponsibleResponse.model_validate(r) for r in service.get_responsibles()]
