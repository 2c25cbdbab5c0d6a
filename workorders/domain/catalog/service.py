"""Catalog service - reference data used when filling in a task"""

import logging

from sqlalchemy.orm import Session

from ...database import unit_of_work
from ...exceptions import ConflictError, NotFoundError
from ...models import PaymentMethod, Responsible, Service
from ..tasks.associations import TaskAssociationManager
from .repository import CatalogRepository
from .schemas import ServiceCreate, ServiceUpdate

logger = logging.getLogger(__name__)


class CatalogService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = CatalogRepository()

    def get_services(self) -> list[Service]:
        return self.repo.get_services(self.db)

    def get_service(self, service_id: int) -> Service:
        service = self.repo.get_service_by_id(self.db, service_id)
        if not service:
            raise NotFoundError(f"Service {service_id} not found")
        return service

    def _require_unique_name(self, service_name: str, service_id: int = None) -> None:
        existing = self.repo.get_service_by_name(self.db, service_name)
        if existing and existing.id != service_id:
            raise ConflictError(f"Service '{service_name}' already exists")

    def create_service(self, data: ServiceCreate) -> Service:
        self._require_unique_name(data.service_name)
        with unit_of_work(self.db):
            service = self.repo.add_service(self.db, **data.model_dump())
        self.db.refresh(service)
        logger.info(f"✅ Service {service.id} '{service.service_name}' created")
        return service

    def update_service(self, service_id: int, data: ServiceUpdate) -> Service:
        updates = data.model_dump(exclude_unset=True)
        if updates.get("service_name"):
            self._require_unique_name(updates["service_name"], service_id)

        with unit_of_work(self.db):
            service = self.get_service(service_id)
            for field, value in updates.items():
                if field == "service_name" and not value:
                    continue
                setattr(service, field, value)
        self.db.refresh(service)
        return service

    def delete_service(self, service_id: int) -> dict:
        """Delete a service and drop it from every task it was linked to"""
        with unit_of_work(self.db):
            service = self.get_service(service_id)
            TaskAssociationManager(self.db).detach_service_everywhere(service_id)
            self.repo.delete_service(self.db, service)
        logger.info(f"🗑️ Service {service_id} deleted")
        return {"message": "Service deleted"}

    def get_payment_methods(self) -> list[PaymentMethod]:
        return self.repo.get_payment_methods(self.db)

    def get_responsibles(self) -> list[Responsible]:
        return self.repo.get_responsibles(self.db)
