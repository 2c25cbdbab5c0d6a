"""Catalog repository - services, payment methods and responsibles"""

from typing import Optional

from sqlalchemy.orm import Session

from ...models import PaymentMethod, Responsible, Service


class CatalogRepository:
    """Repository for reference data. Callers own the transaction"""

    @staticmethod
    def get_services(db: Session) -> list[Service]:
        return db.query(Service).order_by(Service.service_name).all()

    @staticmethod
    def get_service_by_id(db: Session, service_id: int) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()

    @staticmethod
    def get_service_by_name(db: Session, service_name: str) -> Optional[Service]:
        return db.query(Service).filter(Service.service_name == service_name).first()

    @staticmethod
    def add_service(db: Session, **service_data) -> Service:
        service = Service(**service_data)
        db.add(service)
        db.flush()
        return service

    @staticmethod
    def delete_service(db: Session, service: Service) -> None:
        db.delete(service)
        db.flush()

    @staticmethod
    def get_payment_methods(db: Session) -> list[PaymentMethod]:
        return db.query(PaymentMethod).order_by(PaymentMethod.id).all()

    @staticmethod
    def get_responsibles(db: Session) -> list[Responsible]:
        return db.query(Responsible).order_by(Responsible.full_name).all()
