"""Client service - Business logic for client operations"""

import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ...exceptions import NotFoundError, TransactionError, ValidationError
from ...models import Client
from ...shared.validators import missing_fields
from ..audit.service import ChangeAuditLog
from .repository import ClientRepository
from .schemas import ClientCreate, ClientUpdate

logger = logging.getLogger(__name__)

# POST /clients takes a quick contact; POST /add-client is the full card
CONTACT_FIELDS = ("full_name", "phone_number")
CARD_FIELDS = ("full_name", "phone_number", "email", "address", "source", "comment")


class ClientService:
    """Service layer for client business logic"""

    def __init__(self, db: Session, audit: ChangeAuditLog):
        self.db = db
        self.repo = ClientRepository()
        self.audit = audit

    def get_clients(self) -> list[Client]:
        return self.repo.get_clients(self.db)

    def get_client(self, client_id: int) -> Client:
        """Get a specific client"""
        client = self.repo.get_client_by_id(self.db, client_id)
        if not client:
            raise NotFoundError(f"Client {client_id} not found")
        return client

    def create_client(self, data: ClientCreate, actor_id: str, required: tuple = CONTACT_FIELDS) -> Client:
        """Create a new client after checking the endpoint's required fields"""
        values = data.model_dump()
        missing = missing_fields(values, required)
        if missing:
            raise ValidationError(f"Missing required fields: {', '.join(missing)}", fields=missing)

        try:
            client = self.repo.create_client(self.db, **values)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to create client: {e}")
            raise TransactionError() from e

        logger.info(f"✅ Client {client.id} created by {actor_id}")
        self.audit.record_later("client", client.id, actor_id, f"Created client '{client.full_name}'")
        return client

    def update_client(self, client_id: int, data: ClientUpdate, actor_id: str) -> Client:
        """Update the fields present in the request"""
        client = self.get_client(client_id)
        updates = data.model_dump(exclude_unset=True)

        cleared = [field for field in CONTACT_FIELDS if field in updates and not updates[field]]
        if cleared:
            raise ValidationError(f"Missing required fields: {', '.join(cleared)}", fields=cleared)

        changes = {
            field: (getattr(client, field), value)
            for field, value in updates.items()
            if getattr(client, field) != value
        }
        if not changes:
            return client

        try:
            client = self.repo.update_client(self.db, client, **updates)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to update client {client_id}: {e}")
            raise TransactionError() from e

        summary = ", ".join(f"{field}: {old} → {new}" for field, (old, new) in changes.items())
        self.audit.record_later("client", client.id, actor_id, f"Updated {summary}")
        return client

    def delete_client(self, client_id: int, actor_id: str) -> dict:
        client = self.get_client(client_id)
        name = client.full_name
        try:
            self.repo.delete_client(self.db, client)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"❌ Failed to delete client {client_id}: {e}")
            raise TransactionError() from e

        logger.info(f"🗑️ Client {client_id} deleted by {actor_id}")
        self.audit.record_later("client", client_id, actor_id, f"Deleted client '{name}'")
        return {"message": "Client deleted"}

    def history(self, client_id: int) -> list:
        return self.audit.history(self.db, "client", client_id)
