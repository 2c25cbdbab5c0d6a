"""Change log repository - Database operations for the *_changes tables"""

from sqlalchemy.orm import Session

from ...models import ClientChange, EmployeeChange, InventoryChange

# entity kind -> (model, entity id column name)
CHANGE_MODELS = {
    "client": (ClientChange, "client_id"),
    "employee": (EmployeeChange, "employee_id"),
    "inventory": (InventoryChange, "inventory_id"),
}


class ChangeLogRepository:
    """Repository for append-only change entries"""

    @staticmethod
    def resolve(entity_kind: str):
        try:
            return CHANGE_MODELS[entity_kind]
        except KeyError:
            raise ValueError(f"Unknown audited entity kind: {entity_kind}") from None

    @staticmethod
    def append(db: Session, entity_kind: str, entity_id: int, actor_id: str, description: str):
        """Insert one change row and commit it"""
        model, id_column = ChangeLogRepository.resolve(entity_kind)
        entry = model(**{id_column: entity_id}, user_id=actor_id, description=description)
        db.add(entry)
        db.commit()
        return entry

    @staticmethod
    def list_for_entity(db: Session, entity_kind: str, entity_id: int) -> list:
        """Get change entries for one entity, newest first"""
        model, id_column = ChangeLogRepository.resolve(entity_kind)
        return (
            db.query(model)
            .filter(getattr(model, id_column) == entity_id)
            .order_by(model.created_at.desc(), model.id.desc())
            .all()
        )
