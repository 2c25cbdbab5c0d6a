from sqlalchemy import (
    CheckConstraint,
    Column,
    Date,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func

from .database import Base


class TaskStatus:
    """Stored task status values. Workflow: draft → new → in_progress → completed"""

    DRAFT = "черновик"
    NEW = "новая"
    IN_PROGRESS = "в работе"
    COMPLETED = "выполнено"

    ORDER = [DRAFT, NEW, IN_PROGRESS, COMPLETED]


class Task(Base):
    __tablename__ = "tasks"

    id = Column(Integer, primary_key=True, index=True)
    status = Column(String(50), default=TaskStatus.DRAFT, nullable=False, index=True)

    # Business fields; all required once the task leaves draft
    service = Column(String(255), nullable=True)  # Primary service name
    payment = Column(String(100), nullable=True)  # Payment method name
    cost = Column(Float, nullable=True)
    start_date = Column(Date, nullable=True, index=True)
    end_date = Column(Date, nullable=True)
    start_time = Column(String(10), nullable=True)  # HH:MM format
    end_time = Column(String(10), nullable=True)
    responsible = Column(String(255), nullable=True)  # Responsible person's full name
    fullname_client = Column(String(255), nullable=True)
    address_client = Column(String(500), nullable=True)
    phone = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)

    # Denormalized size of task_employees for this task
    employee_count = Column(Integer, default=0, nullable=False)

    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())

    employee_links = relationship("TaskEmployee", back_populates="task", passive_deletes=True)
    service_links = relationship("TaskService", back_populates="task", passive_deletes=True)
    reservations = relationship("TaskInventory", back_populates="task", passive_deletes=True)
    photos = relationship("TaskPhoto", back_populates="task", passive_deletes=True)


class Employee(Base):
    __tablename__ = "employees"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(255), nullable=False)
    phone_number = Column(String(50), nullable=True)
    user_id = Column(String(128), nullable=True, index=True)  # Firebase UID, used for push
    created_at = Column(DateTime, server_default=func.now())


class Responsible(Base):
    __tablename__ = "responsibles"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(255), nullable=False)


class Client(Base):
    __tablename__ = "clients"

    id = Column(Integer, primary_key=True, index=True)
    full_name = Column(String(255), nullable=False)
    phone_number = Column(String(50), nullable=False)
    email = Column(String(255), nullable=True)
    address = Column(String(500), nullable=True)
    source = Column(String(255), nullable=True)  # Where the lead came from
    comment = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())


class Service(Base):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    service_name = Column(String(255), unique=True, nullable=False)
    description = Column(Text, nullable=True)


class PaymentMethod(Base):
    __tablename__ = "paymentmethod"

    id = Column(Integer, primary_key=True, index=True)
    payment = Column(String(100), unique=True, nullable=False)


class InventoryItem(Base):
    __tablename__ = "inventory"
    __table_args__ = (CheckConstraint("quantity >= 0", name="ck_inventory_quantity_non_negative"),)

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    measure = Column(String(50), nullable=True)  # Unit of measure: шт, л, м ...
    quantity = Column(Integer, default=0, nullable=False)


class TaskEmployee(Base):
    __tablename__ = "task_employees"

    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True)
    employee_id = Column(Integer, ForeignKey("employees.id"), primary_key=True, index=True)

    task = relationship("Task", back_populates="employee_links")
    employee = relationship("Employee")


class TaskService(Base):
    __tablename__ = "task_services"

    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), primary_key=True)
    service_id = Column(Integer, ForeignKey("services.id"), primary_key=True, index=True)

    task = relationship("Task", back_populates="service_links")
    service = relationship("Service")


class TaskInventory(Base):
    """Inventory committed to a task; the ledger keeps it paired with stock decrements"""

    __tablename__ = "task_inventory"
    __table_args__ = (
        UniqueConstraint("task_id", "inventory_id", name="uq_task_inventory_item"),
        CheckConstraint("quantity >= 0", name="ck_task_inventory_quantity_non_negative"),
    )

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    inventory_id = Column(Integer, ForeignKey("inventory.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)

    task = relationship("Task", back_populates="reservations")
    item = relationship("InventoryItem")


class TaskPhoto(Base):
    __tablename__ = "task_photos"

    id = Column(Integer, primary_key=True, index=True)
    task_id = Column(Integer, ForeignKey("tasks.id", ondelete="CASCADE"), nullable=False, index=True)
    storage_key = Column(String(500), nullable=False)  # R2 object key
    created_at = Column(DateTime, server_default=func.now())

    task = relationship("Task", back_populates="photos")


# Append-only change history, one table per audited entity kind


class ClientChange(Base):
    __tablename__ = "client_changes"

    id = Column(Integer, primary_key=True, index=True)
    client_id = Column(Integer, nullable=False, index=True)  # No FK: history outlives the client
    user_id = Column(String(128), nullable=False)  # Acting user
    description = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class EmployeeChange(Base):
    __tablename__ = "employee_changes"

    id = Column(Integer, primary_key=True, index=True)
    employee_id = Column(Integer, nullable=False, index=True)
    user_id = Column(String(128), nullable=False)
    description = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class InventoryChange(Base):
    __tablename__ = "inventory_changes"

    id = Column(Integer, primary_key=True, index=True)
    inventory_id = Column(Integer, nullable=False, index=True)
    user_id = Column(String(128), nullable=False)
    description = Column(Text, nullable=False)
    created_at = Column(DateTime, server_default=func.now())


class UserToken(Base):
    """Device push token of an application user"""

    __tablename__ = "user_tokens"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(128), unique=True, nullable=False, index=True)
    token = Column(String(512), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
