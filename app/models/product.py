import uuid

from sqlalchemy import Column, Integer, String, Numeric, Text, DateTime, Uuid
from sqlalchemy.sql import func

from app.database import Base


class Product(Base):
    """
    Product model mapped onto the externally managed ``products`` table.

    The API only reads this table; rows are created and updated by other
    tooling.

    Attributes:
        id: Opaque unique identifier (UUID)
        name: Product name
        category: Category label
        price: Product price
        description: Optional free text, NULL when absent
        stock: Available quantity
        created_at: Timestamp when product was created
        updated_at: Timestamp when product was last updated
    """
    __tablename__ = "products"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4)
    name = Column(String(255), nullable=False, index=True)
    category = Column(String(100), nullable=False, index=True)
    price = Column(Numeric(10, 2, asdecimal=False), nullable=False)
    description = Column(Text, nullable=True)
    stock = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', category='{self.category}')>"
