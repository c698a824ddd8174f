"""SQLAlchemy models for the product catalog.

Defines Category and Product tables for persistent storage.
"""

from decimal import Decimal

from sqlalchemy import ForeignKey, Integer, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from loja.infrastructure.database import Base


class Category(Base):
    """Product category.

    Categories are managed outside the product endpoints; products only
    reference them.

    Attributes:
        id: Store-assigned identifier.
        name: Display name.
    """

    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(80), nullable=False)

    def __repr__(self) -> str:
        """String representation."""
        return f"<Category(id={self.id}, name={self.name})>"


class Product(Base):
    """Product entity in the catalog.

    Attributes:
        id: Store-assigned identifier.
        name: Product name.
        description: Product description.
        value: Catalog price.
        image: URL of the stored product image.
        category_id: Owning category ID.
        category: Owning category.
    """

    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    value: Mapped[Decimal] = mapped_column(Numeric(18, 2), nullable=False)
    image: Mapped[str] = mapped_column(String(1024), nullable=False, default="")
    category_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("categories.id"),
        nullable=False,
        index=True,
    )

    # Relationships
    category: Mapped[Category] = relationship("Category", lazy="raise")

    def __repr__(self) -> str:
        """String representation."""
        return f"<Product(id={self.id}, name={self.name[:30]})>"
