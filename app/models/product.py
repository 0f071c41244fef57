"""
Denormalised product table.

One row per effective SKU: the flattened join of a Loyverse item, one of its
variants, the variant's summed inventory across stores, and the category name.
"""

from sqlalchemy import Column, Text, Float, BigInteger

from ..database import Base


class Product(Base):
    __tablename__ = "products"

    sku = Column(Text, primary_key=True, nullable=False)
    name = Column(Text, nullable=True, index=True)
    category = Column(Text, nullable=True, index=True)
    # "desc" is a reserved word in SQL, so the attribute gets a longer name
    description = Column("desc", Text, nullable=True)
    price = Column(Float, nullable=True)
    qty = Column(BigInteger, nullable=True)
    image = Column(Text, nullable=True)

    def __repr__(self):
        return f"<Product(sku='{self.sku}', name='{self.name}', qty={self.qty})>"
