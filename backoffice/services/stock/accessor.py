"""
Stock Accessor
Locked read and write of a product's authoritative stock quantity
"""
from sqlalchemy.orm import Session

from backoffice.core.exceptions import ProductNotFound, StockInvariantError
from backoffice.models.product import Product


class StockAccessor:
    """
    Reads and writes ``products.stock`` inside one unit of work

    ``lock`` must be called before ``write``; the row lock is released
    when the enclosing transaction commits or rolls back.
    """

    def __init__(self, db: Session):
        self.db = db

    def lock(self, product_id: int) -> Product:
        """
        Acquire the product row lock and re-read it (SELECT ... FOR UPDATE)

        Blocks while another unit of work holds the lock on the same row.
        """
        product = (
            self.db.query(Product)
            .filter(Product.id == product_id)
            .with_for_update()
            .populate_existing()
            .first()
        )
        if product is None:
            raise ProductNotFound(product_id)
        return product

    def write(self, product: Product, new_stock: int, actor_id: int) -> Product:
        """Persist the new stock value for a product locked by this unit of work"""
        if new_stock < 0:
            raise StockInvariantError(f"Refusing to write negative stock {new_stock} for product {product.id}")
        product.stock = new_stock
        product.updated_by = actor_id
        self.db.flush()
        return product
