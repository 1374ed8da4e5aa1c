from catalog_admin.extensions import db
from catalog_admin.models.mixins import TimestampMixin
from catalog_admin.services.storage_service import url_for


product_categories = db.Table(
    "product_categories",
    db.Column(
        "product_id",
        db.Integer,
        db.ForeignKey("products.id", ondelete="CASCADE"),
        primary_key=True,
    ),
    db.Column(
        "category_id",
        db.Integer,
        db.ForeignKey("categories.id"),
        primary_key=True,
        index=True,
    ),
)


class Product(TimestampMixin, db.Model):
    __tablename__ = "products"

    id = db.Column(db.Integer, primary_key=True)
    product_name = db.Column(db.String(255), nullable=False)
    product_image = db.Column(db.String(512))
    # Primary category; every linked category also has a product_categories row
    category_id = db.Column(
        db.Integer, db.ForeignKey("categories.id"), nullable=True, index=True
    )
    sub_category_id = db.Column(
        db.Integer, db.ForeignKey("sub_categories.id"), nullable=True
    )
    inner_category_id = db.Column(
        db.Integer, db.ForeignKey("inner_categories.id"), nullable=True
    )
    brand_id = db.Column(
        db.Integer, db.ForeignKey("brands.id"), nullable=True, index=True
    )
    features = db.Column(db.JSON, default=list)  # [{"option": ..., "value": ...}]
    advantages = db.Column(db.JSON, default=list)
    status = db.Column(db.SmallInteger, nullable=False, default=1, index=True)

    __table_args__ = (
        db.Index(
            "ix_product_category_chain",
            "category_id",
            "sub_category_id",
            "inner_category_id",
        ),
    )

    categories = db.relationship(
        "Category", secondary=product_categories, lazy="select", order_by="Category.id"
    )
    category = db.relationship("Category", foreign_keys=[category_id])
    brand = db.relationship("Brand")
    variations = db.relationship(
        "ProductVariation",
        backref="product",
        lazy="select",
        order_by="ProductVariation.id",
    )

    @property
    def category_ids(self):
        ids = [c.id for c in self.categories]
        if not ids and self.category_id:
            ids = [self.category_id]
        return ids

    def to_dict(self):
        return {
            "id": self.id,
            "product_name": self.product_name,
            "product_image": url_for(self.product_image),
            "category_id": self.category_id,
            "category_ids": self.category_ids,
            "category_name": self.category.category_name if self.category else None,
            "sub_category_id": self.sub_category_id,
            "inner_category_id": self.inner_category_id,
            "brand_id": self.brand_id,
            "brand_name": self.brand.brand_name if self.brand else None,
            "features": self.features or [],
            "advantages": self.advantages or [],
            "status": self.status,
            **self._timestamps(),
        }

    def __repr__(self):
        return f"<Product {self.id}: {self.product_name}>"
