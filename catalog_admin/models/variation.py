from catalog_admin.extensions import db
from catalog_admin.models.mixins import TimestampMixin


class ProductVariation(TimestampMixin, db.Model):
    """One variation axis of a product, e.g. "Color"."""

    __tablename__ = "product_variations"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    product_id = db.Column(
        db.Integer, db.ForeignKey("products.id"), nullable=False, index=True
    )
    status = db.Column(db.SmallInteger, nullable=False, default=1)

    options = db.relationship(
        "ProductVariationOption",
        backref="variation",
        lazy="select",
        order_by="ProductVariationOption.id",
    )

    def to_dict(self, with_options=True):
        data = {
            "id": self.id,
            "name": self.name,
            "product_id": self.product_id,
            "status": self.status,
        }
        if with_options:
            data["options"] = [o.to_dict() for o in self.options]
        return data

    def __repr__(self):
        return f"<ProductVariation {self.name}>"


class ProductVariationOption(TimestampMixin, db.Model):
    """A selectable value on an axis, e.g. "Red"."""

    __tablename__ = "product_variation_options"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    product_id = db.Column(
        db.Integer, db.ForeignKey("products.id"), nullable=False, index=True
    )
    product_variation_id = db.Column(
        db.Integer,
        db.ForeignKey("product_variations.id"),
        nullable=False,
        index=True,
    )
    status = db.Column(db.SmallInteger, nullable=False, default=1)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "product_id": self.product_id,
            "product_variation_id": self.product_variation_id,
            "status": self.status,
        }

    def __repr__(self):
        return f"<ProductVariationOption {self.name}>"
