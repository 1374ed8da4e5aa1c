from catalog_admin.extensions import db
from catalog_admin.models.mixins import TimestampMixin
from catalog_admin.services.storage_service import url_for, urls_for


def variation_signature(option_ids):
    """Canonical text form of a set of option ids ("" for simple products)."""
    return ",".join(str(i) for i in sorted({int(i) for i in option_ids}))


class ProductSku(TimestampMixin, db.Model):
    __tablename__ = "product_skus"

    id = db.Column(db.Integer, primary_key=True)
    sku = db.Column(db.String(100), nullable=False)
    product_sku_name = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text)
    thumbnail_image = db.Column(db.String(512))
    sku_images = db.Column(db.JSON, default=list)
    mrp = db.Column(db.Numeric(12, 2), nullable=False)
    price = db.Column(db.Numeric(12, 2), nullable=False)
    quantity = db.Column(db.Integer, nullable=False, default=0)
    is_new = db.Column(db.Boolean, nullable=False, default=False)
    single_order_limit = db.Column(db.Integer, nullable=False, default=1)
    is_out_of_stock = db.Column(db.Boolean, nullable=False, default=False)
    product_id = db.Column(
        db.Integer, db.ForeignKey("products.id"), nullable=False, index=True
    )
    status = db.Column(db.SmallInteger, nullable=False, default=1)
    variation_signature = db.Column(db.String(512), nullable=False, default="")

    __table_args__ = (
        db.UniqueConstraint("product_id", "sku", name="uq_sku_code"),
        db.UniqueConstraint(
            "product_id", "variation_signature", name="uq_sku_signature"
        ),
    )

    product = db.relationship("Product")
    configurations = db.relationship(
        "ProductVariationConfiguration",
        backref="product_sku",
        lazy="select",
        order_by="ProductVariationConfiguration.product_variation_id",
    )

    @property
    def option_ids(self):
        return {c.product_variation_option_id for c in self.configurations}

    def to_dict(self, with_configuration=False):
        data = {
            "id": self.id,
            "sku": self.sku,
            "product_sku_name": self.product_sku_name,
            "description": self.description,
            "thumbnail_image": url_for(self.thumbnail_image),
            "sku_images": urls_for(self.sku_images),
            "mrp": float(self.mrp) if self.mrp is not None else None,
            "price": float(self.price) if self.price is not None else None,
            "quantity": self.quantity,
            "is_new": self.is_new,
            "single_order_limit": self.single_order_limit,
            "is_out_of_stock": self.is_out_of_stock,
            "product_id": self.product_id,
            "product_name": self.product.product_name if self.product else None,
            "status": self.status,
            **self._timestamps(),
        }
        if with_configuration:
            data["variation_configuration"] = [
                c.to_dict() for c in self.configurations
            ]
        return data

    def __repr__(self):
        return f"<ProductSku {self.sku}>"


class ProductVariationConfiguration(TimestampMixin, db.Model):
    """One (SKU, axis) pair: the option a SKU selects on that axis."""

    __tablename__ = "product_variation_configurations"

    id = db.Column(db.Integer, primary_key=True)
    product_id = db.Column(
        db.Integer, db.ForeignKey("products.id"), nullable=False, index=True
    )
    product_sku_id = db.Column(
        db.Integer, db.ForeignKey("product_skus.id"), nullable=False, index=True
    )
    product_variation_id = db.Column(
        db.Integer, db.ForeignKey("product_variations.id"), nullable=False
    )
    product_variation_option_id = db.Column(
        db.Integer, db.ForeignKey("product_variation_options.id"), nullable=False
    )
    status = db.Column(db.SmallInteger, nullable=False, default=1)

    __table_args__ = (
        db.UniqueConstraint(
            "product_sku_id", "product_variation_id", name="uq_config_axis"
        ),
    )

    variation = db.relationship("ProductVariation")
    option = db.relationship("ProductVariationOption")

    def to_dict(self):
        return {
            "id": self.id,
            "product_variation_id": self.product_variation_id,
            "variation_name": self.variation.name if self.variation else None,
            "product_variation_option_id": self.product_variation_option_id,
            "option_name": self.option.name if self.option else None,
        }

    def __repr__(self):
        return (
            f"<Configuration sku={self.product_sku_id} "
            f"option={self.product_variation_option_id}>"
        )
