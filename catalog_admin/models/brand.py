from catalog_admin.extensions import db
from catalog_admin.models.mixins import TimestampMixin
from catalog_admin.services.storage_service import url_for


class Brand(TimestampMixin, db.Model):
    __tablename__ = "brands"

    id = db.Column(db.Integer, primary_key=True)
    brand_name = db.Column(db.String(120), nullable=False)
    brand_image = db.Column(db.String(512), nullable=False)
    is_popular = db.Column(db.Boolean, nullable=False, default=False)
    status = db.Column(db.SmallInteger, nullable=False, default=1)

    def to_dict(self):
        return {
            "id": self.id,
            "brand_name": self.brand_name,
            "brand_image": url_for(self.brand_image),
            "is_popular": self.is_popular,
            "status": self.status,
            **self._timestamps(),
        }

    def __repr__(self):
        return f"<Brand {self.brand_name}>"
