from catalog_admin.extensions import db
from catalog_admin.models.mixins import TimestampMixin
from catalog_admin.services.storage_service import url_for


class Category(TimestampMixin, db.Model):
    __tablename__ = "categories"

    id = db.Column(db.Integer, primary_key=True)
    category_name = db.Column(db.String(120), unique=True, nullable=False)
    category_image = db.Column(db.String(512))
    status = db.Column(db.SmallInteger, nullable=False, default=1)
    is_listing = db.Column(db.Boolean, nullable=False, default=False, index=True)

    sub_categories = db.relationship(
        "SubCategory", backref="category", lazy="dynamic"
    )

    def to_dict(self):
        return {
            "id": self.id,
            "category_name": self.category_name,
            "category_image": url_for(self.category_image),
            "status": self.status,
            "is_listing": self.is_listing,
            **self._timestamps(),
        }

    def __repr__(self):
        return f"<Category {self.category_name}>"


class SubCategory(TimestampMixin, db.Model):
    __tablename__ = "sub_categories"

    id = db.Column(db.Integer, primary_key=True)
    sub_category_name = db.Column(db.String(120), nullable=False)
    sub_category_image = db.Column(db.String(512))
    category_id = db.Column(
        db.Integer, db.ForeignKey("categories.id"), nullable=False, index=True
    )
    status = db.Column(db.SmallInteger, nullable=False, default=1)

    inner_categories = db.relationship(
        "InnerCategory", backref="sub_category", lazy="dynamic"
    )

    def to_dict(self):
        return {
            "id": self.id,
            "sub_category_name": self.sub_category_name,
            "sub_category_image": url_for(self.sub_category_image),
            "category_id": self.category_id,
            "category_name": self.category.category_name if self.category else None,
            "status": self.status,
            **self._timestamps(),
        }

    def __repr__(self):
        return f"<SubCategory {self.sub_category_name}>"


class InnerCategory(TimestampMixin, db.Model):
    __tablename__ = "inner_categories"

    id = db.Column(db.Integer, primary_key=True)
    inner_category_name = db.Column(db.String(120), nullable=False)
    category_id = db.Column(
        db.Integer, db.ForeignKey("categories.id"), nullable=False, index=True
    )
    sub_category_id = db.Column(
        db.Integer, db.ForeignKey("sub_categories.id"), nullable=False, index=True
    )
    status = db.Column(db.SmallInteger, nullable=False, default=1)

    def to_dict(self):
        return {
            "id": self.id,
            "inner_category_name": self.inner_category_name,
            "category_id": self.category_id,
            "sub_category_id": self.sub_category_id,
            "sub_category_name": (
                self.sub_category.sub_category_name if self.sub_category else None
            ),
            "status": self.status,
            **self._timestamps(),
        }

    def __repr__(self):
        return f"<InnerCategory {self.inner_category_name}>"
