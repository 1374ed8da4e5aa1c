from catalog_admin.extensions import db
from catalog_admin.models.mixins import TimestampMixin
from catalog_admin.services.storage_service import url_for, urls_for


class Banner(TimestampMixin, db.Model):
    __tablename__ = "banners"

    id = db.Column(db.Integer, primary_key=True)
    banner_title = db.Column(db.String(255), nullable=False)
    banner_sub_title = db.Column(db.String(255))
    banner_image = db.Column(db.String(512), nullable=False)
    # Plain reference, no FK: banners may outlive the category they point at
    connected_category_id = db.Column(db.Integer, nullable=True)
    status = db.Column(db.SmallInteger, nullable=False, default=1)

    def to_dict(self):
        return {
            "id": self.id,
            "banner_title": self.banner_title,
            "banner_sub_title": self.banner_sub_title,
            "banner_image": url_for(self.banner_image),
            "connected_category_id": self.connected_category_id,
            "status": self.status,
            **self._timestamps(),
        }


class Blog(TimestampMixin, db.Model):
    __tablename__ = "blogs"

    id = db.Column(db.Integer, primary_key=True)
    blog_title = db.Column(db.String(255), nullable=False)
    blog_thumbnail = db.Column(db.String(512), nullable=False)
    blog_sec_title = db.Column(db.String(255))
    description = db.Column(db.Text)
    sec_description = db.Column(db.Text)
    date = db.Column(db.Date, nullable=False)
    place = db.Column(db.String(255))
    other_images = db.Column(db.JSON, default=list)
    status = db.Column(db.SmallInteger, nullable=False, default=1)

    def to_dict(self):
        return {
            "id": self.id,
            "blog_title": self.blog_title,
            "blog_thumbnail": url_for(self.blog_thumbnail),
            "blog_sec_title": self.blog_sec_title,
            "description": self.description,
            "sec_description": self.sec_description,
            "date": self.date.isoformat() if self.date else None,
            "place": self.place,
            "other_images": urls_for(self.other_images),
            "status": self.status,
            **self._timestamps(),
        }


class Carousel(TimestampMixin, db.Model):
    __tablename__ = "carousel"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255))
    sub_title = db.Column(db.String(255))
    description = db.Column(db.Text)
    desktop_file = db.Column(db.String(512), nullable=False)
    mobile_file = db.Column(db.String(512))
    status = db.Column(db.SmallInteger, nullable=False, default=1)

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "sub_title": self.sub_title,
            "description": self.description,
            "desktop_file": url_for(self.desktop_file),
            "mobile_file": url_for(self.mobile_file),
            "status": self.status,
            **self._timestamps(),
        }
