from catalog_admin.models.brand import Brand
from catalog_admin.models.category import Category, InnerCategory, SubCategory
from catalog_admin.models.content import Banner, Blog, Carousel
from catalog_admin.models.product import Product, product_categories
from catalog_admin.models.sku import ProductSku, ProductVariationConfiguration
from catalog_admin.models.user import User
from catalog_admin.models.variation import ProductVariation, ProductVariationOption

__all__ = [
    "Banner",
    "Blog",
    "Brand",
    "Carousel",
    "Category",
    "InnerCategory",
    "Product",
    "ProductSku",
    "ProductVariation",
    "ProductVariationConfiguration",
    "ProductVariationOption",
    "SubCategory",
    "User",
    "product_categories",
]
