"""Flask CLI commands for admin operations."""
import click
from flask import current_app


DEMO_CATALOG = [
    # (category, brand, product, axes, skus as (code, name, price, option names))
    (
        "Apparel",
        "Northwind",
        "Classic Cotton Tee",
        [("Color", ["Red", "Blue"]), ("Size", ["M", "L"])],
        [
            ("TEE-RED-M", "Classic Tee Red M", "499", ["Red", "M"]),
            ("TEE-BLUE-L", "Classic Tee Blue L", "499", ["Blue", "L"]),
        ],
    ),
    (
        "Apparel",
        "Northwind",
        "Everyday Hoodie",
        [("Size", ["S", "M", "L"])],
        [("HOOD-S", "Everyday Hoodie S", "1299", ["S"])],
    ),
    (
        "Home",
        "Fernhill",
        "Ceramic Mug",
        [],
        [("MUG-01", "Ceramic Mug", "299", [])],
    ),
]


def register_cli(app):
    @app.cli.command("init-db")
    def init_db():
        """Create all tables."""
        from catalog_admin.extensions import db

        db.create_all()
        click.echo("Database initialized.")

    @app.cli.command("seed-admin")
    @click.option("--name", default="Admin")
    def seed_admin(name):
        """Create the admin user from ADMIN_EMAIL / ADMIN_PASSWORD if missing."""
        from catalog_admin.services.auth_service import ensure_admin

        email = current_app.config["ADMIN_EMAIL"]
        password = current_app.config["ADMIN_PASSWORD"]
        if not password:
            raise click.ClickException("ADMIN_PASSWORD is not set")
        user, created = ensure_admin(name, email, password)
        if created:
            click.echo(f"Created admin {user.email}")
        else:
            click.echo(f"Admin {user.email} already exists")

    @app.cli.command("seed-demo")
    def seed_demo():
        """Seed a small demo catalog with variations and SKUs (idempotent)."""
        from catalog_admin.extensions import db
        from catalog_admin.models import Brand, Category, Product, ProductVariationOption
        from catalog_admin.services import sku_service, variation_service

        if Product.query.first():
            click.echo("Products already exist, skipping demo seed.")
            return

        for category_name, brand_name, product_name, axes, skus in DEMO_CATALOG:
            category = Category.query.filter_by(category_name=category_name).first()
            if category is None:
                category = Category(category_name=category_name, status=1)
                db.session.add(category)
            brand = Brand.query.filter_by(brand_name=brand_name).first()
            if brand is None:
                brand = Brand(
                    brand_name=brand_name, brand_image="/uploads/brands/demo.jpg"
                )
                db.session.add(brand)
            db.session.flush()

            product = Product(
                product_name=product_name,
                category_id=category.id,
                brand_id=brand.id,
                features=[],
                advantages=[],
                status=1,
            )
            product.categories = [category]
            db.session.add(product)
            db.session.flush()
            variation_service.add_variations(product, axes)
            db.session.commit()

            for code, sku_name, price, option_names in skus:
                option_ids = [
                    o.id
                    for o in ProductVariationOption.query.filter(
                        ProductVariationOption.product_id == product.id,
                        ProductVariationOption.name.in_(option_names),
                    )
                ]
                sku_service.create_sku_with_variation(
                    product.id,
                    {
                        "sku": code,
                        "product_sku_name": sku_name,
                        "mrp": price,
                        "price": price,
                        "quantity": 10,
                    },
                    option_ids,
                )
        click.echo(f"Seeded {len(DEMO_CATALOG)} demo products.")

    @app.cli.command("stats")
    def stats():
        """Show catalog row counts."""
        from catalog_admin.services.product_service import get_stats

        for table, count in get_stats().items():
            click.echo(f"  {table}: {count}")
