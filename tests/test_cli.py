"""Tests for the admin CLI commands."""
from catalog_admin.models import Product, ProductSku, ProductVariationConfiguration, User


def test_seed_admin_is_idempotent(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["seed-admin"])
    assert "Created admin admin@example.com" in result.output
    result = runner.invoke(args=["seed-admin"])
    assert "already exists" in result.output
    assert User.query.count() == 1


def test_seed_admin_requires_password(app, monkeypatch):
    monkeypatch.setitem(app.config, "ADMIN_PASSWORD", "")

    result = app.test_cli_runner().invoke(args=["seed-admin"])

    assert result.exit_code != 0
    assert "ADMIN_PASSWORD is not set" in result.output


def test_seed_demo_and_stats(app):
    runner = app.test_cli_runner()

    result = runner.invoke(args=["seed-demo"])
    assert result.exit_code == 0, result.output
    assert Product.query.count() == 3
    assert ProductSku.query.count() == 4
    assert ProductVariationConfiguration.query.count() == 5

    result = runner.invoke(args=["seed-demo"])
    assert "skipping" in result.output
    assert Product.query.count() == 3

    result = runner.invoke(args=["stats"])
    assert "products: 3" in result.output
    assert "skus: 4" in result.output
