# storefront/cli.py
import click
from flask.cli import with_appcontext
from werkzeug.security import generate_password_hash

from .errors import ApiError
from .extensions import db
from .model import Category, Coupon, Product, ProductImage, User
from .model.coupon import COUPON_TYPES
from .services import coupon_service
from .utils.money import D

SAMPLE_CATEGORIES = [
    {"name": "Electronics", "slug": "electronics", "featured": True, "sort_order": 1},
    {"name": "Home & Kitchen", "slug": "home-kitchen", "featured": True, "sort_order": 2},
    {"name": "Books", "slug": "books", "featured": False, "sort_order": 3},
]

SAMPLE_PRODUCTS = [
    ("electronics", "Wireless Earbuds", "wireless-earbuds", "EL-001", "1499.00", "1999.00", 40),
    ("electronics", "USB-C Charger 30W", "usb-c-charger-30w", "EL-002", "899.00", None, 8),
    ("electronics", "Bluetooth Speaker", "bluetooth-speaker", "EL-003", "2499.00", "2999.00", 15),
    ("home-kitchen", "Steel Water Bottle", "steel-water-bottle", "HK-001", "399.00", "499.00", 120),
    ("home-kitchen", "Non-stick Pan 24cm", "non-stick-pan-24cm", "HK-002", "1099.00", None, 5),
    ("books", "Python Crash Course", "python-crash-course", "BK-001", "650.00", "799.00", 25),
]

SAMPLE_COUPONS = [
    ("WELCOME10", "percentage", "10", "10% off your order"),
    ("FLAT100", "fixed", "100", "Flat 100 off"),
    ("FREESHIP", "free_shipping", "0", "Free shipping"),
]


@click.command("create-admin")
@with_appcontext
@click.option("--email", required=True)
@click.option("--password", required=True)
@click.option("--name", required=True)
def create_admin(email, password, name):
    email = email.strip().lower()
    if User.query.filter_by(email=email).first():
        click.echo("Email already exists"); return
    u = User(email=email, name=name, password_hash=generate_password_hash(password), role="admin")
    db.session.add(u); db.session.commit()
    click.echo(f"Admin created: {u.id} {u.email}")


@click.command("create-coupon")
@with_appcontext
@click.option("--code", required=True)
@click.option("--type", "ctype", required=True, type=click.Choice(COUPON_TYPES))
@click.option("--value", required=True)
@click.option("--name", default=None)
def create_coupon(code, ctype, value, name):
    try:
        c = coupon_service.create_coupon(code, ctype, value, name=name)
    except ApiError as e:
        raise click.ClickException(e.message)
    click.echo(f"Coupon created: {c.code} ({c.type} {c.value})")


@click.command("seed-catalog")
@with_appcontext
def seed_catalog():
    """Sample categories, products and coupons; rows that already exist are left alone."""
    categories = {}
    for data in SAMPLE_CATEGORIES:
        c = Category.query.filter_by(slug=data["slug"]).first()
        if c is None:
            c = Category(active=True, **data)
            db.session.add(c)
        categories[data["slug"]] = c
    db.session.flush()

    added = 0
    for cat_slug, name, slug, sku, price, original, stock in SAMPLE_PRODUCTS:
        if Product.query.filter_by(slug=slug).first():
            continue
        p = Product(
            name=name, slug=slug, sku=sku,
            price=D(price), original_price=D(original) if original else None,
            stock=stock, category_id=categories[cat_slug].id,
            short_description=name, active=True,
        )
        p.images.append(ProductImage(url=f"/uploads/{slug}.jpg", alt_text=name, sort_order=0, is_primary=True))
        db.session.add(p)
        added += 1

    for code, ctype, value, name in SAMPLE_COUPONS:
        if not Coupon.query.filter_by(code=code).first():
            db.session.add(Coupon(code=code, type=ctype, value=D(value), name=name))

    db.session.commit()
    click.echo(f"Seeded {len(categories)} categories, {added} new products")


def register_cli(app):
    app.cli.add_command(create_admin)
    app.cli.add_command(create_coupon)
    app.cli.add_command(seed_catalog)
