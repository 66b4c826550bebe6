# --- storefront/__init__.py ---
import os

from flask import Flask, jsonify
from loguru import logger

from .config import Config
from .extensions import db, jwt, cors, migrate


def create_app(config_class=Config):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(config_class)
    os.makedirs(app.instance_path, exist_ok=True)
    config_class.init_app(app)

    from .utils.log import setup_logging
    setup_logging(app.config["LOG_LEVEL"])

    # Init extensions
    db.init_app(app)
    jwt.init_app(app)
    cors.init_app(app, resources={r"/api/*": {"origins": "*"}})
    migrate.init_app(app, db)

    # Register blueprints
    from .auth import bp as auth_bp; app.register_blueprint(auth_bp)
    from .product import bp as product_bp; app.register_blueprint(product_bp)
    from .category import bp as category_bp; app.register_blueprint(category_bp)
    from .cart import bp as cart_bp; app.register_blueprint(cart_bp)
    from .wishlist import bp as wishlist_bp; app.register_blueprint(wishlist_bp)
    from .coupon import bp as coupon_bp; app.register_blueprint(coupon_bp)
    from .order import bp as order_bp; app.register_blueprint(order_bp)
    from .user import bp as user_bp; app.register_blueprint(user_bp)
    from .admin import bp as admin_bp; app.register_blueprint(admin_bp)
    from .upload import bp as upload_bp; app.register_blueprint(upload_bp)

    from .upload.routes import serve_upload
    app.add_url_rule(
        f"{app.config['UPLOAD_URL_PREFIX'].rstrip('/')}/<path:filename>",
        "uploaded_file",
        serve_upload,
    )

    from .errors import register_error_handlers
    register_error_handlers(app)

    from .cli import register_cli
    register_cli(app)

    @app.get("/")
    def health():
        return jsonify(ok=True, msg="API running")

    with app.app_context():
        from . import model  # noqa: F401
        db.create_all()

    logger.info("storefront ready ({}, {} routes)", app.config["ENV"], len(list(app.url_map.iter_rules())))
    return app
