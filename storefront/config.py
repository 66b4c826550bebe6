import os
from datetime import timedelta


class Config:
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False
    ENV = os.getenv("FLASK_ENV", "development")
    JWT_SECRET_KEY = os.environ.get("JWT_SECRET_KEY", "dev-secret-change-me")
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)
    REFRESH_TOKEN_TTL_DAYS = int(os.getenv("REFRESH_TOKEN_TTL_DAYS", "7"))

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

    # checkout preview
    SHIPPING_FEE = os.getenv("SHIPPING_FEE", "50.00")
    FREE_SHIPPING_THRESHOLD = os.getenv("FREE_SHIPPING_THRESHOLD", "500.00")
    TAX_RATE = os.getenv("TAX_RATE", "0.18")
    CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₹")

    # blob store
    MAX_CONTENT_LENGTH = 5 * 1024 * 1024
    UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER")  # defaults to <instance>/uploads
    UPLOAD_URL_PREFIX = os.getenv("UPLOAD_URL_PREFIX", "/uploads")

    @staticmethod
    def init_app(app):
        if not os.getenv("DATABASE_URL"):
            os.makedirs(app.instance_path, exist_ok=True)
            app.config["SQLALCHEMY_DATABASE_URI"] = f"sqlite:///{os.path.join(app.instance_path, 'app.db')}"
        else:
            app.config["SQLALCHEMY_DATABASE_URI"] = os.getenv("DATABASE_URL")

        if not app.config.get("UPLOAD_FOLDER"):
            app.config["UPLOAD_FOLDER"] = os.path.join(app.instance_path, "uploads")


class TestingConfig(Config):
    TESTING = True
    JWT_SECRET_KEY = "test-secret-with-enough-length-for-hs256"
    LOG_LEVEL = "WARNING"

    @staticmethod
    def init_app(app):
        app.config["SQLALCHEMY_DATABASE_URI"] = "sqlite://"
        if not app.config.get("UPLOAD_FOLDER"):
            app.config["UPLOAD_FOLDER"] = os.path.join(app.instance_path, "test-uploads")
