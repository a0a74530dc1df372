import os
import logging
import sqlite3

from dotenv import load_dotenv
from flask import Flask, jsonify
from sqlalchemy import Engine, event

from liga.config import config
from liga.errors import register_error_handlers
from liga.extensions import db, migrate, jwt, cors, ma, limiter


def create_app(config_name=None):
    load_dotenv()

    if config_name is None:
        config_name = os.getenv("FLASK_ENV", "development")

    app = Flask(__name__)
    config_class = config[config_name]
    app.config.from_object(config_class)

    # Refuse to boot production without secrets
    if hasattr(config_class, "init_app"):
        config_class.init_app(app)

    _configure_logging(app)
    _init_extensions(app)
    register_error_handlers(app)

    from liga import models  # noqa: F401

    _register_blueprints(app)

    @app.route("/health")
    def health():
        return jsonify({"status": "healthy"}), 200

    from liga.seeds.cli import seed_cli

    app.cli.add_command(seed_cli, "seed")

    app.logger.info("Liga API ready (%s)", config_name)
    return app


def _configure_logging(app):
    level = logging.DEBUG if app.debug else app.config["LOG_LEVEL"]
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
    app.logger.setLevel(level)
    logging.getLogger("liga").setLevel(level)


def _init_extensions(app):
    db.init_app(app)
    migrate.init_app(app, db, render_as_batch=True)
    jwt.init_app(app)
    cors.init_app(
        app,
        resources={r"/api/*": {"origins": app.config["CORS_ORIGINS"].split(",")}},
    )
    ma.init_app(app)
    limiter.init_app(app)


@event.listens_for(Engine, "connect")
def _sqlite_pragmas(dbapi_conn, connection_record):
    # Local runs and the test suite use SQLite; foreign keys are off by default
    if isinstance(dbapi_conn, sqlite3.Connection):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.execute("PRAGMA busy_timeout=5000")
        cursor.close()


def _register_blueprints(app):
    from liga.auth.routes import auth_bp
    from liga.api.routes import api_bp
    from liga.api.club_routes import club_bp
    from liga.api.notification_routes import notification_bp

    app.register_blueprint(auth_bp, url_prefix="/api/auth")
    app.register_blueprint(api_bp, url_prefix="/api")
    app.register_blueprint(club_bp, url_prefix="/api/club")
    app.register_blueprint(notification_bp, url_prefix="/api")
