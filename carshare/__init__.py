import logging

from flask import Flask

from .config import load_config, setup_logging
from .controllers.bookings import bp as bookings_bp
from .controllers.errors import bp as errors_bp
from .controllers.favorites import bp as favorites_bp
from .controllers.listings import bp as listings_bp
from .controllers.reviews import bp as reviews_bp
from .controllers.views import bp as views_bp
from .models.store import Store

logger = logging.getLogger(__name__)


def create_app(overrides: dict | None = None, store: Store | None = None):
    """
    Build the Flask app. `overrides` is merged over the environment config;
    `store` replaces the global Store (tests pass an in-memory one).
    """
    app = Flask(__name__)
    app.config.update(load_config())
    if overrides:
        app.config.update(overrides)
    app.json.sort_keys = app.config["JSON_SORT_KEYS"]

    setup_logging(app.config["LOG_LEVEL"])

    if store is not None:
        Store.reset_instance(store)
    else:
        Store.instance(app.config["DATA_PATH"])  # load data.pkl or start empty

    app.register_blueprint(errors_bp)
    app.register_blueprint(views_bp)
    app.register_blueprint(listings_bp)
    app.register_blueprint(bookings_bp)
    app.register_blueprint(reviews_bp)
    app.register_blueprint(favorites_bp)

    logger.info("App ready (strict status transitions: %s)", app.config["ENFORCE_STATUS_TRANSITIONS"])
    return app
