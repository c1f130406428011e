"""Application factory for the album submission service."""

import os

from flask import Flask

from . import auth, logging
from .routes import api, ui
from .services import database

logger = logging.getLogger(__name__)


def create_web_app() -> Flask:
    """Initialize an instance of the album submission web application."""
    app = Flask('tidalwav', template_folder='templates')
    app.config.from_pyfile('config.py')

    auth.init_app(app)
    database.init_app(app)
    if app.config['RECORD_STORE'] == 'database':
        os.makedirs(app.config['DATA_DIR'], exist_ok=True)
        with app.app_context():
            database.create_all()

    app.register_blueprint(ui.blueprint)
    app.register_blueprint(api.blueprint)
    logger.debug('Created app with %s record store',
                 app.config['RECORD_STORE'])
    return app
