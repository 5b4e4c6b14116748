import os
from flask import Flask
from dotenv import load_dotenv

from .config import Config
from .logging_config import configure_logging
from .routes import bp


def create_app(config=None):
    # local.env never overrides variables already set in the environment
    load_dotenv(os.environ.get("ENV_FILE", "local.env"))

    app = Flask(__name__)
    app.config.update(Config.from_env())
    if config:
        app.config.update(config)
    Config.validate(app.config)

    if not app.config.get("TESTING"):
        configure_logging(app)

    # CORS (simple)
    from flask_cors import CORS
    CORS(app, resources={r"/*": {"origins": app.config["ALLOWED_ORIGINS"]}})

    app.register_blueprint(bp)

    @app.get("/healthz")
    def healthz():
        return {"ok": True}, 200
    return app
