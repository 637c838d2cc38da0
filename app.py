import logging

import click
from flask import Flask
from flask_cors import CORS

import config
from cron.auto_stop import auto_stop_expired_trips
from notifications.routes import create_notifications_bp
from search.routes import create_search_bp
from trips.routes import create_trips_bp
from user_auth.utils import initialize_firebase_app

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')


def _firestore_client():
    from firebase_admin import firestore

    try:
        firebase_app = initialize_firebase_app(
            config.FIREBASE_SERVICE_ACCOUNT_CONTENT, config.FIREBASE_SERVICE_ACCOUNT_PATH
        )
    except Exception:
        logging.error(
            "Firebase could not be initialized. Set FIREBASE_SERVICE_ACCOUNT_CONTENT, "
            f"provide a key file at {config.FIREBASE_SERVICE_ACCOUNT_PATH}, "
            "or run with Application Default Credentials."
        )
        raise
    logging.info("Firebase initialized.")
    return firestore.client(app=firebase_app)


def create_app(db_instance=None):
    if db_instance is None:
        db_instance = _firestore_client()

    app = Flask(__name__)
    app.secret_key = config.FLASK_SECRET_KEY
    CORS(app)

    app.register_blueprint(create_trips_bp(db_instance))
    app.register_blueprint(create_search_bp(db_instance))
    app.register_blueprint(create_notifications_bp(db_instance))

    @app.route('/')
    def home():
        return 'Server is working!'

    @app.cli.command('auto-stop-trips')
    @click.option('--grace-hours', type=float, default=config.DEFAULT_GRACE_HOURS, show_default=True)
    def auto_stop_trips_command(grace_hours):
        """Stop tracking trips whose end date + grace period has passed."""
        stopped = auto_stop_expired_trips(db_instance, default_grace_hours=grace_hours)
        click.echo(f"Auto-stopped {len(stopped)} trip(s).")

    return app


if __name__ == "__main__":
    app = create_app()
    app.run(debug=True, port=5000)
