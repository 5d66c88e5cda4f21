import os
import secrets

from flask import Flask, jsonify

from config import GuardConfig
from csrf import CsrfGuard
from observability import setup_logging
from views import views_bp


def create_app(config=None, guard_config=None):
    app = Flask(__name__)
    app.secret_key = os.environ.get('CSRF_GUARD_SECRET', secrets.token_hex(32))

    # Session security
    app.config['SESSION_COOKIE_HTTPONLY'] = True
    app.config['SESSION_COOKIE_SAMESITE'] = 'Lax'
    if os.environ.get('CSRF_GUARD_ENV') == 'production':
        app.config['SESSION_COOKIE_SECURE'] = True
    if config:
        app.config.update(config)

    if not app.config.get('TESTING'):
        setup_logging()

    # Health check endpoint
    @app.route('/health')
    def health_check():
        return jsonify({"status": "healthy"}), 200

    # Register blueprints
    app.register_blueprint(views_bp)

    guard = CsrfGuard(config=guard_config or GuardConfig.from_env())
    guard.init_app(app)
    guard.add_excluded_routes(['views.webhook'])

    return app


if __name__ == '__main__':
    create_app().run(host='0.0.0.0', port=3200, debug=True)
