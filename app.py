# app.py

from flask import Flask, jsonify, request, render_template_string
from flask_cors import CORS

from config import Config
from catalog import SEED_WORKSPACES
from models import db
from database import seed_workspaces
from auth import auth_bp
from api import api_bp
from pages import pages_bp


# --- FLASK APP FACTORY ---
def create_app(config_class=Config):
    app = Flask(__name__, static_folder='static', template_folder='templates')
    app.config.from_object(config_class)
    app.logger.setLevel(app.config.get('LOG_LEVEL', 'INFO'))

    # Enable CORS for the JSON API
    CORS(app, resources={r"/api/*": {"origins": "*"}})

    # --- DATABASE ---
    db.init_app(app)
    with app.app_context():
        db.create_all()
        seed_workspaces(SEED_WORKSPACES)

    # --- REGISTER BLUEPRINTS (Separate Logic) ---
    app.register_blueprint(auth_bp)
    app.register_blueprint(api_bp)
    app.register_blueprint(pages_bp)

    # JSON errors for API paths, plain pages elsewhere
    @app.errorhandler(404)
    def not_found(e):
        if request.path.startswith('/api/'):
            return jsonify({'error': 'Not found'}), 404
        return render_template_string('<h1>404</h1><p>페이지를 찾을 수 없습니다.</p>'), 404

    @app.errorhandler(500)
    def internal_error(e):
        app.logger.error(f"Unhandled error: {e}")
        if request.path.startswith('/api/'):
            return jsonify({'error': 'Internal Server Error'}), 500
        return render_template_string('<h1>500</h1><p>일시적인 오류가 발생했습니다.</p>'), 500

    return app


# --- MAIN EXECUTION ---
if __name__ == '__main__':
    app = create_app()
    # Disable the auto-reloader so background runs don't spawn child processes
    app.run(debug=True, port=5000, use_reloader=False)
