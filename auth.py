"""Fixed-credential auth gate.

There is exactly one account (the configured admin pair). Pages are gated on
an authenticated flag kept in the signed client session; the JSON surface
additionally hands out bearer tokens kept in-memory. Asset and generation
API routes are not gated.
"""

import secrets
from functools import wraps
from flask import Blueprint, request, jsonify, current_app, session, redirect, url_for

auth_bp = Blueprint('auth', __name__, url_prefix='/api/auth')

# In-memory token store: token -> user descriptor. Entries are removed only on
# logout, so the table grows for the lifetime of the process.
SESSIONS = {}

SESSION_FLAG = 'isAuthenticated'
SESSION_USER = 'user'

MSG_INVALID_CREDENTIALS = '아이디 또는 비밀번호가 올바르지 않습니다.'


def generate_token():
    return secrets.token_hex(32)


def check_credentials(username, password):
    cfg = current_app.config
    return (isinstance(username, str) and isinstance(password, str)
            and secrets.compare_digest(username, cfg['ADMIN_USERNAME'])
            and secrets.compare_digest(password, cfg['ADMIN_PASSWORD']))


def login(username, password):
    """Mark the client session authenticated; return the user descriptor or None."""
    if not check_credentials(username, password):
        current_app.logger.info(f"[AUTH] Rejected login for {username!r}")
        return None
    user = {'username': current_app.config['ADMIN_USERNAME'], 'role': current_app.config['ADMIN_ROLE']}
    session[SESSION_FLAG] = True
    session[SESSION_USER] = user
    current_app.logger.info(f"[AUTH] {user['username']} logged in")
    return user


def logout():
    session.pop(SESSION_FLAG, None)
    session.pop(SESSION_USER, None)


def is_authenticated():
    return session.get(SESSION_FLAG) is True


def get_user():
    user = session.get(SESSION_USER)
    return user if isinstance(user, dict) else None


def login_required(f):
    """Redirect unauthenticated viewers to the login page."""
    @wraps(f)
    def decorated(*args, **kwargs):
        if not is_authenticated():
            return redirect(url_for('pages.login_page', next=request.path))
        return f(*args, **kwargs)
    return decorated


def token_required(f):
    @wraps(f)
    def decorated(*args, **kwargs):
        token_header = request.headers.get('Authorization')
        if not token_header or not token_header.startswith('Bearer '):
            return jsonify({'error': 'Authorization token is missing or invalid'}), 401
        token = token_header.split(' ', 1)[1]
        user = SESSIONS.get(token)
        if not user:
            return jsonify({'error': 'Invalid or expired token'}), 401
        # Pass the user descriptor and token as the first args to handlers
        return f(user, token, *args, **kwargs)
    return decorated


@auth_bp.route('/login', methods=['POST'])
def login_api():
    data = request.get_json(silent=True) or {}
    username = data.get('username')
    password = data.get('password')
    if not username or not password:
        return jsonify({'error': 'Missing required fields: username, password'}), 400

    user = login(username, password)
    if user is None:
        return jsonify({'error': MSG_INVALID_CREDENTIALS}), 401

    token = generate_token()
    SESSIONS[token] = user
    return jsonify({'token': token, 'user': user}), 200


@auth_bp.route('/logout', methods=['POST'])
@token_required
def logout_api(user, token):
    SESSIONS.pop(token, None)
    logout()
    return jsonify({'message': 'Logged out successfully'}), 200


@auth_bp.route('/me', methods=['GET'])
@token_required
def me(user, token):
    return jsonify({'user': user}), 200
