# pages.py
"""Server-rendered pages: login, dashboard and the per-workspace views."""

from flask import Blueprint, render_template, request, redirect, url_for, abort, current_app

import auth
from auth import login_required
from catalog import STYLE_PRESETS
from database import DatabaseService, DatabaseError

pages_bp = Blueprint('pages', __name__)

MSG_WORKSPACE_NOT_FOUND = '워크스페이스를 찾을 수 없습니다.'
MSG_LOAD_FAILED = '데이터를 불러오는데 실패했습니다.'


def _safe_next(target):
    # only allow local paths as redirect targets
    if target and target.startswith('/') and not target.startswith('//'):
        return target
    return url_for('pages.dashboard')


@pages_bp.route('/')
def index():
    if auth.is_authenticated():
        return redirect(url_for('pages.dashboard'))
    return redirect(url_for('pages.login_page'))


@pages_bp.route('/login', methods=['GET', 'POST'])
def login_page():
    error = None
    if request.method == 'POST':
        username = request.form.get('username', '')
        password = request.form.get('password', '')
        if auth.login(username, password):
            return redirect(_safe_next(request.args.get('next')))
        error = auth.MSG_INVALID_CREDENTIALS
    elif auth.is_authenticated():
        return redirect(url_for('pages.dashboard'))
    status = 401 if error else 200
    return render_template('login.html', error=error), status


@pages_bp.route('/logout')
def logout_page():
    auth.logout()
    return redirect(url_for('pages.login_page'))


@pages_bp.route('/dashboard')
@login_required
def dashboard():
    recent = DatabaseService.get_recent_assets(limit=current_app.config['RECENT_ASSETS_LIMIT'])
    return render_template('dashboard.html', presets=STYLE_PRESETS, recent_assets=recent, user=auth.get_user())


@pages_bp.route('/workspace/<key>')
@login_required
def workspace(key):
    preset = STYLE_PRESETS.get(key)
    if preset is None:
        abort(404)

    error = None
    workspace_row = None
    assets = []
    try:
        workspace_row = DatabaseService.get_workspace_by_key(key)
        if workspace_row is None:
            error = f"{preset['name']} {MSG_WORKSPACE_NOT_FOUND}"
        else:
            assets = DatabaseService.get_assets(workspace_row.id)
    except DatabaseError as e:
        error = e.message or MSG_LOAD_FAILED

    return render_template(
        'workspace.html',
        style_key=key,
        preset=preset,
        workspace=workspace_row,
        assets=assets,
        error=error,
        user=auth.get_user(),
    )
