from flask import render_template, request, redirect, url_for, session, flash, current_app
from flask_login import login_user, logout_user, login_required, current_user
from google_auth_oauthlib.flow import Flow

from . import auth_bp  # Import the blueprint
from .identity import StaffIdentity
from ..constants import ANONYMOUS_STAFF_NAME

GOOGLE_SCOPES = [
    "openid",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
]
GOOGLE_USERINFO_URL = "https://openidconnect.googleapis.com/v1/userinfo"
OAUTH_STATE_KEY = 'google_oauth_state'


def _google_flow(state=None):
    config = current_app.config
    flow = Flow.from_client_config(
        {
            "web": {
                "client_id": config['GOOGLE_CLIENT_ID'],
                "client_secret": config['GOOGLE_CLIENT_SECRET'],
                "redirect_uris": [url_for('auth_bp.google_callback', _external=True)],
                "auth_uri": "https://accounts.google.com/o/oauth2/auth",
                "token_uri": "https://oauth2.googleapis.com/token",
            }
        },
        scopes=GOOGLE_SCOPES,
        state=state,
    )
    flow.redirect_uri = url_for('auth_bp.google_callback', _external=True)
    return flow


def _next_page():
    next_page = request.args.get('next')
    if not next_page or not next_page.startswith('/') or next_page.startswith('//'):
        next_page = url_for('tickets_bp.dashboard')
    return next_page


# Login route: manual name entry, no verification
@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    if current_user.is_authenticated:
        return redirect(url_for('tickets_bp.dashboard'))

    if request.method == 'POST':
        nombre = request.form.get('nombre', '').strip()
        apellido = request.form.get('apellido', '').strip()

        if not nombre or not apellido:
            flash('Nombre y apellido son obligatorios.', 'error')
            return redirect(url_for('auth_bp.login'))

        if len(nombre) > 60 or len(apellido) > 60:
            flash('Nombre demasiado largo.', 'error')
            return redirect(url_for('auth_bp.login'))

        login_user(StaffIdentity.manual(nombre, apellido), remember=True)
        return redirect(_next_page())

    google_enabled = bool(current_app.config.get('GOOGLE_CLIENT_ID'))
    return render_template('auth/login.html', google_enabled=google_enabled)


@auth_bp.route('/login/google')
def google_login():
    if not current_app.config.get('GOOGLE_CLIENT_ID'):
        flash('El inicio de sesión con Google no está configurado.', 'error')
        return redirect(url_for('auth_bp.login'))

    flow = _google_flow()
    auth_url, state = flow.authorization_url(prompt="select_account")
    session[OAUTH_STATE_KEY] = state
    return redirect(auth_url)


@auth_bp.route('/login/google/callback')
def google_callback():
    state = session.pop(OAUTH_STATE_KEY, None)
    if not state or request.args.get('state') != state:
        flash('La sesión de Google expiró. Inténtalo de nuevo.', 'error')
        return redirect(url_for('auth_bp.login'))

    if request.args.get('error'):
        flash('Inicio de sesión con Google cancelado.', 'error')
        return redirect(url_for('auth_bp.login'))

    try:
        flow = _google_flow(state=state)
        flow.fetch_token(code=request.args.get('code'))
        response = flow.authorized_session().get(GOOGLE_USERINFO_URL)
        response.raise_for_status()
        userinfo = response.json()
    except Exception as e:
        current_app.logger.error(f"Error durante el inicio de sesión con Google: {e}")
        flash('No se pudo iniciar sesión con Google.', 'error')
        return redirect(url_for('auth_bp.login'))

    login_user(StaffIdentity.from_google(userinfo, ANONYMOUS_STAFF_NAME), remember=True)
    return redirect(url_for('tickets_bp.dashboard'))


# Logout route
@auth_bp.route('/logout')
@login_required
def logout():
    logout_user()
    return redirect(url_for('auth_bp.login'))
