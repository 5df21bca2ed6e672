import os
from datetime import timedelta
from dotenv import load_dotenv

# Load environment variables from .env file
BASE_DIR = os.path.abspath(os.path.dirname(__file__))
dotenv_path = os.path.join(BASE_DIR, '.env')

# Load the .env file from that specific path
load_dotenv(dotenv_path=dotenv_path)


class Config:
    """Base configuration class."""

    # Get secret key and database URL from environment variables
    SECRET_KEY = os.getenv('SECRET_KEY') or 'dev-fallback-secret-key-change-in-prod'
    SQLALCHEMY_DATABASE_URI = os.getenv('DATABASE_URL') or \
        'sqlite:///' + os.path.join(BASE_DIR, 'ticketdesk.db')

    # Flask-SQLAlchemy settings
    SQLALCHEMY_ENGINE_OPTIONS = {'pool_recycle': 280}
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Session settings
    PERMANENT_SESSION_LIFETIME = timedelta(days=30)

    # Flask-Login settings
    REMEMBER_COOKIE_DURATION = timedelta(days=30)
    REMEMBER_COOKIE_HTTPONLY = True
    SESSION_PROTECTION = 'basic'

    # Flask-Caching (row lookups of the mirror)
    CACHE_TYPE = os.getenv('CACHE_TYPE', 'SimpleCache')
    CACHE_DEFAULT_TIMEOUT = 300

    # Prices, never stored on the ticket
    PRICE_VIP = int(os.getenv('PRICE_VIP', 40))
    PRICE_GENERAL = int(os.getenv('PRICE_GENERAL', 25))

    # Spreadsheet mirror
    SPREADSHEET_ID = os.getenv('SPREADSHEET_ID', '')
    SHEET_TAB_VIP = os.getenv('SHEET_TAB_VIP', 'Tickets VIP')
    SHEET_TAB_GENERAL = os.getenv('SHEET_TAB_GENERAL', 'Tickets General')
    MIRROR_ENABLED = os.getenv('MIRROR_ENABLED', 'true').lower() in ['true', 'on', '1']
    MIRROR_TIMEZONE = os.getenv('MIRROR_TIMEZONE', 'America/Lima')
    SHEET_ROW_CACHE_TIMEOUT = int(os.getenv('SHEET_ROW_CACHE_TIMEOUT', 60))

    # Service account used by the mirror (file path or raw JSON)
    GOOGLE_SERVICE_ACCOUNT_FILE = os.getenv('GOOGLE_SERVICE_ACCOUNT_FILE')
    GOOGLE_SERVICE_ACCOUNT_JSON = os.getenv('GOOGLE_SERVICE_ACCOUNT_JSON')

    # Google sign-in for staff
    GOOGLE_CLIENT_ID = os.getenv('GOOGLE_CLIENT_ID')
    GOOGLE_CLIENT_SECRET = os.getenv('GOOGLE_CLIENT_SECRET')
