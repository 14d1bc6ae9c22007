# config.py

import os
from dotenv import load_dotenv, find_dotenv

# Load environment variables from .env file (install python-dotenv: pip install python-dotenv)
dotenv_path = find_dotenv()
if dotenv_path:
    load_dotenv(dotenv_path)
else:
    # fallback: try loading default .env in cwd
    load_dotenv()


def _env_flag(name, default='False'):
    return os.environ.get(name, default).lower() == 'true'


class Config:
    # --- CORE FLASK CONFIG ---
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'mood-asset-dev-key-replace-me'
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    TESTING = False

    # --- DATABASE CONFIG ---
    # Any SQLAlchemy URL works; a hosted Postgres in production, SQLite locally.
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or 'sqlite:///mood_assets.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    # Number of rows returned by GET /api/assets when no limit is given
    RECENT_ASSETS_LIMIT = int(os.environ.get('RECENT_ASSETS_LIMIT', 10))

    # --- AUTH CONFIG ---
    # Single fixed admin account. There is no user table.
    ADMIN_USERNAME = os.environ.get('ADMIN_USERNAME') or 'generator_admin'
    ADMIN_PASSWORD = os.environ.get('ADMIN_PASSWORD') or 'moodAsset'
    ADMIN_ROLE = 'admin'

    # --- AI SERVICE CONFIG ---
    # OpenRouter fronts both the chat model (prompt optimisation, URL guessing)
    # and the image model. Leave the key unset to run on placeholders only.
    OPENROUTER_API_KEY = os.environ.get('OPENROUTER_API_KEY') or None
    OPENROUTER_BASE_URL = os.environ.get('OPENROUTER_BASE_URL') or 'https://openrouter.ai/api/v1'
    OPENROUTER_REFERER = os.environ.get('OPENROUTER_REFERER') or 'https://mood-asset-generator.com'
    OPENROUTER_TITLE = os.environ.get('OPENROUTER_TITLE') or 'Mood Asset Generator'

    PROMPT_MODEL = os.environ.get('PROMPT_MODEL') or 'anthropic/claude-3.5-sonnet'
    IMAGE_MODEL = os.environ.get('IMAGE_MODEL') or 'black-forest-labs/flux-1.1-pro'
    URL_GUESS_MODEL = os.environ.get('URL_GUESS_MODEL') or 'openai/gpt-4o'
    IMAGE_SIZE = os.environ.get('IMAGE_SIZE') or '512x512'

    # --- STOCK PHOTO CONFIG ---
    UNSPLASH_ACCESS_KEY = os.environ.get('UNSPLASH_ACCESS_KEY') or None
    UNSPLASH_SEARCH_URL = 'https://api.unsplash.com/search/photos'

    # Per-call timeout (seconds) for every outbound HTTP request
    EXTERNAL_REQUEST_TIMEOUT = int(os.environ.get('EXTERNAL_REQUEST_TIMEOUT', 30))

    # --- STORAGE CONFIG ---
    # When True, the chosen image is copied into the local upload bucket and the
    # asset stores the bucket URL instead of the remote one.
    PERSIST_GENERATED_IMAGES = _env_flag('PERSIST_GENERATED_IMAGES')
    STORAGE_BUCKET = os.environ.get('STORAGE_BUCKET') or 'asset-images'


class TestingConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    OPENROUTER_API_KEY = None
    UNSPLASH_ACCESS_KEY = None
    PERSIST_GENERATED_IMAGES = False
    EXTERNAL_REQUEST_TIMEOUT = 1
