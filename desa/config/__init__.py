import os
from dotenv import load_dotenv

load_dotenv()


def _int_env(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


# PyJWT flags HS256 keys shorter than 32 bytes as insecure
DEV_SECRET_KEY = 'dev-secret-key-change-me-before-deploying'


class Config:
    # Provide a safe development fallback to avoid 500s when SECRET_KEY is missing.
    SECRET_KEY = os.getenv('SECRET_KEY') or DEV_SECRET_KEY
    DATABASE_URL = os.getenv('DATABASE_URL')
    SQLALCHEMY_DATABASE_URI = DATABASE_URL or 'sqlite:///desa.db'
    SQLALCHEMY_TRACK_MODIFICATIONS = False

    # Connection pool (ignored for SQLite). Excess demand waits up to
    # DB_POOL_TIMEOUT seconds for a connection to be released.
    DB_POOL_SIZE = _int_env('DB_POOL_SIZE', 10)
    DB_POOL_TIMEOUT = _int_env('DB_POOL_TIMEOUT', 60)
    DB_MAX_OVERFLOW = _int_env('DB_MAX_OVERFLOW', 0)

    # Authentication
    BCRYPT_ROUNDS = _int_env('BCRYPT_ROUNDS', 12)
    SESSION_MAX_AGE_HOURS = _int_env('SESSION_MAX_AGE_HOURS', 24)
    MIN_PASSWORD_LENGTH = 8

    # Uploads
    UPLOAD_FOLDER = os.getenv('UPLOAD_FOLDER') or os.path.join(os.getcwd(), 'uploads')
    MAX_UPLOAD_SIZE = _int_env('MAX_UPLOAD_SIZE', 5 * 1024 * 1024)
    MAX_JSON_SIZE = 1024 * 1024

    # Rate limiting (Flask-Limiter)
    RATELIMIT_STORAGE_URI = os.getenv('RATELIMIT_STORAGE_URI', 'memory://')
    RATELIMIT_ENABLED = os.getenv('RATELIMIT_ENABLED', 'true').lower() in ('1', 'true', 'yes')

    # Skip create-if-missing table bootstrap (e.g. when running Alembic)
    SKIP_BOOTSTRAP = os.getenv('DESA_SKIP_BOOTSTRAP', '0') == '1'


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = 'test-secret-key-for-desa-digital-suite'
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'
    BCRYPT_ROUNDS = 4
    RATELIMIT_ENABLED = False
    SKIP_BOOTSTRAP = True
