import os

class Config:
    SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret")
    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///storefront.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JSON_SORT_KEYS = False

    # Comma-separated list
    CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]

    # Remote store API; a relative base is resolved against API_ORIGIN
    API_BASE_URL = os.getenv("STOREFRONT_API_URL", "/api")
    API_ORIGIN = os.getenv("STOREFRONT_API_ORIGIN", "http://localhost:8080")
    API_TIMEOUT = float(os.getenv("STOREFRONT_API_TIMEOUT", "10"))

    RECENTLY_VIEWED_LIMIT = int(os.getenv("RECENTLY_VIEWED_LIMIT", "8"))
    CAROUSEL_INTERVAL = float(os.getenv("CAROUSEL_INTERVAL", "5"))
    CAROUSEL_RESUME_DELAY = float(os.getenv("CAROUSEL_RESUME_DELAY", "10"))
    # Live per-visitor carousels kept in memory
    CAROUSEL_LIVE_LIMIT = int(os.getenv("CAROUSEL_LIVE_LIMIT", "500"))

    APP_HOST = os.getenv("APP_HOST", "0.0.0.0")
    APP_PORT = int(os.getenv("APP_PORT", "5000"))
