from __future__ import annotations

import os


def _load_dotenv_if_present() -> None:
    """
    Load environment variables from a local `.env` file (dev convenience).

    Production deployments should set real environment variables instead.
    """
    try:
        from dotenv import load_dotenv  # type: ignore

        # Do not override existing environment variables.
        load_dotenv(override=False)
    except Exception:
        return


# Load .env as early as possible (dev only).
_load_dotenv_if_present()


def database_url() -> str:
    url = os.environ.get("DATABASE_URL") or "sqlite:///./local.db"
    # Some managed providers still supply `postgres://...` which SQLAlchemy treats as invalid.
    if url.startswith("postgres://"):
        url = url.replace("postgres://", "postgresql://", 1)
    return url


def jwt_secret() -> str:
    return os.environ.get("JWT_SECRET") or "dev-secret-change-me"


def jwt_exp_hours() -> int:
    """
    Token lifetime in hours. `0` issues tokens without an `exp` claim.
    """
    raw = (os.environ.get("JWT_EXP_HOURS") or "").strip()
    try:
        v = int(raw or "168")
    except Exception:
        v = 168
    return max(v, 0)


def is_local_dev() -> bool:
    """
    We treat the app as "local dev" when DATABASE_URL is not set, because
    `database_url()` falls back to sqlite in that case.
    """
    return not (os.environ.get("DATABASE_URL") or "").strip()


def app_env() -> str:
    """
    Application environment marker: local | staging | prod
    """
    raw = (os.environ.get("APP_ENV") or "").strip().lower()
    if raw:
        return raw
    return "local" if is_local_dev() else "prod"


def enforce_secure_secrets() -> None:
    """
    Fail-fast in production if dangerous defaults are still in use.
    """
    if app_env() in {"prod", "production"}:
        if jwt_secret() == "dev-secret-change-me":
            raise RuntimeError("JWT_SECRET must be set in production (default dev secret detected)")


def cors_origins() -> list[str]:
    raw = (os.environ.get("CORS_ORIGINS") or "").strip()
    if not raw:
        return ["*"]
    origins = [o.strip() for o in raw.split(",") if o.strip()]
    return origins or ["*"]


def log_level() -> str:
    return (os.environ.get("LOG_LEVEL") or "INFO").strip().upper()


def log_format() -> str:
    return (os.environ.get("LOG_FORMAT") or "text").strip().lower()


def port() -> int:
    raw = (os.environ.get("PORT") or "").strip()
    try:
        return int(raw or "3000")
    except Exception:
        return 3000


# -----------------------
# Cloudinary (media host)
# -----------------------
def cloudinary_cloud_name() -> str:
    return (os.environ.get("CLOUDINARY_CLOUD_NAME") or "").strip()


def cloudinary_api_key() -> str:
    return (os.environ.get("CLOUDINARY_API_KEY") or "").strip()


def cloudinary_api_secret() -> str:
    return (os.environ.get("CLOUDINARY_API_SECRET") or "").strip()


def cloudinary_folder() -> str:
    return (os.environ.get("CLOUDINARY_FOLDER") or "property_uploads").strip() or "property_uploads"


# -----------------------
# Typesense (search index)
# -----------------------
def typesense_url() -> str:
    """
    Base URL of the Typesense node, e.g. https://xyz.a1.typesense.net
    """
    return (os.environ.get("TYPESENSE_URL") or "").strip().rstrip("/")


def typesense_api_key() -> str:
    return (os.environ.get("TYPESENSE_API_KEY") or "").strip()


def typesense_collection() -> str:
    return (os.environ.get("TYPESENSE_COLLECTION") or "properties").strip() or "properties"


def search_timeout_seconds() -> float:
    raw = (os.environ.get("SEARCH_TIMEOUT_SECONDS") or "").strip()
    try:
        v = float(raw or "10")
    except Exception:
        v = 10.0
    return v if v > 0 else 10.0
