"""Configuration settings for the clinic portal."""

import os


def get_postgres_uri():
    """Get PostgreSQL connection URI from environment variables."""
    host = os.environ.get("DB_HOST", "localhost")
    port = 5433 if host == "localhost" else 5432
    password = os.environ.get("DB_PASSWORD", "portal_pass")
    user = os.environ.get("DB_USER", "portal_user")
    db_name = os.environ.get("DB_NAME", "portal_db")
    return f"postgresql://{user}:{password}@{host}:{port}/{db_name}"


def get_redis_host_and_port():
    """Get Redis connection details from environment variables."""
    host = os.environ.get("REDIS_HOST", "localhost")
    port = int(os.environ.get("REDIS_PORT", "6379"))
    return dict(host=host, port=port)


def get_minio_config():
    """Get MinIO connection configuration from environment variables."""
    host = os.environ.get("MINIO_HOST", "localhost")
    endpoint = f"{host}:9000"
    access_key = os.environ.get("MINIO_ACCESS_KEY", "minioadmin")
    secret_key = os.environ.get("MINIO_SECRET_KEY", "minioadmin123")
    secure = os.environ.get("MINIO_SECURE", "false").lower() == "true"
    scheme = "https" if secure else "http"

    return dict(
        endpoint=endpoint,
        access_key=access_key,
        secret_key=secret_key,
        case_documents_bucket=os.environ.get("MINIO_CASE_DOCUMENTS_BUCKET", "case-documents"),
        case_files_bucket=os.environ.get("MINIO_CASE_FILES_BUCKET", "case-files"),
        secure=secure,
        public_base_url=os.environ.get("MINIO_PUBLIC_URL", f"{scheme}://{endpoint}"),
    )


def get_functions_config():
    """Get notification function endpoint configuration."""
    return dict(
        base_url=os.environ.get("FUNCTIONS_URL", "http://localhost:54321/functions/v1"),
        api_key=os.environ.get("FUNCTIONS_API_KEY", ""),
        timeout=int(os.environ.get("FUNCTIONS_TIMEOUT", "10")),
        lab_order_email=os.environ.get("LAB_ORDER_EMAIL", "orders@lab.example.com"),
    )


def get_auth_config():
    """Get hosted auth service configuration."""
    return dict(
        base_url=os.environ.get("AUTH_URL", "http://localhost:54321/auth/v1"),
        anon_key=os.environ.get("AUTH_ANON_KEY", ""),
        jwt_secret=os.environ.get("AUTH_JWT_SECRET", "dev-jwt-secret"),
        audience=os.environ.get("AUTH_JWT_AUDIENCE", "authenticated"),
        password_redirect_url=os.environ.get("AUTH_REDIRECT_URL", "http://localhost:5173/login"),
    )


def get_api_host_and_port():
    """Get API bind host and port from environment variables."""
    host = os.environ.get("API_HOST", "localhost")
    port = int(os.environ.get("API_PORT", "8000"))
    return dict(host=host, port=port)


def get_api_url():
    """Get API URL from environment variables."""
    api = get_api_host_and_port()
    return f"http://{api['host']}:{api['port']}"
