# portal/core/config.py
import os

from dotenv import load_dotenv


def str_to_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def parse_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]


def merge_unique(items: list[str]) -> list[str]:
    seen: set[str] = set()
    out: list[str] = []
    for v in items:
        if v in seen:
            continue
        seen.add(v)
        out.append(v)
    return out


IDENTITY_PROVIDERS = {"session", "cognito"}


class Settings:
    def __init__(self) -> None:
        self.ENV = os.getenv("ENV", "dev").strip().lower()  # dev | prod
        if self.ENV != "prod":
            # Load .env only for non-prod so prod can't be accidentally influenced by local files.
            load_dotenv()

        self.LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").strip().upper()

        # ----------------------------
        # Document store
        # ----------------------------
        default_db = "" if self.ENV == "prod" else "sqlite:///./portal.db"
        self.DATABASE_URL = os.getenv("DATABASE_URL", default_db).strip()

        # ----------------------------
        # Password policy
        # ----------------------------
        self.PASSWORD_MIN_LENGTH = int(os.getenv("PASSWORD_MIN_LENGTH", "6"))
        self.PASSWORD_MAX_LENGTH = int(os.getenv("PASSWORD_MAX_LENGTH", "128"))

        # ----------------------------
        # CORS
        # ----------------------------
        dev_defaults = [
            "http://localhost:3000",
            "http://127.0.0.1:3000",
        ]

        cors_from_env = parse_csv(os.getenv("CORS_ORIGINS"))
        if self.ENV == "prod":
            self.CORS_ORIGINS = merge_unique(cors_from_env)
        else:
            self.CORS_ORIGINS = merge_unique(cors_from_env + dev_defaults)

        # ----------------------------
        # Identity provider
        # ----------------------------
        self.IDENTITY_PROVIDER = os.getenv("IDENTITY_PROVIDER", "session").strip().lower()

        # Session tokens (credentials provider)
        self.SESSION_SECRET = os.getenv("SESSION_SECRET", "")
        self.SESSION_ALGORITHM = os.getenv("SESSION_ALGORITHM", "HS256")
        self.SESSION_EXPIRE_MINUTES = int(os.getenv("SESSION_EXPIRE_MINUTES", str(60 * 24 * 30)))
        self.SESSION_COOKIE_NAME = os.getenv("SESSION_COOKIE_NAME", "portal_session")
        self.SESSION_COOKIE_SAMESITE = os.getenv("SESSION_COOKIE_SAMESITE", "lax")
        self.SESSION_COOKIE_SECURE = str_to_bool(os.getenv("SESSION_COOKIE_SECURE"), default=self.ENV == "prod")

        # Cognito (hosted provider)
        self.COGNITO_REGION = os.getenv("COGNITO_REGION", "").strip()
        self.COGNITO_USER_POOL_ID = os.getenv("COGNITO_USER_POOL_ID", "").strip()
        self.COGNITO_APP_CLIENT_ID = os.getenv("COGNITO_APP_CLIENT_ID", "").strip()
        self.COGNITO_JWKS_CACHE_SECONDS = int(os.getenv("COGNITO_JWKS_CACHE_SECONDS", "900"))
        self.COGNITO_ROLE_ATTRIBUTE = os.getenv("COGNITO_ROLE_ATTRIBUTE", "custom:role").strip()

        self._validate_prod()

    def _validate_prod(self) -> None:
        if self.IDENTITY_PROVIDER not in IDENTITY_PROVIDERS:
            raise RuntimeError(
                f"IDENTITY_PROVIDER must be one of {sorted(IDENTITY_PROVIDERS)}, got {self.IDENTITY_PROVIDER!r}"
            )

        if self.ENV != "prod":
            return

        missing: list[str] = []

        if not self.SESSION_SECRET:
            missing.append("SESSION_SECRET")
        if not self.DATABASE_URL:
            missing.append("DATABASE_URL")
        if not self.CORS_ORIGINS:
            missing.append("CORS_ORIGINS")

        if self.IDENTITY_PROVIDER == "cognito":
            if not self.COGNITO_REGION:
                missing.append("COGNITO_REGION")
            if not self.COGNITO_USER_POOL_ID:
                missing.append("COGNITO_USER_POOL_ID")
            if not self.COGNITO_APP_CLIENT_ID:
                missing.append("COGNITO_APP_CLIENT_ID")

        cors_joined = ",".join(self.CORS_ORIGINS)
        if "localhost" in cors_joined or "127.0.0.1" in cors_joined:
            raise RuntimeError("CORS_ORIGINS contains localhost/dev origins in prod")

        if missing:
            raise RuntimeError(f"Missing required prod env vars: {', '.join(missing)}")

    @property
    def cognito_issuer(self) -> str:
        if not (self.COGNITO_REGION and self.COGNITO_USER_POOL_ID):
            return ""
        return f"https://cognito-idp.{self.COGNITO_REGION}.amazonaws.com/{self.COGNITO_USER_POOL_ID}"

    @property
    def cognito_jwks_url(self) -> str:
        issuer = self.cognito_issuer
        if not issuer:
            return ""
        return f"{issuer}/.well-known/jwks.json"


settings = Settings()


def require_session_secret() -> None:
    if not settings.SESSION_SECRET:
        raise RuntimeError("SESSION_SECRET must be set")
