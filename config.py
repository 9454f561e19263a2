import os

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")
PORT = int(os.getenv("PORT", 5000))
API_PREFIX = os.getenv("API_PREFIX", "/api/v1")

MONGO_URI = os.getenv("MONGO_URI", "mongodb://localhost:27017")
DATABASE_NAME = os.getenv("DATABASE_NAME", "devcamper")

JWT_SECRET = os.getenv("JWT_SECRET", "supersecretkey")
JWT_ALGORITHM = "HS256"
JWT_EXPIRE_DAYS = int(os.getenv("JWT_EXPIRE_DAYS", 30))
JWT_COOKIE_EXPIRE_DAYS = int(os.getenv("JWT_COOKIE_EXPIRE_DAYS", 30))

MAX_FILE_UPLOAD = int(os.getenv("MAX_FILE_UPLOAD", 1000000))
FILE_UPLOAD_PATH = os.getenv("FILE_UPLOAD_PATH", "./public/uploads")

GEOCODER_URL = os.getenv("GEOCODER_URL", "https://www.mapquestapi.com/geocoding/v1/address")
GEOCODER_API_KEY = os.getenv("GEOCODER_API_KEY", "")

SMTP_HOST = os.getenv("SMTP_HOST", "localhost")
SMTP_PORT = int(os.getenv("SMTP_PORT", 587))
SMTP_USERNAME = os.getenv("SMTP_USERNAME")
SMTP_PASSWORD = os.getenv("SMTP_PASSWORD")
FROM_NAME = os.getenv("FROM_NAME", "DevCamper")
FROM_EMAIL = os.getenv("FROM_EMAIL", "noreply@devcamper.io")


def is_production() -> bool:
    return ENVIRONMENT == "production"
