import os
from dotenv import load_dotenv


load_dotenv()

APP_DOMAIN = os.getenv("APP_DOMAIN", "http://localhost:8000")

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./huddle.db")

SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24))

MAIL_USERNAME = os.getenv("MAIL_USERNAME")
MAIL_PASSWORD = os.getenv("MAIL_PASSWORD")
MAIL_FROM = os.getenv("MAIL_FROM")
MAIL_PORT = int(os.getenv("MAIL_PORT", 587))
MAIL_SERVER = os.getenv("MAIL_SERVER")
MAIL_STARTTLS = os.getenv("MAIL_STARTTLS", "True").lower() == "true"
MAIL_SSL_TLS = os.getenv("MAIL_SSL_TLS", "False").lower() == "true"
MAIL_FROM_NAME = os.getenv("MAIL_FROM_NAME", "Huddle")
USE_CREDENTIALS = os.getenv("USE_CREDENTIALS", "True").lower() == "true"

MINIO_ENDPOINT = os.getenv("MINIO_ENDPOINT", "localhost:9000")
MINIO_ACCESS_KEY = os.getenv("MINIO_ACCESS_KEY", "minioadmin")
MINIO_SECRET_KEY = os.getenv("MINIO_SECRET_KEY", "minioadmin")
MINIO_SECURE = os.getenv("MINIO_SECURE", "False").lower() == "true"
MINIO_BUCKET = os.getenv("MINIO_BUCKET", "huddle-media")
MEDIA_PUBLIC_URL = os.getenv("MEDIA_PUBLIC_URL", f"http://{MINIO_ENDPOINT}")

# Product limits
MAX_SUGGESTIONS_PER_AUTHOR = 4
MAX_TITLE_LENGTH = 16
DEFAULT_DURATION_MINUTES = 60
OPEN_MEETING_PARTICIPANT_CAP = 100
DEFAULT_GROUP_MEMBER_LIMIT = 100
REMINDER_LEAD_MINUTES = int(os.getenv("REMINDER_LEAD_MINUTES", 15))
