import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

APP_NAME = os.getenv("APP_NAME", "Trường THPT Nguyễn Trãi")

# "mock" keeps everything in memory; "http" talks to the deployed Apps Script.
GATEWAY_MODE = os.getenv("GATEWAY_MODE", "mock")
GATEWAY_URL = os.getenv("GATEWAY_URL", "")
GATEWAY_TIMEOUT = float(os.getenv("GATEWAY_TIMEOUT", "15"))
# Answer from demo data when the backend is unreachable
GATEWAY_FALLBACK_TO_MOCK = bool(int(os.getenv("GATEWAY_FALLBACK_TO_MOCK", "1")))

SESSION_LIFETIME_HOURS = float(os.getenv("SESSION_LIFETIME_HOURS", "4"))
PAGE_SIZE = int(os.getenv("PAGE_SIZE", "10"))

DEBUG = True
