import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

APP_NAME = os.getenv("APP_NAME", "Trường THPT Nguyễn Trãi")

GATEWAY_MODE = os.getenv("GATEWAY_MODE", "http")
GATEWAY_URL = os.getenv("GATEWAY_URL", "")
GATEWAY_TIMEOUT = float(os.getenv("GATEWAY_TIMEOUT", "15"))
GATEWAY_FALLBACK_TO_MOCK = bool(int(os.getenv("GATEWAY_FALLBACK_TO_MOCK", "0")))

SESSION_LIFETIME_HOURS = float(os.getenv("SESSION_LIFETIME_HOURS", "4"))
PAGE_SIZE = int(os.getenv("PAGE_SIZE", "10"))

DEBUG = False
