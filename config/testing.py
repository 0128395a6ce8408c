SECRET_KEY = "test-secret"

APP_NAME = "Trường Kiểm Thử"

GATEWAY_MODE = "mock"
GATEWAY_URL = ""
GATEWAY_TIMEOUT = 5.0
GATEWAY_FALLBACK_TO_MOCK = False

SESSION_LIFETIME_HOURS = 4
PAGE_SIZE = 10

DEBUG = False
TESTING = True
