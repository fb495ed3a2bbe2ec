# ordercore/utils/settings.py
import os
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./ordercore.db")
PRODUCT_SERVICE_URL = os.getenv("PRODUCT_SERVICE_URL", "http://product-service:8000")
PRODUCT_CLIENT_TIMEOUT = int(os.getenv("PRODUCT_CLIENT_TIMEOUT", 2))

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://redis:6379/1")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://redis:6379/2")
CELERY_TASK_ALWAYS_EAGER = os.getenv("CELERY_TASK_ALWAYS_EAGER", "false").lower() in ("1", "true", "yes")

# ile razy losujemy numer zamowienia zanim poddamy sie z InternalError
ORDER_NUMBER_MAX_ATTEMPTS = int(os.getenv("ORDER_NUMBER_MAX_ATTEMPTS", 5))
CONFLICT_RETRY_ATTEMPTS = int(os.getenv("CONFLICT_RETRY_ATTEMPTS", 3))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
