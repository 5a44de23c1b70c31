import os
import warnings
from pathlib import Path

from dotenv import load_dotenv

# .env na raiz do projeto
env_path = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(dotenv_path=env_path)

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./micks_barber.db")

SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    warnings.warn("SECRET_KEY não definido, usando chave de desenvolvimento insegura", RuntimeWarning, stacklevel=2)
    SECRET_KEY = "micks-barber-dev-key"
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

# comprovantes ficam em <UPLOAD_DIR>/receipts e são servidos em /uploads
UPLOAD_DIR = Path(os.getenv("UPLOAD_DIR", Path(__file__).resolve().parent.parent / "uploads"))
MAX_RECEIPT_SIZE = int(os.getenv("MAX_RECEIPT_SIZE", str(5 * 1024 * 1024)))

# expediente: 9 -> 09:00, 18 -> último horário de início 17:59
BUSINESS_OPEN_HOUR = int(os.getenv("BUSINESS_OPEN_HOUR", "9"))
BUSINESS_CLOSE_HOUR = int(os.getenv("BUSINESS_CLOSE_HOUR", "18"))


def business_hours_label() -> str:
    """Ex.: "9:00 AM and 5:59 PM"."""
    open_h = BUSINESS_OPEN_HOUR
    last_h = BUSINESS_CLOSE_HOUR - 1
    return (
        f"{open_h % 12 or 12}:00 {'AM' if open_h < 12 else 'PM'} and "
        f"{last_h % 12 or 12}:59 {'AM' if last_h < 12 else 'PM'}"
    )


CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "*").split(",") if o.strip()]
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# URL padrão usada pelo micks_barber.client
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:3000/api")
