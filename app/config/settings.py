import os
from dotenv import load_dotenv
from pathlib import Path

# Carrega o .env manualmente se estiver fora do Docker
if not os.getenv("RUNNING_IN_DOCKER"):
    dotenv_path = Path(__file__).resolve().parents[2] / ".env"
    load_dotenv(dotenv_path=dotenv_path)

# Backend de pedidos (criação de pedido e busca de cliente por telefone)
API_BASE_URL = os.getenv("API_BASE_URL", "http://localhost:3001")
API_TIMEOUT_SECONDS = float(os.getenv("API_TIMEOUT_SECONDS", 30))

# Banco local (sessão do cliente e histórico de pedidos)
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./checkout.db")

# Geocodificação (Nominatim / OpenStreetMap)
NOMINATIM_URL = os.getenv("NOMINATIM_URL", "https://nominatim.openstreetmap.org/search")
NOMINATIM_USER_AGENT = os.getenv("NOMINATIM_USER_AGENT", "DeliveryApp/1.0")
# Nominatim rejeita mais de 1 req/s
GEOCODING_MIN_INTERVAL_SECONDS = float(os.getenv("GEOCODING_MIN_INTERVAL_SECONDS", 1.1))
GEOCODING_TIMEOUT_SECONDS = float(os.getenv("GEOCODING_TIMEOUT_SECONDS", 10))
CIDADE_PADRAO = os.getenv("CIDADE_PADRAO", "Campo Grande")
ESTADO_PADRAO = os.getenv("ESTADO_PADRAO", "MS")
VELOCIDADE_MEDIA_KMH = float(os.getenv("VELOCIDADE_MEDIA_KMH", 30))

# ViaCEP
VIACEP_URL = os.getenv("VIACEP_URL", "https://viacep.com.br/ws")

# Checkout
DEBOUNCE_SECONDS = float(os.getenv("DEBOUNCE_SECONDS", 0.5))
PIX_EXPIRACAO_SEGUNDOS = int(os.getenv("PIX_EXPIRACAO_SEGUNDOS", 300))
CUSTOMER_TOKEN_COOKIE = os.getenv("CUSTOMER_TOKEN_COOKIE", "customer_token")
CUSTOMER_TOKEN_EXPIRY_DAYS = int(os.getenv("CUSTOMER_TOKEN_EXPIRY_DAYS", 365))
DISPOSITIVO_COOKIE = os.getenv("DISPOSITIVO_COOKIE", "dispositivo_id")
# Checkouts em memória: ociosos saem após o TTL; concluídos, após o TTL curto
CHECKOUT_TTL_SEGUNDOS = int(os.getenv("CHECKOUT_TTL_SEGUNDOS", 1800))
CHECKOUT_CONCLUIDO_TTL_SEGUNDOS = int(os.getenv("CHECKOUT_CONCLUIDO_TTL_SEGUNDOS", 120))

# CORS
CORS_ORIGINS = [o.strip() for o in os.getenv("CORS_ORIGINS", "").split(",") if o.strip()]
CORS_ALLOW_ALL = os.getenv("CORS_ALLOW_ALL", "false").lower() in ("1", "true", "yes")

# FastAPI / App
BASE_URL = os.getenv("BASE_URL", "")
ENABLE_DOCS = os.getenv("ENABLE_DOCS", "true").lower() in ("1", "true", "yes")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_TO_FILE = os.getenv("LOG_TO_FILE", "true").lower() in ("1", "true", "yes")
