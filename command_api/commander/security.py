import hmac

from fastapi import Header, HTTPException

from .config import settings


def require_api_key(x_api_key: str | None = Header(default=None, alias="X-API-Key")):
    """Check X-API-Key against COMMANDER_API_KEY; open when no key is configured."""
    if not settings.api_key:
        return
    if not x_api_key or not hmac.compare_digest(x_api_key.encode(), settings.api_key.encode()):
        raise HTTPException(status_code=401, detail="Chave de API inválida")
