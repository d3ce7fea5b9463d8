from __future__ import annotations
from dataclasses import dataclass, field
from typing import List

# ====== App identity (used by UI + API) ======
APP_NAME: str = "ChainScopeWeb"
APP_VERSION: str = "1.2.0"

DEFAULT_API_BASE_URL: str = "http://127.0.0.1:8080/api"


@dataclass
class Settings:
    # Forensic analysis backend
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = 15.0           # seconds per backend request
    # Graph presentation
    label_length: int = 8                   # chars kept before "..." in node labels
    # Browser origins allowed to call the dashboard API
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:5173"])
