import os
from dataclasses import dataclass, field
from typing import List

from payments import DEFAULT_PAYMENT_DELAY

DEFAULT_PORT = 8080
DEFAULT_CORS_ORIGINS = ["http://localhost:3000"]


def _split_origins(value: str) -> List[str]:
    return [origin.strip() for origin in value.split(",") if origin.strip()]


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    cors_origins: List[str] = field(default_factory=lambda: list(DEFAULT_CORS_ORIGINS))
    payment_delay: float = DEFAULT_PAYMENT_DELAY

    @classmethod
    def from_env(cls) -> "Settings":
        origins = os.getenv("CORS_ORIGINS")
        return cls(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", DEFAULT_PORT)),
            cors_origins=_split_origins(origins) if origins else list(DEFAULT_CORS_ORIGINS),
            payment_delay=float(os.getenv("PAYMENT_DELAY_SECONDS", DEFAULT_PAYMENT_DELAY)),
        )
