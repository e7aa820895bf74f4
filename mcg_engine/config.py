from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal

from dotenv import load_dotenv

# .env opcional na raiz do projeto; variáveis já exportadas têm prioridade
load_dotenv()

DEFAULT_DATA_DIR = os.path.join(os.path.dirname(__file__), "..", "data")


@dataclass(frozen=True)
class Settings:
    data_dir: str
    icms_file: str
    gris_percent: Decimal
    adv_percent: Decimal
    cache_ttl_seconds: int
    cache_max_entries: int
    log_level: str

    @property
    def icms_path(self) -> str:
        return os.path.join(self.data_dir, self.icms_file)


def get_settings() -> Settings:
    """
    Lida a cada chamada (sem cache) para que testes e /reload
    enxerguem mudanças no ambiente.
    """
    return Settings(
        data_dir=os.path.abspath(os.getenv("DATA_DIR", DEFAULT_DATA_DIR)),
        icms_file=os.getenv("ICMS_FILE", "icms_uf.csv"),
        gris_percent=Decimal(os.getenv("GRIS_PERCENT", "0.3")),
        adv_percent=Decimal(os.getenv("ADV_PERCENT", "0.3")),
        cache_ttl_seconds=int(os.getenv("CACHE_TTL", "3600")),
        cache_max_entries=int(os.getenv("CACHE_MAX_ENTRIES", "1024")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
