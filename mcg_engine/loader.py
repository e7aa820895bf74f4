from __future__ import annotations

import csv
import os
import unicodedata
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, List, Optional

from .errors import ReferenceDataError
from .logging_config import get_logger
from .pricing import IcmsTable

logger = get_logger(__name__)


# -------------------------
# Utilitários de normalização
# -------------------------
def norm_code(code: str) -> str:
    return (code or "").strip().upper()


def normalize_text(value: str) -> str:
    """
    Remove acentos/maiúsculas para facilitar match textual.
    """
    txt = unicodedata.normalize("NFKD", value or "").lower()
    return "".join(ch for ch in txt if not unicodedata.combining(ch)).strip()


def parse_decimal_ptbr(value: Any) -> Optional[Decimal]:
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    # aceita "17,5%", "1.234,56" ou "0.3"
    s = s.replace("%", "").strip()
    s = s.replace(".", "").replace(",", ".") if "," in s else s
    try:
        return Decimal(s)
    except InvalidOperation:
        return None


# -------------------------
# Leitura CSV (separador ;)
# -------------------------
def read_csv_semicolon(path: str) -> List[Dict[str, str]]:
    if not os.path.exists(path):
        raise ReferenceDataError(f"Arquivo de referência não encontrado: {path}")
    encodings = ["utf-8-sig", "cp1252"]
    last_error = None
    for enc in encodings:
        try:
            with open(path, "r", encoding=enc, newline="") as f:
                reader = csv.DictReader(f, delimiter=";")
                return [
                    {
                        k.strip().replace("\ufeff", ""): (v.strip() if isinstance(v, str) else v)
                        for k, v in r.items()
                        if k is not None
                    }
                    for r in reader
                ]
        except UnicodeDecodeError as e:
            last_error = e
            continue
    raise ReferenceDataError(f"Não foi possível decodificar {path}: {last_error}")


# -------------------------
# Tabela de ICMS por UF
# -------------------------
def build_icms_table(rows: List[Dict[str, str]]) -> IcmsTable:
    """
    icms_uf.csv:
      uf;nome;aliquota
    Ex: RO;Rondônia;17,5  (percentual, não fração)
    """
    aliquotas: Dict[str, Decimal] = {}
    nomes: Dict[str, str] = {}
    for n, r in enumerate(rows, start=2):
        uf = norm_code(r.get("uf") or r.get("UF") or "")
        if not uf:
            continue
        if len(uf) != 2:
            raise ReferenceDataError(f"Linha {n}: UF '{uf}' deve ter duas letras")
        aliquota = parse_decimal_ptbr(r.get("aliquota") or r.get("ALIQUOTA"))
        if aliquota is None or aliquota < 0:
            raise ReferenceDataError(f"Linha {n}: alíquota inválida para {uf}")
        if uf in aliquotas:
            raise ReferenceDataError(f"Linha {n}: UF {uf} duplicada")
        aliquotas[uf] = aliquota
        nomes[uf] = (r.get("nome") or r.get("NOME") or "").strip()

    if not aliquotas:
        raise ReferenceDataError("Tabela de ICMS vazia")

    return IcmsTable(aliquotas, nomes)


def load_icms_table(path: str) -> IcmsTable:
    table = build_icms_table(read_csv_semicolon(path))
    logger.info(
        "Tabela de ICMS carregada",
        extra={"extra_data": {"arquivo": os.path.basename(path), "ufs": len(table)}},
    )
    return table
