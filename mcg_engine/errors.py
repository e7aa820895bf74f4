from __future__ import annotations

from typing import Iterable


class MCGEngineError(Exception):
    """Base de todos os erros de validação do motor."""


class ReferenceDataError(MCGEngineError):
    pass


# -------------------------
# Frete
# -------------------------
class PricingError(MCGEngineError):
    pass


class InvalidStateCode(PricingError):
    def __init__(self, uf: str):
        self.uf = uf
        super().__init__(f"UF '{uf}' não encontrada na tabela de ICMS")


class InvalidAmount(PricingError):
    def __init__(self, campo: str, valor, regra: str = "deve ser maior que zero"):
        self.campo = campo
        self.valor = valor
        super().__init__(f"{campo}={valor} inválido: {regra}")


# -------------------------
# Diagnóstico
# -------------------------
class ScoringError(MCGEngineError):
    pass


class IncompleteAnswers(ScoringError):
    def __init__(self, faltando: Iterable[str]):
        self.faltando = list(faltando)
        super().__init__(f"Categorias sem resposta: {', '.join(self.faltando)}")


class OutOfRangeAnswer(ScoringError):
    def __init__(self, categoria: str, valor):
        self.categoria = categoria
        self.valor = valor
        super().__init__(f"Resposta '{valor}' para '{categoria}' fora da faixa 0-3")


class UnknownCategory(ScoringError):
    def __init__(self, categorias: Iterable[str]):
        self.categorias = list(categorias)
        super().__init__(f"Categorias desconhecidas: {', '.join(self.categorias)}")
