from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


# -------------------------
# FRETE - entrada
# -------------------------
class CotacaoFreteRequest(BaseModel):
    uf_origem: str = Field(..., min_length=2, max_length=2, description="UF de origem (ex: SP)")
    uf_destino: str = Field(..., min_length=2, max_length=2, description="UF de destino (ex: RJ)")
    peso: Decimal = Field(..., description="Peso da carga em kg")
    valor_declarado: Decimal = Field(..., description="Valor da NF (mercadoria) em R$")
    eixos: int = Field(5, description="Número de eixos do veículo")
    pedagio_por_eixo: Decimal = Field(Decimal("0"), description="Pedágio por eixo em R$")
    gris_percentual: Optional[Decimal] = Field(None, description="Sobrescreve o GRIS padrão (ex: 0.3 = 0,3%)")
    adv_percentual: Optional[Decimal] = Field(None, description="Sobrescreve o ADV padrão (ex: 0.3 = 0,3%)")
    nome_operacao: Optional[str] = Field(None, description="Identificação livre da rota na proposta")


class PropostaFreteRequest(BaseModel):
    rotas: List[CotacaoFreteRequest] = Field(..., min_length=1)


# -------------------------
# FRETE - saída
# -------------------------
class CotacaoFreteResponse(BaseModel):
    nome_operacao: Optional[str] = None
    uf_origem: str
    uf_destino: str
    aliquota_icms: Decimal
    gris_percentual: Decimal
    adv_percentual: Decimal
    valor_icms: Decimal
    valor_gris: Decimal
    valor_adv: Decimal
    valor_pedagio: Decimal
    valor_total: Decimal
    valor_por_kg: Decimal


class PropostaFreteResponse(BaseModel):
    rotas: List[CotacaoFreteResponse]
    valor_total: Decimal


class IcmsUF(BaseModel):
    uf: str
    nome: str
    aliquota: Decimal


# -------------------------
# DIAGNÓSTICO
# -------------------------
class OpcaoResposta(BaseModel):
    valor: int
    descricao: str


class Pergunta(BaseModel):
    id: str
    categoria: str
    texto: str
    opcoes: List[OpcaoResposta]


class DiagnosticoRequest(BaseModel):
    # valores crus: a validação 0..3 (sem coerção de bool/str/float) fica no motor
    respostas: Dict[str, Any] = Field(..., description="categoria -> 0..3")


class Recomendacao(BaseModel):
    titulo: str
    descricao: str
    ferramenta: str
    link: str


class DiagnosticoResponse(BaseModel):
    pontuacao: int
    pontuacao_maxima: int
    percentual: int
    nivel: str = Field(..., description="beginner | basic | intermediate | advanced")
    nivel_descricao: str
    respostas: Dict[str, int]
    recomendacoes: List[Recomendacao]


class LeadRequest(DiagnosticoRequest):
    nome: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3, pattern=r"^[^@\s]+@[^@\s]+\.[^@\s]+$")
    empresa: str = Field(..., min_length=1)
    telefone: Optional[str] = ""


class LeadResponse(BaseModel):
    # registro pronto para a camada de persistência (fora deste serviço)
    name: str
    email: str
    company: str
    phone: str
    score: int
    maxScore: int
    percentage: int
    maturityLevel: str
    answers: Dict[str, int]
    recomendacoes: List[Recomendacao]
