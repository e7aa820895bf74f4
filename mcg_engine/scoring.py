"""
Diagnóstico de maturidade comercial.

Dez categorias, cada uma respondida com 0 a 3 pontos. O percentual é
round(100 * soma / 30) e define o nível:

    >= 75  advanced      (Avançado)
    >= 50  intermediate  (Intermediário)
    >= 25  basic         (Básico)
    <  25  beginner      (Iniciante)
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Tuple

from .errors import IncompleteAnswers, OutOfRangeAnswer, UnknownCategory
from .loader import normalize_text

MAX_POR_CATEGORIA = 3
MAX_RECOMENDACOES = 3


class MaturityTier(str, Enum):
    BEGINNER = "beginner"
    BASIC = "basic"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"

    @property
    def label(self) -> str:
        return _TIER_LABELS[self]


_TIER_LABELS = {
    MaturityTier.BEGINNER: "Iniciante",
    MaturityTier.BASIC: "Básico",
    MaturityTier.INTERMEDIATE: "Intermediário",
    MaturityTier.ADVANCED: "Avançado",
}

# limite mínimo (inclusive) de cada nível, do maior para o menor
TIER_THRESHOLDS: Tuple[Tuple[int, MaturityTier], ...] = (
    (75, MaturityTier.ADVANCED),
    (50, MaturityTier.INTERMEDIATE),
    (25, MaturityTier.BASIC),
)


@dataclass(frozen=True)
class AnswerOption:
    value: int
    label: str


@dataclass(frozen=True)
class DiagnosticQuestion:
    key: str
    category: str
    text: str
    options: Tuple[AnswerOption, ...]


def _opcoes(*labels: str) -> Tuple[AnswerOption, ...]:
    return tuple(AnswerOption(value=i, label=l) for i, l in enumerate(labels))


QUESTIONS: Tuple[DiagnosticQuestion, ...] = (
    DiagnosticQuestion(
        "crm", "CRM e Organização",
        "Como você gerencia as informações dos seus clientes e prospects?",
        _opcoes(
            "Não tenho controle, fica na cabeça do vendedor",
            "Planilhas Excel ou Google Sheets",
            "CRM genérico (Pipedrive, HubSpot, etc.)",
            "CRM especializado para logística",
        ),
    ),
    DiagnosticQuestion(
        "pipeline", "Pipeline de Vendas",
        "Como você acompanha as oportunidades de venda em andamento?",
        _opcoes(
            "Não acompanho de forma estruturada",
            "Reuniões semanais com a equipe",
            "Planilha com status de cada proposta",
            "Pipeline visual com etapas definidas",
        ),
    ),
    DiagnosticQuestion(
        "cotacao", "Cotações",
        "Como você calcula e envia cotações de frete para clientes?",
        _opcoes(
            "Na mão, sem padrão definido",
            "Planilha com fórmulas básicas",
            "Sistema próprio ou do embarcador",
            "Calculadora integrada ao CRM com histórico",
        ),
    ),
    DiagnosticQuestion(
        "followup", "Follow-up",
        "Como você garante o acompanhamento de propostas enviadas?",
        _opcoes(
            "Depende da memória do vendedor",
            "Anotações em agenda ou caderno",
            "Lembretes no celular ou e-mail",
            "Sistema com alertas automáticos",
        ),
    ),
    DiagnosticQuestion(
        "histórico", "Histórico",
        "Quando um vendedor sai da empresa, o que acontece com os dados dos clientes dele?",
        _opcoes(
            "Perdemos a maioria das informações",
            "Ficam em planilhas desorganizadas",
            "Temos backup mas difícil de acessar",
            "Tudo fica registrado no sistema",
        ),
    ),
    DiagnosticQuestion(
        "indicadores", "Indicadores",
        "Você consegue ver rapidamente quantas propostas estão em aberto e qual o valor total?",
        _opcoes(
            "Não tenho essa informação",
            "Preciso consolidar manualmente",
            "Tenho relatório semanal/mensal",
            "Dashboard em tempo real",
        ),
    ),
    DiagnosticQuestion(
        "segmentacao", "Segmentação",
        "Você sabe quais clientes representam 80% da sua receita (Curva ABC)?",
        _opcoes(
            "Não tenho essa análise",
            "Tenho uma ideia geral",
            "Faço análise eventual em planilha",
            "Tenho análise automática atualizada",
        ),
    ),
    DiagnosticQuestion(
        "qualificacao", "Qualificação",
        "Como você avalia se um prospect tem potencial antes de investir tempo comercial?",
        _opcoes(
            "Não tenho critérios definidos",
            "Intuição e experiência do vendedor",
            "Checklist básico de perguntas",
            "Diagnóstico estruturado por área",
        ),
    ),
    DiagnosticQuestion(
        "propostas", "Propostas",
        "Como você padroniza as propostas comerciais enviadas?",
        _opcoes(
            "Cada vendedor faz do seu jeito",
            "Modelo em Word/PowerPoint",
            "Template padronizado com dados manuais",
            "Geração automática com dados do cliente",
        ),
    ),
    DiagnosticQuestion(
        "integração", "Integração",
        "Sua área comercial está integrada com a operação (TMS/WMS)?",
        _opcoes(
            "Não há integração",
            "Comunicação por e-mail/WhatsApp",
            "Reuniões periódicas de alinhamento",
            "Sistemas integrados com fluxo de dados",
        ),
    ),
)

CATEGORY_KEYS: Tuple[str, ...] = tuple(q.key for q in QUESTIONS)
MAX_SCORE = MAX_POR_CATEGORIA * len(CATEGORY_KEYS)

# "historico" e "HISTÓRICO" apontam para "histórico"
_CHAVES_NORMALIZADAS = {normalize_text(k): k for k in CATEGORY_KEYS}


@dataclass(frozen=True)
class Recommendation:
    title: str
    description: str
    tool: str
    link: str


# (categoria, recomendação) em ordem de prioridade; dispara com resposta < 2
RECOMMENDATION_RULES: Tuple[Tuple[str, Recommendation], ...] = (
    ("crm", Recommendation(
        "Implemente um CRM",
        "Centralize as informações dos clientes em um sistema organizado",
        "CRM MCG", "/registro",
    )),
    ("cotacao", Recommendation(
        "Padronize suas cotações",
        "Use calculadoras com ICMS, GRIS e ADV integrados",
        "Calculadora de Frete", "/calculadora-frete",
    )),
    ("qualificacao", Recommendation(
        "Qualifique melhor seus prospects",
        "Use checklists diagnósticos antes de investir tempo comercial",
        "Checklists MCG", "/registro",
    )),
    ("indicadores", Recommendation(
        "Tenha visibilidade do funil",
        "Dashboard em tempo real com pipeline e indicadores",
        "Dashboard MCG", "/registro",
    )),
    ("integração", Recommendation(
        "Integre comercial e operação",
        "Conecte seu CRM com os sistemas operacionais",
        "RFI e Integrações", "/registro",
    )),
)

RECOMENDACAO_MADURA = Recommendation(
    "Evolua para o próximo nível",
    "Sua operação está madura. Vamos otimizar ainda mais?",
    "Consultoria MCG", "/registro",
)


@dataclass(frozen=True)
class DiagnosticScore:
    answers: Mapping[str, int]
    total: int
    max_score: int
    percentage: int
    tier: MaturityTier
    recommendations: Tuple[Recommendation, ...]


def normalize_answers(answers: Mapping[str, object]) -> Dict[str, int]:
    """
    Valida e devolve as respostas com as chaves canônicas.

    Raises:
        UnknownCategory: chave fora das dez categorias.
        OutOfRangeAnswer: valor que não é inteiro entre 0 e 3.
        IncompleteAnswers: alguma categoria sem resposta.
    """
    normalizadas: Dict[str, int] = {}
    desconhecidas: List[str] = []

    for key, value in answers.items():
        canonica = _CHAVES_NORMALIZADAS.get(normalize_text(str(key)))
        if canonica is None:
            desconhecidas.append(str(key))
            continue
        if canonica in normalizadas:
            # mesma categoria escrita de dois jeitos ("historico" e "histórico")
            desconhecidas.append(str(key))
            continue
        if isinstance(value, bool) or not isinstance(value, int):
            raise OutOfRangeAnswer(canonica, value)
        if not 0 <= value <= MAX_POR_CATEGORIA:
            raise OutOfRangeAnswer(canonica, value)
        normalizadas[canonica] = value

    if desconhecidas:
        raise UnknownCategory(desconhecidas)

    faltando = [k for k in CATEGORY_KEYS if k not in normalizadas]
    if faltando:
        raise IncompleteAnswers(faltando)

    return {k: normalizadas[k] for k in CATEGORY_KEYS}


def maturity_tier(percentage: int) -> MaturityTier:
    for limite, tier in TIER_THRESHOLDS:
        if percentage >= limite:
            return tier
    return MaturityTier.BEGINNER


def score_percentage(total: int, max_score: int = MAX_SCORE) -> int:
    pct = (Decimal(100) * Decimal(total) / Decimal(max_score)).quantize(
        Decimal("1"), rounding=ROUND_HALF_UP
    )
    return int(pct)


def build_recommendations(answers: Mapping[str, int]) -> Tuple[Recommendation, ...]:
    recs = [rec for key, rec in RECOMMENDATION_RULES if answers[key] < 2]
    if not recs:
        recs = [RECOMENDACAO_MADURA]
    return tuple(recs[:MAX_RECOMENDACOES])


def compute_diagnostic_score(answers: Mapping[str, object]) -> DiagnosticScore:
    respostas = normalize_answers(answers)
    total = sum(respostas.values())
    percentage = score_percentage(total)
    return DiagnosticScore(
        answers=MappingProxyType(respostas),
        total=total,
        max_score=MAX_SCORE,
        percentage=percentage,
        tier=maturity_tier(percentage),
        recommendations=build_recommendations(respostas),
    )
