from __future__ import annotations

from typing import List, Optional, Tuple

from .cache import TTLCache, make_cache_key
from .config import Settings, get_settings
from .loader import load_icms_table, norm_code
from .logging_config import get_logger
from .pricing import (
    FreightQuoteInput,
    FreightQuoteResult,
    IcmsTable,
    SurchargeRates,
    compute_freight_proposal,
    compute_freight_quote,
    round_money,
)
from .schemas import (
    CotacaoFreteRequest,
    CotacaoFreteResponse,
    DiagnosticoRequest,
    DiagnosticoResponse,
    IcmsUF,
    LeadRequest,
    LeadResponse,
    OpcaoResposta,
    Pergunta,
    PropostaFreteRequest,
    PropostaFreteResponse,
    Recomendacao,
)
from .scoring import QUESTIONS, DiagnosticScore, compute_diagnostic_score

logger = get_logger(__name__)


class MotorMCG:
    """
    Fachada usada pela API: guarda a tabela de ICMS carregada,
    as taxas padrão de GRIS/ADV e um cache de cotações.
    """

    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.default_rates = SurchargeRates(
            gris_percent=self.settings.gris_percent,
            adv_percent=self.settings.adv_percent,
        )
        self._cache = TTLCache(
            default_ttl_seconds=self.settings.cache_ttl_seconds,
            max_entries=self.settings.cache_max_entries,
        )
        self._icms = load_icms_table(self.settings.icms_path)

    @property
    def icms_table(self) -> IcmsTable:
        return self._icms

    def reload_sources(self) -> None:
        # carrega antes de trocar: se o CSV estiver quebrado, a tabela atual continua valendo
        self._icms = load_icms_table(self.settings.icms_path)
        self._cache.clear()
        logger.info("Dados de referência recarregados", extra={"extra_data": {"ufs": len(self._icms)}})

    def listar_icms(self) -> List[IcmsUF]:
        return [
            IcmsUF(uf=uf, nome=self._icms.nome(uf), aliquota=aliquota)
            for uf, aliquota in sorted(self._icms.items())
        ]

    # -------------------------
    # Frete
    # -------------------------
    def _rates(self, req: CotacaoFreteRequest) -> SurchargeRates:
        return SurchargeRates(
            gris_percent=req.gris_percentual if req.gris_percentual is not None else self.default_rates.gris_percent,
            adv_percent=req.adv_percentual if req.adv_percentual is not None else self.default_rates.adv_percent,
        )

    def _montar(self, req: CotacaoFreteRequest) -> Tuple[FreightQuoteInput, SurchargeRates]:
        rates = self._rates(req)
        quote_input = FreightQuoteInput(
            origin_uf=norm_code(req.uf_origem),
            destination_uf=norm_code(req.uf_destino),
            weight_kg=req.peso,
            declared_value=req.valor_declarado,
            axles=req.eixos,
            toll_per_axle=req.pedagio_por_eixo,
        )
        return quote_input, rates

    def cotar_frete(self, req: CotacaoFreteRequest) -> CotacaoFreteResponse:
        quote_input, rates = self._montar(req)

        cache_key = make_cache_key(
            quote_input.origin_uf,
            quote_input.destination_uf,
            quote_input.weight_kg,
            quote_input.declared_value,
            quote_input.axles,
            quote_input.toll_per_axle,
            rates.gris_percent,
            rates.adv_percent,
        )
        result = self._cache.get(cache_key)
        if result is not None:
            logger.debug("Cotação servida do cache", extra={"extra_data": {"chave": cache_key}})
        else:
            result = compute_freight_quote(quote_input, self._icms, rates)
            self._cache.set(cache_key, result)
            logger.debug(
                "Cotação calculada",
                extra={"extra_data": {
                    "origem": result.origin_uf,
                    "destino": result.destination_uf,
                    "total": result.total,
                }},
            )

        return self._to_response(result, rates, req.nome_operacao)

    def cotar_proposta(self, req: PropostaFreteRequest) -> PropostaFreteResponse:
        montadas = [self._montar(r) for r in req.rotas]
        proposal = compute_freight_proposal(
            [quote_input for quote_input, _ in montadas],
            self._icms,
            [rates for _, rates in montadas],
        )
        rotas = [
            self._to_response(quote, rates, r.nome_operacao)
            for quote, (_, rates), r in zip(proposal.quotes, montadas, req.rotas)
        ]
        return PropostaFreteResponse(rotas=rotas, valor_total=proposal.total)

    @staticmethod
    def _to_response(
        result: FreightQuoteResult,
        rates: SurchargeRates,
        nome_operacao: Optional[str],
    ) -> CotacaoFreteResponse:
        # componentes arredondados só para exibição; o total vem do cálculo exato
        return CotacaoFreteResponse(
            nome_operacao=nome_operacao,
            uf_origem=result.origin_uf,
            uf_destino=result.destination_uf,
            aliquota_icms=result.icms_rate,
            gris_percentual=rates.gris_percent,
            adv_percentual=rates.adv_percent,
            valor_icms=round_money(result.icms),
            valor_gris=round_money(result.gris),
            valor_adv=round_money(result.adv),
            valor_pedagio=round_money(result.toll),
            valor_total=result.total,
            valor_por_kg=result.value_per_kg,
        )

    # -------------------------
    # Diagnóstico
    # -------------------------
    def perguntas(self) -> List[Pergunta]:
        return [
            Pergunta(
                id=q.key,
                categoria=q.category,
                texto=q.text,
                opcoes=[OpcaoResposta(valor=o.value, descricao=o.label) for o in q.options],
            )
            for q in QUESTIONS
        ]

    @staticmethod
    def _recomendacoes(score: DiagnosticScore) -> List[Recomendacao]:
        return [
            Recomendacao(titulo=r.title, descricao=r.description, ferramenta=r.tool, link=r.link)
            for r in score.recommendations
        ]

    def diagnosticar(self, req: DiagnosticoRequest) -> DiagnosticoResponse:
        score = compute_diagnostic_score(req.respostas)
        return DiagnosticoResponse(
            pontuacao=score.total,
            pontuacao_maxima=score.max_score,
            percentual=score.percentage,
            nivel=score.tier.value,
            nivel_descricao=score.tier.label,
            respostas=dict(score.answers),
            recomendacoes=self._recomendacoes(score),
        )

    def montar_lead(self, req: LeadRequest) -> LeadResponse:
        score = compute_diagnostic_score(req.respostas)
        logger.info(
            "Lead de diagnóstico montado",
            extra={"extra_data": {"percentual": score.percentage, "nivel": score.tier.value}},
        )
        return LeadResponse(
            name=req.nome.strip(),
            email=req.email.strip().lower(),
            company=req.empresa.strip(),
            phone=(req.telefone or "").strip(),
            score=score.total,
            maxScore=score.max_score,
            percentage=score.percentage,
            maturityLevel=score.tier.value,
            answers=dict(score.answers),
            recomendacoes=self._recomendacoes(score),
        )
