"""
Cotação de frete.

Componentes calculados sobre o valor declarado da NF (mercadoria):

    ICMS = valor declarado x alíquota da UF de destino
    GRIS = valor declarado x GRIS%
    ADV  = valor declarado x ADV%
    pedágio = eixos x pedágio por eixo
    total = ICMS + GRIS + ADV + pedágio

Tudo em Decimal. Componentes ficam exatos; só o total é arredondado
(2 casas, ROUND_HALF_UP).

Limites aceitos (acima disso InvalidAmount):
    valor declarado e pedágio por eixo: até R$ 1 trilhão
    peso: de 0,001 kg a 1 bilhão de kg
    eixos: 1 a 99
    GRIS, ADV e alíquota de ICMS: 0 a 100%
Com esses limites o total cabe com folga na precisão padrão do Decimal (28 dígitos).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from types import MappingProxyType
from collections.abc import Mapping
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from .errors import InvalidAmount, InvalidStateCode, ReferenceDataError

CENTAVOS = Decimal("0.01")
CEM = Decimal("100")

VALOR_MAXIMO = Decimal("1000000000000")
PESO_MINIMO = Decimal("0.001")
PESO_MAXIMO = Decimal("1000000000")
EIXOS_MAXIMO = 99
PERCENTUAL_MAXIMO = CEM


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENTAVOS, rounding=ROUND_HALF_UP)


def to_decimal(campo: str, valor: Any) -> Decimal:
    """
    Converte para Decimal sem herdar o erro binário do float
    (1.005 vira Decimal("1.005"), não 1.00499999...).
    """
    if isinstance(valor, bool):
        raise InvalidAmount(campo, valor, "deve ser numérico")
    if isinstance(valor, Decimal):
        d = valor
    elif isinstance(valor, (int, float, str)):
        try:
            d = Decimal(str(valor).strip())
        except InvalidOperation:
            raise InvalidAmount(campo, valor, "deve ser numérico")
    else:
        raise InvalidAmount(campo, valor, "deve ser numérico")
    if not d.is_finite():
        raise InvalidAmount(campo, valor, "deve ser um número finito")
    return d


class IcmsTable(Mapping):
    """Alíquotas de ICMS (percentual) por UF. Somente leitura."""

    def __init__(self, aliquotas: Mapping[str, Decimal], nomes: Optional[Mapping[str, str]] = None):
        normalizadas: Dict[str, Decimal] = {}
        for uf, aliquota in aliquotas.items():
            d = Decimal(str(aliquota))
            if not d.is_finite() or not 0 <= d <= PERCENTUAL_MAXIMO:
                raise ReferenceDataError(f"Alíquota de ICMS inválida para {uf}: {aliquota}")
            normalizadas[uf.upper()] = d
        self._aliquotas = MappingProxyType(normalizadas)
        self._nomes = MappingProxyType(dict(nomes or {}))

    def __getitem__(self, uf: str) -> Decimal:
        return self._aliquotas[uf]

    def __iter__(self) -> Iterator[str]:
        return iter(self._aliquotas)

    def __len__(self) -> int:
        return len(self._aliquotas)

    def nome(self, uf: str) -> str:
        return self._nomes.get(uf, "")

    def aliquota(self, uf: str) -> Decimal:
        code = (uf or "").strip().upper()
        if code not in self._aliquotas:
            raise InvalidStateCode(uf)
        return self._aliquotas[code]


@dataclass(frozen=True)
class SurchargeRates:
    """GRIS e ADV em percentual do valor declarado (0.3 = 0,3%)."""

    gris_percent: Decimal = Decimal("0.3")
    adv_percent: Decimal = Decimal("0.3")

    def __post_init__(self):
        object.__setattr__(self, "gris_percent", to_decimal("gris_percentual", self.gris_percent))
        object.__setattr__(self, "adv_percent", to_decimal("adv_percentual", self.adv_percent))


DEFAULT_RATES = SurchargeRates()


@dataclass(frozen=True)
class FreightQuoteInput:
    origin_uf: str
    destination_uf: str
    weight_kg: Decimal
    declared_value: Decimal
    axles: int
    toll_per_axle: Decimal

    def __post_init__(self):
        object.__setattr__(self, "weight_kg", to_decimal("peso", self.weight_kg))
        object.__setattr__(self, "declared_value", to_decimal("valor_declarado", self.declared_value))
        object.__setattr__(self, "toll_per_axle", to_decimal("pedagio_por_eixo", self.toll_per_axle))


@dataclass(frozen=True)
class FreightQuoteResult:
    origin_uf: str
    destination_uf: str
    icms_rate: Decimal
    icms: Decimal
    gris: Decimal
    adv: Decimal
    toll: Decimal
    total: Decimal
    value_per_kg: Decimal

    @property
    def components(self) -> Tuple[Decimal, Decimal, Decimal, Decimal]:
        return (self.icms, self.gris, self.adv, self.toll)


@dataclass(frozen=True)
class FreightProposal:
    quotes: Tuple[FreightQuoteResult, ...]
    total: Decimal


def _validate(quote_input: FreightQuoteInput, rates: SurchargeRates) -> None:
    if quote_input.weight_kg <= 0:
        raise InvalidAmount("peso", quote_input.weight_kg)
    if not PESO_MINIMO <= quote_input.weight_kg <= PESO_MAXIMO:
        raise InvalidAmount("peso", quote_input.weight_kg, f"deve estar entre {PESO_MINIMO} e {PESO_MAXIMO} kg")
    if quote_input.declared_value <= 0:
        raise InvalidAmount("valor_declarado", quote_input.declared_value)
    if quote_input.declared_value > VALOR_MAXIMO:
        raise InvalidAmount("valor_declarado", quote_input.declared_value, f"não pode passar de {VALOR_MAXIMO}")
    axles = quote_input.axles
    if isinstance(axles, bool) or not isinstance(axles, int) or not 0 < axles <= EIXOS_MAXIMO:
        raise InvalidAmount("eixos", axles, f"deve ser um inteiro entre 1 e {EIXOS_MAXIMO}")
    if quote_input.toll_per_axle < 0:
        raise InvalidAmount("pedagio_por_eixo", quote_input.toll_per_axle, "não pode ser negativo")
    if quote_input.toll_per_axle > VALOR_MAXIMO:
        raise InvalidAmount("pedagio_por_eixo", quote_input.toll_per_axle, f"não pode passar de {VALOR_MAXIMO}")
    for campo, pct in (("gris_percentual", rates.gris_percent), ("adv_percentual", rates.adv_percent)):
        if not 0 <= pct <= PERCENTUAL_MAXIMO:
            raise InvalidAmount(campo, pct, "deve estar entre 0 e 100")


def compute_freight_quote(
    quote_input: FreightQuoteInput,
    icms_table: IcmsTable,
    rates: SurchargeRates = DEFAULT_RATES,
) -> FreightQuoteResult:
    """
    Calcula a cotação de uma rota.

    Raises:
        InvalidStateCode: UF de origem ou destino fora da tabela.
        InvalidAmount: valores fora dos limites do módulo (<= 0, negativos ou grandes demais).
    """
    # origem não entra no cálculo, mas precisa existir na tabela
    icms_table.aliquota(quote_input.origin_uf)
    icms_rate = icms_table.aliquota(quote_input.destination_uf)

    _validate(quote_input, rates)

    value = quote_input.declared_value
    icms = value * icms_rate / CEM
    gris = value * rates.gris_percent / CEM
    adv = value * rates.adv_percent / CEM
    toll = Decimal(quote_input.axles) * quote_input.toll_per_axle

    total = round_money(icms + gris + adv + toll)

    return FreightQuoteResult(
        origin_uf=quote_input.origin_uf.strip().upper(),
        destination_uf=quote_input.destination_uf.strip().upper(),
        icms_rate=icms_rate,
        icms=icms,
        gris=gris,
        adv=adv,
        toll=toll,
        total=total,
        value_per_kg=round_money(total / quote_input.weight_kg),
    )


def compute_freight_proposal(
    inputs: Iterable[FreightQuoteInput],
    icms_table: IcmsTable,
    rates: Union[SurchargeRates, Sequence[SurchargeRates]] = DEFAULT_RATES,
) -> FreightProposal:
    """
    Proposta com várias rotas; total = soma dos totais de cada rota.
    `rates` pode ser uma taxa única ou uma por rota (mesma ordem de `inputs`).
    """
    rotas = list(inputs)
    if not rotas:
        raise InvalidAmount("rotas", 0, "a proposta precisa de ao menos uma rota")

    if isinstance(rates, SurchargeRates):
        taxas = [rates] * len(rotas)
    else:
        taxas = list(rates)
        if len(taxas) != len(rotas):
            raise ValueError(f"{len(taxas)} taxas para {len(rotas)} rotas")

    quotes: List[FreightQuoteResult] = [
        compute_freight_quote(i, icms_table, r) for i, r in zip(rotas, taxas)
    ]
    return FreightProposal(
        quotes=tuple(quotes),
        total=round_money(sum((q.total for q in quotes), Decimal("0"))),
    )


def as_table(aliquotas: Dict[str, object]) -> IcmsTable:
    """Atalho para montar uma tabela a partir de números/strings."""
    return IcmsTable({uf: Decimal(str(v)) for uf, v in aliquotas.items()})
