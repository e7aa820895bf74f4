"""Fixtures compartilhadas."""

from decimal import Decimal

import pytest

from mcg_engine.pricing import FreightQuoteInput, SurchargeRates, as_table
from mcg_engine.scoring import CATEGORY_KEYS


@pytest.fixture
def tabela_exemplo():
    return as_table({"SP": 18, "RJ": 12, "PR": "17.5"})


@pytest.fixture
def taxas_exemplo():
    return SurchargeRates(gris_percent=Decimal("0.1"), adv_percent=Decimal("0.05"))


@pytest.fixture
def cotacao_sp_rj():
    return FreightQuoteInput(
        origin_uf="SP",
        destination_uf="RJ",
        weight_kg=Decimal("100"),
        declared_value=Decimal("1000.00"),
        axles=2,
        toll_per_axle=Decimal("15.00"),
    )


@pytest.fixture
def respostas_exemplo():
    return {
        "crm": 2,
        "pipeline": 1,
        "cotacao": 2,
        "followup": 1,
        "histórico": 2,
        "indicadores": 1,
        "segmentacao": 1,
        "qualificacao": 2,
        "propostas": 1,
        "integração": 1,
    }


@pytest.fixture
def respostas_todas():
    def _build(valor):
        return {k: valor for k in CATEGORY_KEYS}
    return _build
