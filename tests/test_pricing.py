"""Tests for the freight quote calculator."""

from dataclasses import replace
from decimal import Decimal

import pytest

from mcg_engine.config import get_settings
from mcg_engine.errors import InvalidAmount, InvalidStateCode, PricingError, ReferenceDataError
from mcg_engine.loader import load_icms_table
from mcg_engine.pricing import (
    DEFAULT_RATES,
    FreightQuoteInput,
    SurchargeRates,
    as_table,
    compute_freight_proposal,
    compute_freight_quote,
    round_money,
)


# ============================================================================
# Components and total
# ============================================================================


class TestComputeFreightQuote:
    def test_sp_to_rj_example(self, cotacao_sp_rj, tabela_exemplo, taxas_exemplo):
        result = compute_freight_quote(cotacao_sp_rj, tabela_exemplo, taxas_exemplo)

        assert result.icms_rate == Decimal("12")
        assert result.icms == Decimal("120.00")
        assert result.gris == Decimal("1.00")
        assert result.adv == Decimal("0.50")
        assert result.toll == Decimal("30.00")
        assert result.total == Decimal("151.50")

    def test_value_per_kg_rounds_half_up(self, cotacao_sp_rj, tabela_exemplo, taxas_exemplo):
        result = compute_freight_quote(cotacao_sp_rj, tabela_exemplo, taxas_exemplo)
        # 151.50 / 100 = 1.515
        assert result.value_per_kg == Decimal("1.52")

    def test_icms_uses_destination_rate(self, cotacao_sp_rj, tabela_exemplo, taxas_exemplo):
        inverted = replace(cotacao_sp_rj, origin_uf="RJ", destination_uf="SP")
        result = compute_freight_quote(inverted, tabela_exemplo, taxas_exemplo)
        assert result.icms_rate == Decimal("18")
        assert result.icms == Decimal("180.00")

    def test_fractional_state_rate(self, cotacao_sp_rj, tabela_exemplo, taxas_exemplo):
        result = compute_freight_quote(
            replace(cotacao_sp_rj, destination_uf="PR"), tabela_exemplo, taxas_exemplo
        )
        assert result.icms == Decimal("175.00")

    def test_lowercase_state_codes_are_accepted(self, cotacao_sp_rj, tabela_exemplo, taxas_exemplo):
        result = compute_freight_quote(
            replace(cotacao_sp_rj, origin_uf=" sp", destination_uf="rj "),
            tabela_exemplo,
            taxas_exemplo,
        )
        assert result.origin_uf == "SP"
        assert result.destination_uf == "RJ"
        assert result.total == Decimal("151.50")

    def test_default_rates(self, cotacao_sp_rj, tabela_exemplo):
        result = compute_freight_quote(cotacao_sp_rj, tabela_exemplo)
        assert DEFAULT_RATES.gris_percent == Decimal("0.3")
        assert result.gris == Decimal("3.00")
        assert result.adv == Decimal("3.00")
        assert result.total == Decimal("156.00")

    def test_zero_toll_is_allowed(self, cotacao_sp_rj, tabela_exemplo, taxas_exemplo):
        result = compute_freight_quote(
            replace(cotacao_sp_rj, toll_per_axle=Decimal("0")), tabela_exemplo, taxas_exemplo
        )
        assert result.toll == Decimal("0")
        assert result.total == Decimal("121.50")

    def test_rounding_only_on_total(self):
        table = as_table({"SP": 0, "RJ": 0})
        rates = SurchargeRates(gris_percent=Decimal("0.5"), adv_percent=Decimal("0.5"))
        quote = FreightQuoteInput("SP", "RJ", Decimal("1"), Decimal("1.00"), 1, Decimal("0"))

        result = compute_freight_quote(quote, table, rates)

        # componentes exatos (0.005 cada); arredondar antes daria 0.02
        assert result.gris == Decimal("0.005")
        assert result.adv == Decimal("0.005")
        assert result.total == Decimal("0.01")

    def test_total_matches_components_for_every_state(self, cotacao_sp_rj):
        table = load_icms_table(get_settings().icms_path)
        quote = replace(cotacao_sp_rj, declared_value=Decimal("1234.57"), toll_per_axle=Decimal("7.33"))

        for uf in table:
            result = compute_freight_quote(replace(quote, destination_uf=uf), table)
            exact = sum(result.components, Decimal("0"))
            assert abs(result.total - exact) <= Decimal("0.005")
            assert result.total == round_money(exact)
            assert result.total.as_tuple().exponent == -2

    def test_same_input_same_output(self, cotacao_sp_rj, tabela_exemplo, taxas_exemplo):
        first = compute_freight_quote(cotacao_sp_rj, tabela_exemplo, taxas_exemplo)
        second = compute_freight_quote(cotacao_sp_rj, tabela_exemplo, taxas_exemplo)
        assert first == second


# ============================================================================
# Validation
# ============================================================================


class TestValidation:
    @pytest.mark.parametrize("uf_field", ["origin_uf", "destination_uf"])
    def test_unknown_state(self, cotacao_sp_rj, tabela_exemplo, uf_field):
        with pytest.raises(InvalidStateCode) as exc:
            compute_freight_quote(replace(cotacao_sp_rj, **{uf_field: "ZZ"}), tabela_exemplo)
        assert exc.value.uf == "ZZ"

    @pytest.mark.parametrize("weight", [Decimal("0"), Decimal("-1")])
    def test_non_positive_weight(self, cotacao_sp_rj, tabela_exemplo, weight):
        with pytest.raises(InvalidAmount) as exc:
            compute_freight_quote(replace(cotacao_sp_rj, weight_kg=weight), tabela_exemplo)
        assert exc.value.campo == "peso"

    @pytest.mark.parametrize("value", [Decimal("0"), Decimal("-10.00")])
    def test_non_positive_declared_value(self, cotacao_sp_rj, tabela_exemplo, value):
        with pytest.raises(InvalidAmount) as exc:
            compute_freight_quote(replace(cotacao_sp_rj, declared_value=value), tabela_exemplo)
        assert exc.value.campo == "valor_declarado"

    @pytest.mark.parametrize("axles", [0, -2])
    def test_non_positive_axles(self, cotacao_sp_rj, tabela_exemplo, axles):
        with pytest.raises(InvalidAmount):
            compute_freight_quote(replace(cotacao_sp_rj, axles=axles), tabela_exemplo)

    def test_negative_toll(self, cotacao_sp_rj, tabela_exemplo):
        with pytest.raises(InvalidAmount):
            compute_freight_quote(replace(cotacao_sp_rj, toll_per_axle=Decimal("-0.01")), tabela_exemplo)

    def test_negative_surcharge_rate(self, cotacao_sp_rj, tabela_exemplo):
        rates = SurchargeRates(gris_percent=Decimal("-0.1"))
        with pytest.raises(InvalidAmount):
            compute_freight_quote(cotacao_sp_rj, tabela_exemplo, rates)

    @pytest.mark.parametrize(
        "field,value",
        [
            ("declared_value", Decimal("1e30")),
            ("toll_per_axle", Decimal("1e30")),
            ("weight_kg", Decimal("1e-30")),
            ("weight_kg", Decimal("1e30")),
        ],
    )
    def test_amount_out_of_bounds(self, cotacao_sp_rj, tabela_exemplo, field, value):
        with pytest.raises(InvalidAmount):
            compute_freight_quote(replace(cotacao_sp_rj, **{field: value}), tabela_exemplo)

    @pytest.mark.parametrize("value", [Decimal("NaN"), Decimal("Infinity"), "-Infinity", float("nan")])
    def test_non_finite_amount(self, cotacao_sp_rj, value):
        with pytest.raises(InvalidAmount) as exc:
            replace(cotacao_sp_rj, declared_value=value)
        assert exc.value.campo == "valor_declarado"

    @pytest.mark.parametrize("value", ["abc", None, True, [1]])
    def test_non_numeric_amount(self, cotacao_sp_rj, value):
        with pytest.raises(InvalidAmount):
            replace(cotacao_sp_rj, weight_kg=value)

    @pytest.mark.parametrize("axles", [100, 2.5, True])
    def test_axles_must_be_small_integer(self, cotacao_sp_rj, tabela_exemplo, axles):
        with pytest.raises(InvalidAmount) as exc:
            compute_freight_quote(replace(cotacao_sp_rj, axles=axles), tabela_exemplo)
        assert exc.value.campo == "eixos"

    def test_surcharge_rate_above_100(self, cotacao_sp_rj, tabela_exemplo):
        with pytest.raises(InvalidAmount):
            compute_freight_quote(cotacao_sp_rj, tabela_exemplo, SurchargeRates(adv_percent=Decimal("100.01")))

    def test_errors_share_a_base_class(self, cotacao_sp_rj, tabela_exemplo):
        with pytest.raises(PricingError):
            compute_freight_quote(replace(cotacao_sp_rj, destination_uf="XX"), tabela_exemplo)


# ============================================================================
# Float inputs
# ============================================================================


class TestFloatInputs:
    def test_float_amounts_keep_their_decimal_value(self):
        quote = FreightQuoteInput("SP", "RJ", 1.0, 1.0, 1, 1.005)
        result = compute_freight_quote(quote, as_table({"SP": 0, "RJ": 0}), SurchargeRates(0, 0))

        assert quote.toll_per_axle == Decimal("1.005")
        assert result.total == Decimal("1.01")

    def test_float_surcharge_rates(self, cotacao_sp_rj, tabela_exemplo):
        rates = SurchargeRates(0.3, 0.3)
        assert rates.gris_percent == Decimal("0.3")
        assert rates.adv_percent == Decimal("0.3")

        result = compute_freight_quote(cotacao_sp_rj, tabela_exemplo, rates)
        assert result.gris == Decimal("3")
        assert result.total == Decimal("156.00")

    def test_float_and_decimal_inputs_agree(self, cotacao_sp_rj, tabela_exemplo, taxas_exemplo):
        as_floats = FreightQuoteInput("SP", "RJ", 100.0, 1000.0, 2, 15.0)
        assert compute_freight_quote(as_floats, tabela_exemplo, taxas_exemplo) == compute_freight_quote(
            cotacao_sp_rj, tabela_exemplo, taxas_exemplo
        )


# ============================================================================
# ICMS table
# ============================================================================


class TestIcmsTable:
    def test_table_is_read_only(self, tabela_exemplo):
        with pytest.raises(TypeError):
            tabela_exemplo["SP"] = Decimal("0")
        with pytest.raises(TypeError):
            tabela_exemplo._aliquotas["SP"] = Decimal("0")

    def test_aliquota_lookup(self, tabela_exemplo):
        assert tabela_exemplo.aliquota("rj") == Decimal("12")
        assert "SP" in tabela_exemplo
        assert len(tabela_exemplo) == 3

    @pytest.mark.parametrize("aliquota", ["100.5", "-1", "NaN"])
    def test_rate_outside_percentage_range(self, aliquota):
        with pytest.raises(ReferenceDataError):
            as_table({"SP": aliquota})


# ============================================================================
# Multi-route proposal
# ============================================================================


class TestFreightProposal:
    def test_total_is_sum_of_routes(self, cotacao_sp_rj, tabela_exemplo, taxas_exemplo):
        other = replace(cotacao_sp_rj, destination_uf="SP")
        proposal = compute_freight_proposal([cotacao_sp_rj, other], tabela_exemplo, taxas_exemplo)

        assert len(proposal.quotes) == 2
        assert proposal.total == proposal.quotes[0].total + proposal.quotes[1].total
        assert proposal.total == Decimal("151.50") + Decimal("211.50")

    def test_empty_proposal(self, tabela_exemplo):
        with pytest.raises(InvalidAmount):
            compute_freight_proposal([], tabela_exemplo)

    def test_one_bad_route_rejects_proposal(self, cotacao_sp_rj, tabela_exemplo):
        with pytest.raises(InvalidStateCode):
            compute_freight_proposal(
                [cotacao_sp_rj, replace(cotacao_sp_rj, destination_uf="ZZ")], tabela_exemplo
            )

    def test_rates_per_route(self, cotacao_sp_rj, tabela_exemplo, taxas_exemplo):
        proposal = compute_freight_proposal(
            [cotacao_sp_rj, cotacao_sp_rj], tabela_exemplo, [taxas_exemplo, DEFAULT_RATES]
        )
        assert [q.total for q in proposal.quotes] == [Decimal("151.50"), Decimal("156.00")]
        assert proposal.total == Decimal("307.50")

    def test_rates_count_must_match_routes(self, cotacao_sp_rj, tabela_exemplo, taxas_exemplo):
        with pytest.raises(ValueError):
            compute_freight_proposal([cotacao_sp_rj, cotacao_sp_rj], tabela_exemplo, [taxas_exemplo])
