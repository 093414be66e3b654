import pytest

from casense.tax import (
    NEW_REGIME_SLABS,
    OLD_REGIME_SLABS,
    calculate_gst,
    calculate_income_tax,
    estimate_tax_liability,
    tax_on_slabs,
)


def test_gst_on_base_amount() -> None:
    result = calculate_gst(1000, 18)

    assert result.gst_amount == pytest.approx(180.0)
    assert result.total == pytest.approx(1180.0)


def test_gst_default_rate_is_18_percent() -> None:
    assert calculate_gst(500).gst_amount == pytest.approx(90.0)


@pytest.mark.parametrize(
    "taxable, expected",
    [
        (0, 0),
        (250000, 0),
        (250001, 0.05),
        (500000, 12500),
        (1000000, 112500),
        (1100000, 142500),
    ],
)
def test_old_regime_slab_boundaries(taxable: float, expected: float) -> None:
    assert tax_on_slabs(taxable, OLD_REGIME_SLABS) == pytest.approx(expected)


@pytest.mark.parametrize(
    "taxable, expected",
    [
        (300000, 0),
        (700000, 20000),
        (1000000, 50000),
        (1200000, 80000),
        (1500000, 140000),
        (1600000, 170000),
    ],
)
def test_new_regime_slab_boundaries(taxable: float, expected: float) -> None:
    assert tax_on_slabs(taxable, NEW_REGIME_SLABS) == pytest.approx(expected)


def test_old_regime_applies_standard_deduction() -> None:
    result = calculate_income_tax(550000, "old")

    assert result.taxable_income == 500000
    assert result.tax == pytest.approx(12500)
    assert result.cess == pytest.approx(500)
    assert result.total_tax == pytest.approx(13000)


def test_old_regime_taxable_never_negative() -> None:
    result = calculate_income_tax(20000, "old")
    assert result.taxable_income == 0
    assert result.total_tax == 0


def test_new_regime_with_cess() -> None:
    result = calculate_income_tax(1500000, "new")

    assert result.taxable_income == 1500000
    assert result.tax == pytest.approx(140000)
    assert result.cess == pytest.approx(140000 * 0.04)
    assert result.total_tax == pytest.approx(145600)


def test_unknown_regime_falls_back_to_new() -> None:
    result = calculate_income_tax(700000, "flat")

    assert result.regime == "new"
    assert result.tax == pytest.approx(20000)


def test_estimate_tax_liability_is_flat_rate() -> None:
    assert estimate_tax_liability(100000) == pytest.approx(18000)
    assert estimate_tax_liability(100000, rate=0.1) == pytest.approx(10000)
