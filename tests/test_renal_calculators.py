import pytest

from tools import renal_calculators as rc


def test_cockcroft_gault_dose_bands():
    res = rc.cockcroft_gault(1, 40, 72)
    assert res.value == 100
    assert res.category == "Normal dose"
    assert rc.cockcroft_gault(1, 40, 72, female=True).value == 85
    assert rc.cockcroft_gault(2, 80, 60).category.startswith("Significant dose adjustment")
    assert rc.cockcroft_gault(5, 90, 50).category == rc.KIDNEY_FAILURE_DOSING


def test_cockcroft_gault_rejects_non_positive():
    with pytest.raises(ValueError, match="weight"):
        rc.cockcroft_gault(1, 40, 0)


def test_egfr_2021_reference_value():
    res = rc.egfr(0.9, 50)
    assert res.value == pytest.approx(104.05, abs=0.1)
    assert res.category == "G1: Normal or high"


def test_egfr_2021_ignores_race():
    assert rc.egfr(1.2, 60, black=True).value == rc.egfr(1.2, 60).value


def test_egfr_2009_race_coefficient():
    base = rc.egfr(1.2, 60, formula="CKD-EPI 2009")
    black = rc.egfr(1.2, 60, black=True, formula="CKD-EPI 2009")
    assert black.value == pytest.approx(base.value * 1.159, abs=0.02)


def test_egfr_kidney_failure_stage():
    assert rc.egfr(4.5, 60).category.startswith("G5")


def test_egfr_unknown_formula():
    with pytest.raises(ValueError):
        rc.egfr(1, 50, formula="MDRD")


def test_ckd_stage_boundaries():
    assert rc.ckd_stage(60)[0].startswith("G2")
    assert rc.ckd_stage(59.9)[0].startswith("G3a")
    assert rc.ckd_stage(15)[0].startswith("G4")


def test_fena_categories():
    assert rc.fena(10, 140, 100, 1).category == "Pre-renal AKI"
    assert rc.fena(40, 140, 50, 2).category == "Grey zone, consider other factors"
    assert rc.fena(80, 140, 40, 3).category == "Intrinsic AKI (ATN)"


def test_fena_allows_zero_urine_sodium():
    assert rc.fena(0, 140, 100, 1).value == 0


def test_uacr_units_and_categories():
    a2 = rc.uacr(30, 100)
    assert a2.value == 300
    assert a2.category.startswith("A2")
    a3 = rc.uacr(100, 10, creatinine_unit="mmol/L")
    assert a3.value == pytest.approx(884.96, abs=0.01)
    assert a3.category.startswith("A3")
    assert rc.uacr(2, 100).category.startswith("A1")


def test_uacr_rejects_zero_creatinine():
    with pytest.raises(ValueError):
        rc.uacr(30, 0)
