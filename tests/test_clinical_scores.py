import pytest

from tools import clinical_scores as cs


def test_chadsvasc_female_with_risk_factors():
    res = cs.chadsvasc(female=True, hypertension=True, age_65_to_74=True)
    assert res.score == 3
    assert res.interpretation == "Score 3 (Female): Anticoagulation recommended (Risk increases with score)"


def test_chadsvasc_sex_alone():
    assert cs.chadsvasc(female=True).interpretation.startswith("Score 1 (Female): Consider anticoagulation")
    assert cs.chadsvasc().interpretation.startswith("Score 0 (Male): Low risk")


def test_chadsvasc_age_bands_do_not_stack():
    assert cs.chadsvasc(age_75_or_older=True, age_65_to_74=True).score == 2


def test_curb65_bands():
    assert "Low risk" in cs.curb65(confusion=True).interpretation
    assert "Moderate risk" in cs.curb65(confusion=True, age_65_or_older=True).interpretation
    high = cs.curb65(
        confusion=True, urea_over_7=True, respiratory_rate_30=True, low_blood_pressure=True, age_65_or_older=True
    )
    assert high.score == 5
    assert "consider ICU" in high.interpretation


def test_gcs_severity():
    assert cs.gcs(4, 5, 6).interpretation == "Total Score 15: Mild Brain Injury. (Components: E4 V5 M6)"
    assert "Moderate" in cs.gcs(3, 4, 5).interpretation
    assert cs.gcs(1, 1, 1).score == 3


def test_gcs_incomplete_and_out_of_range():
    assert cs.gcs(4, None, 6).score is None
    with pytest.raises(ValueError, match="eye"):
        cs.gcs(5, 5, 6)


def test_meld_floor_values():
    res = cs.meld(0.5, 0.7, 0.9)
    assert res.score == 6
    assert "<1.9% mortality" in res.interpretation
    assert res.extra is None


def test_meld_with_sodium_adjustment():
    res = cs.meld(2, 1.5, 1.5, 130)
    assert res.score == 17
    assert res.extra == "22"
    assert "MELD-Na Score: 22." in res.interpretation
    assert "~6.0% mortality" in res.interpretation


def test_meld_dialysis_caps_creatinine_at_four():
    assert cs.meld(1, 1, 1, dialysis=True).score == 20


def test_meld_missing_and_invalid():
    assert cs.meld(None, 1, 1).score is None
    with pytest.raises(ValueError):
        cs.meld(1, 0, 1)


def test_wells_dvt_alternative_diagnosis_subtracts_two():
    assert cs.wells_dvt(active_cancer=True, calf_swelling=True, pitting_edema=True).interpretation.startswith(
        "Score 3: High Probability"
    )
    res = cs.wells_dvt(alternative_diagnosis_likely=True)
    assert res.score == -2
    assert "Low Probability" in res.interpretation


def test_wells_pe_two_readings():
    res = cs.wells_pe(dvt_signs=True, heart_rate_over_100=True)
    assert res.score == 4.5
    assert res.interpretation == "Score 4.5: Moderate Probability of PE"
    assert res.extra == "Score 4.5: PE Likely"
    low = cs.wells_pe()
    assert low.interpretation == "Score 0: Low Probability of PE"
    assert low.extra == "Score 0: PE Unlikely"


def test_anion_gap():
    assert cs.anion_gap(140, 104, 24).interpretation == "Normal Anion Gap"
    high = cs.anion_gap(140, 100, 20)
    assert high.score == 20
    assert "HAGMA" in high.interpretation
    assert cs.anion_gap(135, 105, 25).interpretation == "Low Anion Gap"
    with pytest.raises(ValueError):
        cs.anion_gap(140, 0, 24)
