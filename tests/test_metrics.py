import pytest

from hemoflow.core import metrics
from hemoflow.core.constants import CHOLESTEROL_REF, MU_BASE
from hemoflow.core.state import SimulationParameters, HistoryPoint
from hemoflow.physiology.environment import get_environment, EnvironmentProfile
from hemoflow.physiology.momentum import SolverStep
from hemoflow.physiology.rheology import plasma_viscosity


def make_step(**overrides):
    values = dict(
        time=0.0, pressure_gradient=22.0, max_velocity=0.01,
        max_shear=50.0, volumetric_flow=2.0e-6, plasma_viscosity=0.0012,
    )
    values.update(overrides)
    return SolverStep(**values)


# --- Pure formulas ---

def test_wavelength_exact():
    for hr in range(40, 181):
        assert metrics.wavelength(hr) == 7.5 / (hr / 60)


def test_pollutant_load_london():
    london = get_environment("London")
    load = metrics.pollutant_load(london.dust, london.chemicals, 45.0)
    assert load == pytest.approx((12 / 200 + 18 / 120 + 45 / 400) / 3)


@pytest.mark.parametrize("dust,chem,aqi", [
    (0, 0, 0), (12, 18, 45), (210, 115, 342), (1e4, 1e4, 1e4), (1e9, 0, 400),
])
def test_lung_efficiency_floor(dust, chem, aqi):
    load = metrics.pollutant_load(dust, chem, aqi)
    eff = metrics.lung_efficiency(load)
    assert eff == max(0.4, 1 - load)
    assert eff >= 0.4


def test_respiratory_quotient_guards_denominator():
    assert metrics.respiratory_quotient(0.05, 0.0) == pytest.approx(0.5)
    assert metrics.respiratory_quotient(0.85, 1.0) == pytest.approx(0.85)


def test_peak_pressure():
    assert metrics.peak_pressure(22.0) == 101.0
    assert metrics.peak_pressure(42.0) == 111.0


def test_wall_stress():
    assert metrics.wall_stress(0.0012, 100.0) == pytest.approx(0.12)


# --- Risk index ---

class TestRiskIndex:

    def test_reference_adult_is_one(self):
        params = SimulationParameters(hct=45, hr=70, cholesterol=180)
        assert metrics.risk_index(params, 0.0) == pytest.approx(1.0)

    @pytest.mark.parametrize("low,high", [(0.0, 50.1), (50.0, 85.0), (10.0, 60.0)])
    def test_stenosis_multiplier(self, low, high):
        base = SimulationParameters(hr=88, cholesterol=240)
        r_low = metrics.risk_index(base.replace(stenosis_severity=low), 0.2)
        r_high = metrics.risk_index(base.replace(stenosis_severity=high), 0.2)
        assert r_high == pytest.approx(1.6 * r_low, rel=1e-12)

    def test_threshold_is_strict(self):
        assert metrics.stenosis_multiplier(50.0) == 1.0
        assert metrics.stenosis_multiplier(50.0001) == 1.6

    def test_pollution_raises_risk(self):
        params = SimulationParameters()
        assert metrics.risk_index(params, 0.5) == pytest.approx(1.5 * metrics.risk_index(params, 0.0))

    def test_cholesterol_shares_viscosity_reference(self):
        # Both closures are neutral at the same reference cholesterol.
        params = SimulationParameters(hct=45, hr=70, cholesterol=CHOLESTEROL_REF)
        assert metrics.risk_index(params, 0.0) == pytest.approx(1.0)
        assert plasma_viscosity(CHOLESTEROL_REF) == pytest.approx(MU_BASE)
        doubled = params.replace(cholesterol=2 * CHOLESTEROL_REF)
        assert metrics.risk_index(doubled, 0.0) == pytest.approx(2.0)


# --- Result assembly ---

class TestComputeResult:

    @pytest.fixture
    def result(self, params):
        return metrics.compute_result(
            make_step(), params, get_environment("London"), heartbeat=0.3, time=0.008
        )

    def test_flow_and_gas_exchange(self, result, params):
        flow = 2.0e-6 * 1000 * 60
        assert result.flow_rate == pytest.approx(flow)
        expected_o2 = flow * 0.45 * 1.34 * 0.25 * result.lung_efficiency
        assert result.o2_consumption == pytest.approx(expected_o2)
        assert result.co2_production == pytest.approx(0.85 * expected_o2)

    def test_passthrough_fields(self, result):
        assert result.time == 0.008
        assert result.heartbeat == 0.3
        assert result.pressure_gradient == 22.0
        assert result.max_velocity == 0.01
        assert result.max_shear == 50.0
        assert result.peak_pressure == 101.0
        assert result.wall_stress == pytest.approx(0.0012 * 50.0)

    def test_result_is_immutable(self, result):
        with pytest.raises(AttributeError):
            result.time = 1.0

    def test_unknown_environment_uses_aqi_only(self, params):
        res = metrics.compute_result(make_step(), params, EnvironmentProfile(), 0.0, 0.0)
        assert res.pollutant_load == pytest.approx(45 / 400 / 3)

    def test_history_projection(self, result):
        point = metrics.to_history_point(result)
        assert point.time == result.time
        assert point.pressure == result.pressure_gradient
        assert point.lung_stress == pytest.approx(1.0 - result.lung_efficiency)
        assert point.rq == pytest.approx(result.respiratory_quotient)
        assert point.flow_rate == result.flow_rate


# --- History summary ---

def test_summarize_empty_history():
    summary = metrics.summarize_history([])
    assert summary["flow_rate"] == {"mean": 0.0, "min": 0.0, "max": 0.0}


def test_summarize_history():
    points = [
        HistoryPoint(time=t, pressure=p, rq=0.85, heartbeat=0.0, pollutant_load=0.1,
                     lung_stress=0.1, risk_index=r, flow_rate=f)
        for t, p, r, f in [(0.04, 20.0, 1.0, 0.1), (0.08, 30.0, 2.0, 0.3)]
    ]
    summary = metrics.summarize_history(points)
    assert summary["pressure"]["mean"] == pytest.approx(25.0)
    assert summary["risk_index"]["max"] == 2.0
    assert summary["flow_rate"]["min"] == 0.1
