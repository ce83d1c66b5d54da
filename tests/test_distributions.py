"""Distribution library: parameter validation, exact values and sample statistics."""

from __future__ import annotations

import math
import statistics

import pytest

from gamerng import MaxRecursionsError, PredictableRng, Rng, Settings, ValidationError, support

N = 5_000


def _samples(fn, n: int = N):
    return [fn() for _ in range(n)]


@pytest.mark.parametrize(
    "method, kwargs",
    [
        ("bernoulli", {"p": 1.5}),
        ("exponential", {"rate": 0}),
        ("poisson", {"lam": 0}),
        ("binomial", {"n": 1.5}),
        ("binomial", {"n": 2, "p": -0.1}),
        ("beta_binomial", {"alpha": 0}),
        ("beta", {"beta": -1}),
        ("gamma", {"shape": 0}),
        ("gamma", {"shape": 1, "rate": 2, "scale": 1}),
        ("gamma", {"shape": 2, "rate": 1, "scale": 0}),
        ("gamma", {"shape": 2, "scale": -1}),
        ("hypergeometric", {"K": 60}),
        ("hypergeometric", {"n": 0}),
        ("hypergeometric", {"k": 6}),
        ("irwin_hall", {"n": 0}),
        ("bates", {"n": 2.5}),
        ("bates_gaussian", {"n": 1}),
        ("gaussian", {"stddev": 0}),
        ("box_muller", {"stddev": -1}),
        ("pareto", {"shape": -1}),
        ("pareto", {"scale": 0}),
        ("students_t", {"nu": 0}),
        ("wigner_semicircle", {"R": 0}),
        ("kumaraswamy", {"alpha": 0}),
        ("hermite", {"lambda1": 0}),
        ("chi_squared", {"k": 0}),
        ("chi_squared", {"k": 1.5}),
        ("rayleigh", {"scale": -1}),
        ("log_normal", {"stddev": 0}),
        ("cauchy", {"scale": 0}),
        ("laplace", {"scale": 0}),
        ("logistic", {"scale": 0}),
    ],
)
def test_invalid_parameters_raise_before_drawing(settings: Settings, method, kwargs):
    prng = PredictableRng(settings=settings)
    with pytest.raises(ValidationError):
        getattr(prng, method)(**kwargs)
    assert prng.counter == 0


def test_gamma_accepts_consistent_rate_and_scale(rng: Rng):
    assert rng.gamma(shape=2, rate=0.25, scale=4) > 0
    assert rng.gamma(shape=2, rate=2, scale=0.5) > 0


def test_exact_values_from_fixed_draws(prng: PredictableRng):
    prng.results = [0.5]
    assert prng.exponential() == pytest.approx(math.log(2))
    assert prng.pareto(shape=0) == pytest.approx(math.log(2))
    assert prng.pareto(shape=1, scale=1, location=2) == pytest.approx(3)
    assert prng.wigner_semicircle(R=2) == pytest.approx(-2)
    assert prng.logistic(mean=3) == pytest.approx(3)
    assert prng.laplace(mean=1.5) == 1.5
    assert prng.cauchy(median=4) == pytest.approx(4)
    assert prng.rayleigh() == pytest.approx(math.sqrt(2 * math.log(2)))
    assert prng.box_muller(mean=3, stddev=0) == 3
    assert prng.bates(4) == pytest.approx(0.5)
    assert prng.irwin_hall(4) == pytest.approx(2)


def test_bernoulli_and_rademacher(prng: PredictableRng):
    prng.results = [0.2]
    assert prng.bernoulli(0.3) == 1
    assert prng.bernoulli(0.1) == 0
    assert prng.rademacher() == -1
    prng.results = [0.7]
    assert prng.rademacher() == 1


def test_hypergeometric_probability(rng: Rng):
    expected = math.comb(40, 5) / math.comb(50, 5)
    assert rng.hypergeometric(N=50, K=10, n=5, k=0) == pytest.approx(expected, rel=1e-9)
    for _ in range(100):
        assert 0 < rng.hypergeometric() <= 1


def test_normal_unbounded_statistics(rng: Rng):
    values = _samples(lambda: rng.normal(mean=10, stddev=2))
    assert statistics.fmean(values) == pytest.approx(10, abs=0.15)
    assert statistics.pstdev(values) == pytest.approx(2, abs=0.15)


def test_gaussian_skew_shifts_the_mean(settings: Settings):
    left = Rng(7, settings=settings)
    right = Rng(7, settings=settings)
    assert statistics.fmean(_samples(lambda: left.gaussian(skew=-1), 2000)) < statistics.fmean(
        _samples(lambda: right.gaussian(skew=1), 2000)
    )


def test_normal_bounded_stays_in_range(rng: Rng):
    for _ in range(2000):
        assert 0 <= rng.normal(minimum=0, maximum=10) <= 10
        assert 4 <= rng.normal(mean=5, stddev=1, minimum=4, maximum=6) <= 6
        assert rng.normal(minimum=2, mean=3, stddev=1) >= 2
        assert rng.normal(maximum=-2, mean=-1, stddev=3) <= -2


def test_normal_bounded_skew(settings: Settings):
    low = Rng(3, settings=settings)
    high = Rng(3, settings=settings)
    low_mean = statistics.fmean(_samples(lambda: low.normal(minimum=0, maximum=100, skew=-1), 2000))
    high_mean = statistics.fmean(_samples(lambda: high.normal(minimum=0, maximum=100, skew=1), 2000))
    assert low_mean < 50 < high_mean


def test_normal_impossible_bounds_raise(low_cap_settings: Settings):
    rng = Rng(5, settings=low_cap_settings)
    with pytest.raises(MaxRecursionsError):
        rng.normal(mean=100, stddev=1, minimum=0, maximum=1)


def test_normal_impossible_bounds_clamp_without_throw(low_cap_settings: Settings, caplog):
    rng = Rng(5, settings=low_cap_settings)
    rng.throw_on_max_recursions = False
    with caplog.at_level("WARNING", logger="gamerng.distributions"):
        assert rng.normal(mean=100, stddev=1, minimum=0, maximum=1) == 1
    assert "clamping" in caplog.text


@pytest.mark.parametrize(
    "draw, expected_mean, tolerance",
    [
        (lambda r: r.exponential(rate=2), 0.5, 0.05),
        (lambda r: r.bernoulli(p=0.3), 0.3, 0.03),
        (lambda r: r.poisson(lam=4), 4, 0.2),
        (lambda r: r.binomial(n=10, p=0.5), 5, 0.2),
        (lambda r: r.beta_binomial(alpha=2, beta=2, n=10), 5, 0.3),
        (lambda r: r.gamma(shape=3), 3, 0.2),
        (lambda r: r.gamma(shape=0.25), 0.25, 0.05),
        (lambda r: r.gamma(shape=2, rate=3), 6, 0.4),
        (lambda r: r.gamma(shape=2, scale=4), 0.5, 0.05),
        (lambda r: r.beta(alpha=2, beta=2), 0.5, 0.03),
        (lambda r: r.chi_squared(k=3), 3, 0.2),
        (lambda r: r.hermite(lambda1=1, lambda2=2), 3, 0.2),
        (lambda r: r.irwin_hall(n=6), 3, 0.1),
        (lambda r: r.bates_gaussian(n=12), 0, 0.1),
        (lambda r: r.laplace(mean=1), 1, 0.1),
        (lambda r: r.logistic(), 0, 0.1),
        (lambda r: r.students_t(nu=30), 0, 0.1),
        (lambda r: r.wigner_semicircle(R=1), 0, 0.05),
        (lambda r: r.rayleigh(scale=1), math.sqrt(math.pi / 2), 0.05),
        (lambda r: r.log_normal(mean=0, stddev=0.5), math.exp(0.125), 0.05),
    ],
)
def test_sample_means(settings: Settings, draw, expected_mean, tolerance):
    rng = Rng("means", settings=settings)
    values = _samples(lambda: draw(rng))
    assert statistics.fmean(values) == pytest.approx(expected_mean, abs=tolerance)


@pytest.mark.parametrize(
    "draw, low, high",
    [
        (lambda r: r.bates(), 0, 1),
        (lambda r: r.irwin_hall(n=4), 0, 4),
        (lambda r: r.kumaraswamy(), 0, 1),
        (lambda r: r.beta(), 0, 1),
        (lambda r: r.wigner_semicircle(R=2), -2, 2),
        (lambda r: r.pareto(location=2), 2, math.inf),
        (lambda r: r.exponential(), 0, math.inf),
        (lambda r: r.rayleigh(), 0, math.inf),
        (lambda r: r.log_normal(), 0, math.inf),
        (lambda r: r.chi_squared(), 0, math.inf),
        (lambda r: r.gamma(shape=0.2), 0, math.inf),
        (lambda r: r.binomial(n=4, p=0.5), 0, 4),
        (lambda r: r.poisson(lam=2), 0, math.inf),
    ],
)
def test_samples_within_support(settings: Settings, draw, low, high):
    rng = Rng("support", settings=settings)
    for _ in range(1000):
        assert low <= draw(rng) <= high


def test_discrete_results_are_integers(rng: Rng):
    for _ in range(200):
        assert isinstance(rng.poisson(3), int)
        assert isinstance(rng.binomial(5, 0.5), int)
        assert isinstance(rng.hermite(), int)
        assert rng.rademacher() in (-1, 1)


def test_support_lookup():
    assert support("poisson") == "{0, 1, 2, ...}"
    assert support("bates") == "[0, 1]"
    assert support("studentsT") == "(-INF, INF)"
    assert support("nope") is None
    assert Rng.support("beta") == "(0, 1)"
