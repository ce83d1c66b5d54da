from __future__ import annotations

import logging
import math
from typing import Optional, Union

from .errors import IterationLimitError, MaxRecursionsError, ValidationError
from .loop_guard import LoopGuard
from .random_utils import apply_skew, safe_log
from .validation import (
    require_between_eq,
    require_gt,
    require_gteq,
    require_int,
    require_lteq,
    require_positive,
)


logger = logging.getLogger(__name__)

Number = Union[int, float]

SUPPORT = {
    "random": "[min, max)",
    "integer": "[min, max]",
    "normal": "(-INF, INF)",
    "boxMuller": "(-INF, INF)",
    "gaussian": "(-INF, INF)",
    "irwinHall": "[0, n]",
    "bates": "[0, 1]",
    "batesgaussian": "(-INF, INF)",
    "bernoulli": "{0, 1}",
    "exponential": "[0, INF)",
    "pareto": "[location, INF)",
    "poisson": "{0, 1, 2, ...}",
    "hypergeometric": "{max(0, n+K-N), ..., min(n, K)}",
    "rademacher": "{-1, 1}",
    "binomial": "{0, 1, 2, ..., n}",
    "betaBinomial": "{0, 1, 2, ..., n}",
    "beta": "(0, 1)",
    "gamma": "(0, INF)",
    "studentsT": "(-INF, INF)",
    "wignerSemicircle": "[-R; +R]",
    "kumaraswamy": "(0, 1)",
    "hermite": "{0, 1, 2, 3, ...}",
    "chiSquared": "[0, INF)",
    "rayleigh": "[0, INF)",
    "logNormal": "(0, INF)",
    "cauchy": "(-INF, +INF)",
    "laplace": "(-INF, +INF)",
    "logistic": "(-INF, +INF)",
}


def support(distribution: str) -> Optional[str]:
    """Canonical domain of a named distribution, or None if unknown."""
    return SUPPORT.get(distribution)


def _ratio(num: float, den: float) -> float:
    # IEEE semantics instead of ZeroDivisionError
    if den:
        return num / den
    if num == 0 or math.isnan(num):
        return math.nan
    return math.copysign(math.inf, num)


def _exp(x: float) -> float:
    try:
        return math.exp(x)
    except OverflowError:
        return math.inf


def _log_factorial(x: int) -> float:
    return sum(math.log(i) for i in range(2, x + 1))


def _log_combination(a: int, b: int) -> float:
    return _log_factorial(a) - _log_factorial(b) - _log_factorial(a - b)


class DistributionsMixin:
    """Sampling functions over a uniform source.

    Host classes provide ``draw()`` (a uniform value in [0, 1)),
    ``rand_int``, ``scale_norm``, ``settings`` and
    ``throw_on_max_recursions``. Every method validates its parameters
    before drawing anything.
    """

    # Normal family

    def normal(
        self,
        mean: Optional[float] = None,
        stddev: Optional[float] = None,
        minimum: Optional[float] = None,
        maximum: Optional[float] = None,
        skew: float = 0,
    ) -> float:
        """Normally distributed number, optionally bounded and skewed.

        Without bounds this is ``gaussian``. With ``minimum`` and/or
        ``maximum`` a 7-term Bates value is skewed, rescaled and redrawn while
        out of bounds. After ``settings.max_recursions`` redraws it either
        raises ``MaxRecursionsError`` or, with the throw policy off, clamps
        into range (a small bias toward the bounds).
        """
        if minimum is None and maximum is None:
            return self.gaussian(
                mean=0 if mean is None else mean,
                stddev=1 if stddev is None else stddev,
                skew=skew,
            )
        skew = skew or 0
        cap = self.settings.max_recursions
        attempt = 0
        while True:
            if attempt > cap and self.throw_on_max_recursions:
                raise MaxRecursionsError(
                    "Max resampling attempts in rng normal function. This might be as a result of using "
                    "predictable random numbers, or inappropriate arguments? Args: "
                    f"mean={mean}, stddev={stddev}, min={minimum}, max={maximum}, skew={skew}"
                )
            num = apply_skew(self.bates(7), skew)

            if mean is None and stddev is None and minimum is not None and maximum is not None:
                return self.scale_norm(num, minimum, maximum)

            num = num * 10 - 5
            if mean is None:
                mean = 0
                if minimum is not None and maximum is not None:
                    mean = (maximum + minimum) / 2
                    if stddev is None:
                        stddev = abs(maximum - minimum) / 10
            if stddev is None:
                if minimum is not None and maximum is not None:
                    stddev = abs(maximum - minimum) / 10
                else:
                    stddev = 0.1
            num = num * stddev + mean

            out_of_bounds = (maximum is not None and num > maximum) or (minimum is not None and num < minimum)
            if out_of_bounds and attempt <= cap:
                attempt += 1
                continue
            if out_of_bounds:
                logger.warning(
                    "normal hit %d redraws, clamping %s into [%s, %s]", cap, num, minimum, maximum
                )
            if maximum is not None:
                num = min(num, maximum)
            if minimum is not None:
                num = max(num, minimum)
            return num

    def gaussian(self, mean: float = 0, stddev: float = 1, skew: float = 0) -> float:
        require_positive("stddev", stddev)

        if not skew:
            return self.box_muller(mean=mean, stddev=stddev)

        num = self.box_muller(mean=0, stddev=1)
        # Into [0, 1] for the power transform; only |z| > 5 is clipped
        num = min(max(num / 10.0 + 0.5, 0.0), 1.0)
        num = apply_skew(num, skew)
        return (num * 10 - 5) * stddev + mean

    def box_muller(self, mean: float = 0, stddev: float = 1) -> float:
        require_gteq("stddev", stddev, 0)
        u = 1 - self.draw()
        v = self.draw()
        z = math.sqrt(-2.0 * math.log(u)) * math.cos(2.0 * math.pi * v)
        return z * stddev + mean

    def irwin_hall(self, n: int = 6) -> float:
        """Sum of ``n`` uniform draws."""
        n = require_int("n", n)
        require_positive("n", n)
        return sum(self.draw() for _ in range(n))

    def bates(self, n: int = 6) -> float:
        """Mean of ``n`` uniform draws."""
        n = require_int("n", n)
        require_positive("n", n)
        return self.irwin_hall(n) / n

    def bates_gaussian(self, n: int = 6) -> float:
        n = require_int("n", n)
        require_gt("n", n, 1)
        return (self.irwin_hall(n) / math.sqrt(n)) - ((1 / math.sqrt(1 / n)) / 2)

    # Discrete

    def bernoulli(self, p: float = 0.5) -> int:
        require_between_eq("p", p, 0, 1)
        return 1 if self.draw() < p else 0

    def rademacher(self) -> int:
        return -1 if self.draw() < 0.5 else 1

    def binomial(self, n: int = 1, p: float = 0.5) -> int:
        n = require_int("n", n)
        require_positive("n", n)
        require_between_eq("p", p, 0, 1)
        return sum(1 for _ in range(n) if self.draw() < p)

    def beta_binomial(self, alpha: float = 1, beta: float = 1, n: int = 1) -> int:
        """Binomial trials whose success probability is itself drawn first."""
        require_positive("alpha", alpha)
        require_positive("beta", beta)
        n = require_int("n", n)
        require_positive("n", n)

        x = math.pow(self.draw(), 1 / alpha)
        y = math.pow(self.draw(), 1 / beta)
        p = _ratio(x, x + y)
        return sum(1 for _ in range(n) if self.draw() < p)

    def poisson(self, lam: float = 1) -> int:
        """Knuth's product-of-uniforms method.

        Guarded against degenerate sources by a loop guard and against
        endless varying input by ``settings.loop_max``.
        """
        require_positive("lambda", lam)

        limit = math.exp(-lam)
        size = self.settings.loop_guard_size
        guard: LoopGuard[float] = LoopGuard(
            size,
            2,
            f"Loop detected in randomly generated numbers over the last {size} generations. "
            f"This is incompatible with the poisson distribution (lambda = {lam}). Try either using a "
            "spread of non-random numbers or fine tune the number to not fall foul of the looped way of generating.",
        )
        k = 0
        p = 1.0
        for _ in range(self.settings.loop_max):
            k += 1
            r = self.draw()
            guard.push(r)
            p *= r
            if p <= limit:
                return k - 1
        raise IterationLimitError(
            f"loop_max reached in poisson - bailing out - possible parameter error, or using non-random source? lambda = {lam}"
        )

    def hypergeometric(self, N: int = 50, K: int = 10, n: int = 5, k: Optional[int] = None) -> float:
        """Probability of exactly ``k`` successes in ``n`` draws without replacement.

        ``k`` is picked uniformly from ``[0, min(K, n)]`` when not given.
        """
        N = require_int("N", N)
        require_positive("N", N)
        K = require_int("K", K)
        require_positive("K", K)
        require_lteq("K", K, N)
        n = require_int("n", n)
        require_positive("n", n)
        require_lteq("n", n, N)

        upper = min(K, n)
        if k is None:
            k = self.rand_int(0, upper)
        k = require_int("k", k)
        require_between_eq("k", k, 0, upper)

        log_prob = _log_combination(K, k) + _log_combination(N - K, n - k) - _log_combination(N, n)
        return math.exp(log_prob)

    def hermite(self, lambda1: float = 1, lambda2: float = 2) -> int:
        require_gt("lambda1", lambda1, 0)
        require_gt("lambda2", lambda2, 0)
        return self.poisson(lambda1) + self.poisson(lambda2)

    # Continuous

    def exponential(self, rate: float = 1) -> float:
        require_gt("rate", rate, 0)
        return -safe_log(1 - self.draw()) / rate

    def pareto(self, shape: float = 0.5, scale: float = 1, location: float = 0) -> float:
        require_gteq("shape", shape, 0)
        require_positive("scale", scale)

        u = self.draw()
        if shape != 0:
            if u == 0:
                return math.inf
            return location + (scale / shape) * (math.pow(u, -shape) - 1)
        return location - scale * safe_log(u)

    def beta(self, alpha: float = 0.5, beta: float = 0.5) -> float:
        """Ratio of two sums of ``-ln(u)`` terms.

        Each sum is Gamma distributed only for integer shapes; fractional
        shapes are rounded up to the next whole number of terms.
        """
        require_positive("alpha", alpha)
        require_positive("beta", beta)

        loop_max = self.settings.loop_max

        def gamma_sum(shape: float) -> float:
            total = 0.0
            i = 0
            while i < shape:
                total += -safe_log(self.draw())
                i += 1
                if i >= loop_max:
                    raise IterationLimitError(
                        f"loop_max reached in beta - bailing out - possible parameter error, or using "
                        f"non-random source? alpha = {alpha}, beta = {beta}"
                    )
            return total

        x = gamma_sum(alpha)
        y = gamma_sum(beta)
        return _ratio(x, x + y)

    def gamma(self, shape: float = 1, rate: Optional[float] = None, scale: Optional[float] = None) -> float:
        """Marsaglia-Tsang squeeze sampler.

        ``rate`` and ``scale`` are alternatives; both may be given only when
        ``rate == 1 / scale``. Shapes at or below 1/3 are sampled at
        ``shape + 1`` and scaled down by ``u ** (1 / shape)``.
        """
        require_positive("shape", shape)
        if scale is not None:
            require_positive("scale", scale)
        if rate is not None:
            require_positive("rate", rate)
        if scale is not None and rate is not None and rate != 1 / scale:
            raise ValidationError(f"Cannot supply both rate and scale unless rate == 1 / scale, got rate = {rate}, scale = {scale}")
        if scale is not None:
            rate = 1 / scale
        if rate is None:
            rate = 1

        boosted = shape <= 1 / 3
        d = (shape + 1 if boosted else shape) - 1 / 3
        c = 1.0 / math.sqrt(9.0 * d)
        size = self.settings.loop_guard_size
        loop_max = self.settings.loop_max
        message = (
            f"Loop detected in randomly generated numbers over the last {size} generations. This is "
            "incompatible with the gamma distribution. Try either using a spread of non-random numbers or "
            f"fine tune the number to not fall foul of the looped way of generating. shape = {shape}, rate = {rate}"
        )

        outer: LoopGuard[float] = LoopGuard(size, message=message)
        for _ in range(loop_max):
            inner: LoopGuard[float] = LoopGuard(size, message=message)
            for _ in range(loop_max):
                x = self.normal()
                inner.push(x)
                v = 1.0 + c * x
                if v > 0.0:
                    break
            else:
                raise IterationLimitError(
                    "loop_max reached inside gamma inner loop - bailing out - possible parameter error, or "
                    f"using non-random source? had shape = {shape}, rate = {rate}, scale = {scale}"
                )

            v = v * v * v
            x2 = x * x
            v0 = 1.0 - 0.331 * x2 * x2
            v1 = 0.5 * x2 + d * (1.0 - v + math.log(v))

            u = self.draw()
            outer.push(u)
            if u < v0 or safe_log(u) < v1:
                break
        else:
            raise IterationLimitError(
                "loop_max reached inside gamma - bailing out - possible parameter error, or using non-random "
                f"source? had shape = {shape}, rate = {rate}, scale = {scale}"
            )

        result = rate * d * v
        if boosted:
            result *= math.pow(self.draw(), 1 / shape)
        return result

    def students_t(self, nu: float = 1) -> float:
        require_positive("nu", nu)
        normal = math.sqrt(-2.0 * safe_log(self.draw())) * math.cos(2.0 * math.pi * self.draw())
        chi_squared = self.gamma(shape=nu / 2, rate=2)
        return _ratio(normal, math.sqrt(chi_squared / nu))

    def wigner_semicircle(self, R: float = 1) -> float:
        require_gt("R", R, 0)
        theta = self.draw() * 2 * math.pi
        return R * math.cos(theta)

    def kumaraswamy(self, alpha: float = 0.5, beta: float = 0.5) -> float:
        require_gt("alpha", alpha, 0)
        require_gt("beta", beta, 0)
        u = self.draw()
        return math.pow(1 - math.pow(1 - u, 1 / beta), 1 / alpha)

    def chi_squared(self, k: int = 1) -> float:
        """Sum of ``k`` squared standard normals."""
        require_positive("k", k)
        k = require_int("k", k)
        total = 0.0
        for _ in range(k):
            z = math.sqrt(-2.0 * safe_log(self.draw())) * math.cos(2.0 * math.pi * self.draw())
            total += z * z
        return total

    def rayleigh(self, scale: float = 1) -> float:
        require_gt("scale", scale, 0)
        return scale * math.sqrt(-2 * safe_log(self.draw()))

    def log_normal(self, mean: float = 0, stddev: float = 1) -> float:
        require_gt("stddev", stddev, 0)
        normal = mean + stddev * math.sqrt(-2.0 * safe_log(self.draw())) * math.cos(2.0 * math.pi * self.draw())
        return _exp(normal)

    def cauchy(self, median: float = 0, scale: float = 1) -> float:
        require_gt("scale", scale, 0)
        u = self.draw()
        return median + scale * math.tan(math.pi * (u - 0.5))

    def laplace(self, mean: float = 0, scale: float = 1) -> float:
        require_gt("scale", scale, 0)
        u = self.draw() - 0.5
        if u == 0:
            return mean
        return mean - scale * math.copysign(1.0, u) * safe_log(1 - 2 * abs(u))

    def logistic(self, mean: float = 0, scale: float = 1) -> float:
        require_gt("scale", scale, 0)
        u = self.draw()
        return mean + scale * safe_log(u / (1 - u))
