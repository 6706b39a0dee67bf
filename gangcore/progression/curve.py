"""
Curve Engine - Maps total experience to gang level and back.

required_xp(level) is the XP needed to advance from `level` to
`level + 1`:

    base + linear * (level - 1) + quadratic * (level - 1) ** 2

multiplied by the hard cap multiplier from hard_cap_level on, or by the
soft cap multiplier from soft_cap_level on. The caps slow
endgame progression on long-lived servers. There is no level ceiling.

Design principles:
- Pure: no side effects, same input -> same output
- Integer XP: per-level costs are the exact decimal cost rounded up
- Constant time per threshold: cumulative XP is summed in closed form
  per cap segment, so astronomically large totals resolve immediately
"""

from __future__ import annotations
from dataclasses import dataclass
from fractions import Fraction
import math

from ..config import CurveConfig
from ..errors import InvalidArgument


def _check_xp(total_xp) -> int | float:
    """Reject booleans, non-numbers, non-finite and negative XP."""
    if isinstance(total_xp, bool) or not isinstance(total_xp, (int, float)):
        raise InvalidArgument(f"total_xp must be a number, got {total_xp!r}")
    if isinstance(total_xp, float) and not math.isfinite(total_xp):
        raise InvalidArgument(f"total_xp must be finite, got {total_xp!r}")
    if total_xp < 0:
        raise InvalidArgument(f"total_xp must be >= 0, got {total_xp!r}")
    return total_xp


def _check_level(level) -> int:
    if isinstance(level, bool) or not isinstance(level, int):
        raise InvalidArgument(f"level must be an integer, got {level!r}")
    if level < 1:
        raise InvalidArgument(f"level must be >= 1, got {level}")
    return level


@dataclass(frozen=True)
class LevelProgress:
    """Where a total XP value sits within its level."""
    level: int
    total_xp: int | float
    level_start_xp: int  # Cumulative XP at which `level` was reached
    next_level_xp: int  # Cumulative XP at which `level + 1` is reached

    @property
    def xp_into_level(self) -> int | float:
        return self.total_xp - self.level_start_xp

    @property
    def xp_to_next_level(self) -> int | float:
        return self.next_level_xp - self.total_xp

    @property
    def fraction(self) -> float:
        span = self.next_level_xp - self.level_start_xp
        return self.xp_into_level / span if span else 0.0


def _exact(value: float) -> Fraction:
    """The decimal value as written in the config, without float noise."""
    return Fraction(str(value))


def _sum_powers(n: int) -> tuple[int, int, int]:
    """Sums of s**0, s**1 and s**2 over s in [0, n)."""
    return n, n * (n - 1) // 2, (n - 1) * n * (2 * n - 1) // 6


class _Segment:
    """
    Levels sharing one cap multiplier.

    With step s = level - 1 the exact cost is N(s) / D for the integer
    polynomial N(s) = n0 + n1*s + n2*s**2. Rounding up adds the residue
    (-N(s)) mod D, which repeats every D steps, so any run of levels
    sums in constant time from one period of residues.
    """

    def __init__(self, config: CurveConfig, first_level: int, end_level: int | None, multiplier: float):
        self.first_level = first_level
        self.end_level = end_level

        m = _exact(multiplier)
        coeffs = [m * _exact(config.base_xp), m * _exact(config.linear_xp), m * _exact(config.quadratic_xp)]
        self.denominator = math.lcm(*(c.denominator for c in coeffs))
        self.n0, self.n1, self.n2 = (int(c * self.denominator) for c in coeffs)

        d = self.denominator
        self._residues = [0]
        for s in range(d):
            self._residues.append(self._residues[-1] + (-self._numerator(s)) % d)

    def _numerator(self, step: int) -> int:
        return self.n0 + self.n1 * step + self.n2 * step * step

    def cost(self, level: int) -> int:
        return -(-self._numerator(level - 1) // self.denominator)

    def _residue_sum(self, steps: int) -> int:
        """Rounding residues over steps [0, steps)."""
        periods, rest = divmod(steps, self.denominator)
        return periods * self._residues[-1] + self._residues[rest]

    def _numerator_sum(self, steps: int) -> int:
        """N(s) over steps [0, steps)."""
        count, s1, s2 = _sum_powers(steps)
        return self.n0 * count + self.n1 * s1 + self.n2 * s2

    def cost_between(self, start_level: int, stop_level: int) -> int:
        """Total cost of levels [start_level, stop_level)."""
        a, b = start_level - 1, stop_level - 1
        numerator = self._numerator_sum(b) - self._numerator_sum(a)
        residues = self._residue_sum(b) - self._residue_sum(a)
        return (numerator + residues) // self.denominator


class CurveEngine:
    """
    XP curve for one CurveConfig.

    Usage:
        curve = CurveEngine(CurveConfig())
        curve.required_xp(10)      # XP to go from 10 to 11
        curve.xp_to_reach(10)      # Cumulative XP at which level 10 starts
        curve.level_for(125_000)   # Level for a total XP value

    Immutable after construction, so safe to share between threads.
    """

    def __init__(self, config: CurveConfig | None = None):
        self.config = config or CurveConfig()
        cfg = self.config
        self._segments = (
            _Segment(cfg, 1, cfg.soft_cap_level, 1),
            _Segment(cfg, cfg.soft_cap_level, cfg.hard_cap_level, cfg.soft_cap_multiplier),
            _Segment(cfg, cfg.hard_cap_level, None, cfg.hard_cap_multiplier),
        )

    def required_xp(self, level: int) -> int:
        """XP needed to advance from `level` to `level + 1`."""
        _check_level(level)
        return self._segment_for(level).cost(level)

    def xp_to_reach(self, level: int) -> int:
        """Cumulative XP at which `level` is reached. Level 1 is free."""
        _check_level(level)
        total = 0
        for segment in self._segments:
            if level <= segment.first_level:
                break
            stop = level if segment.end_level is None else min(level, segment.end_level)
            total += segment.cost_between(segment.first_level, stop)
        return total

    def level_for(self, total_xp: int | float) -> int:
        """Largest level whose cumulative threshold does not exceed total_xp."""
        total_xp = _check_xp(total_xp)

        # xp_to_reach(low) <= total_xp < xp_to_reach(high) throughout
        low, high = 1, 2
        while self.xp_to_reach(high) <= total_xp:
            low, high = high, high * 2
        while high - low > 1:
            mid = (low + high) // 2
            if self.xp_to_reach(mid) <= total_xp:
                low = mid
            else:
                high = mid
        return low

    def progress(self, total_xp: int | float) -> LevelProgress:
        """Level plus how far total_xp is into it."""
        level = self.level_for(total_xp)
        return LevelProgress(
            level=level,
            total_xp=total_xp,
            level_start_xp=self.xp_to_reach(level),
            next_level_xp=self.xp_to_reach(level + 1),
        )

    def table(self, max_level: int) -> list[tuple[int, int, int]]:
        """(level, required_xp, xp_to_reach) rows for levels 1..max_level."""
        _check_level(max_level)
        return [
            (level, self.required_xp(level), self.xp_to_reach(level))
            for level in range(1, max_level + 1)
        ]

    def _segment_for(self, level: int) -> _Segment:
        for segment in reversed(self._segments):
            if level >= segment.first_level:
                return segment
        return self._segments[0]


def required_xp(level: int, config: CurveConfig | None = None) -> int:
    """Convenience wrapper around CurveEngine.required_xp."""
    return CurveEngine(config).required_xp(level)


def level_for(total_xp: int | float, config: CurveConfig | None = None) -> int:
    """Convenience wrapper around CurveEngine.level_for."""
    return CurveEngine(config).level_for(total_xp)
