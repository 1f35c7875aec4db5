from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable


GRADE_BANDS_OVERLAP = "GRADE_BANDS_OVERLAP"

# Label used when a score falls outside every configured band.
UNMATCHED_GRADE = "E"


@dataclass(frozen=True)
class GradeBand:
    grade_label: str
    min_percentage: float
    max_percentage: float
    grade_points: float = 0
    remarks: str = ""


@dataclass(frozen=True)
class GradeBandError:
    code: str
    message: str
    lower_label: str
    upper_label: str


@dataclass(frozen=True)
class GradeBandGap:
    after_label: str
    before_label: str
    from_percentage: float
    to_percentage: float

    @property
    def message(self) -> str:
        return (
            f"Scores {self.from_percentage:g}-{self.to_percentage:g} are not covered "
            f"(between {self.after_label} and {self.before_label})"
        )


CBC_DEFAULT_BANDS: tuple[GradeBand, ...] = (
    GradeBand("EE", 80, 100, 4, "Exceeding Expectations"),
    GradeBand("ME", 60, 79, 3, "Meeting Expectations"),
    GradeBand("AE", 40, 59, 2, "Approaching Expectations"),
    GradeBand("BE", 0, 39, 1, "Below Expectations"),
)

# Fixed 8-4-4 style ladder used when no grading system is active.
LEGACY_GRADE_THRESHOLDS: tuple[tuple[float, str], ...] = (
    (90, "A"),
    (80, "A-"),
    (75, "B+"),
    (70, "B"),
    (65, "B-"),
    (60, "C+"),
    (55, "C"),
    (50, "C-"),
    (45, "D+"),
    (40, "D"),
    (35, "D-"),
)


def _ascending(bands: Iterable[Any]) -> list[Any]:
    return sorted(bands, key=lambda b: float(b.min_percentage))


def validate_grade_bands(bands: Iterable[Any]) -> GradeBandError | None:
    """Check that no two bands claim the same percentage.

    Input order does not matter. Gaps between bands are tolerated; use
    `find_grade_band_gaps` to report them.
    """

    ordered = _ascending(bands)
    for a, b in zip(ordered, ordered[1:]):
        if float(a.max_percentage) >= float(b.min_percentage):
            return GradeBandError(
                code=GRADE_BANDS_OVERLAP,
                message=f"Overlap detected between {a.grade_label} and {b.grade_label}",
                lower_label=a.grade_label,
                upper_label=b.grade_label,
            )
    return None


def find_grade_band_gaps(bands: Iterable[Any]) -> list[GradeBandGap]:
    # Bands are whole-percent ranges: 0-49 followed by 50-69 leaves no gap.
    ordered = _ascending(bands)
    gaps: list[GradeBandGap] = []
    for a, b in zip(ordered, ordered[1:]):
        if float(a.max_percentage) + 1 < float(b.min_percentage):
            gaps.append(
                GradeBandGap(
                    after_label=a.grade_label,
                    before_label=b.grade_label,
                    from_percentage=float(a.max_percentage) + 1,
                    to_percentage=float(b.min_percentage) - 1,
                )
            )
    return gaps


def legacy_grade(percentage: float) -> str:
    for threshold, label in LEGACY_GRADE_THRESHOLDS:
        if percentage >= threshold:
            return label
    return UNMATCHED_GRADE


def grade_for_percentage(percentage: float, bands: Iterable[Any]) -> str:
    """Bounds are inclusive whole percents; round averages first, 79.5 falls between ME and EE."""
    bands = sorted(bands, key=lambda b: float(b.min_percentage), reverse=True)
    if not bands:
        return legacy_grade(percentage)
    for band in bands:
        if float(band.min_percentage) <= percentage <= float(band.max_percentage):
            return band.grade_label
    return UNMATCHED_GRADE
