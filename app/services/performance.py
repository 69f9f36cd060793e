"""
Rating aggregation.

Pure functions over already-fetched users and ratings:

- ``compute_rating_score``: one rating's weighted percentage at submission time
- ``combine_monthly_score``: one ratee's month, 50/50 between PM and TL tiers
- ``build_trend_table``: per user-month averages over a rolling window
- ``find_low_performers``: users whose overall average falls below a threshold

Every function skips records it cannot use (unknown users, malformed scores,
months outside the window) instead of raising, so a dashboard built on top of
them always renders.
"""
import csv
import io
import logging
import math
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from app.models.user import UserRole

logger = logging.getLogger(__name__)

TREND_MONTH_OPTIONS = (1, 3, 6, 12)
THRESHOLD_OPTIONS = (5.0, 6.0, 7.0, 8.0, 9.0)


def round_half_up(value: float, digits: int = 0) -> float:
    factor = 10 ** digits
    return math.floor(value * factor + 0.5) / factor


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return float(value)


def _get(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _key(obj: Any, name: str) -> Optional[str]:
    value = _get(obj, name)
    return value if isinstance(value, str) else None


def month_key(day: date) -> str:
    return f"{day.year:04d}-{day.month:02d}"


# ---------------------------------------------------------------------------
# Single rating
# ---------------------------------------------------------------------------

def compute_rating_score(scores: Mapping[str, Any], criteria: Iterable[Any]) -> int:
    """
    Weighted percentage for one rating.

    Each raw score (1..10) is scaled by ``weight / 10`` and the sum is
    normalised by the total weight, so weights act as relative proportions
    whether or not they add up to 100. An omitted criterion scores zero.
    """
    weighted_sum = 0.0
    total_weight = 0.0
    for criterion in criteria:
        weight = _number(_get(criterion, "weight"))
        if weight is None or weight <= 0:
            continue
        score = _number(scores.get(_get(criterion, "title"))) or 0.0
        weighted_sum += score * weight / 10
        total_weight += weight

    if total_weight <= 0:
        return 0
    return max(int(round_half_up(weighted_sum / total_weight * 100)), 0)


# ---------------------------------------------------------------------------
# Monthly aggregation across raters
# ---------------------------------------------------------------------------

def _mean(values: Sequence[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def combine_monthly_score(ratings: Iterable[Any], rater_roles: Mapping[str, str]) -> float:
    """
    Combine one ratee's ratings for a single month.

    Raters are classified by looking up their own role; ratings from unknown
    raters or from roles other than project manager / team lead are ignored.
    """
    pm_scores: List[float] = []
    tl_scores: List[float] = []
    for rating in ratings:
        score = _number(_get(rating, "average_score"))
        if score is None:
            continue
        role = rater_roles.get(_key(rating, "given_by"))
        if role == UserRole.PROJECT_MANAGER.value:
            pm_scores.append(score)
        elif role == UserRole.TEAM_LEAD.value:
            tl_scores.append(score)

    if pm_scores and tl_scores:
        return 0.5 * _mean(pm_scores) + 0.5 * _mean(tl_scores)
    if pm_scores:
        return _mean(pm_scores)
    if tl_scores:
        return _mean(tl_scores)
    return 0.0


# ---------------------------------------------------------------------------
# Trend table
# ---------------------------------------------------------------------------

def recent_months(count: int, today: Optional[date] = None) -> List[str]:
    """The last ``count`` month keys, most recent first."""
    today = today or date.today()
    year, month = today.year, today.month
    months = []
    for _ in range(max(count, 0)):
        months.append(f"{year:04d}-{month:02d}")
        month -= 1
        if month == 0:
            month = 12
            year -= 1
    return months


@dataclass(frozen=True)
class TrendRecord:
    month: str
    user_id: str
    name: str
    score: float


@dataclass
class TrendTable:
    months: List[str]
    records: List[TrendRecord] = field(default_factory=list)
    overall_averages: Dict[str, float] = field(default_factory=dict)

    def for_user(self, user_id: str) -> List[TrendRecord]:
        return [r for r in self.records if r.user_id == user_id]


def build_trend_table(users: Iterable[Any], ratings: Iterable[Any], months: Sequence[str]) -> TrendTable:
    tracked = {}
    for user in users:
        uid = _key(user, "uid")
        if not uid or _get(user, "role") == UserRole.ADMIN.value:
            continue
        tracked[uid] = user

    window = set(months)
    buckets: Dict[str, Dict[str, List[float]]] = {uid: {} for uid in tracked}
    skipped = 0
    for rating in ratings:
        uid = _key(rating, "given_to")
        month = _key(rating, "month")
        score = _number(_get(rating, "average_score"))
        if uid not in buckets or month not in window or score is None:
            skipped += 1
            continue
        buckets[uid].setdefault(month, []).append(score)
    if skipped:
        logger.debug("Trend table skipped %d unusable ratings", skipped)

    table = TrendTable(months=list(months))
    for uid, user in tracked.items():
        monthly = []
        for month in months:
            scores = buckets[uid].get(month)
            if not scores:
                continue
            score = round_half_up(_mean(scores), 1)
            monthly.append(score)
            table.records.append(
                TrendRecord(month=month, user_id=uid, name=_get(user, "name") or "", score=score)
            )
        if monthly:
            table.overall_averages[uid] = _mean(monthly)
    return table


# ---------------------------------------------------------------------------
# Low performers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LowPerformer:
    uid: str
    name: str
    role: str
    average_score: float


def is_low_performer(overall_average: float, threshold: float) -> bool:
    # Averages are on a 0-100 scale, the threshold on 0-10.
    scaled = overall_average / 10
    return 0 < scaled < threshold


def find_low_performers(users: Iterable[Any], trend: TrendTable, threshold: float) -> List[LowPerformer]:
    performers = []
    for user in users:
        uid = _key(user, "uid")
        average = trend.overall_averages.get(uid)
        if average is None or not is_low_performer(average, threshold):
            continue
        performers.append(
            LowPerformer(
                uid=uid,
                name=_get(user, "name") or "",
                role=_get(user, "role") or "",
                average_score=average,
            )
        )
    return performers


def low_performers_csv(performers: Iterable[LowPerformer], months: int) -> str:
    output = io.StringIO()
    writer = csv.writer(output, lineterminator="\n")
    writer.writerow(["Name", "Months", "Average Score"])
    for performer in performers:
        writer.writerow([performer.name, months, f"{performer.average_score:.1f}"])
    return output.getvalue()

