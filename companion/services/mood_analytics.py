from __future__ import annotations

import calendar
import html
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from companion.db.models import MoodCheckIn, utcnow
from companion.db.store import Store
from companion.utils.constants import (
    DEFAULT_INTENSITY,
    MOOD_EMOJIS,
    MOOD_LABELS,
    MOOD_TREND_LENGTH,
)


class Timeframe(str, Enum):
    WEEK = "week"
    MONTH = "month"
    ALL = "all"

    @property
    def label(self) -> str:
        return _LABELS[self]


_LABELS = {
    Timeframe.WEEK: "Last Week",
    Timeframe.MONTH: "Last Month",
    Timeframe.ALL: "All Time",
}


@dataclass(frozen=True)
class MoodStat:
    mood: str
    count: int
    percentage: int
    average_intensity: float


@dataclass(frozen=True)
class MoodReport:
    timeframe: Timeframe
    total: int
    stats: list[MoodStat]
    average_intensity: float
    activities: list[str]
    dominant_mood: str
    dominant_count: int
    insights: list[str]


@dataclass(frozen=True)
class NoData:
    timeframe: Timeframe


def _round_half_up(numerator: int, denominator: int, places: int) -> Decimal:
    exp = Decimal(1).scaleb(-places)
    return (Decimal(numerator) / Decimal(denominator)).quantize(exp, rounding=ROUND_HALF_UP)


def _intensity(checkin: MoodCheckIn) -> int:
    return checkin.intensity if checkin.intensity is not None else DEFAULT_INTENSITY


def _plural(n: int, word: str, plural: str | None = None) -> str:
    return f"{n} {word}" if n == 1 else f"{n} {plural or word + 's'}"


def _months_back(dt: datetime, months: int) -> datetime:
    month_index = dt.month - 1 - months
    year = dt.year + month_index // 12
    month = month_index % 12 + 1
    day = min(dt.day, calendar.monthrange(year, month)[1])
    return dt.replace(year=year, month=month, day=day)


def window_start(timeframe: Timeframe, now: datetime) -> datetime | None:
    timeframe = Timeframe(timeframe)
    if timeframe is Timeframe.WEEK:
        return now - timedelta(days=7)
    if timeframe is Timeframe.MONTH:
        return _months_back(now, 1)
    return None


def aggregate(checkins: list[MoodCheckIn], timeframe: Timeframe) -> MoodReport | NoData:
    """Compute the mood report for check-ins ordered oldest-to-newest."""
    timeframe = Timeframe(timeframe)
    if not checkins:
        return NoData(timeframe)

    counts: dict[str, int] = {}
    intensity_sums: dict[str, int] = {}
    activities: list[str] = []
    total_intensity = 0
    for c in checkins:
        value = _intensity(c)
        counts[c.mood] = counts.get(c.mood, 0) + 1
        intensity_sums[c.mood] = intensity_sums.get(c.mood, 0) + value
        total_intensity += value
        if c.activity and c.activity not in activities:
            activities.append(c.activity)

    total = len(checkins)
    # sorted() is stable: equal counts keep first-encountered order
    stats = [
        MoodStat(
            mood=mood,
            count=count,
            percentage=int(_round_half_up(count * 100, total, 0)),
            average_intensity=float(_round_half_up(intensity_sums[mood], count, 1)),
        )
        for mood, count in sorted(counts.items(), key=lambda item: -item[1])
    ]
    dominant = stats[0]
    average = float(_round_half_up(total_intensity, total, 1))

    insights = [
        f"Your most frequent mood was <b>{html.escape(dominant.mood)}</b> "
        f"({_plural(dominant.count, 'time')})"
    ]
    if activities:
        insights.append(
            f"You logged {_plural(len(activities), 'different activity', 'different activities')}"
        )
    insights.append(f"Your average mood intensity was {average:.1f}/5")

    return MoodReport(
        timeframe=timeframe,
        total=total,
        stats=stats,
        average_intensity=average,
        activities=activities,
        dominant_mood=dominant.mood,
        dominant_count=dominant.count,
        insights=insights,
    )


async def analyze(
    store: Store,
    user_id: int | str,
    timeframe: Timeframe | str = Timeframe.WEEK,
    *,
    now: datetime | None = None,
) -> MoodReport | NoData:
    timeframe = Timeframe(timeframe)
    now = now or utcnow()
    since = window_start(timeframe, now)
    until = now if since is not None else None
    checkins = await store.query_checkins(user_id, since=since, until=until)
    return aggregate(checkins, timeframe)


async def record_checkin(
    store: Store,
    user_id: int | str,
    mood: str,
    intensity: int | None = None,
    activity: str | None = None,
    note: str | None = None,
) -> MoodCheckIn:
    mood = mood.strip().lower()
    if mood not in MOOD_LABELS:
        raise ValueError(f"Unknown mood: {mood!r}")
    if intensity is not None and not 1 <= intensity <= 5:
        raise ValueError("Intensity must be between 1 and 5")
    activity = activity.strip() if activity and activity.strip() else None
    note = note.strip() if note and note.strip() else None
    return await store.append_checkin(user_id, mood, intensity, activity, note)


def mood_trend(checkins: list[MoodCheckIn], length: int = MOOD_TREND_LENGTH) -> str:
    return " → ".join(c.mood for c in checkins[-length:])


def format_checkin(checkin: MoodCheckIn, recent: list[MoodCheckIn]) -> str:
    emoji = MOOD_EMOJIS.get(checkin.mood, "❓")
    lines = [
        "Thank you for checking in.\n",
        f"{emoji} Current mood: <b>{checkin.mood}</b> ({_intensity(checkin)}/5)",
    ]
    if checkin.activity:
        lines.append(f"Activity: <i>{html.escape(checkin.activity)}</i>")
    if checkin.note:
        lines.append(f"Note: <i>{html.escape(checkin.note)}</i>")
    if len(recent) > 1:
        lines.append(f"\nRecent moods: {mood_trend(recent)}")
    return "\n".join(lines)


def format_report(result: MoodReport | NoData) -> str:
    if isinstance(result, NoData):
        return (
            f"📓 <b>Mood Insights ({result.timeframe.label})</b>\n\n"
            "No check-ins found for the selected timeframe.\n"
            "Use /checkin to start tracking your moods!"
        )

    lines = [
        f"📓 <b>Mood Insights ({result.timeframe.label})</b>",
        f"Based on {_plural(result.total, 'check-in')}:\n",
    ]
    lines.extend(result.insights)
    lines.append("\n<b>Mood Distribution</b>")
    for s in result.stats:
        emoji = MOOD_EMOJIS.get(s.mood, "❓")
        lines.append(
            f"{emoji} <b>{html.escape(s.mood)}</b>: {s.percentage}% "
            f"(avg intensity: {s.average_intensity:.1f})"
        )
    return "\n".join(lines)
