from dataclasses import dataclass


@dataclass(frozen=True)
class Level:
    name: str
    min_xp: int
    max_xp: int | None


@dataclass(frozen=True)
class LevelProgress:
    name: str
    min_xp: int
    max_xp: int | None
    next_level: str | None
    next_level_xp: int | None
    progress_percent: float


LEVELS: tuple[Level, ...] = (
    Level("Beginner", 0, 99),
    Level("Explorer", 100, 299),
    Level("Achiever", 300, 599),
    Level("Master", 600, 999),
    Level("Legend", 1000, None),
)


def level_for(xp_total: int) -> LevelProgress:
    index = 0
    for position, level in enumerate(LEVELS):
        if xp_total >= level.min_xp:
            index = position
    current = LEVELS[index]
    upcoming = LEVELS[index + 1] if index + 1 < len(LEVELS) else None

    if upcoming is None:
        progress = 100.0
    else:
        span = upcoming.min_xp - current.min_xp
        progress = round(min(max((xp_total - current.min_xp) / span, 0.0), 1.0) * 100, 1)

    return LevelProgress(
        name=current.name,
        min_xp=current.min_xp,
        max_xp=current.max_xp,
        next_level=upcoming.name if upcoming else None,
        next_level_xp=upcoming.min_xp if upcoming else None,
        progress_percent=progress,
    )
