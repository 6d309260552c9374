"""Week classification by weeks-from-end (wFE, 0 = race week)."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

TAPER_WFE = 2
TEMPO_WFE_FIXED = {4, 6, 8, 11}


class WeekClass(str, Enum):
    RACE = "race"
    TAPER = "taper"
    CUTBACK = "cutback"
    TEMPO = "tempo"
    STANDARD = "standard"


def is_cutback_wfe(wfe: int) -> bool:
    return wfe == 2 or wfe == 5 or (wfe >= 9 and (wfe - 9) % 4 == 0)


def is_tempo_wfe(wfe: int) -> bool:
    if wfe <= 3 or is_cutback_wfe(wfe):
        return False
    if wfe in TEMPO_WFE_FIXED:
        return True
    return wfe >= 12 and wfe % 3 == 2


@dataclass(frozen=True)
class WeekInfo:
    week: int
    wfe: int
    is_race: bool
    is_cutback: bool
    is_tempo: bool

    @property
    def is_taper(self) -> bool:
        return not self.is_race and self.wfe <= TAPER_WFE

    @property
    def classification(self) -> WeekClass:
        if self.is_race:
            return WeekClass.RACE
        if self.is_taper:
            return WeekClass.TAPER
        if self.is_cutback:
            return WeekClass.CUTBACK
        if self.is_tempo:
            return WeekClass.TEMPO
        return WeekClass.STANDARD


def week_info(week: int, total_weeks: int) -> WeekInfo:
    """Classify plan week ``week`` (1-indexed); race week overrides cutback/tempo."""
    wfe = total_weeks - week
    is_race = week == total_weeks
    is_cutback = not is_race and is_cutback_wfe(wfe)
    is_tempo = not is_race and not is_cutback and is_tempo_wfe(wfe)
    return WeekInfo(week=week, wfe=wfe, is_race=is_race, is_cutback=is_cutback, is_tempo=is_tempo)
