import re
from datetime import datetime, timedelta

from marketnews.errors import MalformedTimestamp

# Fixed offset from the source's wall clock to ours. No DST handling.
SOURCE_OFFSET_HOURS = 2

# formato da fonte: "%b %d %Y %H:%M:%S", ex. 'Oct 01 2024 23:08:47'
_WEEKDAY_PREFIX = 4                   # 'Tue '
_DATETIME_WIDTH = 20

# strptime's %b follows the process locale; the source is always English.
_MONTHS = {
    "Jan": 1, "Feb": 2, "Mar": 3, "Apr": 4, "May": 5, "Jun": 6,
    "Jul": 7, "Aug": 8, "Sep": 9, "Oct": 10, "Nov": 11, "Dec": 12,
}
_SOURCE_RE = re.compile(r"^([A-Z][a-z]{2}) (\d{2}) (\d{4}) (\d{2}):(\d{2}):(\d{2})$")


def _parse_source_datetime(text: str) -> datetime:
    m = _SOURCE_RE.match(text)
    if not m or m.group(1) not in _MONTHS:
        raise MalformedTimestamp(f"unrecognized release time: {text!r}")
    mon, day, year, hh, mm, ss = m.groups()
    try:
        return datetime(int(year), _MONTHS[mon], int(day), int(hh), int(mm), int(ss))
    except ValueError as e:
        raise MalformedTimestamp(f"invalid release time {text!r}: {e}") from e


def normalize_release_time(raw: str, offset_hours: int = SOURCE_OFFSET_HOURS) -> str:
    """
    Converte o horário da fonte para 'YYYY-MM-DD HH:MM:SS'.

    A fonte publica algo como 'Tue Oct 01 2024 23:08:47 GMT+0000': os 20
    caracteres após o prefixo do dia da semana são lidos como horário local
    (sem fuso) e deslocados em ``offset_hours``. Campos com zero à esquerda e
    relógio de 24h: ordem lexical == ordem cronológica.
    """
    if not isinstance(raw, str):
        raise MalformedTimestamp(f"release time must be text, got {type(raw).__name__}")
    text = raw.strip()
    if len(text) < _WEEKDAY_PREFIX + _DATETIME_WIDTH:
        raise MalformedTimestamp(f"release time too short: {raw!r}")
    dt = _parse_source_datetime(text[_WEEKDAY_PREFIX:_WEEKDAY_PREFIX + _DATETIME_WIDTH])
    try:
        dt = dt + timedelta(hours=offset_hours)
    except OverflowError as e:
        raise MalformedTimestamp(f"release time out of range: {raw!r}") from e
    # strftime nao garante %Y com 4 digitos em todas as plataformas
    return (
        f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d} "
        f"{dt.hour:02d}:{dt.minute:02d}:{dt.second:02d}"
    )

