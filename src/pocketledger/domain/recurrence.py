"""Recurrence scheduling helpers."""

from datetime import datetime

from dateutil.relativedelta import relativedelta

from pocketledger.domain.entities import Frequency

_STEPS = {
    Frequency.DAILY: relativedelta(days=1),
    Frequency.WEEKLY: relativedelta(weeks=1),
    Frequency.MONTHLY: relativedelta(months=1),
    Frequency.YEARLY: relativedelta(years=1),
}


def next_occurrence(when: datetime, frequency: Frequency) -> datetime:
    """Add one calendar period to ``when``.

    Month and year steps clamp to the end of shorter months, so January 31st
    is followed by the last day of February.
    """
    return when + _STEPS[Frequency(frequency)]


# Prefix per frequency, weekday names (Monday first) and month names per locale
_LABELS = {
    "en": {
        Frequency.DAILY: "Every day",
        Frequency.WEEKLY: "Every",
        Frequency.MONTHLY: "Every",
        Frequency.YEARLY: "Every",
        "weekdays": ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"),
        "months": (
            "January", "February", "March", "April", "May", "June",
            "July", "August", "September", "October", "November", "December",
        ),
    },
    "es": {
        Frequency.DAILY: "Todos los días",
        Frequency.WEEKLY: "Todos los",
        Frequency.MONTHLY: "Todos los días",
        Frequency.YEARLY: "Cada",
        "weekdays": ("lunes", "martes", "miércoles", "jueves", "viernes", "sábado", "domingo"),
        "months": (
            "enero", "febrero", "marzo", "abril", "mayo", "junio",
            "julio", "agosto", "septiembre", "octubre", "noviembre", "diciembre",
        ),
    },
    "fr": {
        Frequency.DAILY: "Tous les jours",
        Frequency.WEEKLY: "Tous les",
        Frequency.MONTHLY: "Le",
        Frequency.YEARLY: "Chaque",
        "weekdays": ("lundi", "mardi", "mercredi", "jeudi", "vendredi", "samedi", "dimanche"),
        "months": (
            "janvier", "février", "mars", "avril", "mai", "juin",
            "juillet", "août", "septembre", "octobre", "novembre", "décembre",
        ),
    },
    "pt": {
        Frequency.DAILY: "Todos os dias",
        Frequency.WEEKLY: "Toda",
        Frequency.MONTHLY: "Todo dia",
        Frequency.YEARLY: "Todo",
        "weekdays": ("segunda-feira", "terça-feira", "quarta-feira", "quinta-feira", "sexta-feira", "sábado", "domingo"),
        "months": (
            "janeiro", "fevereiro", "março", "abril", "maio", "junho",
            "julho", "agosto", "setembro", "outubro", "novembro", "dezembro",
        ),
    },
    "de": {
        Frequency.DAILY: "Täglich",
        Frequency.WEEKLY: "Jeden",
        Frequency.MONTHLY: "Am",
        Frequency.YEARLY: "Jedes Jahr am",
        "weekdays": ("Montag", "Dienstag", "Mittwoch", "Donnerstag", "Freitag", "Samstag", "Sonntag"),
        "months": (
            "Januar", "Februar", "März", "April", "Mai", "Juni",
            "Juli", "August", "September", "Oktober", "November", "Dezember",
        ),
    },
}


SUPPORTED_LOCALES: tuple[str, ...] = tuple(_LABELS)


def _ordinal(day: int) -> str:
    if 11 <= day % 100 <= 13:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(day % 10, "th")
    return f"{day}{suffix}"


def _time_of_day(when: datetime, locale: str) -> str:
    if locale == "en":
        hour = when.hour % 12 or 12
        return f"{hour}:{when.minute:02d} {'AM' if when.hour < 12 else 'PM'}"
    return f"{when.hour:02d}:{when.minute:02d}"


def describe_frequency(frequency: Frequency, when: datetime, locale: str = "en") -> str:
    """Human readable label for a recurrence anchored at ``when``.

    Daily rules show the time of day, weekly rules the weekday, monthly rules
    the day of the month and yearly rules the month and day. Unknown locales
    fall back to English.

    Examples:
        >>> describe_frequency(Frequency.MONTHLY, datetime(2024, 3, 15))
        'Every 15th'
        >>> describe_frequency(Frequency.YEARLY, datetime(2024, 3, 3))
        'Every March 3rd'
    """
    frequency = Frequency(frequency)
    language = locale.split("-")[0].lower()
    if language not in _LABELS:
        language = "en"
    labels = _LABELS[language]
    prefix = labels[frequency]

    if frequency == Frequency.DAILY:
        return f"{prefix} ({_time_of_day(when, language)})"
    if frequency == Frequency.WEEKLY:
        return f"{prefix} {labels['weekdays'][when.weekday()]}"

    if language == "en":
        day = _ordinal(when.day)
        month_day = f"{labels['months'][when.month - 1]} {day}"
    elif language == "de":
        day = f"{when.day}."
        month_day = f"{when.day}. {labels['months'][when.month - 1]}"
    else:
        day = str(when.day)
        joiner = " de " if language in ("es", "pt") else " "
        month_day = f"{when.day}{joiner}{labels['months'][when.month - 1]}"

    if frequency == Frequency.MONTHLY:
        return f"{prefix} {day}"
    return f"{prefix} {month_day}"
