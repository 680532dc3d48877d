"""日時の正規化ユーティリティ"""

from datetime import datetime, timezone


def normalize_to_utc(dt: datetime) -> datetime:
    """UTC のタイムゾーン付き datetime に揃える

    SQLite はタイムゾーンを保存しないため、naive な値は UTC とみなす。

    Args:
        dt: 対象の datetime

    Returns:
        UTC の datetime
    """
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def normalize_optional(dt: datetime | None) -> datetime | None:
    """None を許容する normalize_to_utc"""
    return normalize_to_utc(dt) if dt is not None else None
