# meydan/utils/datetime_utils.py
"""
프로젝트 전체에서 일관된 시간 처리를 위한 유틸리티 모듈

이 모듈의 목적:
1. 모든 타임스탬프를 UTC timezone-aware datetime으로 통일
2. Firestore 타임스탬프 읽기/쓰기 호환성 보장
3. 피드 화면의 상대 시간 표시("3h", "2d")와 수정 여부 판단 제공
"""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)


class DateTimeUtils:
    """시간 처리를 위한 중앙화된 유틸리티 클래스"""

    @staticmethod
    def now() -> datetime:
        """현재 시간을 UTC timezone-aware datetime으로 반환"""
        return datetime.now(timezone.utc)

    @staticmethod
    def parse_iso_datetime(iso_string: str) -> datetime:
        """
        ISO 포맷 문자열을 UTC datetime 객체로 파싱

        지원 포맷:
        - 2024-01-15T10:30:00Z
        - 2024-01-15T10:30:00+09:00
        - 2024-01-15T10:30:00.123456Z
        - 2024-01-15T10:30:00
        """
        try:
            if not iso_string:
                raise ValueError("빈 문자열은 파싱할 수 없습니다")

            if iso_string.endswith('Z'):
                iso_string = iso_string[:-1] + '+00:00'

            dt = dateutil_parser.isoparse(iso_string)
            if dt.tzinfo is None:
                dt = dt.replace(tzinfo=timezone.utc)
            return dt.astimezone(timezone.utc)

        except Exception as e:
            logger.error(f"ISO datetime 파싱 실패: {iso_string} - {e}")
            raise ValueError(f"잘못된 ISO 날짜 형식입니다: {iso_string}")

    @staticmethod
    def from_firestore(value: Any) -> Optional[datetime]:
        """
        Firestore에서 읽은 타임스탬프 값을 UTC datetime으로 변환

        변환 규칙:
        - None -> None
        - ISO 문자열 -> 파싱
        - timezone-naive datetime -> UTC로 간주
        - Firestore DatetimeWithNanoseconds -> UTC datetime
        """
        if value is None:
            return None
        if isinstance(value, str):
            return DateTimeUtils.parse_iso_datetime(value)
        if isinstance(value, datetime):
            if value.tzinfo is None:
                return value.replace(tzinfo=timezone.utc)
            return value.astimezone(timezone.utc)
        if hasattr(value, 'timestamp'):
            return datetime.fromtimestamp(value.timestamp(), tz=timezone.utc)
        raise ValueError(f"타임스탬프로 변환할 수 없는 값입니다: {value!r}")

    @staticmethod
    def exceeds(start: datetime, end: Optional[datetime], window: timedelta) -> bool:
        """end - start 가 window 보다 '엄격하게' 큰지 확인합니다. end가 없으면 False."""
        if end is None:
            return False
        return (end - start) > window

    @staticmethod
    def time_ago(dt: datetime, now: Optional[datetime] = None) -> str:
        """
        피드 카드에 표시할 짧은 상대 시간 문자열을 반환합니다.
        예: "42s", "5m", "3h", "2d", "4mo", "1y"
        """
        now = now or DateTimeUtils.now()
        seconds = max(0, int((now - dt).total_seconds()))

        units = (
            (31536000, "y"),
            (2592000, "mo"),
            (86400, "d"),
            (3600, "h"),
            (60, "m"),
        )
        for unit_seconds, suffix in units:
            interval = seconds / unit_seconds
            if interval > 1:
                return f"{int(interval)}{suffix}"
        return f"{seconds}s"


# 편의를 위한 글로벌 함수들
def now() -> datetime:
    """현재 UTC 시간 반환"""
    return DateTimeUtils.now()

def from_firestore(value: Any) -> Optional[datetime]:
    """Firestore 읽기용 변환"""
    return DateTimeUtils.from_firestore(value)
