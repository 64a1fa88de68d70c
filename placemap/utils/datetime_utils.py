# placemap/utils/datetime_utils.py
"""
서버와 클라이언트 동기화 계층이 함께 쓰는 시간 처리 유틸리티 모듈

- 모든 시각은 UTC timezone-aware datetime 으로 통일합니다.
- Firestore 저장/조회 시 변환 규칙을 한 곳에서 관리합니다.
- 원격 API 가 내려주는 다양한 날짜 표현(ISO 문자열, epoch 밀리초)을 흡수합니다.
"""

import logging
from datetime import datetime, date, timezone, time
from typing import Any, Optional, Union
from dateutil import parser as dateutil_parser

logger = logging.getLogger(__name__)

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class DateTimeUtils:
    """시간/날짜 처리를 위한 중앙화된 유틸리티 클래스"""

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
        - 2024-01-15T10:30:00.123Z
        - 2024-01-15T10:30:00
        """
        if not iso_string:
            raise ValueError("빈 문자열은 파싱할 수 없습니다")
        try:
            if iso_string.endswith('Z'):
                iso_string = iso_string[:-1] + '+00:00'
            dt = dateutil_parser.isoparse(iso_string)
        except (ValueError, OverflowError) as e:
            logger.error(f"ISO datetime 파싱 실패: {iso_string} - {e}")
            raise ValueError(f"잘못된 ISO 날짜 형식입니다: {iso_string}")
        return DateTimeUtils.ensure_utc(dt)

    @staticmethod
    def ensure_utc(dt: datetime) -> datetime:
        """timezone-naive 는 UTC 로 간주하고, aware 는 UTC 로 변환합니다."""
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    @staticmethod
    def to_iso_string(dt: datetime) -> str:
        """datetime 객체를 'Z' 접미사 ISO 문자열로 변환"""
        return DateTimeUtils.ensure_utc(dt).isoformat().replace('+00:00', 'Z')

    @staticmethod
    def from_timestamp_ms(timestamp_ms: Union[int, float]) -> datetime:
        """Unix timestamp (밀리초)를 UTC datetime 객체로 변환"""
        if isinstance(timestamp_ms, bool) or not isinstance(timestamp_ms, (int, float)):
            raise ValueError("timestamp_ms는 숫자여야 합니다")
        return datetime.fromtimestamp(timestamp_ms / 1000.0, tz=timezone.utc)

    @staticmethod
    def coerce(value: Any, default: Optional[datetime] = None) -> Optional[datetime]:
        """
        원격 응답의 날짜 필드를 관대하게 datetime 으로 변환합니다.

        ISO 문자열, epoch 밀리초, datetime/date 객체를 지원합니다.
        변환할 수 없으면 default 를 반환합니다 (예외를 던지지 않음).
        """
        if value is None:
            return default
        if isinstance(value, datetime):
            return DateTimeUtils.ensure_utc(value)
        if isinstance(value, date):
            return datetime.combine(value, time.min).replace(tzinfo=timezone.utc)
        try:
            if isinstance(value, str):
                return DateTimeUtils.parse_iso_datetime(value)
            return DateTimeUtils.from_timestamp_ms(value)
        except (ValueError, OverflowError, OSError):
            # 범위를 벗어난 epoch 값은 플랫폼에 따라 OverflowError 또는 OSError
            logger.debug(f"날짜 변환 실패, 기본값 사용: {value!r}")
            return default

    @staticmethod
    def for_firestore(obj: Any) -> Any:
        """
        Firestore 저장을 위해 객체의 날짜/시간 필드를 변환

        - date -> datetime (00:00:00 UTC)
        - timezone-naive datetime -> UTC aware datetime
        - dict/list 내부 재귀적 변환
        """
        if isinstance(obj, datetime):
            return DateTimeUtils.ensure_utc(obj)
        if isinstance(obj, date):
            return datetime.combine(obj, time.min).replace(tzinfo=timezone.utc)
        if isinstance(obj, dict):
            return {k: DateTimeUtils.for_firestore(v) for k, v in obj.items()}
        if isinstance(obj, (list, tuple)):
            return [DateTimeUtils.for_firestore(item) for item in obj]
        return obj

    @staticmethod
    def from_firestore(obj: Any) -> Any:
        """
        Firestore 에서 읽은 데이터의 timestamp 필드를 UTC datetime 으로 변환

        변환 실패 시 원본 객체를 그대로 반환합니다 (로그만 남김).
        """
        try:
            if isinstance(obj, datetime):
                return DateTimeUtils.ensure_utc(obj)
            if hasattr(obj, 'timestamp'):
                # DatetimeWithNanoseconds 이외의 Firestore Timestamp 객체
                return datetime.fromtimestamp(obj.timestamp(), tz=timezone.utc)
            if isinstance(obj, dict):
                return {k: DateTimeUtils.from_firestore(v) for k, v in obj.items()}
            if isinstance(obj, list):
                return [DateTimeUtils.from_firestore(item) for item in obj]
            return obj
        except (TypeError, ValueError, OverflowError) as e:
            logger.error(f"Firestore 읽기 변환 실패: {obj!r} ({type(obj)}) - {e}")
            return obj


# 편의를 위한 글로벌 함수들
def now() -> datetime:
    """현재 UTC 시간 반환"""
    return DateTimeUtils.now()

def parse_iso(iso_string: str) -> datetime:
    """ISO 문자열을 datetime으로 파싱"""
    return DateTimeUtils.parse_iso_datetime(iso_string)

def to_iso(dt: datetime) -> str:
    """datetime을 ISO 문자열로 변환"""
    return DateTimeUtils.to_iso_string(dt)

def for_firestore(obj: Any) -> Any:
    """Firestore 저장용 변환"""
    return DateTimeUtils.for_firestore(obj)

def from_firestore(obj: Any) -> Any:
    """Firestore 읽기용 변환"""
    return DateTimeUtils.from_firestore(obj)
