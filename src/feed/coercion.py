"""
느슨한 타입 JSON 값 변환

위젯 명령의 필드는 숫자, 숫자 문자열, bool, bool 문자열 등으로 섞여 들어옵니다.
모든 필드는 아래 함수들을 거쳐 int / float / bool 로 고정됩니다.
변환 실패 시 예외 대신 기본값을 돌려줍니다.

숫자 문자열은 로케일 무관 형식만 받습니다. 밑줄 구분자("1_000")와
ASCII 가 아닌 숫자(전각, 아라비아 숫자 등)는 거부합니다.
"""

import math
from typing import Any, Optional


def _clean_number_text(text: str) -> Optional[str]:
    cleaned = text.strip()
    if not cleaned or not cleaned.isascii() or "_" in cleaned:
        return None
    return cleaned


def _parse_number_text(text: str) -> Optional[float]:
    """로케일 무관 숫자 파싱. 천 단위 구분자(,)와 앞뒤 공백 허용."""
    cleaned = _clean_number_text(text)
    if cleaned is None:
        return None
    try:
        value = float(cleaned.replace(",", ""))
    except ValueError:
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def parse_int(raw: Any) -> Optional[int]:
    """
    정수 변환, 실패 시 None

    - int → 그대로, float → 소수점 버림
    - 문자열 → 정수 문자열만 허용 ("12.5"는 실패)
    - None, bool, 그 외 → None
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, float):
        if math.isnan(raw) or math.isinf(raw):
            return None
        return int(raw)
    if isinstance(raw, str):
        cleaned = _clean_number_text(raw)
        if cleaned is None:
            return None
        try:
            return int(cleaned)
        except ValueError:
            return None
    return None


def parse_float(raw: Any) -> Optional[float]:
    """실수 변환, 실패 시 None"""
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        value = float(raw)
        if math.isnan(value) or math.isinf(value):
            return None
        return value
    if isinstance(raw, str):
        return _parse_number_text(raw)
    return None


def to_int(raw: Any, default: int) -> int:
    """정수 변환 (parse_int 실패 → default)"""
    value = parse_int(raw)
    return default if value is None else value


def to_float(raw: Any, default: float) -> float:
    """실수 변환 (None·bool·파싱 실패 → default)"""
    value = parse_float(raw)
    return default if value is None else value


def to_bool(raw: Any, default: bool) -> bool:
    """
    bool 변환

    "true"/"false"(대소문자 무시), "1"/"0", 숫자 1/0 을 허용합니다.
    """
    if raw is None:
        return default
    if isinstance(raw, bool):
        return raw
    if isinstance(raw, (int, float)):
        if raw == 1:
            return True
        if raw == 0:
            return False
        return default
    if isinstance(raw, str):
        text = raw.strip().lower()
        if text == "true" or text == "1":
            return True
        if text == "false" or text == "0":
            return False
        return default
    return default


def to_optional_int(raw: Any) -> Optional[int]:
    """없거나 변환 불가면 None (createdAt 처럼 '없음'이 의미 있는 필드용)"""
    return parse_int(raw)
