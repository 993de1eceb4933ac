"""
NOTAM 처리 관련 공통 유틸리티 함수
"""

import re
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from .notam_constants import VOR_ALIAS_PATTERN, WAYPOINT_REPLACEMENTS


def compress_whitespace(text):
    """
    연속 공백/줄바꿈을 공백 하나로 압축
    """
    return re.sub(r'\s+', ' ', text or '').strip()


def clean_waypoint(waypoint):
    """
    waypoint 문자열 정리
    "JINGNING VOR 'JIG'" -> "JINGNING", "JINGNING VOR" -> "JIG"
    """
    if not waypoint:
        return ''

    cleaned = VOR_ALIAS_PATTERN.sub('', waypoint)
    for source, target in WAYPOINT_REPLACEMENTS.items():
        cleaned = cleaned.replace(source, target)
    cleaned = cleaned.replace("'", '')
    return cleaned.strip()


def utc_timestamp() -> str:
    """ISO-8601 UTC 타임스탬프 (밀리초, Z 접미사)"""
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec='milliseconds').replace('+00:00', 'Z')


def split_correction_lines(text):
    """
    수정 텍스트를 비어있지 않은 줄 단위로 분리
    """
    return [line.strip() for line in (text or '').split('\n') if line.strip()]


def parse_correction_line(line: str) -> Optional[Tuple[str, str, str]]:
    """
    수정 라인 한 줄 해석

    Args:
        line: "W100 ABCDE-FGHIJ FL100-FL200" 형태

    Returns:
        Optional[Tuple[str, str, str]]: (항로, 출발 waypoint, 도착 waypoint) 또는 None
    """
    parts = line.strip().split()
    if len(parts) < 2:
        return None

    airway, route_part = parts[0], parts[1]
    if '-' not in route_part:
        return None

    points: List[str] = route_part.split('-')
    from_point, to_point = points[0], points[1]
    if not from_point or not to_point:
        return None

    return airway, from_point, to_point
