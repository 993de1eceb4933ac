"""
NOTAM 고도(Flight Level) 추출기
Q-code 고도 필드 -> 본문 FL 범위 -> 미터 고도 순서로 탐색
"""

import math
import logging
from typing import NamedTuple, Optional

from .notam_constants import (
    DEFAULT_FLIGHT_LEVELS, METERS_TO_FEET, METRIC_ALTITUDE_PATTERN,
    Q_CODE_FL_PATTERN, TEXT_FL_PATTERN
)

logger = logging.getLogger(__name__)


class FlightLevelRange(NamedTuple):
    """FL 범위 (하한, 상한 3자리 문자열)"""
    lower: str
    upper: str

    def __str__(self):
        return f"FL{self.lower}-FL{self.upper}"


def meters_to_flight_level(meters: int) -> str:
    """미터 고도를 3자리 FL 문자열로 변환 (반올림)"""
    hundreds_of_feet = math.floor(meters * METERS_TO_FEET / 100 + 0.5)
    return str(hundreds_of_feet).zfill(3)


class FlightLevelExtractor:
    """NOTAM 고도 추출기"""

    def extract(self, notam_text: str) -> Optional[FlightLevelRange]:
        """
        NOTAM 텍스트에서 고도 범위 추출 (먼저 찾은 방식 우선)

        Args:
            notam_text: NOTAM 원문

        Returns:
            Optional[FlightLevelRange]: 고도 범위, 찾지 못하면 None
        """
        if not notam_text:
            return None

        for method in (self._extract_q_code, self._extract_text_fl, self._extract_metric):
            flight_levels = method(notam_text)
            if flight_levels:
                logger.debug(f"고도 결정 ({method.__name__}): {flight_levels}")
                return flight_levels

        return None

    def resolve(self, notam_text: str) -> str:
        """고도 범위 문자열, 없으면 GND-UNL"""
        flight_levels = self.extract(notam_text)
        return str(flight_levels) if flight_levels else DEFAULT_FLIGHT_LEVELS

    def _extract_q_code(self, text: str) -> Optional[FlightLevelRange]:
        # Q)ZLHW/QARLC/IV/NBO/E/187/217/...
        match = Q_CODE_FL_PATTERN.search(text)
        if match:
            return FlightLevelRange(match.group(1), match.group(2))
        return None

    def _extract_text_fl(self, text: str) -> Optional[FlightLevelRange]:
        # FL187-FL217, FL 187 – FL 217
        match = TEXT_FL_PATTERN.search(text)
        if match:
            return FlightLevelRange(match.group(1), match.group(2))
        return None

    def _extract_metric(self, text: str) -> Optional[FlightLevelRange]:
        # 9,000M AND 6,000M
        match = METRIC_ALTITUDE_PATTERN.search(text)
        if not match:
            return None

        lower = int(match.group(1).replace(',', ''))
        upper = int(match.group(2).replace(',', ''))
        return FlightLevelRange(meters_to_flight_level(lower), meters_to_flight_level(upper))


# 전역 인스턴스
flight_level_extractor = FlightLevelExtractor()


def extract_flight_levels(notam_text: str) -> Optional[FlightLevelRange]:
    """전역 함수: 고도 범위 추출"""
    return flight_level_extractor.extract(notam_text)


def resolve_flight_levels(notam_text: str) -> str:
    """전역 함수: 고도 범위 문자열 (기본값 포함)"""
    return flight_level_extractor.resolve(notam_text)
