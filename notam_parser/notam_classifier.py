"""
NOTAM 상태/우선순위 분류 및 구조 기반 신뢰도 계산
"""

from typing import NamedTuple

from .notam_constants import (
    CONFIDENCE_BASE, CONFIDENCE_MAX, CONFIDENCE_MIN, CONFIDENCE_WEIGHTS,
    DEFAULT_PRIORITY, PRIORITY_KEYWORDS, REVIEW_THRESHOLD, STATUS_PATTERN, UNKNOWN_STATUS
)


class NOTAMAssessment(NamedTuple):
    """NOTAM 분류 결과"""
    status: str
    priority: str
    confidence: float
    needs_review: bool


class NOTAMClassifier:
    """NOTAM 분류기"""

    def __init__(self):
        self.priority_levels = PRIORITY_KEYWORDS

    def get_status(self, text: str) -> str:
        """NOTAM 상태 (CLSD, OPEN 등), 없으면 UNKNOWN"""
        match = STATUS_PATTERN.search(text or '')
        return match.group(1).upper() if match else UNKNOWN_STATUS

    def get_priority(self, text: str) -> str:
        """NOTAM 텍스트의 우선순위 레벨 결정"""
        text_upper = (text or '').upper()

        for level, keywords in self.priority_levels.items():
            if any(keyword in text_upper for keyword in keywords):
                return level

        return DEFAULT_PRIORITY

    def get_confidence(self, has_airway: bool, has_route: bool, has_altitude: bool, has_status: bool) -> float:
        """
        추출된 구성 요소 기반 신뢰도

        Args:
            has_airway: 항로명이 있는 라인 추출 여부
            has_route: 항로 라인 추출 여부
            has_altitude: 고도 범위 발견 여부
            has_status: 상태 키워드 발견 여부

        Returns:
            float: 0.3 ~ 0.95
        """
        found = {
            'airway': has_airway,
            'route': has_route,
            'altitude': has_altitude,
            'status': has_status,
        }
        score = CONFIDENCE_BASE + sum(CONFIDENCE_WEIGHTS[name] for name, hit in found.items() if hit)
        return round(max(CONFIDENCE_MIN, min(CONFIDENCE_MAX, score)), 2)

    def assess(self, text: str, has_airway: bool, has_route: bool, has_altitude: bool) -> NOTAMAssessment:
        status = self.get_status(text)
        confidence = self.get_confidence(has_airway, has_route, has_altitude, status != UNKNOWN_STATUS)
        return NOTAMAssessment(
            status=status,
            priority=self.get_priority(text),
            confidence=confidence,
            needs_review=confidence < REVIEW_THRESHOLD,
        )


# 전역 인스턴스
notam_classifier = NOTAMClassifier()


def assess_notam(text: str, has_airway: bool, has_route: bool, has_altitude: bool) -> NOTAMAssessment:
    """전역 함수: NOTAM 분류"""
    return notam_classifier.assess(text, has_airway, has_route, has_altitude)
