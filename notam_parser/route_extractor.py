"""
NOTAM 항로 추출기
규칙 저장소의 규칙을 평가 순서대로 적용하여 중복 없는 항로 라인 생성
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Tuple

from .notam_constants import (
    CONFIDENCE_BASE, DEFAULT_FLIGHT_LEVELS, DEFAULT_PRIORITY, NO_MATCH_MESSAGE,
    ROLE_AIRWAY, ROLE_FROM, ROLE_TO, UNKNOWN_STATUS
)
from .notam_classifier import NOTAMClassifier
from .notam_utils import clean_waypoint
from .parsing_rules import ExtractionRule


@dataclass(frozen=True)
class ExtractionResult:
    """항로 추출 결과"""
    routes: Tuple[str, ...]
    flight_levels: str
    status: str = UNKNOWN_STATUS
    priority: str = DEFAULT_PRIORITY
    confidence: float = CONFIDENCE_BASE
    needs_review: bool = True

    @property
    def has_results(self) -> bool:
        return len(self.routes) > 0

    def to_text(self) -> str:
        """화면 표시/로그용 텍스트 (한 줄에 항로 하나)"""
        if not self.has_results:
            return NO_MATCH_MESSAGE
        return '\n'.join(self.routes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'routes': list(self.routes),
            'flight_levels': self.flight_levels,
            'has_results': self.has_results,
            'status': self.status,
            'priority': self.priority,
            'confidence': self.confidence,
            'needs_review': self.needs_review,
        }


def format_route(airway: str, from_point: str, to_point: str, flight_levels: str) -> str:
    """항로 라인 포맷: "W213 URBEB-IDSUD FL187-FL217" """
    if airway:
        return f"{airway} {from_point}-{to_point} {flight_levels}"
    return f"{from_point}-{to_point} {flight_levels}"


class RouteExtractor:
    """규칙 기반 NOTAM 항로 추출기"""

    def __init__(self, rule_store):
        self.rule_store = rule_store
        self.classifier = NOTAMClassifier()
        self.logger = logging.getLogger(__name__)

    def extract(self, notam_text: str, flight_levels: Optional[str] = None) -> ExtractionResult:
        """
        NOTAM 텍스트에서 항로 추출

        Args:
            notam_text: NOTAM 원문
            flight_levels: 고도 범위 문자열 (None 이면 GND-UNL, 고도 미발견으로 취급)

        Returns:
            ExtractionResult: 추출 결과
        """
        fl_display = flight_levels or DEFAULT_FLIGHT_LEVELS
        candidates = list(self._iter_matches(self.rule_store.all(), notam_text or ''))

        # 항로가 지정된 (출발, 도착) 쌍은 항로 없는 라인으로 다시 출력하지 않음
        airway_pairs = {(from_point, to_point) for airway, from_point, to_point in candidates if airway}

        routes = []
        seen_routes = set()
        for airway, from_point, to_point in candidates:
            route_key = (airway, from_point, to_point)
            if route_key in seen_routes:
                continue
            if not airway and (from_point, to_point) in airway_pairs:
                continue
            seen_routes.add(route_key)

            route_line = format_route(airway, from_point, to_point, fl_display)
            routes.append(route_line)
            self.logger.debug(f"항로 추가: {route_line}")

        has_altitude = fl_display != DEFAULT_FLIGHT_LEVELS
        assessment = self.classifier.assess(notam_text, bool(airway_pairs), bool(routes), has_altitude)

        return ExtractionResult(
            routes=tuple(routes),
            flight_levels=fl_display,
            status=assessment.status,
            priority=assessment.priority,
            confidence=assessment.confidence,
            needs_review=assessment.needs_review,
        )

    def _iter_matches(self, rules: Iterable[ExtractionRule], text: str):
        """규칙별 매칭 결과를 (항로, 출발, 도착) 으로 변환"""
        for rule in rules:
            if not rule.is_valid:
                self.logger.warning(f"잘못된 규칙 건너뜀: {rule.error}")
                continue

            try:
                captures = list(rule.find_matches(text))
            except Exception as e:
                self.logger.warning(f"규칙 {rule.id} 처리 중 오류: {e}")
                continue

            self.logger.debug(f"규칙 {rule.id}: {len(captures)}개 매칭")

            for capture in captures:
                airway = (capture.get(ROLE_AIRWAY) or '').strip()
                from_point = clean_waypoint(capture.get(ROLE_FROM))
                to_point = clean_waypoint(capture.get(ROLE_TO))

                if from_point and to_point:
                    yield airway, from_point, to_point
