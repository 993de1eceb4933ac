"""
수정 내용 기반 파싱 규칙 학습기
사용자가 입력한 올바른 출력으로부터 새 규칙을 만들어 규칙 저장소에 추가 (기존 규칙은 건드리지 않음)
"""

import re
import time
import random
import string
import logging
from typing import List, Tuple

from .errors import EmptyInputError
from .notam_constants import (
    LEARNED_RULE_FLAGS, LEARNED_RULE_TEMPLATE, ROLE_AIRWAY, ROLE_FROM, ROLE_TO
)
from .notam_utils import parse_correction_line, split_correction_lines, utc_timestamp
from .parsing_rules import ExtractionRule
from .processing_log import LogKind

_ID_ALPHABET = string.digits + string.ascii_lowercase


class RuleLearner:
    """수정 내용으로부터 파싱 규칙 생성"""

    def __init__(self, rule_store, processing_log):
        self.rule_store = rule_store
        self.processing_log = processing_log
        self.logger = logging.getLogger(__name__)

    def learn(self, original_notam: str, corrected_text: str) -> Tuple[ExtractionRule, ...]:
        """
        수정 내용을 학습하여 새 규칙 추가

        Args:
            original_notam: 수정 대상 NOTAM 원문
            corrected_text: 올바른 출력 (한 줄에 "<항로> <출발>-<도착> [고도]")

        Returns:
            Tuple[ExtractionRule, ...]: 새로 추가된 규칙
        """
        if not original_notam or not original_notam.strip():
            raise EmptyInputError("학습할 NOTAM 원문이 없습니다.")
        if not corrected_text or not corrected_text.strip():
            raise EmptyInputError("올바른 출력을 입력해주세요.")

        corrected_text = corrected_text.strip()
        new_rules: List[ExtractionRule] = []

        for line in split_correction_lines(corrected_text):
            parsed = parse_correction_line(line)
            if not parsed:
                self.logger.info(f"규칙으로 변환할 수 없는 라인 건너뜀: {line}")
                continue

            rule = self.build_rule(*parsed)
            self.rule_store.append(rule)
            new_rules.append(rule)
            self.logger.info(f"새 규칙 생성: {rule.id} - {rule.description}")

        self.processing_log.record(LogKind.CORRECTION, original_notam, corrected_text)
        self.logger.info(f"학습 완료: 새 규칙 {len(new_rules)}개, 전체 규칙 {len(self.rule_store)}개")
        return tuple(new_rules)

    def build_rule(self, airway: str, from_point: str, to_point: str) -> ExtractionRule:
        """항로/출발/도착 값으로 학습 규칙 생성"""
        pattern = LEARNED_RULE_TEMPLATE.format(
            airway=re.escape(airway),
            from_point=re.escape(from_point),
            to_point=re.escape(to_point),
        )
        return ExtractionRule(
            id=self._new_rule_id(),
            pattern=pattern,
            flags=LEARNED_RULE_FLAGS,
            description=f"Learned from correction: {airway} {from_point}-{to_point}",
            learned=True,
            created_at=utc_timestamp(),
            roles=(ROLE_AIRWAY, ROLE_FROM, ROLE_TO),
        )

    def _new_rule_id(self) -> str:
        # learned-<epoch ms>-<5자리 base36>
        while True:
            suffix = ''.join(random.choice(_ID_ALPHABET) for _ in range(5))
            rule_id = f"learned-{int(time.time() * 1000)}-{suffix}"
            if rule_id not in self.rule_store:
                return rule_id
