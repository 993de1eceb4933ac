"""
NOTAM 파싱 규칙 및 규칙 저장소
기본 규칙 + 수정 내용으로부터 학습된 규칙을 평가 순서대로 보관 (추가만 가능, 삭제 없음)
"""

import re
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .errors import MalformedRuleError, PersistenceUnavailableError
from .notam_constants import (
    BARE_ROUTE_RULE_ID, DEFAULT_PARSING_RULES, RULES_STORAGE_KEY,
    ROLE_AIRWAY, ROLE_FROM, ROLE_TO
)
from .notam_utils import utc_timestamp

VALID_ROLES = (ROLE_AIRWAY, ROLE_FROM, ROLE_TO)

# 규칙 플래그 문자 -> re 플래그 (g 는 전체 검색 여부로 따로 처리)
_FLAG_MAP = {
    'i': re.IGNORECASE,
    'm': re.MULTILINE,
    's': re.DOTALL,
}


def _infer_roles(rule_id: str, group_count: int) -> Tuple[str, ...]:
    """역할 정보가 없는 저장 규칙의 캡처 그룹 역할 추정"""
    if group_count >= 3:
        return (ROLE_AIRWAY, ROLE_FROM, ROLE_TO)
    if group_count == 2:
        if rule_id == BARE_ROUTE_RULE_ID:
            return (ROLE_FROM, ROLE_TO)
        # 도착 waypoint가 없으므로 항로를 만들 수 없음
        return (ROLE_AIRWAY, ROLE_FROM)
    return ()


@dataclass(frozen=True)
class ExtractionRule:
    """
    항로 추출 규칙

    패턴은 생성 시 한 번만 컴파일되며, 컴파일 실패 시 error 에 보관되고
    추출 단계에서 경고 후 건너뛴다.
    """
    id: str
    pattern: str
    flags: str = 'gi'
    description: str = ''
    learned: bool = False
    created_at: str = field(default_factory=utc_timestamp)
    roles: Tuple[str, ...] = ()
    compiled: Optional[re.Pattern] = field(default=None, init=False, repr=False, compare=False)
    error: Optional[MalformedRuleError] = field(default=None, init=False, repr=False, compare=False)

    def __post_init__(self):
        # 모든 규칙은 ASCII 모드 ([A-Z], \d 가 유니코드 문자에 매칭하지 않도록)
        re_flags = re.ASCII
        for flag in self.flags:
            re_flags |= _FLAG_MAP.get(flag, 0)

        compiled = None
        try:
            compiled = re.compile(self.pattern, re_flags)
        except (re.error, OverflowError, RecursionError) as e:
            object.__setattr__(self, 'error', MalformedRuleError(self.id, self.pattern, str(e)))

        group_count = compiled.groups if compiled else 0
        roles = tuple(self.roles) if self.roles else _infer_roles(self.id, group_count)
        object.__setattr__(self, 'roles', roles)

        if compiled is not None:
            invalid = [role for role in roles if role not in VALID_ROLES]
            if invalid or len(roles) > group_count:
                reason = f"역할 {list(roles)} 이(가) 캡처 그룹 {group_count}개와 맞지 않음"
                object.__setattr__(self, 'error', MalformedRuleError(self.id, self.pattern, reason))
                compiled = None

        object.__setattr__(self, 'compiled', compiled)

    @property
    def ignore_case(self) -> bool:
        return 'i' in self.flags

    @property
    def global_match(self) -> bool:
        return 'g' in self.flags

    @property
    def is_valid(self) -> bool:
        return self.compiled is not None

    def find_matches(self, text: str) -> Iterator[Dict[str, str]]:
        """
        텍스트에서 규칙 매칭

        Returns:
            Iterator[Dict[str, str]]: 역할 -> 캡처 문자열
        """
        if self.compiled is None:
            raise self.error

        if self.global_match:
            matches = self.compiled.finditer(text)
        else:
            first = self.compiled.search(text)
            matches = [first] if first else []

        for match in matches:
            groups = match.groups()
            yield {role: groups[i] or '' for i, role in enumerate(self.roles)}

    def to_dict(self) -> Dict[str, Any]:
        return {
            'id': self.id,
            'pattern': self.pattern,
            'flags': self.flags,
            'description': self.description,
            'learned': self.learned,
            'created_at': self.created_at,
            'roles': list(self.roles),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExtractionRule':
        """저장된 레코드로부터 규칙 생성 (구조가 잘못되면 ValueError)"""
        if not isinstance(data, dict):
            raise ValueError(f"규칙 레코드가 객체가 아님: {data!r}")
        rule_id = data.get('id')
        pattern = data.get('pattern')
        if not isinstance(rule_id, str) or not rule_id or not isinstance(pattern, str):
            raise ValueError(f"규칙 레코드에 id/pattern 누락: {data!r}")

        flags = data.get('flags') or 'gi'
        if not isinstance(flags, str):
            raise ValueError(f"규칙 {rule_id}: flags 가 문자열이 아님: {flags!r}")

        roles = data.get('roles') or []
        if not isinstance(roles, list) or not all(isinstance(role, str) for role in roles):
            raise ValueError(f"규칙 {rule_id}: roles 가 문자열 리스트가 아님: {roles!r}")

        description = data.get('description') or ''
        if not isinstance(description, str):
            raise ValueError(f"규칙 {rule_id}: description 이 문자열이 아님: {description!r}")

        kwargs = {
            'id': rule_id,
            'pattern': pattern,
            'flags': flags,
            'description': description,
            'learned': bool(data.get('learned', False)),
            'roles': tuple(roles),
        }
        # 이전 형식은 timestamp 필드 사용
        created_at = data.get('created_at') or data.get('timestamp')
        if created_at:
            if not isinstance(created_at, str):
                raise ValueError(f"규칙 {rule_id}: created_at 이 문자열이 아님: {created_at!r}")
            kwargs['created_at'] = created_at
        return cls(**kwargs)


def default_rules() -> List[ExtractionRule]:
    """기본 파싱 규칙 3개 생성"""
    created_at = utc_timestamp()
    return [
        ExtractionRule(
            id=rule['id'],
            pattern=rule['pattern'],
            flags=rule['flags'],
            description=rule['description'],
            roles=tuple(rule['roles']),
            created_at=created_at,
        )
        for rule in DEFAULT_PARSING_RULES
    ]


class RuleStore:
    """
    파싱 규칙 저장소

    삽입 순서가 곧 평가 순서이며, 규칙은 추가만 가능하다.
    저장 실패 시 경고만 남기고 메모리 상태를 유지한다.
    """

    def __init__(self, storage, storage_key: str = RULES_STORAGE_KEY):
        self.storage = storage
        self.storage_key = storage_key
        self.logger = logging.getLogger(__name__)
        self._rules: List[ExtractionRule] = []
        self._ids = set()

    def load(self) -> Tuple[ExtractionRule, ...]:
        """
        저장된 규칙 로드, 없거나 손상된 경우 기본 규칙 사용

        Returns:
            Tuple[ExtractionRule, ...]: 로드된 규칙 (평가 순서)
        """
        rules = None
        try:
            saved = self.storage.get_item(self.storage_key)
            if saved:
                rules = self._decode(saved)
                self.logger.info(f"저장된 파싱 규칙 로드: {len(rules)}개")
        except PersistenceUnavailableError as e:
            self.logger.warning(f"파싱 규칙 저장소를 읽을 수 없음, 기본 규칙 사용: {e}")
        except ValueError as e:
            self.logger.warning(f"저장된 파싱 규칙 손상, 기본 규칙 사용: {e}")

        if rules is None:
            rules = default_rules()
            self.logger.info(f"기본 파싱 규칙 사용: {len(rules)}개")

        self._rules = list(rules)
        self._ids = {rule.id for rule in rules}

        for rule in self._rules:
            if not rule.is_valid:
                self.logger.warning(f"잘못된 규칙 포함: {rule.error}")

        return self.all()

    @staticmethod
    def _decode(saved: str) -> List[ExtractionRule]:
        data = json.loads(saved)
        if not isinstance(data, list):
            raise ValueError("파싱 규칙 데이터가 리스트가 아님")

        rules = [ExtractionRule.from_dict(item) for item in data]
        ids = [rule.id for rule in rules]
        if len(ids) != len(set(ids)):
            raise ValueError("중복된 규칙 ID 존재")
        return rules

    def append(self, rule: ExtractionRule):
        """규칙을 끝에 추가하고 전체 규칙 저장"""
        if rule.id in self._ids:
            raise ValueError(f"이미 존재하는 규칙 ID: {rule.id}")

        self._rules.append(rule)
        self._ids.add(rule.id)
        self.logger.info(f"규칙 추가: {rule.id} (전체 {len(self._rules)}개)")
        self.save()

    def save(self) -> bool:
        """전체 규칙 저장, 실패 시 경고 후 False"""
        payload = json.dumps([rule.to_dict() for rule in self._rules], ensure_ascii=False, indent=2)
        try:
            self.storage.set_item(self.storage_key, payload)
        except PersistenceUnavailableError as e:
            self.logger.warning(f"파싱 규칙 저장 실패: {e}")
            return False
        self.logger.debug("파싱 규칙 저장 완료")
        return True

    def all(self) -> Tuple[ExtractionRule, ...]:
        return tuple(self._rules)

    def get(self, rule_id: str) -> Optional[ExtractionRule]:
        for rule in self._rules:
            if rule.id == rule_id:
                return rule
        return None

    def learned_rules(self) -> Tuple[ExtractionRule, ...]:
        return tuple(rule for rule in self._rules if rule.learned)

    def __contains__(self, rule_id) -> bool:
        return rule_id in self._ids

    def __iter__(self) -> Iterator[ExtractionRule]:
        return iter(self.all())

    def __len__(self) -> int:
        return len(self._rules)
