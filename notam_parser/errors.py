"""
NOTAM 파서 예외 정의
"""


class NOTAMParserError(Exception):
    """NOTAM 파서 기본 예외"""


class MalformedRuleError(NOTAMParserError):
    """파싱 규칙 패턴을 컴파일할 수 없음"""

    def __init__(self, rule_id: str, pattern: str, reason: str):
        self.rule_id = rule_id
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"규칙 {rule_id} 패턴 오류: {reason}")


class PersistenceUnavailableError(NOTAMParserError, OSError):
    """저장소를 읽거나 쓸 수 없음"""


class EmptyInputError(NOTAMParserError, ValueError):
    """NOTAM 또는 수정 텍스트가 비어 있음"""
