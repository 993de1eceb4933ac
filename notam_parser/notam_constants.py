"""
NOTAM 파싱 관련 공통 상수 및 패턴 정의
"""

import re

# 저장소 키 (규칙 세트 / 처리 로그)
RULES_STORAGE_KEY = 'notam-parsing-rules'
LOG_STORAGE_KEY = 'notam-log'

# 로그 다운로드 파일명
LOG_DOWNLOAD_FILENAME = 'notamparsed.txt'

# 고도 정보가 없을 때 사용하는 기본값 (지표면 ~ 무제한)
DEFAULT_FLIGHT_LEVELS = 'GND-UNL'

# 추출 결과가 없을 때 출력 문구
NO_MATCH_MESSAGE = 'No matching routes found.'

# 하이픈 또는 en-dash 구분자
ROUTE_SEPARATOR = '[-–]'

# 캡처 그룹 역할
ROLE_AIRWAY = 'airway'
ROLE_FROM = 'from'
ROLE_TO = 'to'

# 항로 없는 단순 경로 규칙 ID
BARE_ROUTE_RULE_ID = 'default-3'

# 기본 파싱 규칙 (항상 이 순서로 평가)
DEFAULT_PARSING_RULES = [
    {
        'id': 'default-1',
        'pattern': r"(\w\d+):\s*([A-Z]{3,5}(?:\s+VOR)?(?:\s+'[A-Z]+')?(?:\s+[A-Z]+)?)\s*"
                   + ROUTE_SEPARATOR + r"\s*([A-Z]{3,5})",
        'flags': 'gi',
        'description': 'Standard airway format: W213: URBEB - IDSUD',
        'roles': [ROLE_AIRWAY, ROLE_FROM, ROLE_TO],
    },
    {
        'id': 'default-2',
        'pattern': r"(\w\d+)\s+([A-Z]{3,5})\s*" + ROUTE_SEPARATOR + r"\s*([A-Z]{3,5})",
        'flags': 'gi',
        'description': 'Simple airway format: W213 URBEB-IDSUD',
        'roles': [ROLE_AIRWAY, ROLE_FROM, ROLE_TO],
    },
    {
        'id': BARE_ROUTE_RULE_ID,
        'pattern': r"([A-Z]{3,5})\s*" + ROUTE_SEPARATOR + r"\s*([A-Z]{3,5})",
        'flags': 'g',
        'description': 'Route without airway: URBEB-IDSUD',
        'roles': [ROLE_FROM, ROLE_TO],
    },
]

# 수정 내용으로부터 생성되는 학습 규칙 패턴
# {airway}, {from_point}, {to_point} 에는 이스케이프된 값이 들어감
LEARNED_RULE_TEMPLATE = (
    r"({airway})[:.]?\s*([A-Z]{{3,5}}(?:\s+VOR)?(?:\s+'[A-Z]+')?(?:\s+{from_point})?)\s*"
    r"[-–]\s*([A-Z]{{3,5}}(?:\s+{to_point})?)"
)
LEARNED_RULE_FLAGS = 'gi'

# 고도 패턴 (ASCII 숫자만 허용)
# Q)ZLHW/QARLC/IV/NBO/E/187/217/... 형태
Q_CODE_FL_PATTERN = re.compile(r'Q\)[^/]*/[^/]*/[^/]*/[^/]*/[^/]*/(\d{3})/(\d{3})', re.ASCII)

# FL187-FL217 형태 (본문)
TEXT_FL_PATTERN = re.compile(
    r'FL\s*(\d{3})\s*' + ROUTE_SEPARATOR + r'\s*FL\s*(\d{3})', re.IGNORECASE | re.ASCII
)

# 9,000M ... 6,000M 형태 (미터 단위)
METRIC_ALTITUDE_PATTERN = re.compile(r'(\d{1,2},?\d{3})M.*?(\d{1,2},?\d{3})M', re.ASCII)

# 미터 -> 피트 환산 계수
METERS_TO_FEET = 3.28

# waypoint 정리 패턴
VOR_ALIAS_PATTERN = re.compile(r"\s+VOR\s*'[A-Z]+'", re.ASCII)
WAYPOINT_REPLACEMENTS = {
    'JINGNING VOR': 'JIG',
}

# NOTAM 상태 키워드
STATUS_PATTERN = re.compile(r'\b(CLOSED|CLSD|OPEN|RESTRICTED|ACTIVE|INACTIVE)\b', re.IGNORECASE | re.ASCII)
UNKNOWN_STATUS = 'UNKNOWN'

# 우선순위별 키워드 (위에서부터 먼저 찾은 우선순위 적용)
PRIORITY_KEYWORDS = {
    'CRITICAL': ['EMERGENCY', 'CRITICAL'],
    'HIGH': ['CLSD', 'CLOSED', 'RESTRICTED'],
    'LOW': ['CAUTION', 'NOTICE'],
}
DEFAULT_PRIORITY = 'MEDIUM'

# 구조 기반 신뢰도 (기본값 + 항목별 가산점, 상/하한)
CONFIDENCE_BASE = 0.5
CONFIDENCE_WEIGHTS = {
    'airway': 0.2,
    'route': 0.2,
    'altitude': 0.1,
    'status': 0.2,
}
CONFIDENCE_MIN = 0.3
CONFIDENCE_MAX = 0.95
REVIEW_THRESHOLD = 0.7

# 로그 라인 패턴
# 추출 결과에는 " => OUT: " 가 나오지 않으므로 원문은 마지막 구분자까지
EXTRACTION_LOG_LINE_PATTERN = re.compile(
    r'^\[(?P<timestamp>[^\]]+)\] RAW: (?P<raw>.*) => OUT: (?P<output>.*)$'
)
CORRECTION_LOG_LINE_PATTERN = re.compile(
    r'^\[(?P<timestamp>[^\]]+)\] CORRECTION - RAW: (?P<raw>.*?) => CORRECTED: (?P<output>.*)$'
)
