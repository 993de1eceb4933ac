"""
NOTAM 처리 로그
추출/수정 이벤트를 시간순으로 누적 기록 (수정/삭제 없음)
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Tuple

from .errors import PersistenceUnavailableError
from .notam_constants import (
    CORRECTION_LOG_LINE_PATTERN, EXTRACTION_LOG_LINE_PATTERN, LOG_STORAGE_KEY
)
from .notam_utils import compress_whitespace, utc_timestamp


class LogKind(str, Enum):
    EXTRACTION = 'EXTRACTION'
    CORRECTION = 'CORRECTION'


@dataclass(frozen=True)
class LogEntry:
    """처리 로그 항목"""
    timestamp: str
    kind: LogKind
    raw_notam_text: str
    output_text: str

    def to_line(self) -> str:
        if self.kind == LogKind.CORRECTION:
            return f"[{self.timestamp}] CORRECTION - RAW: {self.raw_notam_text} => CORRECTED: {self.output_text}\n"
        return f"[{self.timestamp}] RAW: {self.raw_notam_text} => OUT: {self.output_text}\n"


def _match_log_line(line: str):
    """로그 항목 시작 라인이면 (종류, 매칭) 반환"""
    match = CORRECTION_LOG_LINE_PATTERN.match(line)
    if match:
        return LogKind.CORRECTION, match
    match = EXTRACTION_LOG_LINE_PATTERN.match(line)
    if match:
        return LogKind.EXTRACTION, match
    return None, None


def parse_log_text(text: str) -> List[LogEntry]:
    """
    저장된 로그 텍스트를 항목 리스트로 변환
    출력이 여러 줄인 경우 다음 항목 전까지의 줄을 출력에 이어 붙임
    """
    entries: List[LogEntry] = []
    current = None
    continuation: List[str] = []

    def flush():
        if current is not None:
            output = '\n'.join([current['output']] + continuation)
            entries.append(LogEntry(current['timestamp'], current['kind'], current['raw'], output))

    for line in text.split('\n'):
        kind, match = _match_log_line(line)
        if match:
            flush()
            current = {
                'timestamp': match.group('timestamp'),
                'kind': kind,
                'raw': match.group('raw'),
                'output': match.group('output'),
            }
            continuation = []
        elif current is not None:
            continuation.append(line)

    # 마지막 줄바꿈으로 생긴 빈 줄 제거
    while continuation and continuation[-1] == '':
        continuation.pop()
    flush()
    return entries


class ProcessingLog:
    """
    처리 로그

    메모리 항목 리스트와 저장용 텍스트 블롭을 함께 유지하며
    기록할 때마다 즉시 저장한다.
    """

    def __init__(self, storage, storage_key: str = LOG_STORAGE_KEY):
        self.storage = storage
        self.storage_key = storage_key
        self.logger = logging.getLogger(__name__)
        self._entries: List[LogEntry] = []
        self._text = ''

    def load(self) -> Tuple[LogEntry, ...]:
        """저장된 로그 로드, 읽을 수 없으면 빈 로그로 시작"""
        try:
            saved = self.storage.get_item(self.storage_key) or ''
        except PersistenceUnavailableError as e:
            self.logger.warning(f"처리 로그를 읽을 수 없음: {e}")
            saved = ''

        self._text = saved
        self._entries = parse_log_text(saved)
        self.logger.info(f"처리 로그 로드: {len(self._entries)}개 항목")
        return self.entries()

    def record(self, kind: LogKind, raw_text: str, output_text: str) -> LogEntry:
        """
        로그 항목 추가 후 저장

        Args:
            kind: EXTRACTION 또는 CORRECTION
            raw_text: NOTAM 원문 (공백 압축 후 저장)
            output_text: 추출 결과 또는 수정 내용
        """
        entry = LogEntry(
            timestamp=utc_timestamp(),
            kind=LogKind(kind),
            raw_notam_text=compress_whitespace(raw_text),
            output_text=output_text,
        )
        self._entries.append(entry)
        self._text += entry.to_line()
        self._save()
        self.logger.debug(f"{entry.kind.value} 로그 기록")
        return entry

    def _save(self):
        try:
            self.storage.set_item(self.storage_key, self._text)
        except PersistenceUnavailableError as e:
            self.logger.warning(f"처리 로그 저장 실패: {e}")

    def export(self) -> str:
        return self._text

    def entries(self) -> Tuple[LogEntry, ...]:
        return tuple(self._entries)

    def count(self, kind: LogKind) -> int:
        return sum(1 for entry in self._entries if entry.kind == kind)

    def __len__(self) -> int:
        return len(self._entries)
