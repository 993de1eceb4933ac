"""
Self-Training NOTAM Parser
NOTAM 원문 -> 고도 추출 -> 규칙 기반 항로 추출 -> 처리 로그
사용자 수정 내용으로부터 새 파싱 규칙을 학습
"""

import os
import sys
import logging
from typing import Dict, Optional, Tuple

from dotenv import load_dotenv

# 프로젝트 모듈 import
from notam_parser.errors import EmptyInputError
from notam_parser.flight_level_extractor import FlightLevelExtractor
from notam_parser.notam_constants import DEFAULT_FLIGHT_LEVELS
from notam_parser.parsing_rules import ExtractionRule, RuleStore
from notam_parser.processing_log import LogKind, ProcessingLog
from notam_parser.route_extractor import ExtractionResult, RouteExtractor
from notam_parser.rule_learner import RuleLearner
from notam_parser.storage import FileStorage, MemoryStorage

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


class NOTAMParserEngine:
    """
    NOTAM 파서 엔진
    규칙 저장소와 처리 로그를 소유하고, 현재 처리 중인 NOTAM/출력을 관리
    """

    def __init__(self, storage=None, data_dir: Optional[str] = None):
        self.logger = logging.getLogger(__name__)

        if storage is None:
            storage = FileStorage(data_dir) if data_dir else MemoryStorage()
        self.storage = storage

        # 모듈 인스턴스 생성
        self.rule_store = RuleStore(storage)
        self.processing_log = ProcessingLog(storage)
        self.flight_level_extractor = FlightLevelExtractor()
        self.route_extractor = RouteExtractor(self.rule_store)
        self.rule_learner = RuleLearner(self.rule_store, self.processing_log)

        self.rule_store.load()
        self.processing_log.load()

        self.current_notam: Optional[str] = None
        self.current_output: Optional[str] = None

        self.logger.info(f"NOTAM Parser 초기화 완료 (규칙 {len(self.rule_store)}개)")

    def parse_notam(self, notam_text: str) -> ExtractionResult:
        """
        NOTAM 파싱 (로그 기록 없음)

        Args:
            notam_text: NOTAM 원문

        Returns:
            ExtractionResult: 항로/고도 추출 결과
        """
        # Q-code 고도 우선, 없으면 본문 고도, 그래도 없으면 GND-UNL
        flight_levels = self.flight_level_extractor.extract(notam_text)
        fl_display = str(flight_levels) if flight_levels else DEFAULT_FLIGHT_LEVELS
        self.logger.debug(f"고도 결정: {fl_display}")

        return self.route_extractor.extract(notam_text, fl_display)

    def process_notam(self, notam_text: str) -> ExtractionResult:
        """NOTAM 처리: 파싱 후 현재 결과로 저장하고 처리 로그 기록"""
        notam_text = (notam_text or '').strip()
        if not notam_text:
            raise EmptyInputError("처리할 NOTAM 텍스트를 입력해주세요.")

        self.logger.info(f"NOTAM 처리 시작: {len(notam_text)} 문자")
        self.current_notam = notam_text

        result = self.parse_notam(notam_text)
        self.current_output = result.to_text()
        self.processing_log.record(LogKind.EXTRACTION, notam_text, self.current_output)

        self.logger.info(f"NOTAM 처리 완료: 항로 {len(result.routes)}개 ({result.flight_levels})")
        return result

    def save_correction(self, correction_text: str, notam_text: Optional[str] = None) -> Tuple[ExtractionRule, ...]:
        """
        수정 내용 저장 및 학습

        Args:
            correction_text: 올바른 출력
            notam_text: 대상 NOTAM (없으면 현재 NOTAM)

        Returns:
            Tuple[ExtractionRule, ...]: 새로 추가된 규칙
        """
        correction_text = (correction_text or '').strip()
        if not correction_text:
            raise EmptyInputError("올바른 출력을 입력해주세요.")

        notam_text = (notam_text or '').strip() or self.current_notam
        if not notam_text:
            raise EmptyInputError("학습할 현재 NOTAM이 없습니다.")

        new_rules = self.rule_learner.learn(notam_text, correction_text)

        self.current_notam = notam_text
        self.current_output = correction_text
        return new_rules

    def get_rules(self) -> Tuple[ExtractionRule, ...]:
        return self.rule_store.all()

    def get_learning_stats(self) -> Dict[str, int]:
        """학습 통계"""
        return {
            'total_processed': self.processing_log.count(LogKind.EXTRACTION),
            'corrections_stored': self.processing_log.count(LogKind.CORRECTION),
            'total_rules': len(self.rule_store),
            'learned_rules': len(self.rule_store.learned_rules()),
            'log_entries': len(self.processing_log),
        }

    def export_log(self) -> str:
        """다운로드용 처리 로그 전체"""
        log_text = self.processing_log.export()
        if not log_text.strip():
            raise EmptyInputError("다운로드할 로그 데이터가 없습니다.")
        return log_text


def setup_logging(level: Optional[str] = None, log_file: Optional[str] = None):
    """로깅 설정"""
    handlers = [logging.StreamHandler()]
    if log_file:
        handlers.append(logging.FileHandler(log_file, encoding='utf-8'))

    logging.basicConfig(
        level=getattr(logging, (level or 'INFO').upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers
    )


def main(argv=None):
    """커맨드라인 인터페이스"""
    import argparse

    load_dotenv()

    parser = argparse.ArgumentParser(description='Self-Training NOTAM Parser')
    parser.add_argument('input', help='NOTAM 텍스트 파일 경로 (- 이면 표준 입력)')
    parser.add_argument('--correction', help='올바른 출력 (학습용, 여러 줄은 \\n 으로 구분)')
    parser.add_argument('--data-dir', default=os.getenv('NOTAM_PARSER_DATA_DIR', 'data'), help='규칙/로그 저장 디렉토리')
    parser.add_argument('--export-log', help='처리 로그 저장 경로')
    parser.add_argument('--log-level', default=os.getenv('NOTAM_PARSER_LOG_LEVEL', 'INFO'), help='로그 레벨')

    args = parser.parse_args(argv)
    setup_logging(args.log_level, 'notam_parser.log')
    logger = logging.getLogger(__name__)

    if args.input == '-':
        text = sys.stdin.read()
    else:
        with open(args.input, 'r', encoding='utf-8') as f:
            text = f.read()

    engine = NOTAMParserEngine(data_dir=args.data_dir)

    try:
        result = engine.process_notam(text)
        print(result.to_text())

        if args.correction:
            new_rules = engine.save_correction(args.correction.replace('\\n', '\n'))
            print(f"\n✅ 새 규칙 {len(new_rules)}개 추가 (전체 {len(engine.get_rules())}개)")

        if args.export_log:
            with open(args.export_log, 'w', encoding='utf-8') as f:
                f.write(engine.export_log())
            print(f"📁 로그 파일: {args.export_log}")

    except EmptyInputError as e:
        logger.error(f"입력 오류: {e}")
        print(f"❌ {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
