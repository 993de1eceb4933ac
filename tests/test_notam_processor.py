import pytest

from notam_parser.errors import EmptyInputError
from notam_parser.notam_constants import RULES_STORAGE_KEY
from notam_parser.processing_log import LogKind
from notam_parser.storage import MemoryStorage
from notam_processor import NOTAMParserEngine, main

SAMPLE_NOTAM = "Q)ZLHW/QARLC/IV/NBO/E/187/217/W213: URBEB - IDSUD"


@pytest.fixture
def engine(tmp_path):
    return NOTAMParserEngine(data_dir=str(tmp_path / 'data'))


def test_process_sample_notam(engine):
    """Q-code 고도 + 항로 추출"""
    result = engine.process_notam(SAMPLE_NOTAM)

    assert result.flight_levels == 'FL187-FL217'
    assert result.routes == ('W213 URBEB-IDSUD FL187-FL217',)
    assert result.has_results
    assert engine.current_notam == SAMPLE_NOTAM
    assert engine.current_output == 'W213 URBEB-IDSUD FL187-FL217'


def test_process_without_routes(engine):
    result = engine.process_notam("AD CLSD DUE TO SNOW REMOVAL")

    assert result.routes == ()
    assert not result.has_results
    assert result.flight_levels == 'GND-UNL'
    assert engine.current_output == 'No matching routes found.'

    entry = engine.processing_log.entries()[-1]
    assert entry.kind == LogKind.EXTRACTION
    assert entry.output_text == 'No matching routes found.'


def test_process_rejects_empty_input(engine):
    with pytest.raises(EmptyInputError):
        engine.process_notam("   \n ")
    assert len(engine.processing_log) == 0


def test_parse_notam_does_not_log(engine):
    engine.parse_notam(SAMPLE_NOTAM)
    assert len(engine.processing_log) == 0


def test_correction_uses_current_notam(engine):
    engine.process_notam("E) W100: ABC - FGH CLSD")
    rules_before = engine.get_rules()

    new_rules = engine.save_correction("W100 ABCDE-FGHIJ FL100-FL200")

    assert len(new_rules) == 1
    assert 'W100 ABCDE-FGHIJ' in new_rules[0].description
    assert engine.get_rules() == rules_before + new_rules
    assert engine.current_output == 'W100 ABCDE-FGHIJ FL100-FL200'


def test_correction_without_current_notam(engine):
    with pytest.raises(EmptyInputError):
        engine.save_correction("W100 ABCDE-FGHIJ")
    with pytest.raises(EmptyInputError):
        engine.save_correction("", notam_text="W100: ABC - FGH")


def test_state_survives_restart(tmp_path):
    """규칙과 로그는 재시작 후에도 유지"""
    data_dir = str(tmp_path / 'data')
    first = NOTAMParserEngine(data_dir=data_dir)
    first.process_notam("E) ATS RTE B330.ELNEX-DOMIL CLSD")
    first.save_correction("B330 ELNEX-DOMIL")

    second = NOTAMParserEngine(data_dir=data_dir)
    assert second.get_rules() == first.get_rules()
    assert second.export_log() == first.export_log()
    assert second.parse_notam("E) ATS RTE B330.ELNEX-DOMIL CLSD").routes == ('B330 ELNEX-DOMIL GND-UNL',)


def test_learning_stats(engine):
    engine.process_notam(SAMPLE_NOTAM)
    engine.process_notam("W100: ABC - FGH")
    engine.save_correction("W100 ABCDE-FGHIJ")

    assert engine.get_learning_stats() == {
        'total_processed': 2,
        'corrections_stored': 1,
        'total_rules': 4,
        'learned_rules': 1,
        'log_entries': 3,
    }


def test_export_empty_log(engine):
    with pytest.raises(EmptyInputError):
        engine.export_log()


def test_cli_processes_file_and_learns(tmp_path, capsys, monkeypatch):
    monkeypatch.chdir(tmp_path)
    notam_file = tmp_path / 'notam.txt'
    notam_file.write_text(SAMPLE_NOTAM, encoding='utf-8')
    log_path = tmp_path / 'notamparsed.txt'

    main([
        str(notam_file),
        '--data-dir', str(tmp_path / 'data'),
        '--correction', 'W213 URBEB-IDSUD FL187-FL217',
        '--export-log', str(log_path),
    ])

    out = capsys.readouterr().out
    assert 'W213 URBEB-IDSUD FL187-FL217' in out
    log_text = log_path.read_text(encoding='utf-8')
    assert 'RAW: ' + SAMPLE_NOTAM in log_text
    assert 'CORRECTION - RAW: ' in log_text


def test_cli_empty_input_exits(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    notam_file = tmp_path / 'empty.txt'
    notam_file.write_text('\n', encoding='utf-8')

    with pytest.raises(SystemExit) as exc_info:
        main([str(notam_file), '--data-dir', str(tmp_path / 'data')])
    assert exc_info.value.code == 1


@pytest.mark.parametrize('saved', [
    '[{"id": "x", "pattern": "(A)", "flags": 5}]',
    '[{"id": "big", "pattern": "(W1){99999999999}"}]',
])
def test_engine_starts_with_corrupted_rules(saved):
    """손상된 규칙 데이터가 있어도 엔진 생성 및 처리 가능"""
    engine = NOTAMParserEngine(storage=MemoryStorage({RULES_STORAGE_KEY: saved}))
    result = engine.process_notam(SAMPLE_NOTAM)
    assert isinstance(result.routes, tuple)


def test_process_reports_classification(engine):
    result = engine.process_notam(SAMPLE_NOTAM)
    assert result.status == 'UNKNOWN'
    assert result.priority == 'MEDIUM'
    assert result.confidence == 0.95
    assert not result.needs_review
