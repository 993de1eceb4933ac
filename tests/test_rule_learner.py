import pytest

from notam_parser.errors import EmptyInputError
from notam_parser.notam_utils import parse_correction_line
from notam_parser.parsing_rules import RuleStore
from notam_parser.processing_log import LogKind, ProcessingLog
from notam_parser.route_extractor import RouteExtractor
from notam_parser.rule_learner import RuleLearner
from notam_parser.storage import MemoryStorage


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def rule_store(storage):
    store = RuleStore(storage)
    store.load()
    return store


@pytest.fixture
def processing_log(storage):
    log = ProcessingLog(storage)
    log.load()
    return log


@pytest.fixture
def learner(rule_store, processing_log):
    return RuleLearner(rule_store, processing_log)


def test_learn_single_correction(learner, rule_store, processing_log):
    """수정 라인 하나 -> 학습 규칙 하나"""
    before = rule_store.all()

    new_rules = learner.learn("A1234/25 NOTAMN\nE) W100: ABC - FGH CLSD", "W100 ABCDE-FGHIJ FL100-FL200")

    assert len(new_rules) == 1
    rule = new_rules[0]
    assert rule.learned
    assert rule.flags == 'gi'
    assert rule.id.startswith('learned-')
    assert rule.description == 'Learned from correction: W100 ABCDE-FGHIJ'
    for literal in ('W100', 'ABCDE', 'FGHIJ'):
        assert literal in rule.pattern, f"패턴에 {literal} 없음: {rule.pattern}"
    assert rule.is_valid

    # 기존 규칙은 그대로, 새 규칙은 끝에 추가
    assert rule_store.all() == before + (rule,)

    entries = processing_log.entries()
    assert len(entries) == 1
    assert entries[0].kind == LogKind.CORRECTION
    assert entries[0].raw_notam_text == 'A1234/25 NOTAMN E) W100: ABC - FGH CLSD'
    assert entries[0].output_text == 'W100 ABCDE-FGHIJ FL100-FL200'


def test_learn_skips_invalid_lines(learner, rule_store):
    correction = "W1 AAA-BBB\nINVALID\nW2 CCCBBB\n\n  W3 DDD-EEE FL100-FL200  \nW4 -FFF"
    new_rules = learner.learn("ANY NOTAM", correction)

    assert [rule.description for rule in new_rules] == [
        'Learned from correction: W1 AAA-BBB',
        'Learned from correction: W3 DDD-EEE',
    ]
    assert len({rule.id for rule in new_rules}) == 2
    assert len(rule_store) == 5


def test_learn_records_correction_without_new_rules(learner, rule_store, processing_log):
    new_rules = learner.learn("ANY NOTAM", "NOTHING USEFUL")
    assert new_rules == ()
    assert len(rule_store) == 3
    assert processing_log.count(LogKind.CORRECTION) == 1


@pytest.mark.parametrize('notam, correction', [
    ("", "W1 AAA-BBB"),
    ("ANY NOTAM", ""),
    ("ANY NOTAM", "   \n  "),
])
def test_learn_rejects_empty_input(learner, rule_store, processing_log, notam, correction):
    with pytest.raises(EmptyInputError):
        learner.learn(notam, correction)
    assert len(rule_store) == 3
    assert len(processing_log) == 0


def test_learned_rule_escapes_literals(learner):
    rule = learner.build_rule('UL(1)', 'A.B+C', 'D*E')
    assert rule.is_valid
    assert r'UL\(1\)' in rule.pattern


def test_learned_rule_improves_extraction(learner, rule_store):
    """학습 후 항로가 붙은 라인으로 추출"""
    notam = "E) ATS RTE B330.ELNEX-DOMIL CLSD"
    extractor = RouteExtractor(rule_store)
    assert extractor.extract(notam).routes == ('ELNEX-DOMIL GND-UNL',)

    learner.learn(notam, "B330 ELNEX-DOMIL")

    assert extractor.extract(notam).routes == ('B330 ELNEX-DOMIL GND-UNL',)


def test_correction_without_airway_uses_route_as_airway():
    """항로명 없는 수정 라인은 첫 토큰을 항로명으로 사용"""
    assert parse_correction_line('ABCDE-FGHIJ FL100-FL200') == ('ABCDE-FGHIJ', 'FL100', 'FL200')
    assert parse_correction_line('ABCDE-FGHIJ') is None


def test_learn_correction_without_airway(learner):
    new_rules = learner.learn("ANY NOTAM", "ABCDE-FGHIJ FL100-FL200")

    assert [rule.description for rule in new_rules] == ['Learned from correction: ABCDE-FGHIJ FL100-FL200']
    assert new_rules[0].is_valid
