from notam_parser.flight_level_extractor import (
    FlightLevelExtractor, FlightLevelRange, extract_flight_levels,
    meters_to_flight_level, resolve_flight_levels
)


def test_q_code_flight_levels():
    """Q-code 고도 필드를 그대로 사용"""
    result = extract_flight_levels("Q)ZLHW/QARLC/IV/NBO/E/187/217/3600N10400E")
    assert result == FlightLevelRange('187', '217')
    assert str(result) == 'FL187-FL217'


def test_q_code_keeps_leading_zeros():
    result = extract_flight_levels("Q)RKRR/QRTCA/IV/BO/W/000/050/3730N12630E005")
    assert str(result) == 'FL000-FL050'


def test_q_code_wins_over_text_range():
    """Q-code 와 본문 FL 범위가 함께 있으면 Q-code 우선"""
    text = "Q)ZLHW/QARLC/IV/NBO/E/187/217/\nE) W213 CLSD FL300-FL400"
    assert str(extract_flight_levels(text)) == 'FL187-FL217'


def test_malformed_q_code_falls_through_to_text_range():
    text = "Q)ZLHW/QARLC/IV/NBO/E/ABC/DEF/ E) W213 CLSD FL300-FL400"
    assert str(extract_flight_levels(text)) == 'FL300-FL400'


def test_text_flight_level_range():
    assert str(extract_flight_levels("ROUTE CLSD BTN FL 290 – FL 350")) == 'FL290-FL350'
    assert str(extract_flight_levels("route closed fl120-fl180")) == 'FL120-FL180'


def test_metric_altitude_conversion():
    """미터 고도 -> FL 변환 (round(m * 3.28 / 100), 3자리)"""
    result = extract_flight_levels("9,000M AND 6,000M")
    assert str(result) == 'FL295-FL197', f"변환 결과: {result}"


def test_metric_altitude_zero_padding():
    result = extract_flight_levels("BTN 1200M AND 2,400M AMSL")
    assert result == FlightLevelRange('039', '079')


def test_meters_to_flight_level_rounds_half_up():
    assert meters_to_flight_level(6000) == '197'
    assert meters_to_flight_level(9000) == '295'
    assert meters_to_flight_level(0) == '000'
    assert meters_to_flight_level(625) == '021'


def test_text_range_wins_over_metric():
    text = "FL100-FL200 OR 9,000M AND 6,000M"
    assert str(extract_flight_levels(text)) == 'FL100-FL200'


def test_no_flight_levels():
    extractor = FlightLevelExtractor()
    assert extractor.extract("W213 URBEB-IDSUD CLSD") is None
    assert extractor.extract("") is None
    assert resolve_flight_levels("W213 URBEB-IDSUD CLSD") == 'GND-UNL'


def test_non_ascii_q_code_digits_fall_through():
    """Q-code 고도 필드는 ASCII 숫자만 인정"""
    text = "Q)ZLHW/QARLC/IV/NBO/E/١٨٧/٢١٧/ FL300-FL400"
    assert str(extract_flight_levels(text)) == 'FL300-FL400'


def test_non_ascii_metric_digits_ignored():
    assert extract_flight_levels("٩٠٠٠M AND ٦٠٠٠M") is None
