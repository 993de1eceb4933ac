"""
NOTAM 항로/고도 자동 추출 및 자가 학습 파서
"""
