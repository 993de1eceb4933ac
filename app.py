"""
Self-Training NOTAM Parser - 항로/고도 추출 및 수정 학습 API
"""

from flask import Flask, request, jsonify, Response
import os
import logging
import threading
from datetime import datetime

from dotenv import load_dotenv

from notam_parser.errors import EmptyInputError
from notam_parser.notam_constants import LOG_DOWNLOAD_FILENAME
from notam_processor import NOTAMParserEngine, LOG_FORMAT

# 환경 변수 로드
load_dotenv()

# 로깅 설정
LOG_LEVEL = os.getenv('NOTAM_PARSER_LOG_LEVEL', 'INFO').upper()
logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO), format=LOG_FORMAT)
logger = logging.getLogger(__name__)

# 설정
DATA_FOLDER = os.getenv('NOTAM_PARSER_DATA_DIR', os.path.join(os.path.dirname(os.path.abspath(__file__)), 'data'))


def create_app(engine=None):
    """Flask 앱 생성"""
    app = Flask(__name__)

    app.config['DATA_FOLDER'] = DATA_FOLDER
    app.config['MAX_CONTENT_LENGTH'] = 1 * 1024 * 1024  # 1MB

    # 엔진은 하나, 요청은 순서대로 처리
    if engine is None:
        engine = NOTAMParserEngine(data_dir=app.config['DATA_FOLDER'])
    engine_lock = threading.Lock()
    app.extensions['notam_engine'] = engine

    @app.route('/health')
    def health_check():
        """헬스 체크 엔드포인트"""
        return jsonify({'status': 'healthy', 'timestamp': datetime.now().isoformat()})

    @app.route('/api/process', methods=['POST'])
    def process_notam():
        """NOTAM 처리 API"""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        notam_text = data.get('notam', '')

        try:
            with engine_lock:
                result = engine.process_notam(notam_text)
                output = engine.current_output
        except EmptyInputError as e:
            return jsonify({'error': str(e)}), 400
        except Exception as e:
            logger.error(f"NOTAM 처리 중 오류: {str(e)}")
            return jsonify({'error': f'NOTAM 처리 중 오류가 발생했습니다: {str(e)}'}), 500

        response = result.to_dict()
        response['output'] = output
        return jsonify(response)

    @app.route('/api/teach', methods=['POST'])
    def teach_parser():
        """수정 내용 학습 API"""
        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = {}
        correction = data.get('correction', '')
        notam_text = data.get('notam')

        try:
            with engine_lock:
                new_rules = engine.save_correction(correction, notam_text)
                total_rules = len(engine.get_rules())
        except EmptyInputError as e:
            return jsonify({'error': str(e)}), 400
        except Exception as e:
            logger.error(f"수정 학습 중 오류: {str(e)}")
            return jsonify({'error': f'수정 학습 중 오류가 발생했습니다: {str(e)}'}), 500

        logger.info(f"학습 API: 새 규칙 {len(new_rules)}개")
        return jsonify({
            'success': True,
            'message': f'Parser updated successfully! {len(new_rules)} new rule(s) added.',
            'new_rules': [rule.to_dict() for rule in new_rules],
            'total_rules': total_rules
        })

    @app.route('/api/rules')
    def list_rules():
        """파싱 규칙 목록"""
        with engine_lock:
            rules = engine.get_rules()
        return jsonify({'rules': [rule.to_dict() for rule in rules], 'count': len(rules)})

    @app.route('/api/stats')
    def learning_stats():
        """학습 통계"""
        with engine_lock:
            stats = engine.get_learning_stats()
        return jsonify(stats)

    @app.route('/download_log')
    def download_log():
        """처리 로그 다운로드"""
        try:
            with engine_lock:
                log_text = engine.export_log()
        except EmptyInputError as e:
            return jsonify({'error': str(e)}), 404

        return Response(
            log_text,
            mimetype='text/plain',
            headers={'Content-Disposition': f'attachment; filename={LOG_DOWNLOAD_FILENAME}'}
        )

    return app


if __name__ == '__main__':
    # Cloud Run에서는 PORT 환경변수를 사용, 로컬에서는 5005 사용
    port = int(os.environ.get('PORT', 5005))
    create_app().run(host='0.0.0.0', port=port)
