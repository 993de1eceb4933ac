"""
키-값 저장소
규칙 세트와 처리 로그를 고정 키 아래 텍스트 블롭으로 보관
"""

import os
import logging
from typing import Dict, Optional

from .errors import PersistenceUnavailableError

logger = logging.getLogger(__name__)


class MemoryStorage:
    """메모리 저장소 (데이터 디렉토리가 없는 세션, 테스트용)"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items = dict(initial or {})

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str):
        self._items[key] = value


class FileStorage:
    """파일 저장소: 키 하나당 디렉토리 안의 UTF-8 파일 하나"""

    def __init__(self, directory: str):
        self.directory = directory

    def _path(self, key: str) -> str:
        return os.path.join(self.directory, key)

    def get_item(self, key: str) -> Optional[str]:
        """
        저장된 값 읽기

        Returns:
            Optional[str]: 저장된 텍스트, 없으면 None
        """
        path = self._path(key)
        if not os.path.exists(path):
            return None

        try:
            with open(path, 'r', encoding='utf-8') as f:
                return f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise PersistenceUnavailableError(f"저장소 읽기 실패 ({path}): {e}") from e

    def set_item(self, key: str, value: str):
        """값 저장 (임시 파일에 쓴 뒤 교체)"""
        path = self._path(key)
        tmp_path = path + '.tmp'
        try:
            os.makedirs(self.directory, exist_ok=True)
            with open(tmp_path, 'w', encoding='utf-8') as f:
                f.write(value)
            os.replace(tmp_path, path)
        except OSError as e:
            raise PersistenceUnavailableError(f"저장소 쓰기 실패 ({path}): {e}") from e
        logger.debug(f"저장 완료: {path} ({len(value)} 문자)")
