"""
설정 로더

settings.yaml 로드 및 운영 모드별 설정 생성
"""

from dataclasses import dataclass
from pathlib import Path

import yaml

from core.constants import Defaults, Paths
from core.types import AppMode


@dataclass(frozen=True)
class AppConfig:
    """애플리케이션 설정 (settings.yaml에서 로드)

    불변 데이터 구조로 설정 변경 방지
    """

    mode: AppMode
    payment_markers: tuple[str, ...]
    web_host: str
    web_port: int


class SettingsLoadError(Exception):
    """Settings 로드 실패 예외"""

    pass


def _parse_markers(ledger_config: dict) -> tuple[str, ...]:
    """ledger.payment_markers 검증

    비어 있는 문자열은 모든 항목과 일치하므로 거부.
    """
    raw = ledger_config.get("payment_markers")
    if raw is None:
        return Defaults.PAYMENT_MARKERS

    if not isinstance(raw, list):
        raise SettingsLoadError(
            "settings.yaml의 ledger.payment_markers는 목록이어야 합니다"
        )

    markers = tuple(str(m).strip() for m in raw)
    if any(not m for m in markers):
        raise SettingsLoadError(
            "settings.yaml의 ledger.payment_markers에 빈 값이 있습니다"
        )
    return markers


def load_settings(path: Path | None = None) -> AppConfig:
    """settings.yaml 파일 로드

    Args:
        path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        AppConfig 인스턴스

    Raises:
        SettingsLoadError: 파일이 없거나 형식이 잘못된 경우
        ValueError: 유효하지 않은 mode인 경우
    """
    if path is None:
        path = Paths.SETTINGS_FILE

    if not path.exists():
        raise SettingsLoadError(f"settings.yaml 파일을 찾을 수 없습니다: {path}")

    try:
        content = path.read_text(encoding="utf-8")
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise SettingsLoadError(f"settings.yaml 파싱 실패: {e}") from e

    if data is None:
        raise SettingsLoadError("settings.yaml이 비어 있습니다")

    # mode 검증
    mode_str = data.get("mode")
    if mode_str is None:
        raise SettingsLoadError("settings.yaml에 'mode' 필드가 없습니다")

    try:
        mode = AppMode(mode_str)
    except ValueError as e:
        valid_modes = [m.value for m in AppMode]
        raise ValueError(
            f"유효하지 않은 mode입니다: '{mode_str}'. "
            f"유효한 값: {valid_modes}"
        ) from e

    markers = _parse_markers(data.get("ledger") or {})

    web_config = data.get("web") or {}

    return AppConfig(
        mode=mode,
        payment_markers=markers,
        web_host=web_config.get("host", Defaults.WEB_HOST),
        web_port=int(web_config.get("port", Defaults.WEB_PORT)),
    )


def get_db_path(config: AppConfig) -> Path:
    """모드에 따른 DB 경로 반환

    Args:
        config: AppConfig 인스턴스

    Returns:
        DB 파일 경로 (Path 타입)
    """
    if config.mode == AppMode.PRODUCTION:
        return Paths.PROD_DB
    return Paths.DEMO_DB


class Settings:
    """애플리케이션 설정 (싱글턴 패턴)

    settings.yaml을 로드하고 관련 설정을 제공
    """

    _instance: "Settings | None" = None
    _config: AppConfig | None = None

    def __new__(cls, settings_path: Path | None = None) -> "Settings":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self, settings_path: Path | None = None) -> None:
        if self._config is None:
            type(self)._config = load_settings(settings_path)

    @property
    def mode(self) -> AppMode:
        """현재 운영 모드"""
        assert self._config is not None
        return self._config.mode

    @property
    def payment_markers(self) -> tuple[str, ...]:
        """주문 결제 중복 표식"""
        assert self._config is not None
        return self._config.payment_markers

    @property
    def web_host(self) -> str:
        assert self._config is not None
        return self._config.web_host

    @property
    def web_port(self) -> int:
        assert self._config is not None
        return self._config.web_port

    @property
    def db_path(self) -> Path:
        """현재 모드의 DB 경로"""
        assert self._config is not None
        return get_db_path(self._config)

    @classmethod
    def reset(cls) -> None:
        """싱글턴 인스턴스 초기화 (테스트용)"""
        cls._instance = None
        cls._config = None


def get_settings(settings_path: Path | None = None) -> Settings:
    """Settings 인스턴스 반환

    Args:
        settings_path: settings.yaml 경로 (None이면 기본 경로 사용)

    Returns:
        Settings 싱글턴 인스턴스
    """
    return Settings(settings_path)
