# meydan/core/errors.py
"""
오류 분류 규칙과 도메인 예외 정의.

백엔드 오류 메시지를 문자열 매칭으로 판별하는 규칙은 아래 SETUP_ERROR_RULES
한 곳에만 모아 둡니다. 규칙은 위에서부터 순서대로 평가되며, 소문자로 바꾼
오류 문자열에 패턴의 모든 부분 문자열이 포함되면 해당 분류가 적용됩니다.
"""
from enum import Enum
from typing import Tuple

GENERIC_ERROR_MESSAGE = "예상치 못한 오류가 발생했습니다. 다시 시도해 주세요."


class ErrorKind(str, Enum):
    SETUP = "setup"        # 배포/설정 상태 문제 -> 설정 안내 화면
    USER = "user"          # 사용자가 볼 수 있는 일반 오류 -> 닫을 수 있는 배너


# (부분 문자열 묶음, 분류)
SETUP_ERROR_RULES: Tuple[Tuple[Tuple[str, ...], ErrorKind], ...] = (
    (("relation", "does not exist"), ErrorKind.SETUP),
    (("schema must be one of",), ErrorKind.SETUP),
    (("permission denied for schema",), ErrorKind.SETUP),
    (("database", "does not exist"), ErrorKind.SETUP),
    (("firestore api has not been used",), ErrorKind.SETUP),
    (("bucket does not exist",), ErrorKind.SETUP),
)


class MeydanError(Exception):
    """프로젝트 공통 기본 예외."""


class SetupRequiredError(MeydanError):
    """백엔드 컬렉션/스키마가 준비되지 않아 설정 안내가 필요한 상태."""


class MutationError(MeydanError):
    """게시물/댓글/좋아요 변경 실패. message 에는 백엔드 원문이 담깁니다."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class AuthError(MeydanError):
    """로그인/회원가입 실패. message 에는 인증 서비스의 원문이 담깁니다."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class PostNotFoundError(LookupError):
    """현재 피드에 존재하지 않는 게시물."""


class EmptyPostError(ValueError):
    """내용과 미디어가 모두 없는 게시물."""


def describe_error(err: BaseException) -> str:
    """
    사용자에게 보여줄 백엔드 오류 원문을 추출합니다.
    - 비어 있지 않은 .message 속성
    - 비어 있지 않은 str(err)
    - 둘 다 없으면 고정된 일반 메시지
    """
    message = getattr(err, 'message', None)
    if isinstance(message, str) and message.strip():
        return message
    text = str(err)
    if text.strip():
        return text
    return GENERIC_ERROR_MESSAGE


def classify_error(err) -> ErrorKind:
    """오류(또는 오류 문자열)를 규칙 표에 따라 분류합니다."""
    text = err if isinstance(err, str) else describe_error(err)
    lowered = text.lower()
    for patterns, kind in SETUP_ERROR_RULES:
        if all(pattern in lowered for pattern in patterns):
            return kind
    return ErrorKind.USER


def is_setup_error(err) -> bool:
    return classify_error(err) is ErrorKind.SETUP
