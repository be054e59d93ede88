# meydan/services/storage_service.py
import uuid
import logging
from datetime import timedelta
from typing import Optional
from urllib.parse import unquote, urlparse

from flask import Flask
from firebase_admin import storage

from meydan.models.post import MediaType


class StorageService:
    """
    미디어 파일용 공개 버킷을 다루는 서비스 클래스입니다.
    객체 경로는 '{user_id}/{무작위 토큰}.{확장자}' 형식을 따릅니다.
    """

    def __init__(self):
        """버킷은 init_app 에서 주입됩니다."""
        self.bucket = None

    def init_app(self, app: Flask, bucket=None):
        """
        Flask 앱 초기화 과정에서 호출되어 미디어 버킷을 설정합니다.

        :param app: Flask 애플리케이션 객체
        :param bucket: 테스트 등에서 직접 주입할 버킷 객체 (선택)
        """
        if bucket is not None:
            self.bucket = bucket
            return

        bucket_name = app.config.get('FIREBASE_STORAGE_BUCKET')
        if not bucket_name:
            raise ValueError("FIREBASE_STORAGE_BUCKET 설정이 .env 또는 설정 파일에 필요합니다.")

        self.bucket = storage.bucket(bucket_name)
        logging.info("StorageService: 미디어 버킷이 성공적으로 초기화되었습니다.")

    def _require_bucket(self):
        if not self.bucket:
            raise RuntimeError("StorageService가 초기화되지 않았습니다. init_app을 먼저 호출해주세요.")

    @staticmethod
    def build_media_path(user_id: str, filename: str) -> str:
        extension = filename.rsplit('.', 1)[-1] if '.' in filename else ''
        token = uuid.uuid4().hex
        return f"{user_id}/{token}.{extension}" if extension else f"{user_id}/{token}"

    def generate_upload_url(self, user_id: str, filename: str, content_type: str) -> dict:
        """
        클라이언트가 서버를 거치지 않고 직접 업로드(PUT)할 수 있는 Pre-signed URL을 생성합니다.

        :param user_id: 현재 로그인된 사용자의 ID (객체 경로의 첫 구간)
        :param filename: 원본 파일명 (확장자 파악에 사용)
        :param content_type: 업로드할 파일의 MIME 타입 (예: "image/jpeg")
        :return: 업로드 URL, 객체 경로, 공개 URL, 미디어 종류
        """
        self._require_bucket()

        file_path = self.build_media_path(user_id, filename)
        blob = self.bucket.blob(file_path)

        # 15분 동안 유효한 업로드 전용 URL
        upload_url = blob.generate_signed_url(
            version="v4",
            expiration=timedelta(minutes=15),
            method="PUT",
            content_type=content_type
        )

        return {
            "upload_url": upload_url,
            "file_path": file_path,
            "public_url": blob.public_url,
            "media_type": MediaType.from_mime_type(content_type).value,
        }

    def object_path_from_url(self, media_url: str) -> Optional[str]:
        """공개 URL에서 버킷 내 객체 경로를 추출합니다. 이 버킷의 URL이 아니면 None."""
        self._require_bucket()
        path = unquote(urlparse(media_url).path)
        marker = f"/{self.bucket.name}/"
        if marker not in path:
            return None
        return path.split(marker, 1)[1] or None

    def delete_media(self, media_url: str) -> bool:
        """
        게시물 삭제 시 연결된 미디어 객체를 최선 노력(best-effort)으로 삭제합니다.
        실패는 로그로만 남기고 예외를 던지지 않습니다.

        :return: 실제로 삭제했으면 True
        """
        try:
            file_path = self.object_path_from_url(media_url)
            if not file_path:
                logging.warning(f"미디어 URL에서 객체 경로를 찾을 수 없습니다: {media_url}")
                return False
            self.bucket.blob(file_path).delete()
            return True
        except Exception as e:
            logging.error(f"Storage 미디어 삭제 실패 (url: {media_url}): {e}")
            return False
