"""
방문자 사진 저장소 (S3 호환 버킷)
업로드 후에는 키만 보관하고, 조회 시 서명된 URL을 발급
"""
import base64
import binascii
import logging
import re
import uuid
from typing import Optional, Tuple

import boto3
from botocore.config import Config as BotoConfig

from kiosk.config import Settings
from kiosk.utils.clock import utcnow

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r"^data:(.+?);base64,(.*)$", re.DOTALL)


class StorageNotConfigured(RuntimeError):
    """버킷 또는 자격 증명이 설정되지 않음"""


def parse_data_url(data_url: str) -> Tuple[str, bytes]:
    """base64 data URL을 (content type, 바이트)로 분해"""
    match = _DATA_URL_RE.match(data_url)
    if not match:
        raise ValueError("Invalid data URL for photo upload")

    content_type, encoded = match.group(1), match.group(2)
    try:
        body = base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError("Invalid base64 payload for photo upload") from e
    if not body:
        raise ValueError("Empty photo payload")
    return content_type, body


def build_photo_key() -> str:
    """visits/YYYY-MM-DD/<uuid>.jpg 형식의 저장 키"""
    return f"visits/{utcnow().date().isoformat()}/{uuid.uuid4()}.jpg"


class PhotoStorage:
    """사진 업로드 및 서명 URL 발급"""

    def __init__(self, settings: Settings, client=None):
        self.bucket = settings.s3_bucket
        self.expires_in = settings.photo_url_expires_seconds
        self._client = client

        if self._client is None and self.bucket and settings.s3_access_key_id and settings.s3_secret_access_key:
            self._client = boto3.client(
                "s3",
                endpoint_url=settings.s3_endpoint,
                region_name=settings.s3_region,
                aws_access_key_id=settings.s3_access_key_id,
                aws_secret_access_key=settings.s3_secret_access_key,
                config=BotoConfig(s3={"addressing_style": "path"}),
            )
            logger.info(f"Initialized S3 client for bucket: {self.bucket}")
        elif self._client is None:
            logger.warning("Photo bucket is not configured; photo uploads will fail until it is set")

    @property
    def configured(self) -> bool:
        return self._client is not None and bool(self.bucket)

    def _require_client(self):
        if not self.configured:
            raise StorageNotConfigured(
                "Photo bucket is not configured. Set S3_BUCKET, S3_ACCESS_KEY_ID and S3_SECRET_ACCESS_KEY."
            )
        return self._client

    def put(self, body: bytes, content_type: str, key: Optional[str] = None) -> str:
        """바이트를 업로드하고 저장 키 반환"""
        client = self._require_client()
        key = key or build_photo_key()
        # 비공개 버킷이므로 ACL 지정 없음
        client.put_object(Bucket=self.bucket, Key=key, Body=body, ContentType=content_type)
        return key

    def upload_visitor_photo(self, data_url: str) -> str:
        """data URL 형식의 사진 업로드"""
        self._require_client()
        content_type, body = parse_data_url(data_url)
        return self.put(body, content_type)

    def generate_presigned_url(self, key: str) -> str:
        """일정 시간(기본 1시간) 유효한 조회 URL 발급"""
        client = self._require_client()
        return client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=self.expires_in,
        )
