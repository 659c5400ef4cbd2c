"""
Object storage for frame images: local disk or S3
"""

import logging
import os
import boto3
from botocore.exceptions import ClientError
from pathlib import Path
from typing import Optional, Tuple
from dotenv import load_dotenv
from ..content_types import content_type_for

load_dotenv()

logger = logging.getLogger(__name__)


class LocalStorage:
    """
    Stores objects as files under ``root/<bucket>/<key>``
    """

    def __init__(self, root):
        self.root = Path(root)

    def _path(self, bucket: str, key: str) -> Path:
        return self.root / bucket / key

    def exists(self, bucket: str, key: str) -> bool:
        return self._path(bucket, key).is_file()

    def put(self, bucket: str, key: str, content: bytes, content_type: Optional[str] = None):
        path = self._path(bucket, key)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(content)
        logger.info("Stored %s/%s (%d bytes)", bucket, key, len(content))

    def get(self, bucket: str, key: str) -> Optional[Tuple[bytes, str]]:
        """Return (content, content_type), or None if the object does not exist"""
        path = self._path(bucket, key)
        if not path.is_file():
            return None
        return path.read_bytes(), content_type_for(key)

    def delete(self, bucket: str, key: str) -> bool:
        """Delete an object; returns False if there was nothing to delete"""
        path = self._path(bucket, key)
        if not path.is_file():
            return False
        path.unlink()
        logger.info("Deleted %s/%s", bucket, key)
        return True


class S3Storage:
    """
    Stores objects in one S3 bucket; each logical bucket becomes a key prefix
    """

    def __init__(self, s3_client=None, bucket_name: Optional[str] = None, prefix: Optional[str] = None):
        """Initialize S3 client with AWS credentials from environment"""
        self.s3_client = s3_client or boto3.client(
            's3',
            region_name=os.getenv('AWS_DEFAULT_REGION', 'ap-northeast-2'),
            aws_access_key_id=os.getenv('AWS_ACCESS_KEY_ID'),
            aws_secret_access_key=os.getenv('AWS_SECRET_ACCESS_KEY')
        )
        self.bucket_name = bucket_name or os.getenv('S3_BUCKET', 'frame-manager')
        self.prefix = prefix if prefix is not None else os.getenv('S3_PREFIX', '')

    def _key(self, bucket: str, key: str) -> str:
        return f"{self.prefix}{bucket}/{key}"

    def exists(self, bucket: str, key: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=self._key(bucket, key))
            return True
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in ('404', 'NoSuchKey', 'NotFound'):
                return False
            raise

    def put(self, bucket: str, key: str, content: bytes, content_type: Optional[str] = None):
        s3_key = self._key(bucket, key)
        self.s3_client.put_object(
            Bucket=self.bucket_name,
            Key=s3_key,
            Body=content,
            ContentType=content_type or content_type_for(key)
        )
        logger.info("Uploaded to S3: %s", s3_key)

    def get(self, bucket: str, key: str) -> Optional[Tuple[bytes, str]]:
        try:
            response = self.s3_client.get_object(Bucket=self.bucket_name, Key=self._key(bucket, key))
        except ClientError as e:
            if e.response.get('Error', {}).get('Code') in ('404', 'NoSuchKey', 'NotFound'):
                return None
            raise
        return response['Body'].read(), response.get('ContentType') or content_type_for(key)

    def delete(self, bucket: str, key: str) -> bool:
        # delete_object succeeds for missing keys, so check first to report what was removed
        if not self.exists(bucket, key):
            return False
        s3_key = self._key(bucket, key)
        self.s3_client.delete_object(Bucket=self.bucket_name, Key=s3_key)
        logger.info("Deleted from S3: %s", s3_key)
        return True
