"""Unit tests for the blob store, notification, auth and Redis adapters."""
import json
from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock, patch

import pytest
import requests
from jose import jwt
from minio.error import S3Error
from urllib3.exceptions import MaxRetryError

from shared.adapters import redis_adapter
from shared.adapters.auth_client import AuthClientError, HTTPAuthClient, decode_access_token
from shared.adapters.notifications import HTTPFunctionNotifier, NotificationError
from shared.domain.exceptions import StorageError
from case.adapters.blob_store import MinIOBlobStore
from case.domain.events import CaseStatusChanged, ConsentSigned

SECRET = "test-secret"


class BucketMissing(S3Error):
    """S3Error without the HTTP response details the real client attaches."""

    def __init__(self, message):
        Exception.__init__(self, message)
        self.text = message

    def __str__(self):
        return self.text


def response(status=200, body=None):
    resp = MagicMock()
    resp.status_code = status
    resp.content = json.dumps(body).encode() if body is not None else b""
    resp.json.return_value = body
    if status >= 400:
        resp.raise_for_status.side_effect = requests.exceptions.HTTPError(f"{status} error", response=resp)
    return resp


class TestMinIOBlobStore:

    def test_put_creates_bucket_once(self):
        client = MagicMock()
        client.bucket_exists.return_value = False
        store = MinIOBlobStore(client=client, public_base_url="http://minio.test/")

        store.put("case-documents", "reports/a.pdf", b"one", "application/pdf")
        store.put("case-documents", "reports/b.pdf", b"two", "application/pdf")

        client.make_bucket.assert_called_once_with("case-documents")
        assert client.put_object.call_count == 2
        kwargs = client.put_object.call_args.kwargs
        assert kwargs["object_name"] == "reports/b.pdf"
        assert kwargs["length"] == 3
        assert kwargs["content_type"] == "application/pdf"

    def test_s3_error_becomes_storage_error(self):
        client = MagicMock()
        client.bucket_exists.return_value = True
        client.put_object.side_effect = BucketMissing("NoSuchBucket")
        store = MinIOBlobStore(client=client, public_base_url="http://minio.test")

        with pytest.raises(StorageError, match="NoSuchBucket"):
            store.put("case-files", "clinic-1/k.pdf", b"x", "application/pdf")

    def test_unreachable_minio_becomes_storage_error(self):
        client = MagicMock()
        client.bucket_exists.return_value = True
        client.put_object.side_effect = MaxRetryError(None, "/case-documents/reports/a.pdf", "connection refused")
        store = MinIOBlobStore(client=client, public_base_url="http://minio.test")

        with pytest.raises(StorageError, match="Failed to store reports/a.pdf"):
            store.put("case-documents", "reports/a.pdf", b"x", "application/pdf")

    def test_public_url(self):
        store = MinIOBlobStore(client=MagicMock(), public_base_url="http://minio.test/")
        assert store.public_url("case-documents", "reports/a.pdf") == "http://minio.test/case-documents/reports/a.pdf"


class TestHTTPFunctionNotifier:

    def test_invoke_posts_payload(self):
        notifier = HTTPFunctionNotifier(base_url="http://functions.test/v1/", api_key="key", timeout=5)

        with patch("shared.adapters.notifications.requests.post", return_value=response(body={"sent": True})) as post:
            result = notifier.invoke("send-order-notification", {"order_id": "o-1"})

        assert result == {"sent": True}
        args, kwargs = post.call_args
        assert args[0] == "http://functions.test/v1/send-order-notification"
        assert kwargs["json"] == {"order_id": "o-1"}
        assert kwargs["headers"]["Authorization"] == "Bearer key"
        assert kwargs["timeout"] == 5

    def test_http_error_raises_notification_error(self):
        notifier = HTTPFunctionNotifier(base_url="http://functions.test", api_key="")

        with patch("shared.adapters.notifications.requests.post", return_value=response(status=500, body={})):
            with pytest.raises(NotificationError):
                notifier.invoke("send-order-notification", {})

    def test_network_error_raises_notification_error(self):
        notifier = HTTPFunctionNotifier(base_url="http://functions.test", api_key="")

        with patch("shared.adapters.notifications.requests.post",
                   side_effect=requests.exceptions.ConnectionError("refused")):
            with pytest.raises(NotificationError, match="Network error"):
                notifier.invoke("send-report-notification", {})


class TestAuth:

    def test_decode_valid_token(self):
        token = jwt.encode({"sub": "auth-1", "aud": "authenticated"}, SECRET, algorithm="HS256")

        claims = decode_access_token(token, secret=SECRET, audience="authenticated")

        assert claims["sub"] == "auth-1"

    def test_wrong_secret_rejected(self):
        token = jwt.encode({"sub": "auth-1", "aud": "authenticated"}, "other-secret", algorithm="HS256")

        with pytest.raises(AuthClientError):
            decode_access_token(token, secret=SECRET, audience="authenticated")

    def test_expired_token_rejected(self):
        expired = datetime.now(timezone.utc) - timedelta(minutes=5)
        token = jwt.encode({"sub": "auth-1", "aud": "authenticated", "exp": expired}, SECRET, algorithm="HS256")

        with pytest.raises(AuthClientError):
            decode_access_token(token, secret=SECRET, audience="authenticated")

    def test_token_without_subject_rejected(self):
        token = jwt.encode({"aud": "authenticated"}, SECRET, algorithm="HS256")

        with pytest.raises(AuthClientError, match="no subject"):
            decode_access_token(token, secret=SECRET, audience="authenticated")

    def test_sign_up_returns_auth_id(self):
        client = HTTPAuthClient(base_url="http://auth.test/v1", anon_key="anon")

        with patch("shared.adapters.auth_client.requests.post",
                   return_value=response(body={"user": {"id": "auth-42"}})) as post:
            auth_id = client.sign_up("new@clinic.test", "pw-123456", {"first_name": "Nia"})

        assert auth_id == "auth-42"
        assert post.call_args.args[0] == "http://auth.test/v1/signup"
        assert post.call_args.kwargs["headers"]["apikey"] == "anon"

    def test_auth_error_message_surfaced(self):
        client = HTTPAuthClient(base_url="http://auth.test/v1", anon_key="anon")

        with patch("shared.adapters.auth_client.requests.post",
                   return_value=response(status=422, body={"msg": "User already registered"})):
            with pytest.raises(AuthClientError, match="User already registered"):
                client.sign_up("dup@clinic.test", "pw-123456")


class TestRedisPublish:

    def test_event_serialized_with_type(self, fake_redis):
        pubsub = fake_redis.pubsub(ignore_subscribe_messages=True)
        pubsub.subscribe("portal:cases")

        redis_adapter.publish("portal:cases", CaseStatusChanged(
            case_id="case-1", case_number="PGT-261019-ABC123", old_status="in_progress", new_status="cancelled"))

        message = None
        for _ in range(5):
            message = pubsub.get_message(timeout=0.1)
            if message:
                break
        body = json.loads(message["data"])
        assert body["event_type"] == "CaseStatusChanged"
        assert body["new_status"] == "cancelled"

    def test_datetimes_serialized_as_iso(self):
        signed_at = datetime(2026, 10, 3, 12, 0, tzinfo=timezone.utc)

        body = json.loads(redis_adapter._serialize_event(
            ConsentSigned(consent_id="c-1", case_id="case-1", signer_role="patient", signed_at=signed_at)))

        assert body["signed_at"] == signed_at.isoformat()
