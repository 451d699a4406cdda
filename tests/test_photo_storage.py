import base64
import re
from unittest.mock import MagicMock

import pytest

from kiosk.storage.photos import PhotoStorage, StorageNotConfigured, parse_data_url

JPEG = b"\xff\xd8\xff\xe0fake-jpeg"
DATA_URL = "data:image/jpeg;base64," + base64.b64encode(JPEG).decode()


@pytest.fixture
def storage_settings(settings):
    return settings.model_copy(update={
        "s3_bucket": "visitor-photos",
        "s3_access_key_id": "key",
        "s3_secret_access_key": "secret",
    })


def test_parse_data_url():
    assert parse_data_url(DATA_URL) == ("image/jpeg", JPEG)

    for bad in ("image/jpeg;base64,abc", "data:image/jpeg;base64,***", "data:image/png;base64,"):
        with pytest.raises(ValueError):
            parse_data_url(bad)


def test_upload_puts_object_and_returns_key(storage_settings):
    s3 = MagicMock()
    storage = PhotoStorage(storage_settings, client=s3)

    key = storage.upload_visitor_photo(DATA_URL)

    assert re.match(r"^visits/\d{4}-\d{2}-\d{2}/[0-9a-f-]{36}\.jpg$", key)
    s3.put_object.assert_called_once_with(
        Bucket="visitor-photos", Key=key, Body=JPEG, ContentType="image/jpeg"
    )


def test_presigned_url_valid_for_one_hour(storage_settings):
    s3 = MagicMock()
    s3.generate_presigned_url.return_value = "https://signed.test/x"
    storage = PhotoStorage(storage_settings, client=s3)

    assert storage.generate_presigned_url("visits/a.jpg") == "https://signed.test/x"
    s3.generate_presigned_url.assert_called_once_with(
        "get_object",
        Params={"Bucket": "visitor-photos", "Key": "visits/a.jpg"},
        ExpiresIn=3600,
    )


def test_unconfigured_storage_raises_on_use(settings):
    storage = PhotoStorage(settings)
    assert not storage.configured
    with pytest.raises(StorageNotConfigured):
        storage.upload_visitor_photo(DATA_URL)
    with pytest.raises(StorageNotConfigured):
        storage.generate_presigned_url("visits/a.jpg")
