"""Tests for the local and S3 modes of the file store."""

from unittest.mock import Mock

import pytest
from botocore.exceptions import ClientError

from app.core.config import settings
from app.core.exceptions import CollaboratorError
from app.services.file_store import FileStore, is_image, is_private, sanitize_name


def test_sanitize_name():
    assert sanitize_name('Jane Doe - 12 Maple St. <rear>') == "Jane_Doe_-_12_Maple_St._rear"
    assert sanitize_name("???") == "unnamed"


def test_local_folder_and_upload(file_store, tmp_path):
    folder = file_store.create_folder("Jane Doe - 12 Maple Street")
    assert folder.startswith("jobs/Jane_Doe_-_12_Maple_Street-")

    stored = file_store.upload(folder, "Delivery Photo.jpg", b"jpeg-bytes", "image/jpeg")

    assert stored.file_id == f"{folder}/Delivery_Photo.jpg"
    assert stored.link == f"{settings.APP_URL}/files/{stored.file_id}"
    assert (tmp_path / "storage" / stored.file_id).read_bytes() == b"jpeg-bytes"
    assert file_store.local_path(stored.file_id) is not None
    assert file_store.download_link(stored.file_id).endswith("?download=1")


def test_local_path_rejects_traversal(file_store):
    assert file_store.local_path("../../etc/passwd") is None
    assert file_store.local_path("jobs/missing.pdf") is None


def test_s3_upload_puts_object():
    client = Mock()
    store = FileStore(bucket="roof-docs", prefix="jobs", client=client)

    stored = store.upload("jobs/jane-1a2b3c4d", "Warranty.pdf", b"%PDF", "application/pdf")

    client.put_object.assert_called_once_with(
        Bucket="roof-docs",
        Key="jobs/jane-1a2b3c4d/Warranty.pdf",
        Body=b"%PDF",
        ContentType="application/pdf",
    )
    assert stored.file_id == "jobs/jane-1a2b3c4d/Warranty.pdf"


def test_s3_failure_raises_collaborator_error():
    client = Mock()
    client.put_object.side_effect = ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
    store = FileStore(bucket="roof-docs", client=client)

    with pytest.raises(CollaboratorError):
        store.upload("jobs/x", "Warranty.pdf", b"%PDF", "application/pdf")


def test_presigned_download_sets_disposition():
    client = Mock()
    client.generate_presigned_url.return_value = "https://s3.example.com/signed"
    store = FileStore(bucket="roof-docs", client=client)

    url = store.presigned_url("jobs/x/Warranty.pdf", download=True)

    assert url == "https://s3.example.com/signed"
    params = client.generate_presigned_url.call_args.kwargs["Params"]
    assert params["ResponseContentDisposition"] == 'attachment; filename="Warranty.pdf"'


def test_is_image():
    assert is_image("roof.JPG")
    assert not is_image("contract.pdf")


def test_private_upload_goes_to_dispatcher_directory(file_store):
    stored = file_store.upload("jobs/jane-1a2b3c4d", "Contract.pdf", b"%PDF", "application/pdf", private=True)
    assert stored.file_id == "jobs/jane-1a2b3c4d/private/Contract.pdf"
    assert is_private(stored.file_id)


def test_is_private():
    assert not is_private("jobs/jane-1a2b3c4d/Completed_Roof_1.jpg")
    assert is_private("jobs/jane-1a2b3c4d/private/Contract.pdf")
    assert is_private("jobs/jane-1a2b3c4d/x/../private/Contract.pdf")
    assert is_private("jobs//private/Contract.pdf")


def test_local_write_failure_raises_collaborator_error(tmp_path):
    blocker = tmp_path / "not-a-directory"
    blocker.write_bytes(b"")
    store = FileStore(bucket="local", prefix="jobs", local_root=str(blocker))

    with pytest.raises(CollaboratorError):
        store.upload("jobs/x", "Warranty.pdf", b"%PDF", "application/pdf")
    with pytest.raises(CollaboratorError):
        store.create_folder("Jane Doe")
