"""
Tests for uploads, including cancellation.
"""

import threading

import pytest

from fixture_helpers import ScriptedTransport, reply

from boxsync import BoxManager
from boxsync.lib import error
from boxsync.objects import ObjectType
from boxsync.statuses import (
    FileNewCopyStatus,
    OverwriteFileStatus,
    UploadFileError,
    UploadFileStatus,
)

UPLOAD_OK = b"""<response><status>upload_ok</status><files>
<file file_name="a.txt" id="1234" folder_id="5" shared="0" public_name="" error=""/>
</files></response>"""

SOME_FAILED = b"""<response><status>upload_some_files_failed</status><files>
<file file_name="big.iso" id="0" folder_id="5" error="storage_limit_exceeded"/>
</files></response>"""

NEW_COPY_OK = b"""<response><status>upload_ok</status><files>
<file file_name="a.txt" id="1250" folder_id="11" shared="0" error=""/>
</files></response>"""


def make_manager(upload_body, replies=None, **kwargs):
    transport = ScriptedTransport(replies, upload_body=upload_body)
    manager = BoxManager(api_key="key", auth_token="tok", transport=transport, **kwargs)
    return manager, transport


class TestUpload:
    def test_success(self, tmp_path):
        path = tmp_path / "a.txt"
        path.write_text("hello")
        manager, transport = make_manager(UPLOAD_OK)
        response = manager.upload_file(path, 5, user_state="u")
        assert response.status == UploadFileStatus.SUCCESSFUL
        assert response.error is None
        assert response.user_state == "u"
        assert response.result.folder_id == 5
        [(uploaded, outcome)] = response.result.uploaded_files.items()
        assert uploaded.id == 1234
        assert uploaded.name == "a.txt"
        assert outcome == UploadFileError.NONE
        assert transport.upload_calls == [("tok", 5, str(path))]
        assert transport.upload_actions == ["upload"]

    def test_some_files_failed(self):
        manager, transport = make_manager(SOME_FAILED)
        response = manager.upload_file("big.iso", 5)
        assert response.status == UploadFileStatus.FAILED
        assert response.result is None
        assert response.error is None

    def test_malformed_reply(self):
        manager, transport = make_manager(b"<html>proxy error")
        response = manager.upload_file("a.txt", 5)
        assert response.status == UploadFileStatus.UNKNOWN
        assert response.result is None
        assert response.error == "<html>proxy error"

    def test_async_success(self):
        manager, transport = make_manager(UPLOAD_OK)
        results = []
        done = threading.Event()

        def callback(response):
            results.append(response)
            done.set()

        pending = manager.upload_file_async("a.txt", 5, callback, "u")
        assert done.wait(5)
        assert pending.result(timeout=5) is results[0]
        assert results[0].status == UploadFileStatus.SUCCESSFUL
        assert not pending.cancelled
        manager.close()

    def test_async_requires_callback(self):
        manager, transport = make_manager(UPLOAD_OK)
        with pytest.raises(error.ArgumentError):
            manager.upload_file_async("a.txt", 5, None)
        assert transport.call_count == 0

    def test_async_transport_error(self):
        manager, transport = make_manager(OSError("disk on fire"))
        results = []
        pending = manager.upload_file_async("a.txt", 5, results.append)
        with pytest.raises(OSError):
            pending.result(timeout=5)
        assert len(results) == 1
        assert results[0].status == UploadFileStatus.UNKNOWN
        assert isinstance(results[0].error, OSError)


class TestCancellation:
    def test_cancel_during_transfer(self):
        started = threading.Event()

        def transfer(cancel_event):
            started.set()
            assert cancel_event.wait(5)
            raise error.UploadCancelledError("upload", "cancelled")

        manager, transport = make_manager(transfer)
        results = []
        pending = manager.upload_file_async("a.txt", 5, results.append, "u")
        assert started.wait(5)
        pending.cancel()
        response = pending.result(timeout=5)
        assert response.status == UploadFileStatus.CANCELLED
        assert response.result is None
        assert response.error is None
        assert response.user_state == "u"
        assert results == [response]
        assert pending.cancelled

    def test_cancel_before_start(self):
        release = threading.Event()

        class BusyTransport(ScriptedTransport):
            def execute(self, request):
                release.wait(5)
                return super().execute(request)

        transport = BusyTransport(
            {"delete": reply("s_delete_node")}, upload_body=UPLOAD_OK
        )
        manager = BoxManager(
            api_key="key", auth_token="tok", transport=transport, max_workers=1
        )
        ## keep the only worker busy
        manager.delete_object_async(1, ObjectType.FILE, lambda response: None)

        results = []
        pending = manager.upload_file_async("a.txt", 5, results.append)
        pending.cancel()
        release.set()
        manager.close()

        assert pending.result() is None
        assert len(results) == 1
        assert results[0].status == UploadFileStatus.CANCELLED
        assert results[0].result is None
        assert transport.upload_calls == []

    def test_blocking_upload_cancelled_by_transport(self):
        manager, transport = make_manager(
            error.UploadCancelledError("upload", "cancelled")
        )
        response = manager.upload_file("a.txt", 5)
        assert response.status == UploadFileStatus.CANCELLED
        assert response.result is None


class TestOverwriteAndNewCopy:
    def test_overwrite(self, tmp_path):
        path = tmp_path / "a.txt"
        path.write_text("hello again")
        manager, transport = make_manager(UPLOAD_OK)
        response = manager.overwrite_file(path, 1234, user_state="u")
        assert response.status == OverwriteFileStatus.SUCCESSFUL
        assert response.error is None
        assert response.user_state == "u"
        [replaced] = response.result.uploaded_files
        assert replaced.id == 1234
        assert response.result.folder_id == 5
        assert transport.upload_calls == [("tok", 1234, str(path))]
        assert transport.upload_actions == ["overwrite"]

    def test_overwrite_failed(self):
        manager, transport = make_manager(SOME_FAILED)
        response = manager.overwrite_file("big.iso", 1234)
        assert response.status == OverwriteFileStatus.FAILED
        assert response.result is None
        assert response.error is None

    def test_new_copy(self):
        manager, transport = make_manager(NEW_COPY_OK)
        response = manager.file_new_copy("a.txt", 1234)
        assert response.status == FileNewCopyStatus.SUCCESSFUL
        assert response.result.folder_id == 11
        [copy] = response.result.uploaded_files
        assert copy.id == 1250
        assert transport.upload_calls == [("tok", 1234, "a.txt")]
        assert transport.upload_actions == ["new_copy"]

    def test_new_copy_not_logged_in(self):
        manager, transport = make_manager(
            b"<response><status>not_logged_in</status></response>"
        )
        response = manager.file_new_copy("a.txt", 1234)
        assert response.status == FileNewCopyStatus.NOT_LOGGED_IN
        assert response.result is None

    def test_malformed_reply(self):
        manager, transport = make_manager(b"<html>proxy error")
        response = manager.overwrite_file("a.txt", 1234)
        assert response.status == OverwriteFileStatus.UNKNOWN
        assert response.error == "<html>proxy error"

    @pytest.mark.parametrize(
        "start,family",
        [
            (lambda m, cb: m.overwrite_file_async("a.txt", 1234, cb, "u"), OverwriteFileStatus),
            (lambda m, cb: m.file_new_copy_async("a.txt", 1234, cb, "u"), FileNewCopyStatus),
        ],
        ids=["overwrite", "new_copy"],
    )
    def test_async(self, start, family):
        manager, transport = make_manager(NEW_COPY_OK)
        results = []
        done = threading.Event()

        def callback(response):
            results.append(response)
            done.set()

        pending = start(manager, callback)
        assert done.wait(5)
        assert pending.result(timeout=5) is results[0]
        assert results[0].status == family.SUCCESSFUL
        assert results[0].user_state == "u"
        manager.close()

    def test_async_requires_callback(self):
        manager, transport = make_manager(UPLOAD_OK)
        with pytest.raises(error.ArgumentError):
            manager.overwrite_file_async("a.txt", 1234, None)
        with pytest.raises(error.ArgumentError):
            manager.file_new_copy_async("a.txt", 1234, None)
        assert transport.call_count == 0

    def test_cancel_during_new_copy(self):
        started = threading.Event()

        def transfer(cancel_event):
            started.set()
            assert cancel_event.wait(5)
            raise error.UploadCancelledError("new_copy", "cancelled")

        manager, transport = make_manager(transfer)
        results = []
        pending = manager.file_new_copy_async("a.txt", 1234, results.append)
        assert started.wait(5)
        pending.cancel()
        response = pending.result(timeout=5)
        assert response.status == FileNewCopyStatus.CANCELLED
        assert response.result is None
        assert results == [response]
