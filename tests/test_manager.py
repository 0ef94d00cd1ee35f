"""
Tests for BoxManager against a scripted transport.  Nothing here
touches the network.
"""

import threading
from datetime import datetime, timezone

import pytest

from fixture_helpers import ScriptedTransport, reply, zipped

from boxsync import BoxManager
from boxsync.lib import error
from boxsync.objects import (
    FolderBase,
    GetUpdatesOptions,
    ObjectType,
    TagPrimitive,
    TagPrimitiveCollection,
    Update,
)
from boxsync.statuses import (
    AddCommentStatus,
    AddToMyBoxStatus,
    CopyObjectStatus,
    CreateFolderStatus,
    DeleteObjectStatus,
    ExportTagsStatus,
    GetAccountInfoStatus,
    GetAuthenticationTokenStatus,
    GetFileInfoStatus,
    GetServerTimeStatus,
    GetTicketStatus,
    GetUpdatesStatus,
    LogoutStatus,
    MoveObjectStatus,
    PrivateShareStatus,
    PublicShareStatus,
    PublicUnshareStatus,
    RegisterNewUserStatus,
    RenameObjectStatus,
    SetDescriptionStatus,
    VerifyRegistrationEmailStatus,
)

USER = {
    "login": "me",
    "email": "me@example.com",
    "access_id": "1",
    "user_id": "7",
    "space_amount": "1000",
    "space_used": "10",
    "max_upload_size": "100",
}


def make_manager(replies=None, **kwargs):
    transport = ScriptedTransport(replies, **kwargs)
    manager = BoxManager(api_key="key", auth_token="tok", transport=transport)
    return manager, transport


class CallbackRecorder:
    """Collects callback invocations and the threads they ran on"""

    def __init__(self):
        self.values = []
        self.threads = []
        self.event = threading.Event()

    def __call__(self, value):
        self.values.append(value)
        self.threads.append(threading.current_thread())
        self.event.set()

    def wait(self, timeout=5):
        assert self.event.wait(timeout), "callback was not called"
        return self.values[0]


## (blocking call, async call, web method, success reply, status family, expected result)
OPERATIONS = [
    (
        lambda m, **kw: m.get_ticket(**kw),
        lambda m, cb, **kw: m.get_ticket_async(cb, **kw),
        "get_ticket",
        reply("get_ticket_ok", ticket="tk"),
        GetTicketStatus,
        "tk",
    ),
    (
        lambda m, **kw: m.create_folder("Pictures", 0, True, **kw),
        lambda m, cb, **kw: m.create_folder_async("Pictures", 0, True, cb, **kw),
        "create_folder",
        reply(
            "create_ok",
            folder={"folder_id": "42", "folder_name": "Pictures", "shared": "1"},
        ),
        CreateFolderStatus,
        FolderBase(id=42, name="Pictures", is_shared=True),
    ),
    (
        lambda m, **kw: m.delete_object(1, ObjectType.FILE, **kw),
        lambda m, cb, **kw: m.delete_object_async(1, ObjectType.FILE, cb, **kw),
        "delete",
        reply("s_delete_node"),
        DeleteObjectStatus,
        None,
    ),
    (
        lambda m, **kw: m.rename_object(1, ObjectType.FOLDER, "new", **kw),
        lambda m, cb, **kw: m.rename_object_async(1, ObjectType.FOLDER, "new", cb, **kw),
        "rename",
        reply("s_rename_node"),
        RenameObjectStatus,
        None,
    ),
    (
        lambda m, **kw: m.move_object(1, ObjectType.FILE, 2, **kw),
        lambda m, cb, **kw: m.move_object_async(1, ObjectType.FILE, 2, cb, **kw),
        "move",
        reply("s_move_node"),
        MoveObjectStatus,
        None,
    ),
    (
        lambda m, **kw: m.copy_object(1, ObjectType.FILE, 2, **kw),
        lambda m, cb, **kw: m.copy_object_async(1, ObjectType.FILE, 2, cb, **kw),
        "copy",
        reply("s_copy_node"),
        CopyObjectStatus,
        None,
    ),
    (
        lambda m, **kw: m.set_description(1, ObjectType.FILE, "d", **kw),
        lambda m, cb, **kw: m.set_description_async(1, ObjectType.FILE, "d", cb, **kw),
        "set_description",
        reply("s_set_description"),
        SetDescriptionStatus,
        None,
    ),
    (
        lambda m, **kw: m.public_share(1, ObjectType.FILE, **kw),
        lambda m, cb, **kw: m.public_share_async(
            1, ObjectType.FILE, None, None, None, False, cb, **kw
        ),
        "public_share",
        reply("share_ok", public_name="abc123"),
        PublicShareStatus,
        "abc123",
    ),
    (
        lambda m, **kw: m.public_unshare(1, ObjectType.FOLDER, **kw),
        lambda m, cb, **kw: m.public_unshare_async(1, ObjectType.FOLDER, cb, **kw),
        "public_unshare",
        reply("unshare_ok"),
        PublicUnshareStatus,
        None,
    ),
    (
        lambda m, **kw: m.private_share(1, ObjectType.FILE, emails=["a@b.c"], **kw),
        lambda m, cb, **kw: m.private_share_async(
            1, ObjectType.FILE, None, "hi", ["a@b.c"], True, cb, **kw
        ),
        "private_share",
        reply("private_share_ok"),
        PrivateShareStatus,
        None,
    ),
    (
        lambda m, **kw: m.add_to_my_box(0, file_id=5, **kw),
        lambda m, cb, **kw: m.add_to_my_box_async(0, None, cb, file_id=5, **kw),
        "add_to_mybox",
        reply("addtomybox_ok"),
        AddToMyBoxStatus,
        None,
    ),
    (
        lambda m, **kw: m.verify_registration_email("me@example.com", **kw),
        lambda m, cb, **kw: m.verify_registration_email_async(
            "me@example.com", cb, **kw
        ),
        "verify_registration_email",
        reply("email_ok"),
        VerifyRegistrationEmailStatus,
        None,
    ),
    (
        lambda m, **kw: m.get_server_time(**kw),
        lambda m, cb, **kw: m.get_server_time_async(cb, **kw),
        "get_server_time",
        reply("get_server_time_ok", time="60"),
        GetServerTimeStatus,
        datetime(1970, 1, 1, 0, 1, tzinfo=timezone.utc),
    ),
    (
        lambda m, **kw: m.get_updates(
            datetime(2009, 1, 1), datetime(2009, 1, 2), GetUpdatesOptions.NO_ZIP, **kw
        ),
        lambda m, cb, **kw: m.get_updates_async(
            datetime(2009, 1, 1), datetime(2009, 1, 2), GetUpdatesOptions.NO_ZIP, cb, **kw
        ),
        "get_updates",
        reply(
            "s_get_updates",
            updates=b'<updates><update update_id="5" update_type="added" folder_id="0"/></updates>',
        ),
        GetUpdatesStatus,
        [Update(id=5, update_type="added", folder_id=0)],
    ),
]

IDS = [op[2] for op in OPERATIONS]


class TestOperations:
    @pytest.mark.parametrize("blocking,_async,method,ok,family,expected", OPERATIONS, ids=IDS)
    def test_blocking_success(self, blocking, _async, method, ok, family, expected):
        manager, transport = make_manager({method: ok})
        response = blocking(manager, user_state="state")
        assert response.status.is_success
        assert isinstance(response.status, family)
        assert response.result == expected
        assert response.user_state == "state"
        assert response.error is None
        assert transport.methods_called() == [method]
        assert transport.requests[0].params["api_key"] == "key"

    @pytest.mark.parametrize("blocking,_async,method,ok,family,expected", OPERATIONS, ids=IDS)
    def test_async_success(self, blocking, _async, method, ok, family, expected):
        manager, transport = make_manager({method: ok})
        callback = CallbackRecorder()
        future = _async(manager, callback, user_state=17)
        response = callback.wait()
        assert future.result(timeout=5) is response
        assert response.status.is_success
        assert response.result == expected
        assert response.user_state == 17
        assert len(callback.values) == 1
        assert callback.threads[0] is not threading.current_thread()
        manager.close()

    @pytest.mark.parametrize("blocking,_async,method,ok,family,expected", OPERATIONS, ids=IDS)
    def test_async_requires_callback(self, blocking, _async, method, ok, family, expected):
        manager, transport = make_manager({method: ok})
        with pytest.raises(error.ArgumentError):
            _async(manager, None)
        assert transport.call_count == 0

    @pytest.mark.parametrize("blocking,_async,method,ok,family,expected", OPERATIONS, ids=IDS)
    def test_unrecognized_status(self, blocking, _async, method, ok, family, expected):
        manager, transport = make_manager({method: reply("gremlins")})
        response = blocking(manager)
        assert response.status == family.UNKNOWN
        assert response.result is None
        assert response.error == "gremlins"


class TestStatuses:
    def test_expected_failure_has_no_payload_and_no_error(self):
        manager, transport = make_manager(
            {"create_folder": reply("e_no_parent_folder")}
        )
        response = manager.create_folder("x", 99)
        assert response.status == CreateFolderStatus.NO_PARENT_FOLDER
        assert response.result is None
        assert response.error is None
        assert not response.ok

    def test_not_logged_in(self):
        manager, transport = make_manager({"move": reply("not_logged_in")})
        response = manager.move_object(1, ObjectType.FILE, 2)
        assert response.status == MoveObjectStatus.NOT_LOGGED_IN
        assert response.error is None

    def test_add_to_my_box_link_exists(self):
        manager, transport = make_manager({"add_to_mybox": reply("link_exists")})
        response = manager.add_to_my_box(0, file_name="pubname")
        assert response.status == AddToMyBoxStatus.LINK_EXISTS
        assert transport.requests[0].params["public_name"] == "pubname"
        assert "file_id" not in transport.requests[0].params


## (call, web method, success status of the family, status family)
MISSING_PAYLOAD = [
    (lambda m: m.get_ticket(), "get_ticket", "get_ticket_ok", GetTicketStatus),
    (
        lambda m: m.get_authentication_token("tk"),
        "get_auth_token",
        "get_auth_token_ok",
        GetAuthenticationTokenStatus,
    ),
    (
        lambda m: m.register_new_user("me@example.com", "secret"),
        "register_new_user",
        "successful_register",
        RegisterNewUserStatus,
    ),
    (lambda m: m.create_folder("Pictures"), "create_folder", "create_ok", CreateFolderStatus),
    (
        lambda m: m.public_share(1, ObjectType.FILE),
        "public_share",
        "share_ok",
        PublicShareStatus,
    ),
    (
        lambda m: m.get_account_info(),
        "get_account_info",
        "get_account_info_ok",
        GetAccountInfoStatus,
    ),
    (
        lambda m: m.get_server_time(),
        "get_server_time",
        "get_server_time_ok",
        GetServerTimeStatus,
    ),
    (
        lambda m: m.add_comment(1, ObjectType.FILE, "hi"),
        "add_comment",
        "add_comment_ok",
        AddCommentStatus,
    ),
    (lambda m: m.get_file_info(21), "get_file_info", "s_get_file_info", GetFileInfoStatus),
    (
        lambda m: m.get_updates(datetime(2009, 1, 1), datetime(2009, 1, 2)),
        "get_updates",
        "s_get_updates",
        GetUpdatesStatus,
    ),
]


class TestMissingPayload:
    @pytest.mark.parametrize(
        "call,method,status,family", MISSING_PAYLOAD, ids=[m[1] for m in MISSING_PAYLOAD]
    )
    def test_success_without_payload_is_unknown(self, call, method, status, family):
        manager, transport = make_manager({method: reply(status)})
        response = call(manager)
        assert response.status == family.UNKNOWN
        assert response.result is None
        assert response.error == status
        assert not response.ok
        assert manager.auth_token == "tok"

    def test_logged_as_deviation(self, caplog):
        manager, transport = make_manager({"create_folder": reply("create_ok")})
        with caplog.at_level("WARNING", logger="boxsync"):
            manager.create_folder("Pictures")
        assert "create_folder succeeded without a result" in caplog.text

    def test_async_success_without_payload(self):
        manager, transport = make_manager({"get_ticket": reply("get_ticket_ok")})
        callback = CallbackRecorder()
        manager.get_ticket_async(callback, user_state="s")
        response = callback.wait()
        assert response.status == GetTicketStatus.UNKNOWN
        assert response.result is None
        assert response.error == "get_ticket_ok"
        assert response.user_state == "s"
        manager.close()

    def test_empty_update_log_is_a_result(self):
        manager, transport = make_manager(
            {"get_updates": reply("s_get_updates", updates=b"<updates/>")}
        )
        response = manager.get_updates(
            datetime(2009, 1, 1), datetime(2009, 1, 2), GetUpdatesOptions.NO_ZIP
        )
        assert response.status == GetUpdatesStatus.SUCCESSFUL
        assert response.result == []
        assert response.ok


class TestObjectTypes:
    def test_blocking_rejects_unknown_type(self):
        manager, transport = make_manager({"delete": reply("s_delete_node")})
        with pytest.raises(error.NotSupportedObjectTypeError):
            manager.delete_object(1, "spreadsheet")
        assert transport.call_count == 0

    def test_async_rejects_unknown_type(self):
        manager, transport = make_manager({"rename": reply("s_rename_node")})
        callback = CallbackRecorder()
        with pytest.raises(error.NotSupportedObjectTypeError):
            manager.rename_object_async(1, 3, "x", callback)
        assert transport.call_count == 0
        assert callback.values == []

    def test_tokens_sent(self):
        manager, transport = make_manager({"delete": reply("s_delete_node")})
        manager.delete_object(1, ObjectType.FOLDER)
        assert transport.requests[0].params["target"] == "folder"


class TestArguments:
    def test_add_comment_requires_text(self):
        manager, transport = make_manager({"add_comment": reply("add_comment_ok")})
        with pytest.raises(error.ArgumentError):
            manager.add_comment(1, ObjectType.FILE, None)
        with pytest.raises(error.ArgumentError):
            manager.add_comment_async(1, ObjectType.FILE, None, CallbackRecorder())
        assert transport.call_count == 0

    def test_add_to_my_box_requires_a_file(self):
        manager, transport = make_manager()
        with pytest.raises(error.ArgumentError):
            manager.add_to_my_box(0)
        assert transport.call_count == 0

    def test_argument_error_is_a_value_error(self):
        manager, transport = make_manager()
        with pytest.raises(ValueError):
            manager.logout_async(None)

    def test_api_key_required(self):
        with pytest.raises(error.ArgumentError):
            BoxManager(api_key="", transport=ScriptedTransport())


class TestPayloads:
    def test_add_comment(self):
        manager, transport = make_manager(
            {
                "add_comment": reply(
                    "add_comment_ok",
                    comment={"comment_id": "9", "message": "nice", "user_id": "7"},
                )
            }
        )
        response = manager.add_comment(21, ObjectType.FILE, "nice")
        assert response.status == AddCommentStatus.SUCCESSFUL
        assert response.result.id == 9
        assert response.result.text == "nice"
        assert transport.requests[0].params["message"] == "nice"

    def test_add_to_my_box_tags(self):
        manager, transport = make_manager({"add_to_mybox": reply("addtomybox_ok")})
        tags = TagPrimitiveCollection([TagPrimitive(3, "a"), TagPrimitive(4, "b")])
        manager.add_to_my_box(10, tags, file_id=5)
        assert transport.requests[0].params["tags"] == "3,4"
        assert transport.requests[0].params["folder_id"] == 10

    def test_get_file_info(self):
        manager, transport = make_manager(
            {
                "get_file_info": reply(
                    "s_get_file_info",
                    info={"file_id": "21", "file_name": "a.txt", "user_id": "7"},
                ),
                "get_account_info": reply("get_account_info_ok", user=USER),
            }
        )
        response = manager.get_file_info(21)
        assert response.status == GetFileInfoStatus.SUCCESSFUL
        info = response.result
        assert info.name == "a.txt"
        assert transport.methods_called() == ["get_file_info"]
        assert info.owner.email == "me@example.com"
        assert transport.methods_called() == ["get_file_info", "get_account_info"]

    def test_get_file_info_access_denied(self):
        manager, transport = make_manager(
            {"get_file_info": reply("e_access_denied")}
        )
        response = manager.get_file_info(21)
        assert response.status == GetFileInfoStatus.FAILED
        assert response.result is None

    def test_get_account_info(self):
        manager, transport = make_manager(
            {"get_account_info": reply("get_account_info_ok", user=USER)}
        )
        response = manager.get_account_info()
        assert response.status == GetAccountInfoStatus.SUCCESSFUL
        assert response.result.login == "me"
        assert response.result.space_amount == 1000
        assert transport.requests[0].params["auth_token"] == "tok"


class TestUpdates:
    UPDATES = b"""<updates><update>
        <update_id>301</update_id><update_type>added</update_type>
        <folder_id>11</folder_id><updated>1230000000</updated>
        <files><file file_id="21" file_name="a.jpg"/></files>
    </update></updates>"""

    def test_request(self):
        manager, transport = make_manager(
            {"get_updates": reply("s_get_updates", updates=zipped(self.UPDATES))}
        )
        manager.get_updates(
            datetime(2009, 1, 1), datetime(2009, 1, 2, tzinfo=timezone.utc)
        )
        params = transport.requests[0].params
        assert params["auth_token"] == "tok"
        assert params["begin_timestamp"] == 1230768000
        assert params["end_timestamp"] == 1230854400
        assert params["params"] == []

    def test_no_zip_option_sent(self):
        manager, transport = make_manager(
            {"get_updates": reply("s_get_updates", updates=self.UPDATES)}
        )
        manager.get_updates(
            datetime(2009, 1, 1), datetime(2009, 1, 2), GetUpdatesOptions.NO_ZIP
        )
        assert transport.requests[0].params["params"] == ["nozip"]

    def test_zipped_reply(self):
        manager, transport = make_manager(
            {"get_updates": reply("s_get_updates", updates=zipped(self.UPDATES))}
        )
        response = manager.get_updates(datetime(2009, 1, 1), datetime(2009, 1, 2))
        assert response.status == GetUpdatesStatus.SUCCESSFUL
        [update] = response.result
        assert update.id == 301
        assert update.update_type == "added"
        assert [f.id for f in update.files] == [21]

    def test_not_logged_in(self):
        manager, transport = make_manager({"get_updates": reply("not_logged_in")})
        response = manager.get_updates(datetime(2009, 1, 1), datetime(2009, 1, 2))
        assert response.status == GetUpdatesStatus.NOT_LOGGED_IN
        assert response.result is None
        assert response.error is None


class TestSession:
    def test_register_new_user_keeps_session(self):
        manager, transport = make_manager(
            {
                "register_new_user": reply(
                    "successful_register", auth_token="newtok", user=USER
                )
            }
        )
        response = manager.register_new_user("me@example.com", "secret")
        assert response.status == RegisterNewUserStatus.SUCCESSFUL
        assert response.result.token == "newtok"
        assert manager.auth_token == "newtok"
        assert manager.user.id == 7

    def test_register_new_user_failure_keeps_nothing(self):
        manager, transport = make_manager(
            {"register_new_user": reply("email_already_registered")}
        )
        response = manager.register_new_user("me@example.com", "secret")
        assert response.status == RegisterNewUserStatus.EMAIL_ALREADY_REGISTERED
        assert manager.auth_token == "tok"

    def test_logout_clears_session(self):
        manager, transport = make_manager({"logout": reply("logout_ok")})
        response = manager.logout()
        assert response.status == LogoutStatus.SUCCESSFUL
        assert response.error is None
        assert manager.auth_token is None
        assert manager.user is None

    def test_logout_not_logged_in_is_unexpected(self):
        manager, transport = make_manager({"logout": reply("not_logged_in")})
        response = manager.logout()
        assert response.status == LogoutStatus.NOT_LOGGED_IN
        assert response.error == "not_logged_in"
        assert manager.auth_token == "tok"

    def test_context_manager_closes_own_transport_only(self):
        transport = ScriptedTransport()
        with BoxManager(api_key="key", transport=transport):
            pass
        assert not transport.closed


class TestTransportErrors:
    def test_blocking_propagates(self):
        manager, transport = make_manager({"delete": ConnectionError("down")})
        with pytest.raises(ConnectionError):
            manager.delete_object(1, ObjectType.FILE)

    def test_async_sets_future_and_calls_back(self):
        manager, transport = make_manager({"delete": ConnectionError("down")})
        callback = CallbackRecorder()
        future = manager.delete_object_async(1, ObjectType.FILE, callback, "s")
        response = callback.wait()
        assert response.status == DeleteObjectStatus.UNKNOWN
        assert isinstance(response.error, ConnectionError)
        assert response.user_state == "s"
        with pytest.raises(ConnectionError):
            future.result(timeout=5)
        assert len(callback.values) == 1


class TestTags:
    def test_export_tags_fills_cache(self):
        manager, transport = make_manager(
            {
                "export_tags": reply(
                    "export_tags_ok", tag_xml=b'<tags><tag id="34">books</tag></tags>'
                )
            }
        )
        response = manager.export_tags()
        assert response.status == ExportTagsStatus.SUCCESSFUL
        assert response.result.get_tag(34).text == "books"
        assert manager._get_tag(34).text == "books"
        assert transport.methods_called() == ["export_tags"]

    def test_tag_lookup_fetches_once(self):
        manager, transport = make_manager(
            {
                "export_tags": reply(
                    "export_tags_ok", tag_xml=b'<tags><tag id="34">books</tag></tags>'
                )
            }
        )
        assert manager._get_tag(34).text == "books"
        assert manager._get_tag(35) is None
        assert transport.methods_called() == ["export_tags"]

    def test_failed_export_is_not_cached(self):
        manager, transport = make_manager(
            {
                "export_tags": [
                    reply("not_logged_in"),
                    reply("export_tags_ok", tag_xml=b'<tags><tag id="1">a</tag></tags>'),
                ]
            }
        )
        assert manager._get_tag(1) is None
        assert manager._get_tag(1).text == "a"
        assert transport.methods_called() == ["export_tags", "export_tags"]

    def test_concurrent_tag_lookups_export_once(self):
        started = threading.Event()
        release = threading.Event()

        class SlowTransport(ScriptedTransport):
            def execute(self, request):
                started.set()
                release.wait(5)
                return super().execute(request)

        transport = SlowTransport(
            {
                "export_tags": reply(
                    "export_tags_ok",
                    tag_xml=b'<tags><tag id="1">a</tag><tag id="2">b</tag></tags>',
                )
            }
        )
        manager = BoxManager(api_key="key", auth_token="tok", transport=transport)
        tags = [TagPrimitive(i % 2 + 1, materialize=manager._get_tag) for i in range(8)]
        results = {}

        def read(index):
            results[index] = tags[index].text

        threads = [threading.Thread(target=read, args=(i,)) for i in range(8)]
        for t in threads:
            t.start()
        assert started.wait(5)
        release.set()
        for t in threads:
            t.join(5)
        assert [results[i] for i in range(8)] == ["a", "b"] * 4
        assert transport.methods_called() == ["export_tags"]

    def test_tag_export_does_not_hold_up_other_calls(self):
        started = threading.Event()
        release = threading.Event()

        class SlowTransport(ScriptedTransport):
            def execute(self, request):
                if request.method == "export_tags":
                    started.set()
                    release.wait(5)
                return super().execute(request)

        transport = SlowTransport(
            {
                "export_tags": reply(
                    "export_tags_ok", tag_xml=b'<tags><tag id="1">a</tag></tags>'
                ),
                "delete": reply("s_delete_node"),
            }
        )
        manager = BoxManager(api_key="key", auth_token="tok", transport=transport)
        tag = TagPrimitive(1, materialize=manager._get_tag)
        reader = threading.Thread(target=lambda: tag.text)
        reader.start()
        try:
            assert started.wait(5)
            callback = CallbackRecorder()
            caller = threading.Thread(
                target=manager.delete_object_async,
                args=(1, ObjectType.FILE, callback),
            )
            caller.start()
            caller.join(2)
            assert not caller.is_alive()
            assert callback.wait().status == DeleteObjectStatus.SUCCESSFUL
            assert manager.delete_object(2, ObjectType.FILE).ok
            ## the export is still waiting
            assert not release.is_set()
            assert reader.is_alive()
        finally:
            release.set()
            reader.join(5)
        assert tag.text == "a"
        assert transport.methods_called().count("export_tags") == 1
        manager.close()
