#!/usr/bin/env python
"""
BoxManager - the entry point of the library.

Every operation comes in two shapes:

* a blocking one, ``manager.create_folder(...)``, returning an
  OperationResponse
* a non-blocking one, ``manager.create_folder_async(..., callback)``,
  returning a concurrent.futures.Future.  The callback gets the
  OperationResponse on a worker thread, exactly once.

Failures the service reports (not logged in, wrong node, ...) are
status values, not exceptions.  Transport errors are not caught.
"""
import calendar
import logging
import os
import sys
import threading
from concurrent.futures import Future
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Any
from typing import Callable
from typing import Iterable
from typing import Optional

from boxsync.authentication import AuthenticationSession
from boxsync.authentication import LoginProcess
from boxsync.authentication import StatusUpdate
from boxsync.io.base import TransportProtocol
from boxsync.io.rest import DEFAULT_AUTH_URL
from boxsync.io.rest import DEFAULT_SERVICE_URL
from boxsync.io.rest import DEFAULT_UPLOAD_URL
from boxsync.io.rest import RestTransport
from boxsync.lib import error
from boxsync.lib.python_utilities import to_normal_str
from boxsync.objects import GetUpdatesOptions
from boxsync.objects import ObjectType
from boxsync.objects import RetrieveFolderStructureOptions
from boxsync.objects import TagPrimitive
from boxsync.objects import TagPrimitiveCollection
from boxsync.objects import User
from boxsync.protocol import message_parsers
from boxsync.protocol import methods
from boxsync.protocol.operations import BoxProtocol
from boxsync.protocol.types import ServiceReply
from boxsync.protocol.types import ServiceRequest
from boxsync.response import AddCommentResponse
from boxsync.response import AddToMyBoxResponse
from boxsync.response import AuthenticationResult
from boxsync.response import CopyObjectResponse
from boxsync.response import CreateFolderResponse
from boxsync.response import DeleteObjectResponse
from boxsync.response import ExportTagsResponse
from boxsync.response import FileNewCopyResponse
from boxsync.response import GetAccountInfoResponse
from boxsync.response import GetAuthenticationTokenResponse
from boxsync.response import GetFileInfoResponse
from boxsync.response import GetFolderStructureResponse
from boxsync.response import GetServerTimeResponse
from boxsync.response import GetTicketResponse
from boxsync.response import GetUpdatesResponse
from boxsync.response import LogoutResponse
from boxsync.response import MoveObjectResponse
from boxsync.response import OperationResponse
from boxsync.response import OverwriteFileResponse
from boxsync.response import PrivateShareResponse
from boxsync.response import PublicShareResponse
from boxsync.response import PublicUnshareResponse
from boxsync.response import RegisterNewUserResponse
from boxsync.response import RenameObjectResponse
from boxsync.response import SetDescriptionResponse
from boxsync.response import UploadFileResponse
from boxsync.response import VerifyRegistrationEmailResponse
from boxsync.statuses import LogoutStatus

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self

log = logging.getLogger("boxsync")

Callback = Callable[[Any], None]
Operation = Callable[[], OperationResponse]


class _DeliverOnce:
    """Hands a value to a callback the first time only"""

    def __init__(self, callback: Callback) -> None:
        self._callback = callback
        self._lock = threading.Lock()
        self._delivered = False

    def __call__(self, value: Any) -> bool:
        with self._lock:
            if self._delivered:
                return False
            self._delivered = True
        self._callback(value)
        return True


class PendingUpload:
    """
    Handle of a transfer started by BoxManager.upload_file_async,
    overwrite_file_async or file_new_copy_async.

    cancel() stops the transfer if it hasn't finished yet.  A cancelled
    transfer ends with the callback getting the CANCELLED status.
    """

    def __init__(self, future: Future, cancel_event: threading.Event) -> None:
        self.future = future
        self._cancel_event = cancel_event

    def cancel(self) -> None:
        self._cancel_event.set()
        self.future.cancel()

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    def done(self) -> bool:
        return self.future.done()

    def result(self, timeout: Optional[float] = None) -> Optional[OperationResponse]:
        """The response, or None if the upload was cancelled before it started"""
        if self.future.cancelled():
            return None
        return self.future.result(timeout)


class BoxManager:
    """
    Client for the Box.NET web service.

    The manager keeps the authentication token and user of the session
    and a cache of the account's tags.  It is safe to share between
    threads: token and user are changed together under the session
    lock, and the tag cache has a lock of its own, held while it is
    filled.  No network call runs under the session lock.

    Example:
        with BoxManager(api_key="...") as manager:
            if manager.login("me@example.com", "secret"):
                tree = manager.get_root_folder_structure().result
    """

    def __init__(
        self,
        api_key: str,
        url: str = DEFAULT_SERVICE_URL,
        proxy: Optional[str] = None,
        auth_token: Optional[str] = None,
        user: Optional[User] = None,
        transport: Optional[TransportProtocol] = None,
        max_workers: Optional[int] = None,
        timeout: Optional[float] = None,
        huge_tree: bool = False,
        auth_url: str = DEFAULT_AUTH_URL,
        upload_url: str = DEFAULT_UPLOAD_URL,
    ) -> None:
        """
        Args:
          api_key: the application key handed out by Box.NET
          url: the REST endpoint
          proxy: A string defining a proxy server: `hostname:port`
          auth_token, user: an already authenticated session to continue
          transport: something implementing TransportProtocol.  Defaults to a RestTransport
          max_workers: size of the pool the *_async operations run on
          timeout: HTTP timeout in seconds
          huge_tree: boolean, enable XMLParser huge_tree for big folder trees
        """
        if not api_key:
            raise error.ArgumentError("BoxManager", "api_key is required")
        self.api_key = api_key
        self.huge_tree = huge_tree
        self.protocol = BoxProtocol(api_key)
        self._owns_transport = transport is None
        self.transport: TransportProtocol = transport or RestTransport(
            url=url,
            auth_url=auth_url,
            upload_url=upload_url,
            proxy=proxy,
            timeout=timeout,
            huge_tree=huge_tree,
        )
        self._lock = threading.RLock()
        self.session = AuthenticationSession(auth_token, user, lock=self._lock)
        self._tags: Optional[TagPrimitiveCollection] = None
        self._tags_lock = threading.RLock()
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="boxsync"
        )

    def __enter__(self) -> Self:
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()

    def close(self) -> None:
        """Waits for running operations, then closes the transport"""
        self._executor.shutdown(wait=True)
        if self._owns_transport:
            self.transport.close()

    @property
    def auth_token(self) -> Optional[str]:
        return self.session.token

    @property
    def user(self) -> Optional[User]:
        return self.session.user

    ## Plumbing

    def _call(
        self,
        method: methods.WebMethod,
        request: ServiceRequest,
        user_state: Any,
        build_result: Optional[Callable[[ServiceReply], Any]] = None,
    ) -> OperationResponse:
        reply = self.transport.execute(request)
        return self._respond(method, reply.status, reply, user_state, build_result)

    def _respond(
        self,
        method: methods.WebMethod,
        status_text: Optional[str],
        reply: Any,
        user_state: Any,
        build_result: Optional[Callable[[Any], Any]] = None,
    ) -> OperationResponse:
        status = method.parse_status(status_text)
        result = None
        err = None
        if status.is_success and build_result is not None:
            result = build_result(reply)
            if result is None:
                ## a success status without the payload that goes with it
                status = method.status_type.UNKNOWN
                err = self._raw_text(reply) or status_text
                error.weirdness(f"{method.name} succeeded without a result", err)
                return OperationResponse(status=status, user_state=user_state, error=err)
        if not method.is_expected(status):
            err = status_text or self._raw_text(reply)
            error.weirdness(f"unexpected status for {method.name}", status_text)
        return OperationResponse(
            status=status, result=result, user_state=user_state, error=err
        )

    @staticmethod
    def _raw_text(reply: Any) -> Optional[str]:
        if isinstance(reply, ServiceReply):
            return to_normal_str(reply.raw) or None
        return None

    @staticmethod
    def _require_callback(callback: Optional[Callback], method: str) -> None:
        if callback is None:
            raise error.ArgumentError(method, "callback is required")

    def _run_async(
        self,
        method: methods.WebMethod,
        operation: Operation,
        callback: Callback,
        user_state: Any,
    ) -> Future:
        deliver = _DeliverOnce(callback)

        def task() -> OperationResponse:
            try:
                response = operation()
            except Exception as e:
                log.debug(f"{method.name} failed: {e}")
                deliver(
                    OperationResponse(
                        status=method.status_type.UNKNOWN,
                        user_state=user_state,
                        error=e,
                    )
                )
                raise
            deliver(response)
            return response

        return self._executor.submit(task)

    def _token(self) -> Optional[str]:
        ## a plain attribute read, set_authenticated swaps it under the session lock
        return self.session.token

    ## Lazy lookups bound into parsed users and tags

    def _materialize_user(self, user_id: int) -> Optional[User]:
        current = self.session.user
        if current is not None and current.id == user_id and current.is_materialized:
            return current
        response = self.get_account_info()
        if response.result is not None and response.result.id == user_id:
            return response.result
        log.debug(f"no details available for user {user_id}")
        return None

    def _get_tag(self, tag_id: int) -> Optional[TagPrimitive]:
        tags = self._tags
        if tags is None:
            with self._tags_lock:
                if self._tags is None:
                    self.export_tags()
                tags = self._tags
        if tags is None:
            return None
        return tags.get_tag(tag_id)

    ## Authentication

    def _get_ticket(self, user_state: Any) -> Operation:
        request = self.protocol.get_ticket_request()

        def build(reply: ServiceReply) -> Optional[str]:
            return reply.output("ticket") or None

        return lambda: self._call(methods.GET_TICKET, request, user_state, build)

    def get_ticket(self, user_state: Any = None) -> GetTicketResponse:
        return self._get_ticket(user_state)()

    def get_ticket_async(
        self, callback: Callback, user_state: Any = None
    ) -> "Future[GetTicketResponse]":
        self._require_callback(callback, methods.GET_TICKET.name)
        return self._run_async(
            methods.GET_TICKET, self._get_ticket(user_state), callback, user_state
        )

    def _build_authentication(self, reply: ServiceReply) -> Optional[AuthenticationResult]:
        token = reply.output("auth_token")
        if not token:
            error.weirdness("authentication succeeded without a token", reply.raw)
            return None
        user = message_parsers.parse_user(reply.output("user"))
        self.session.set_authenticated(token, user)
        return AuthenticationResult(token=token, user=user)

    def _get_authentication_token(self, ticket: str, user_state: Any) -> Operation:
        request = self.protocol.get_auth_token_request(ticket)
        return lambda: self._call(
            methods.GET_AUTH_TOKEN, request, user_state, self._build_authentication
        )

    def get_authentication_token(
        self, ticket: str, user_state: Any = None
    ) -> GetAuthenticationTokenResponse:
        """
        Trades a ticket for an authentication token.  The ticket must
        have been authorized by the user, see login.  On success the
        token and user are kept for the following operations.
        """
        return self._get_authentication_token(ticket, user_state)()

    def get_authentication_token_async(
        self, ticket: str, callback: Callback, user_state: Any = None
    ) -> "Future[GetAuthenticationTokenResponse]":
        self._require_callback(callback, methods.GET_AUTH_TOKEN.name)
        return self._run_async(
            methods.GET_AUTH_TOKEN,
            self._get_authentication_token(ticket, user_state),
            callback,
            user_state,
        )

    def _login_process(self, status_update: Optional[StatusUpdate]) -> LoginProcess:
        return LoginProcess(
            self.session,
            get_ticket=self.get_ticket,
            submit_credentials=self.transport.submit_credentials,
            get_auth_token=self.get_authentication_token,
            status_update=status_update,
        )

    def login(
        self,
        login: str,
        password: str,
        status_update: Optional[StatusUpdate] = None,
    ) -> bool:
        """
        Logs in with the user's credentials: requests a ticket, submits
        login and password for it and fetches the authentication token.

        Returns:
            True if a token was obtained.  Nothing is stored otherwise.
        """
        return self._login_process(status_update).run(login, password)

    def login_async(
        self,
        login: str,
        password: str,
        callback: Callable[[bool], None],
        status_update: Optional[StatusUpdate] = None,
    ) -> "Future[bool]":
        self._require_callback(callback, "login")
        process = self._login_process(status_update)
        deliver = _DeliverOnce(callback)

        def task() -> bool:
            try:
                authenticated = process.run(login, password)
            except Exception:
                deliver(False)
                raise
            deliver(authenticated)
            return authenticated

        return self._executor.submit(task)

    def _logout(self, user_state: Any) -> Operation:
        request = self.protocol.logout_request(self._token())

        def operation() -> LogoutResponse:
            response = self._call(methods.LOGOUT, request, user_state)
            if response.status in (
                LogoutStatus.SUCCESSFUL,
                LogoutStatus.INVALID_AUTH_TOKEN,
            ):
                self.session.clear()
                with self._tags_lock:
                    self._tags = None
            return response

        return operation

    def logout(self, user_state: Any = None) -> LogoutResponse:
        return self._logout(user_state)()

    def logout_async(
        self, callback: Callback, user_state: Any = None
    ) -> "Future[LogoutResponse]":
        self._require_callback(callback, methods.LOGOUT.name)
        return self._run_async(
            methods.LOGOUT, self._logout(user_state), callback, user_state
        )

    def _register_new_user(self, login: str, password: str, user_state: Any) -> Operation:
        request = self.protocol.register_new_user_request(login, password)
        return lambda: self._call(
            methods.REGISTER_NEW_USER, request, user_state, self._build_authentication
        )

    def register_new_user(
        self, login: str, password: str, user_state: Any = None
    ) -> RegisterNewUserResponse:
        """Creates an account.  On success the new session is kept."""
        return self._register_new_user(login, password, user_state)()

    def register_new_user_async(
        self, login: str, password: str, callback: Callback, user_state: Any = None
    ) -> "Future[RegisterNewUserResponse]":
        self._require_callback(callback, methods.REGISTER_NEW_USER.name)
        return self._run_async(
            methods.REGISTER_NEW_USER,
            self._register_new_user(login, password, user_state),
            callback,
            user_state,
        )

    def _verify_registration_email(self, login: str, user_state: Any) -> Operation:
        request = self.protocol.verify_registration_email_request(login)
        return lambda: self._call(methods.VERIFY_REGISTRATION_EMAIL, request, user_state)

    def verify_registration_email(
        self, login: str, user_state: Any = None
    ) -> VerifyRegistrationEmailResponse:
        return self._verify_registration_email(login, user_state)()

    def verify_registration_email_async(
        self, login: str, callback: Callback, user_state: Any = None
    ) -> "Future[VerifyRegistrationEmailResponse]":
        self._require_callback(callback, methods.VERIFY_REGISTRATION_EMAIL.name)
        return self._run_async(
            methods.VERIFY_REGISTRATION_EMAIL,
            self._verify_registration_email(login, user_state),
            callback,
            user_state,
        )

    def _get_account_info(self, user_state: Any) -> Operation:
        request = self.protocol.get_account_info_request(self._token())

        def build(reply: ServiceReply) -> Optional[User]:
            return message_parsers.parse_user(reply.output("user"))

        return lambda: self._call(methods.GET_ACCOUNT_INFO, request, user_state, build)

    def get_account_info(self, user_state: Any = None) -> GetAccountInfoResponse:
        return self._get_account_info(user_state)()

    def get_account_info_async(
        self, callback: Callback, user_state: Any = None
    ) -> "Future[GetAccountInfoResponse]":
        self._require_callback(callback, methods.GET_ACCOUNT_INFO.name)
        return self._run_async(
            methods.GET_ACCOUNT_INFO,
            self._get_account_info(user_state),
            callback,
            user_state,
        )

    def _get_server_time(self, user_state: Any) -> Operation:
        request = self.protocol.get_server_time_request()

        def build(reply: ServiceReply):
            return message_parsers.parse_server_time(reply.output("time"))

        return lambda: self._call(methods.GET_SERVER_TIME, request, user_state, build)

    def get_server_time(self, user_state: Any = None) -> GetServerTimeResponse:
        return self._get_server_time(user_state)()

    def get_server_time_async(
        self, callback: Callback, user_state: Any = None
    ) -> "Future[GetServerTimeResponse]":
        self._require_callback(callback, methods.GET_SERVER_TIME.name)
        return self._run_async(
            methods.GET_SERVER_TIME,
            self._get_server_time(user_state),
            callback,
            user_state,
        )

    ## Upload, overwrite and new copy

    def _upload(
        self,
        method: methods.WebMethod,
        path: str,
        target_id: int,
        user_state: Any,
        cancel_event: Optional[threading.Event] = None,
    ) -> OperationResponse:
        if cancel_event is not None and cancel_event.is_set():
            return self._cancelled_upload(method, user_state)
        try:
            body = self.transport.upload_file(
                self._token(), target_id, path, cancel_event, action=method.name
            )
        except error.UploadCancelledError:
            return self._cancelled_upload(method, user_state)
        ## overwrite and new_copy target a file, their reply names the folder
        folder_id = target_id if method is methods.UPLOAD else None
        status, result = message_parsers.parse_upload_response(
            body, folder_id, self.huge_tree, method.status_type
        )
        err = None
        if not method.is_expected(status):
            err = to_normal_str(body)
            error.weirdness(f"unexpected {method.name} reply", body)
        return OperationResponse(
            status=status,
            result=result if status.is_success else None,
            user_state=user_state,
            error=err,
        )

    @staticmethod
    def _cancelled_upload(
        method: methods.WebMethod, user_state: Any
    ) -> OperationResponse:
        log.debug(f"{method.name} cancelled")
        return OperationResponse(status=method.status_type.CANCELLED, user_state=user_state)

    def _upload_async(
        self,
        method: methods.WebMethod,
        path: str,
        target_id: int,
        callback: Callback,
        user_state: Any,
    ) -> PendingUpload:
        self._require_callback(callback, method.name)
        path = os.fspath(path)
        cancel_event = threading.Event()
        deliver = _DeliverOnce(callback)

        def task() -> OperationResponse:
            try:
                response = self._upload(method, path, target_id, user_state, cancel_event)
            except Exception as e:
                deliver(
                    OperationResponse(
                        status=method.status_type.UNKNOWN, user_state=user_state, error=e
                    )
                )
                raise
            deliver(response)
            return response

        future = self._executor.submit(task)

        def on_done(f: Future) -> None:
            ## cancelled before a worker picked it up
            if f.cancelled():
                deliver(self._cancelled_upload(method, user_state))

        future.add_done_callback(on_done)
        return PendingUpload(future, cancel_event)

    def upload_file(
        self, path: str, folder_id: int = 0, user_state: Any = None
    ) -> UploadFileResponse:
        """
        Uploads a local file into a folder (0 is the root folder).

        Per file outcomes are in result.uploaded_files.
        """
        return self._upload(methods.UPLOAD, os.fspath(path), folder_id, user_state)

    def upload_file_async(
        self,
        path: str,
        folder_id: int,
        callback: Callback,
        user_state: Any = None,
    ) -> PendingUpload:
        return self._upload_async(methods.UPLOAD, path, folder_id, callback, user_state)

    def overwrite_file(
        self, path: str, file_id: int, user_state: Any = None
    ) -> OverwriteFileResponse:
        """Replaces the content of an existing file with a local file"""
        return self._upload(methods.OVERWRITE_FILE, os.fspath(path), file_id, user_state)

    def overwrite_file_async(
        self,
        path: str,
        file_id: int,
        callback: Callback,
        user_state: Any = None,
    ) -> PendingUpload:
        return self._upload_async(
            methods.OVERWRITE_FILE, path, file_id, callback, user_state
        )

    def file_new_copy(
        self, path: str, file_id: int, user_state: Any = None
    ) -> FileNewCopyResponse:
        """
        Uploads a local file as a new copy of an existing one, next to it
        in the same folder.  result.folder_id is that folder.
        """
        return self._upload(methods.FILE_NEW_COPY, os.fspath(path), file_id, user_state)

    def file_new_copy_async(
        self,
        path: str,
        file_id: int,
        callback: Callback,
        user_state: Any = None,
    ) -> PendingUpload:
        return self._upload_async(
            methods.FILE_NEW_COPY, path, file_id, callback, user_state
        )

    ## Folders and objects

    def _create_folder(
        self, name: str, parent_id: int, is_shared: bool, user_state: Any
    ) -> Operation:
        request = self.protocol.create_folder_request(
            self._token(), name, parent_id, is_shared
        )

        def build(reply: ServiceReply):
            return message_parsers.parse_folder_base(reply.output("folder"))

        return lambda: self._call(methods.CREATE_FOLDER, request, user_state, build)

    def create_folder(
        self,
        name: str,
        parent_id: int = 0,
        is_shared: bool = False,
        user_state: Any = None,
    ) -> CreateFolderResponse:
        return self._create_folder(name, parent_id, is_shared, user_state)()

    def create_folder_async(
        self,
        name: str,
        parent_id: int,
        is_shared: bool,
        callback: Callback,
        user_state: Any = None,
    ) -> "Future[CreateFolderResponse]":
        self._require_callback(callback, methods.CREATE_FOLDER.name)
        return self._run_async(
            methods.CREATE_FOLDER,
            self._create_folder(name, parent_id, is_shared, user_state),
            callback,
            user_state,
        )

    def _delete_object(
        self, object_id: int, object_type: ObjectType, user_state: Any
    ) -> Operation:
        request = self.protocol.delete_request(self._token(), object_id, object_type)
        return lambda: self._call(methods.DELETE, request, user_state)

    def delete_object(
        self, object_id: int, object_type: ObjectType, user_state: Any = None
    ) -> DeleteObjectResponse:
        return self._delete_object(object_id, object_type, user_state)()

    def delete_object_async(
        self,
        object_id: int,
        object_type: ObjectType,
        callback: Callback,
        user_state: Any = None,
    ) -> "Future[DeleteObjectResponse]":
        self._require_callback(callback, methods.DELETE.name)
        return self._run_async(
            methods.DELETE,
            self._delete_object(object_id, object_type, user_state),
            callback,
            user_state,
        )

    def _rename_object(
        self, object_id: int, object_type: ObjectType, new_name: str, user_state: Any
    ) -> Operation:
        request = self.protocol.rename_request(
            self._token(), object_id, object_type, new_name
        )
        return lambda: self._call(methods.RENAME, request, user_state)

    def rename_object(
        self,
        object_id: int,
        object_type: ObjectType,
        new_name: str,
        user_state: Any = None,
    ) -> RenameObjectResponse:
        return self._rename_object(object_id, object_type, new_name, user_state)()

    def rename_object_async(
        self,
        object_id: int,
        object_type: ObjectType,
        new_name: str,
        callback: Callback,
        user_state: Any = None,
    ) -> "Future[RenameObjectResponse]":
        self._require_callback(callback, methods.RENAME.name)
        return self._run_async(
            methods.RENAME,
            self._rename_object(object_id, object_type, new_name, user_state),
            callback,
            user_state,
        )

    def _move_object(
        self,
        object_id: int,
        object_type: ObjectType,
        destination_folder_id: int,
        user_state: Any,
    ) -> Operation:
        request = self.protocol.move_request(
            self._token(), object_id, object_type, destination_folder_id
        )
        return lambda: self._call(methods.MOVE, request, user_state)

    def move_object(
        self,
        object_id: int,
        object_type: ObjectType,
        destination_folder_id: int,
        user_state: Any = None,
    ) -> MoveObjectResponse:
        return self._move_object(
            object_id, object_type, destination_folder_id, user_state
        )()

    def move_object_async(
        self,
        object_id: int,
        object_type: ObjectType,
        destination_folder_id: int,
        callback: Callback,
        user_state: Any = None,
    ) -> "Future[MoveObjectResponse]":
        self._require_callback(callback, methods.MOVE.name)
        return self._run_async(
            methods.MOVE,
            self._move_object(object_id, object_type, destination_folder_id, user_state),
            callback,
            user_state,
        )

    def _copy_object(
        self,
        object_id: int,
        object_type: ObjectType,
        destination_folder_id: int,
        user_state: Any,
    ) -> Operation:
        request = self.protocol.copy_request(
            self._token(), object_id, object_type, destination_folder_id
        )
        return lambda: self._call(methods.COPY, request, user_state)

    def copy_object(
        self,
        object_id: int,
        object_type: ObjectType,
        destination_folder_id: int,
        user_state: Any = None,
    ) -> CopyObjectResponse:
        return self._copy_object(
            object_id, object_type, destination_folder_id, user_state
        )()

    def copy_object_async(
        self,
        object_id: int,
        object_type: ObjectType,
        destination_folder_id: int,
        callback: Callback,
        user_state: Any = None,
    ) -> "Future[CopyObjectResponse]":
        self._require_callback(callback, methods.COPY.name)
        return self._run_async(
            methods.COPY,
            self._copy_object(object_id, object_type, destination_folder_id, user_state),
            callback,
            user_state,
        )

    def _get_folder_structure(
        self,
        folder_id: int,
        options: RetrieveFolderStructureOptions,
        user_state: Any,
    ) -> Operation:
        options = RetrieveFolderStructureOptions(options)
        request = self.protocol.get_account_tree_request(
            self._token(), folder_id, options
        )

        def build(reply: ServiceReply):
            data = reply.output("tree") or b""
            if isinstance(data, str):
                data = data.encode("utf-8")
            if not options.contains(RetrieveFolderStructureOptions.NO_ZIP):
                data = message_parsers.unzip(data)
            return message_parsers.parse_folder_structure(
                data,
                materialize_user=self._materialize_user,
                materialize_tag=self._get_tag,
                huge_tree=self.huge_tree,
            )

        return lambda: self._call(methods.GET_ACCOUNT_TREE, request, user_state, build)

    def get_folder_structure(
        self,
        folder_id: int,
        options: RetrieveFolderStructureOptions = RetrieveFolderStructureOptions.NONE,
        user_state: Any = None,
    ) -> GetFolderStructureResponse:
        """
        Fetches the tree below a folder.

        Owners and tag texts of the nodes are looked up the first time
        they are read, not while the tree is decoded.
        """
        return self._get_folder_structure(folder_id, options, user_state)()

    def get_folder_structure_async(
        self,
        folder_id: int,
        options: RetrieveFolderStructureOptions,
        callback: Callback,
        user_state: Any = None,
    ) -> "Future[GetFolderStructureResponse]":
        self._require_callback(callback, methods.GET_ACCOUNT_TREE.name)
        return self._run_async(
            methods.GET_ACCOUNT_TREE,
            self._get_folder_structure(folder_id, options, user_state),
            callback,
            user_state,
        )

    def get_root_folder_structure(
        self,
        options: RetrieveFolderStructureOptions = RetrieveFolderStructureOptions.NONE,
        user_state: Any = None,
    ) -> GetFolderStructureResponse:
        return self.get_folder_structure(0, options, user_state)

    def get_root_folder_structure_async(
        self,
        options: RetrieveFolderStructureOptions,
        callback: Callback,
        user_state: Any = None,
    ) -> "Future[GetFolderStructureResponse]":
        return self.get_folder_structure_async(0, options, callback, user_state)

    ## Tags, sharing, descriptions and comments

    def _export_tags(self, user_state: Any) -> Operation:
        request = self.protocol.export_tags_request(self._token())

        def build(reply: ServiceReply) -> TagPrimitiveCollection:
            tags = message_parsers.parse_export_tags(
                reply.output("tag_xml") or b"", self.huge_tree
            )
            with self._tags_lock:
                self._tags = tags
            return tags

        return lambda: self._call(methods.EXPORT_TAGS, request, user_state, build)

    def export_tags(self, user_state: Any = None) -> ExportTagsResponse:
        """Fetches all tags of the account and refreshes the tag cache"""
        return self._export_tags(user_state)()

    def export_tags_async(
        self, callback: Callback, user_state: Any = None
    ) -> "Future[ExportTagsResponse]":
        self._require_callback(callback, methods.EXPORT_TAGS.name)
        return self._run_async(
            methods.EXPORT_TAGS, self._export_tags(user_state), callback, user_state
        )

    def _set_description(
        self,
        object_id: int,
        object_type: ObjectType,
        description: str,
        user_state: Any,
    ) -> Operation:
        request = self.protocol.set_description_request(
            self._token(), object_id, object_type, description
        )
        return lambda: self._call(methods.SET_DESCRIPTION, request, user_state)

    def set_description(
        self,
        object_id: int,
        object_type: ObjectType,
        description: str,
        user_state: Any = None,
    ) -> SetDescriptionResponse:
        return self._set_description(object_id, object_type, description, user_state)()

    def set_description_async(
        self,
        object_id: int,
        object_type: ObjectType,
        description: str,
        callback: Callback,
        user_state: Any = None,
    ) -> "Future[SetDescriptionResponse]":
        self._require_callback(callback, methods.SET_DESCRIPTION.name)
        return self._run_async(
            methods.SET_DESCRIPTION,
            self._set_description(object_id, object_type, description, user_state),
            callback,
            user_state,
        )

    def _public_share(
        self,
        object_id: int,
        object_type: ObjectType,
        password: Optional[str],
        message: Optional[str],
        emails: Optional[Iterable[str]],
        send_notification: bool,
        user_state: Any,
    ) -> Operation:
        request = self.protocol.public_share_request(
            self._token(),
            object_id,
            object_type,
            password,
            message,
            emails,
            send_notification,
        )

        def build(reply: ServiceReply) -> Optional[str]:
            return reply.output("public_name") or None

        return lambda: self._call(methods.PUBLIC_SHARE, request, user_state, build)

    def public_share(
        self,
        object_id: int,
        object_type: ObjectType,
        password: Optional[str] = None,
        message: Optional[str] = None,
        emails: Optional[Iterable[str]] = None,
        send_notification: bool = False,
        user_state: Any = None,
    ) -> PublicShareResponse:
        """Shares an object publicly.  The result is its public name."""
        return self._public_share(
            object_id,
            object_type,
            password,
            message,
            emails,
            send_notification,
            user_state,
        )()

    def public_share_async(
        self,
        object_id: int,
        object_type: ObjectType,
        password: Optional[str],
        message: Optional[str],
        emails: Optional[Iterable[str]],
        send_notification: bool,
        callback: Callback,
        user_state: Any = None,
    ) -> "Future[PublicShareResponse]":
        self._require_callback(callback, methods.PUBLIC_SHARE.name)
        return self._run_async(
            methods.PUBLIC_SHARE,
            self._public_share(
                object_id,
                object_type,
                password,
                message,
                emails,
                send_notification,
                user_state,
            ),
            callback,
            user_state,
        )

    def _public_unshare(
        self, object_id: int, object_type: ObjectType, user_state: Any
    ) -> Operation:
        request = self.protocol.public_unshare_request(
            self._token(), object_id, object_type
        )
        return lambda: self._call(methods.PUBLIC_UNSHARE, request, user_state)

    def public_unshare(
        self, object_id: int, object_type: ObjectType, user_state: Any = None
    ) -> PublicUnshareResponse:
        return self._public_unshare(object_id, object_type, user_state)()

    def public_unshare_async(
        self,
        object_id: int,
        object_type: ObjectType,
        callback: Callback,
        user_state: Any = None,
    ) -> "Future[PublicUnshareResponse]":
        self._require_callback(callback, methods.PUBLIC_UNSHARE.name)
        return self._run_async(
            methods.PUBLIC_UNSHARE,
            self._public_unshare(object_id, object_type, user_state),
            callback,
            user_state,
        )

    def _private_share(
        self,
        object_id: int,
        object_type: ObjectType,
        password: Optional[str],
        message: Optional[str],
        emails: Optional[Iterable[str]],
        send_notification: bool,
        user_state: Any,
    ) -> Operation:
        request = self.protocol.private_share_request(
            self._token(),
            object_id,
            object_type,
            password,
            message,
            emails,
            send_notification,
        )
        return lambda: self._call(methods.PRIVATE_SHARE, request, user_state)

    def private_share(
        self,
        object_id: int,
        object_type: ObjectType,
        password: Optional[str] = None,
        message: Optional[str] = None,
        emails: Optional[Iterable[str]] = None,
        send_notification: bool = False,
        user_state: Any = None,
    ) -> PrivateShareResponse:
        return self._private_share(
            object_id,
            object_type,
            password,
            message,
            emails,
            send_notification,
            user_state,
        )()

    def private_share_async(
        self,
        object_id: int,
        object_type: ObjectType,
        password: Optional[str],
        message: Optional[str],
        emails: Optional[Iterable[str]],
        send_notification: bool,
        callback: Callback,
        user_state: Any = None,
    ) -> "Future[PrivateShareResponse]":
        self._require_callback(callback, methods.PRIVATE_SHARE.name)
        return self._run_async(
            methods.PRIVATE_SHARE,
            self._private_share(
                object_id,
                object_type,
                password,
                message,
                emails,
                send_notification,
                user_state,
            ),
            callback,
            user_state,
        )

    def _add_to_my_box(
        self,
        folder_id: int,
        tags: Optional[TagPrimitiveCollection],
        file_id: Optional[int],
        file_name: Optional[str],
        user_state: Any,
    ) -> Operation:
        if file_id is None and not file_name:
            raise error.ArgumentError(
                methods.ADD_TO_MYBOX.name, "either file_id or file_name is required"
            )
        tag_string = tags.to_id_string() if tags is not None else ""
        request = self.protocol.add_to_mybox_request(
            self._token(),
            folder_id,
            tag_string,
            file_id=file_id,
            public_name=file_name if file_id is None else None,
        )
        return lambda: self._call(methods.ADD_TO_MYBOX, request, user_state)

    def add_to_my_box(
        self,
        folder_id: int,
        tags: Optional[TagPrimitiveCollection] = None,
        file_id: Optional[int] = None,
        file_name: Optional[str] = None,
        user_state: Any = None,
    ) -> AddToMyBoxResponse:
        """
        Copies somebody else's shared file into one of our folders.  The
        file is given either by its ID or by its public name.
        """
        return self._add_to_my_box(folder_id, tags, file_id, file_name, user_state)()

    def add_to_my_box_async(
        self,
        folder_id: int,
        tags: Optional[TagPrimitiveCollection],
        callback: Callback,
        file_id: Optional[int] = None,
        file_name: Optional[str] = None,
        user_state: Any = None,
    ) -> "Future[AddToMyBoxResponse]":
        self._require_callback(callback, methods.ADD_TO_MYBOX.name)
        return self._run_async(
            methods.ADD_TO_MYBOX,
            self._add_to_my_box(folder_id, tags, file_id, file_name, user_state),
            callback,
            user_state,
        )

    def _add_comment(
        self,
        object_id: int,
        object_type: ObjectType,
        text: str,
        user_state: Any,
    ) -> Operation:
        if text is None:
            raise error.ArgumentError(methods.ADD_COMMENT.name, "text is required")
        request = self.protocol.add_comment_request(
            self._token(), object_id, object_type, text
        )

        def build(reply: ServiceReply):
            return message_parsers.parse_comment(reply.output("comment"))

        return lambda: self._call(methods.ADD_COMMENT, request, user_state, build)

    def add_comment(
        self,
        object_id: int,
        object_type: ObjectType,
        text: str,
        user_state: Any = None,
    ) -> AddCommentResponse:
        return self._add_comment(object_id, object_type, text, user_state)()

    def add_comment_async(
        self,
        object_id: int,
        object_type: ObjectType,
        text: str,
        callback: Callback,
        user_state: Any = None,
    ) -> "Future[AddCommentResponse]":
        self._require_callback(callback, methods.ADD_COMMENT.name)
        return self._run_async(
            methods.ADD_COMMENT,
            self._add_comment(object_id, object_type, text, user_state),
            callback,
            user_state,
        )

    def _get_file_info(self, file_id: int, user_state: Any) -> Operation:
        request = self.protocol.get_file_info_request(self._token(), file_id)

        def build(reply: ServiceReply):
            return message_parsers.parse_file_info(
                reply.output("info"), self._materialize_user
            )

        return lambda: self._call(methods.GET_FILE_INFO, request, user_state, build)

    def get_file_info(self, file_id: int, user_state: Any = None) -> GetFileInfoResponse:
        return self._get_file_info(file_id, user_state)()

    def get_file_info_async(
        self, file_id: int, callback: Callback, user_state: Any = None
    ) -> "Future[GetFileInfoResponse]":
        self._require_callback(callback, methods.GET_FILE_INFO.name)
        return self._run_async(
            methods.GET_FILE_INFO,
            self._get_file_info(file_id, user_state),
            callback,
            user_state,
        )

    def _get_updates(
        self,
        from_date: datetime,
        to_date: datetime,
        options: GetUpdatesOptions,
        user_state: Any,
    ) -> Operation:
        options = GetUpdatesOptions(options)
        request = self.protocol.get_updates_request(
            self._token(),
            _unix_seconds(from_date),
            _unix_seconds(to_date),
            options,
        )

        def build(reply: ServiceReply):
            data = reply.output("updates")
            if data is None:
                return None
            if isinstance(data, str):
                data = data.encode("utf-8")
            if not options.contains(GetUpdatesOptions.NO_ZIP):
                data = message_parsers.unzip(data)
            return message_parsers.parse_updates(data, self.huge_tree)

        return lambda: self._call(methods.GET_UPDATES, request, user_state, build)

    def get_updates(
        self,
        from_date: datetime,
        to_date: datetime,
        options: GetUpdatesOptions = GetUpdatesOptions.NONE,
        user_state: Any = None,
    ) -> GetUpdatesResponse:
        """
        Fetches what changed in the account between two points in time.
        Naive datetimes are taken as UTC.  The service's own clock is
        available through get_server_time.
        """
        return self._get_updates(from_date, to_date, options, user_state)()

    def get_updates_async(
        self,
        from_date: datetime,
        to_date: datetime,
        options: GetUpdatesOptions,
        callback: Callback,
        user_state: Any = None,
    ) -> "Future[GetUpdatesResponse]":
        self._require_callback(callback, methods.GET_UPDATES.name)
        return self._run_async(
            methods.GET_UPDATES,
            self._get_updates(from_date, to_date, options, user_state),
            callback,
            user_state,
        )


def _unix_seconds(when: datetime) -> int:
    return calendar.timegm(when.utctimetuple())


def get_boxmanager(
    check_config_file: bool = True,
    config_file: str = None,
    config_section: str = None,
    environment: bool = True,
    **config_data,
) -> Optional[BoxManager]:
    """
    This function will yield a BoxManager object.  It will not try to
    connect.  It will read configuration from various sources,
    dependent on the parameters given, in this order:

    * Data from the parameters given
    * Environment variables prepended with `BOXSYNC_`, like `BOXSYNC_API_KEY`, `BOXSYNC_AUTH_TOKEN`, `BOXSYNC_PROXY`.
    * Environment variables `BOXSYNC_CONFIG_FILE` and `BOXSYNC_CONFIG_SECTION` will be honored if environment is set
    * Configuration file, see boxsync.config
    """
    if config_data:
        return BoxManager(**config_data)

    if environment:
        conf = {}
        for conf_key in (
            x
            for x in os.environ
            if x.startswith("BOXSYNC_") and not x.startswith("BOXSYNC_CONFIG")
        ):
            conf[conf_key[8:].lower()] = os.environ[conf_key]
        if conf:
            return BoxManager(**_typed_params(conf))
        if not config_file:
            config_file = os.environ.get("BOXSYNC_CONFIG_FILE")
        if not config_section:
            config_section = os.environ.get("BOXSYNC_CONFIG_SECTION")

    if check_config_file:
        from . import config

        if not config_section:
            config_section = "default"

        cfg = config.read_config(config_file)
        if cfg:
            section = config.config_section(cfg, config_section)
            conn_params = config.connection_params(section)
            if conn_params:
                return BoxManager(**_typed_params(conn_params))
    return None


def _typed_params(params: dict) -> dict:
    """Environment variables and config files hand us strings"""
    for key in ("max_workers",):
        if key in params:
            params[key] = int(params[key])
    if "timeout" in params:
        params["timeout"] = float(params["timeout"])
    if "huge_tree" in params and isinstance(params["huge_tree"], str):
        params["huge_tree"] = params["huge_tree"].lower() in ("1", "true", "yes")
    return params
