"""
Registry of the web methods the client knows.

For each method we keep the status family its status string is parsed
into and the set of statuses the client knows how to handle.  A status
outside that set is protocol drift: the response still goes out, but
with the raw status text attached as error.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from boxsync.statuses import (
    AddCommentStatus,
    AddToMyBoxStatus,
    CopyObjectStatus,
    CreateFolderStatus,
    DeleteObjectStatus,
    ExportTagsStatus,
    FileNewCopyStatus,
    GetAccountInfoStatus,
    GetAccountTreeStatus,
    GetAuthenticationTokenStatus,
    GetFileInfoStatus,
    GetServerTimeStatus,
    GetTicketStatus,
    GetUpdatesStatus,
    LogoutStatus,
    MoveObjectStatus,
    OverwriteFileStatus,
    PrivateShareStatus,
    PublicShareStatus,
    PublicUnshareStatus,
    RegisterNewUserStatus,
    RenameObjectStatus,
    SetDescriptionStatus,
    StatusEnum,
    UploadFileStatus,
    VerifyRegistrationEmailStatus,
)

from .status_parsers import parse_status


@dataclass(frozen=True)
class WebMethod:
    """
    Attributes:
        name: the action name sent to the service
        status_type: status family the reply status parses into
        expected: statuses handled without complaint.  Defaults to every
            member except UNKNOWN.
    """

    name: str
    status_type: type[StatusEnum]
    expected: Optional[frozenset[StatusEnum]] = None

    @property
    def expected_statuses(self) -> frozenset[StatusEnum]:
        if self.expected is not None:
            return self.expected
        return frozenset(s for s in self.status_type if s.name != "UNKNOWN")

    def parse_status(self, text: Optional[str]) -> StatusEnum:
        return parse_status(self.status_type, text)

    def is_expected(self, status: StatusEnum) -> bool:
        return status in self.expected_statuses


GET_TICKET = WebMethod("get_ticket", GetTicketStatus)
GET_AUTH_TOKEN = WebMethod("get_auth_token", GetAuthenticationTokenStatus)
LOGOUT = WebMethod(
    "logout",
    LogoutStatus,
    frozenset({LogoutStatus.SUCCESSFUL, LogoutStatus.INVALID_AUTH_TOKEN}),
)
REGISTER_NEW_USER = WebMethod("register_new_user", RegisterNewUserStatus)
VERIFY_REGISTRATION_EMAIL = WebMethod(
    "verify_registration_email", VerifyRegistrationEmailStatus
)
GET_ACCOUNT_INFO = WebMethod("get_account_info", GetAccountInfoStatus)
GET_SERVER_TIME = WebMethod("get_server_time", GetServerTimeStatus)
## not a web method proper, the upload goes through a multipart POST
UPLOAD = WebMethod(
    "upload",
    UploadFileStatus,
    frozenset(
        {
            UploadFileStatus.SUCCESSFUL,
            UploadFileStatus.FAILED,
            UploadFileStatus.NOT_LOGGED_IN,
            UploadFileStatus.APPLICATION_RESTRICTED,
            UploadFileStatus.CANCELLED,
        }
    ),
)
CREATE_FOLDER = WebMethod("create_folder", CreateFolderStatus)
DELETE = WebMethod("delete", DeleteObjectStatus)
RENAME = WebMethod("rename", RenameObjectStatus)
MOVE = WebMethod("move", MoveObjectStatus)
COPY = WebMethod("copy", CopyObjectStatus)
GET_ACCOUNT_TREE = WebMethod("get_account_tree", GetAccountTreeStatus)
EXPORT_TAGS = WebMethod("export_tags", ExportTagsStatus)
SET_DESCRIPTION = WebMethod("set_description", SetDescriptionStatus)
PUBLIC_SHARE = WebMethod("public_share", PublicShareStatus)
PUBLIC_UNSHARE = WebMethod("public_unshare", PublicUnshareStatus)
PRIVATE_SHARE = WebMethod("private_share", PrivateShareStatus)
ADD_TO_MYBOX = WebMethod("add_to_mybox", AddToMyBoxStatus)
ADD_COMMENT = WebMethod("add_comment", AddCommentStatus)
GET_FILE_INFO = WebMethod("get_file_info", GetFileInfoStatus)
GET_UPDATES = WebMethod("get_updates", GetUpdatesStatus)
## multipart POSTs like UPLOAD, the name is the path segment of the upload url
OVERWRITE_FILE = WebMethod(
    "overwrite",
    OverwriteFileStatus,
    frozenset(
        {
            OverwriteFileStatus.SUCCESSFUL,
            OverwriteFileStatus.FAILED,
            OverwriteFileStatus.NOT_LOGGED_IN,
            OverwriteFileStatus.APPLICATION_RESTRICTED,
            OverwriteFileStatus.CANCELLED,
        }
    ),
)
FILE_NEW_COPY = WebMethod(
    "new_copy",
    FileNewCopyStatus,
    frozenset(
        {
            FileNewCopyStatus.SUCCESSFUL,
            FileNewCopyStatus.FAILED,
            FileNewCopyStatus.NOT_LOGGED_IN,
            FileNewCopyStatus.APPLICATION_RESTRICTED,
            FileNewCopyStatus.CANCELLED,
        }
    ),
)

WEB_METHODS: dict[str, WebMethod] = {
    m.name: m
    for m in (
        GET_TICKET,
        GET_AUTH_TOKEN,
        LOGOUT,
        REGISTER_NEW_USER,
        VERIFY_REGISTRATION_EMAIL,
        GET_ACCOUNT_INFO,
        GET_SERVER_TIME,
        UPLOAD,
        CREATE_FOLDER,
        DELETE,
        RENAME,
        MOVE,
        COPY,
        GET_ACCOUNT_TREE,
        EXPORT_TAGS,
        SET_DESCRIPTION,
        PUBLIC_SHARE,
        PUBLIC_UNSHARE,
        PRIVATE_SHARE,
        ADD_TO_MYBOX,
        ADD_COMMENT,
        GET_FILE_INFO,
        GET_UPDATES,
        OVERWRITE_FILE,
        FILE_NEW_COPY,
    )
}
