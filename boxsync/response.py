"""
Response envelopes.

Every operation, blocking or not, ends in one OperationResponse.  It
carries the parsed status, the typed result (only when the status is
the family's success member), the user_state the caller passed in
(handed back untouched), and error - the raw status text when the
service said something the operation doesn't know how to handle.
"""
from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from datetime import datetime
from typing import Any
from typing import Dict
from typing import Generic
from typing import List
from typing import Optional
from typing import TypeVar

from boxsync.objects import Comment
from boxsync.objects import File
from boxsync.objects import Folder
from boxsync.objects import FolderBase
from boxsync.objects import TagPrimitiveCollection
from boxsync.objects import Update
from boxsync.objects import User
from boxsync.statuses import AddCommentStatus
from boxsync.statuses import AddToMyBoxStatus
from boxsync.statuses import CopyObjectStatus
from boxsync.statuses import CreateFolderStatus
from boxsync.statuses import DeleteObjectStatus
from boxsync.statuses import ExportTagsStatus
from boxsync.statuses import FileNewCopyStatus
from boxsync.statuses import GetAccountInfoStatus
from boxsync.statuses import GetAccountTreeStatus
from boxsync.statuses import GetAuthenticationTokenStatus
from boxsync.statuses import GetFileInfoStatus
from boxsync.statuses import GetServerTimeStatus
from boxsync.statuses import GetTicketStatus
from boxsync.statuses import GetUpdatesStatus
from boxsync.statuses import LogoutStatus
from boxsync.statuses import MoveObjectStatus
from boxsync.statuses import OverwriteFileStatus
from boxsync.statuses import PrivateShareStatus
from boxsync.statuses import PublicShareStatus
from boxsync.statuses import PublicUnshareStatus
from boxsync.statuses import RegisterNewUserStatus
from boxsync.statuses import RenameObjectStatus
from boxsync.statuses import SetDescriptionStatus
from boxsync.statuses import StatusEnum
from boxsync.statuses import UploadFileError
from boxsync.statuses import UploadFileStatus
from boxsync.statuses import VerifyRegistrationEmailStatus

S = TypeVar("S", bound=StatusEnum)
P = TypeVar("P")


@dataclass
class OperationResponse(Generic[S, P]):
    """
    Attributes:
        status: status parsed from the service reply
        result: typed payload, None unless status is the success member
        user_state: opaque value supplied by the caller
        error: raw status text for unexpected statuses, or the exception
            an asynchronous call ended with
    """

    status: S
    result: Optional[P] = None
    user_state: Any = None
    error: Any = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status.is_success


@dataclass
class AuthenticationResult:
    """Token and account handed out by get_auth_token and register_new_user"""

    token: str
    user: Optional[User] = None


@dataclass
class UploadResult:
    folder_id: int
    uploaded_files: Dict[File, UploadFileError] = field(default_factory=dict)

    @property
    def failed_files(self) -> Dict[File, UploadFileError]:
        return {f: e for f, e in self.uploaded_files.items() if not e.is_success}


GetTicketResponse = OperationResponse[GetTicketStatus, str]
GetAuthenticationTokenResponse = OperationResponse[
    GetAuthenticationTokenStatus, AuthenticationResult
]
LogoutResponse = OperationResponse[LogoutStatus, None]
RegisterNewUserResponse = OperationResponse[RegisterNewUserStatus, AuthenticationResult]
VerifyRegistrationEmailResponse = OperationResponse[VerifyRegistrationEmailStatus, None]
GetAccountInfoResponse = OperationResponse[GetAccountInfoStatus, User]
GetServerTimeResponse = OperationResponse[GetServerTimeStatus, datetime]
UploadFileResponse = OperationResponse[UploadFileStatus, UploadResult]
CreateFolderResponse = OperationResponse[CreateFolderStatus, FolderBase]
DeleteObjectResponse = OperationResponse[DeleteObjectStatus, None]
RenameObjectResponse = OperationResponse[RenameObjectStatus, None]
MoveObjectResponse = OperationResponse[MoveObjectStatus, None]
CopyObjectResponse = OperationResponse[CopyObjectStatus, None]
GetFolderStructureResponse = OperationResponse[GetAccountTreeStatus, Folder]
ExportTagsResponse = OperationResponse[ExportTagsStatus, TagPrimitiveCollection]
SetDescriptionResponse = OperationResponse[SetDescriptionStatus, None]
PublicShareResponse = OperationResponse[PublicShareStatus, str]
PublicUnshareResponse = OperationResponse[PublicUnshareStatus, None]
PrivateShareResponse = OperationResponse[PrivateShareStatus, None]
AddToMyBoxResponse = OperationResponse[AddToMyBoxStatus, None]
AddCommentResponse = OperationResponse[AddCommentStatus, Comment]
GetFileInfoResponse = OperationResponse[GetFileInfoStatus, File]
GetUpdatesResponse = OperationResponse[GetUpdatesStatus, List[Update]]
OverwriteFileResponse = OperationResponse[OverwriteFileStatus, UploadResult]
FileNewCopyResponse = OperationResponse[FileNewCopyStatus, UploadResult]
