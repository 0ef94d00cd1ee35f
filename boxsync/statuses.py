"""
Status enumerations, one per web method family.

The numeric values are part of the public interface and stay stable,
so they may be persisted or logged.  Every family
has an UNKNOWN member (0) which is what an unmapped status string
parses to.
"""
from enum import IntEnum


class StatusEnum(IntEnum):
    """Base for all status families"""

    @property
    def is_success(self) -> bool:
        return self.name in ("SUCCESSFUL", "EMAIL_OK")


class GetTicketStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    WRONG_INPUT = 2
    APPLICATION_RESTRICTED = 3


class GetAuthenticationTokenStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    FAILED = 2


class LogoutStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    NOT_LOGGED_IN = 2
    INVALID_AUTH_TOKEN = 3
    APPLICATION_RESTRICTED = 4


class RegisterNewUserStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    FAILED = 2
    EMAIL_INVALID = 3
    EMAIL_ALREADY_REGISTERED = 4
    APPLICATION_RESTRICTED = 5


class VerifyRegistrationEmailStatus(StatusEnum):
    UNKNOWN = 0
    EMAIL_OK = 1
    EMAIL_INVALID = 2
    EMAIL_ALREADY_REGISTERED = 3
    APPLICATION_RESTRICTED = 4


class GetAccountInfoStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    NOT_LOGGED_IN = 2
    APPLICATION_RESTRICTED = 3


class GetServerTimeStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    APPLICATION_RESTRICTED = 2


class UploadFileStatus(StatusEnum):
    ## 3 is unused, kept out for compatibility with persisted values
    UNKNOWN = 0
    APPLICATION_RESTRICTED = 1
    NOT_LOGGED_IN = 2
    FAILED = 4
    SUCCESSFUL = 5
    CANCELLED = 6


class OverwriteFileStatus(StatusEnum):
    ## same numbering as UploadFileStatus, the reply is an upload reply
    UNKNOWN = 0
    APPLICATION_RESTRICTED = 1
    NOT_LOGGED_IN = 2
    FAILED = 4
    SUCCESSFUL = 5
    CANCELLED = 6


class FileNewCopyStatus(StatusEnum):
    UNKNOWN = 0
    APPLICATION_RESTRICTED = 1
    NOT_LOGGED_IN = 2
    FAILED = 4
    SUCCESSFUL = 5
    CANCELLED = 6


class UploadFileError(StatusEnum):
    """Outcome of a single file within an upload"""

    UNKNOWN = 0
    NONE = 1
    FILESIZE_LIMIT_EXCEEDED = 2
    STORAGE_LIMIT_EXCEEDED = 3
    ACCESS_DENIED = 4

    @property
    def is_success(self) -> bool:
        return self is UploadFileError.NONE


class CreateFolderStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    NO_PARENT_FOLDER = 2
    NOT_LOGGED_IN = 3
    APPLICATION_RESTRICTED = 4


class DeleteObjectStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    FAILED = 2
    NOT_LOGGED_IN = 3
    APPLICATION_RESTRICTED = 4


class RenameObjectStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    FAILED = 2
    NOT_LOGGED_IN = 3
    APPLICATION_RESTRICTED = 4


class MoveObjectStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    FAILED = 2
    NOT_LOGGED_IN = 3
    APPLICATION_RESTRICTED = 4


class CopyObjectStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    FAILED = 2


class GetAccountTreeStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    NOT_LOGGED_IN = 2
    FOLDER_ID_ERROR = 3
    APPLICATION_RESTRICTED = 4


class ExportTagsStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    NOT_LOGGED_IN = 2
    APPLICATION_RESTRICTED = 3


class SetDescriptionStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    FAILED = 2


class PublicShareStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    FAILED = 2
    NOT_LOGGED_IN = 3
    APPLICATION_RESTRICTED = 4
    WRONG_NODE = 5


class PublicUnshareStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    FAILED = 2
    NOT_LOGGED_IN = 3
    APPLICATION_RESTRICTED = 4
    WRONG_NODE = 5


class PrivateShareStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    FAILED = 2
    NOT_LOGGED_IN = 3
    APPLICATION_RESTRICTED = 4
    WRONG_NODE = 5


class AddToMyBoxStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    FAILED = 2
    NOT_LOGGED_IN = 3
    APPLICATION_RESTRICTED = 4
    LINK_EXISTS = 5


class AddCommentStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    FAILED = 2
    NOT_LOGGED_IN = 3
    APPLICATION_RESTRICTED = 4


class GetFileInfoStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    FAILED = 2
    NOT_LOGGED_IN = 3
    APPLICATION_RESTRICTED = 4


class GetUpdatesStatus(StatusEnum):
    UNKNOWN = 0
    SUCCESSFUL = 1
    FAILED = 2
    NOT_LOGGED_IN = 3
    APPLICATION_RESTRICTED = 4
