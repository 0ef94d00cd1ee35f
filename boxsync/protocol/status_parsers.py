"""
Pure functions mapping the service's status strings to status enums.

There is one table per web method family.  Anything not in the table -
including None and the empty string - maps to the family's UNKNOWN
member.  No I/O, no side effects.
"""

from __future__ import annotations

from typing import Optional, TypeVar

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
    UploadFileError,
    UploadFileStatus,
    VerifyRegistrationEmailStatus,
)

E = TypeVar("E", bound=StatusEnum)

NOT_LOGGED_IN = "not_logged_in"
APPLICATION_RESTRICTED = "application_restricted"

STATUS_TABLES: dict[type[StatusEnum], dict[str, StatusEnum]] = {
    GetTicketStatus: {
        "get_ticket_ok": GetTicketStatus.SUCCESSFUL,
        "wrong_input": GetTicketStatus.WRONG_INPUT,
        APPLICATION_RESTRICTED: GetTicketStatus.APPLICATION_RESTRICTED,
    },
    GetAuthenticationTokenStatus: {
        "get_auth_token_ok": GetAuthenticationTokenStatus.SUCCESSFUL,
        NOT_LOGGED_IN: GetAuthenticationTokenStatus.FAILED,
        "invalid_ticket": GetAuthenticationTokenStatus.FAILED,
    },
    LogoutStatus: {
        "logout_ok": LogoutStatus.SUCCESSFUL,
        "invalid_auth_token": LogoutStatus.INVALID_AUTH_TOKEN,
        NOT_LOGGED_IN: LogoutStatus.NOT_LOGGED_IN,
        APPLICATION_RESTRICTED: LogoutStatus.APPLICATION_RESTRICTED,
    },
    RegisterNewUserStatus: {
        "successful_register": RegisterNewUserStatus.SUCCESSFUL,
        "e_register": RegisterNewUserStatus.FAILED,
        "email_invalid": RegisterNewUserStatus.EMAIL_INVALID,
        "email_already_registered": RegisterNewUserStatus.EMAIL_ALREADY_REGISTERED,
        APPLICATION_RESTRICTED: RegisterNewUserStatus.APPLICATION_RESTRICTED,
    },
    VerifyRegistrationEmailStatus: {
        "email_ok": VerifyRegistrationEmailStatus.EMAIL_OK,
        "email_invalid": VerifyRegistrationEmailStatus.EMAIL_INVALID,
        "email_already_registered": VerifyRegistrationEmailStatus.EMAIL_ALREADY_REGISTERED,
        APPLICATION_RESTRICTED: VerifyRegistrationEmailStatus.APPLICATION_RESTRICTED,
    },
    GetAccountInfoStatus: {
        "get_account_info_ok": GetAccountInfoStatus.SUCCESSFUL,
        NOT_LOGGED_IN: GetAccountInfoStatus.NOT_LOGGED_IN,
        APPLICATION_RESTRICTED: GetAccountInfoStatus.APPLICATION_RESTRICTED,
    },
    GetServerTimeStatus: {
        "get_server_time_ok": GetServerTimeStatus.SUCCESSFUL,
        APPLICATION_RESTRICTED: GetServerTimeStatus.APPLICATION_RESTRICTED,
    },
    UploadFileStatus: {
        "upload_ok": UploadFileStatus.SUCCESSFUL,
        "upload_some_files_failed": UploadFileStatus.FAILED,
        NOT_LOGGED_IN: UploadFileStatus.NOT_LOGGED_IN,
        APPLICATION_RESTRICTED: UploadFileStatus.APPLICATION_RESTRICTED,
    },
    OverwriteFileStatus: {
        "upload_ok": OverwriteFileStatus.SUCCESSFUL,
        "upload_some_files_failed": OverwriteFileStatus.FAILED,
        NOT_LOGGED_IN: OverwriteFileStatus.NOT_LOGGED_IN,
        APPLICATION_RESTRICTED: OverwriteFileStatus.APPLICATION_RESTRICTED,
    },
    FileNewCopyStatus: {
        "upload_ok": FileNewCopyStatus.SUCCESSFUL,
        "upload_some_files_failed": FileNewCopyStatus.FAILED,
        NOT_LOGGED_IN: FileNewCopyStatus.NOT_LOGGED_IN,
        APPLICATION_RESTRICTED: FileNewCopyStatus.APPLICATION_RESTRICTED,
    },
    UploadFileError: {
        "": UploadFileError.NONE,
        "filesize_limit_exceeded": UploadFileError.FILESIZE_LIMIT_EXCEEDED,
        "storage_limit_exceeded": UploadFileError.STORAGE_LIMIT_EXCEEDED,
        "access_denied": UploadFileError.ACCESS_DENIED,
    },
    CreateFolderStatus: {
        "create_ok": CreateFolderStatus.SUCCESSFUL,
        "e_no_parent_folder": CreateFolderStatus.NO_PARENT_FOLDER,
        NOT_LOGGED_IN: CreateFolderStatus.NOT_LOGGED_IN,
        APPLICATION_RESTRICTED: CreateFolderStatus.APPLICATION_RESTRICTED,
    },
    DeleteObjectStatus: {
        "s_delete_node": DeleteObjectStatus.SUCCESSFUL,
        "e_delete_node": DeleteObjectStatus.FAILED,
        NOT_LOGGED_IN: DeleteObjectStatus.NOT_LOGGED_IN,
        APPLICATION_RESTRICTED: DeleteObjectStatus.APPLICATION_RESTRICTED,
    },
    RenameObjectStatus: {
        "s_rename_node": RenameObjectStatus.SUCCESSFUL,
        "e_rename_node": RenameObjectStatus.FAILED,
        NOT_LOGGED_IN: RenameObjectStatus.NOT_LOGGED_IN,
        APPLICATION_RESTRICTED: RenameObjectStatus.APPLICATION_RESTRICTED,
    },
    MoveObjectStatus: {
        "s_move_node": MoveObjectStatus.SUCCESSFUL,
        "e_move_node": MoveObjectStatus.FAILED,
        NOT_LOGGED_IN: MoveObjectStatus.NOT_LOGGED_IN,
        APPLICATION_RESTRICTED: MoveObjectStatus.APPLICATION_RESTRICTED,
    },
    CopyObjectStatus: {
        "s_copy_node": CopyObjectStatus.SUCCESSFUL,
        "e_copy_node": CopyObjectStatus.FAILED,
    },
    GetAccountTreeStatus: {
        "listing_ok": GetAccountTreeStatus.SUCCESSFUL,
        NOT_LOGGED_IN: GetAccountTreeStatus.NOT_LOGGED_IN,
        "e_folder_id": GetAccountTreeStatus.FOLDER_ID_ERROR,
        APPLICATION_RESTRICTED: GetAccountTreeStatus.APPLICATION_RESTRICTED,
    },
    ExportTagsStatus: {
        "export_tags_ok": ExportTagsStatus.SUCCESSFUL,
        NOT_LOGGED_IN: ExportTagsStatus.NOT_LOGGED_IN,
        APPLICATION_RESTRICTED: ExportTagsStatus.APPLICATION_RESTRICTED,
    },
    SetDescriptionStatus: {
        "s_set_description": SetDescriptionStatus.SUCCESSFUL,
        "e_set_description": SetDescriptionStatus.FAILED,
    },
    PublicShareStatus: {
        "share_ok": PublicShareStatus.SUCCESSFUL,
        "share_error": PublicShareStatus.FAILED,
        "wrong_node": PublicShareStatus.WRONG_NODE,
        NOT_LOGGED_IN: PublicShareStatus.NOT_LOGGED_IN,
        APPLICATION_RESTRICTED: PublicShareStatus.APPLICATION_RESTRICTED,
    },
    PublicUnshareStatus: {
        "unshare_ok": PublicUnshareStatus.SUCCESSFUL,
        "unshare_error": PublicUnshareStatus.FAILED,
        "wrong_node": PublicUnshareStatus.WRONG_NODE,
        NOT_LOGGED_IN: PublicUnshareStatus.NOT_LOGGED_IN,
        APPLICATION_RESTRICTED: PublicUnshareStatus.APPLICATION_RESTRICTED,
    },
    PrivateShareStatus: {
        "private_share_ok": PrivateShareStatus.SUCCESSFUL,
        "private_share_error": PrivateShareStatus.FAILED,
        "wrong_node": PrivateShareStatus.WRONG_NODE,
        NOT_LOGGED_IN: PrivateShareStatus.NOT_LOGGED_IN,
        APPLICATION_RESTRICTED: PrivateShareStatus.APPLICATION_RESTRICTED,
    },
    AddToMyBoxStatus: {
        "addtomybox_ok": AddToMyBoxStatus.SUCCESSFUL,
        "addtomybox_error": AddToMyBoxStatus.FAILED,
        "link_exists": AddToMyBoxStatus.LINK_EXISTS,
        NOT_LOGGED_IN: AddToMyBoxStatus.NOT_LOGGED_IN,
        APPLICATION_RESTRICTED: AddToMyBoxStatus.APPLICATION_RESTRICTED,
    },
    AddCommentStatus: {
        "add_comment_ok": AddCommentStatus.SUCCESSFUL,
        "add_comment_error": AddCommentStatus.FAILED,
        NOT_LOGGED_IN: AddCommentStatus.NOT_LOGGED_IN,
        APPLICATION_RESTRICTED: AddCommentStatus.APPLICATION_RESTRICTED,
    },
    GetFileInfoStatus: {
        "s_get_file_info": GetFileInfoStatus.SUCCESSFUL,
        "e_access_denied": GetFileInfoStatus.FAILED,
        NOT_LOGGED_IN: GetFileInfoStatus.NOT_LOGGED_IN,
        APPLICATION_RESTRICTED: GetFileInfoStatus.APPLICATION_RESTRICTED,
    },
    GetUpdatesStatus: {
        "s_get_updates": GetUpdatesStatus.SUCCESSFUL,
        "e_get_updates": GetUpdatesStatus.FAILED,
        NOT_LOGGED_IN: GetUpdatesStatus.NOT_LOGGED_IN,
        APPLICATION_RESTRICTED: GetUpdatesStatus.APPLICATION_RESTRICTED,
    },
}


def parse_status(status_type: type[E], text: Optional[str | bytes]) -> E:
    """
    Look text up in the table for status_type.

    Args:
        status_type: the status family, e.g. CreateFolderStatus
        text: status string as sent by the service

    Returns:
        The mapped member, or status_type.UNKNOWN
    """
    table = STATUS_TABLES[status_type]
    if text is None:
        return status_type.UNKNOWN
    if isinstance(text, bytes):
        text = text.decode("ascii", errors="replace")
    return table.get(text.strip(), status_type.UNKNOWN)


def parse_get_ticket_status(text: Optional[str]) -> GetTicketStatus:
    return parse_status(GetTicketStatus, text)


def parse_get_authentication_token_status(
    text: Optional[str],
) -> GetAuthenticationTokenStatus:
    return parse_status(GetAuthenticationTokenStatus, text)


def parse_logout_status(text: Optional[str]) -> LogoutStatus:
    return parse_status(LogoutStatus, text)


def parse_register_new_user_status(text: Optional[str]) -> RegisterNewUserStatus:
    return parse_status(RegisterNewUserStatus, text)


def parse_verify_registration_email_status(
    text: Optional[str],
) -> VerifyRegistrationEmailStatus:
    return parse_status(VerifyRegistrationEmailStatus, text)


def parse_get_account_info_status(text: Optional[str]) -> GetAccountInfoStatus:
    return parse_status(GetAccountInfoStatus, text)


def parse_get_server_time_status(text: Optional[str]) -> GetServerTimeStatus:
    return parse_status(GetServerTimeStatus, text)


def parse_upload_file_status(text: Optional[str]) -> UploadFileStatus:
    return parse_status(UploadFileStatus, text)


def parse_upload_file_error(text: Optional[str]) -> UploadFileError:
    ## a file without an error attribute went through fine
    if text is None:
        return UploadFileError.NONE
    return parse_status(UploadFileError, text)


def parse_create_folder_status(text: Optional[str]) -> CreateFolderStatus:
    return parse_status(CreateFolderStatus, text)


def parse_delete_object_status(text: Optional[str]) -> DeleteObjectStatus:
    return parse_status(DeleteObjectStatus, text)


def parse_rename_object_status(text: Optional[str]) -> RenameObjectStatus:
    return parse_status(RenameObjectStatus, text)


def parse_move_object_status(text: Optional[str]) -> MoveObjectStatus:
    return parse_status(MoveObjectStatus, text)


def parse_copy_object_status(text: Optional[str]) -> CopyObjectStatus:
    return parse_status(CopyObjectStatus, text)


def parse_get_account_tree_status(text: Optional[str]) -> GetAccountTreeStatus:
    return parse_status(GetAccountTreeStatus, text)


def parse_export_tags_status(text: Optional[str]) -> ExportTagsStatus:
    return parse_status(ExportTagsStatus, text)


def parse_set_description_status(text: Optional[str]) -> SetDescriptionStatus:
    return parse_status(SetDescriptionStatus, text)


def parse_public_share_status(text: Optional[str]) -> PublicShareStatus:
    return parse_status(PublicShareStatus, text)


def parse_public_unshare_status(text: Optional[str]) -> PublicUnshareStatus:
    return parse_status(PublicUnshareStatus, text)


def parse_private_share_status(text: Optional[str]) -> PrivateShareStatus:
    return parse_status(PrivateShareStatus, text)


def parse_add_to_my_box_status(text: Optional[str]) -> AddToMyBoxStatus:
    return parse_status(AddToMyBoxStatus, text)


def parse_add_comment_status(text: Optional[str]) -> AddCommentStatus:
    return parse_status(AddCommentStatus, text)


def parse_get_file_info_status(text: Optional[str]) -> GetFileInfoStatus:
    return parse_status(GetFileInfoStatus, text)


def parse_overwrite_file_status(text: Optional[str]) -> OverwriteFileStatus:
    return parse_status(OverwriteFileStatus, text)


def parse_file_new_copy_status(text: Optional[str]) -> FileNewCopyStatus:
    return parse_status(FileNewCopyStatus, text)


def parse_get_updates_status(text: Optional[str]) -> GetUpdatesStatus:
    return parse_status(GetUpdatesStatus, text)
