"""
Box.NET request building.

This class knows which parameters every web method takes, while
remaining completely I/O-free.
"""

from typing import Any, Dict, Iterable, Optional

from boxsync.objects import (
    GetUpdatesOptions,
    ObjectType,
    RetrieveFolderStructureOptions,
)

from . import methods
from .types import ServiceRequest, object_type_to_string


class BoxProtocol:
    """
    Sans-I/O Box.NET request builder.

    Builds ServiceRequests without doing any I/O.  Every request carries
    the api_key, and the auth_token where the web method wants one.

    Example:
        protocol = BoxProtocol(api_key="...")
        request = protocol.create_folder_request(token, "Pictures", 0, False)
        reply = transport.execute(request)
    """

    def __init__(self, api_key: str):
        self.api_key = api_key

    def _request(
        self,
        method: methods.WebMethod,
        auth_token: Optional[str] = None,
        **params: Any,
    ) -> ServiceRequest:
        request = ServiceRequest(method=method.name, params={"api_key": self.api_key})
        if auth_token is not None:
            request = request.with_param("auth_token", auth_token)
        for name, value in params.items():
            if value is not None:
                request = request.with_param(name, value)
        return request

    @staticmethod
    def _flag(value: bool) -> int:
        return 1 if value else 0

    def get_ticket_request(self) -> ServiceRequest:
        return self._request(methods.GET_TICKET)

    def get_auth_token_request(self, ticket: str) -> ServiceRequest:
        return self._request(methods.GET_AUTH_TOKEN, ticket=ticket)

    def logout_request(self, auth_token: str) -> ServiceRequest:
        return self._request(methods.LOGOUT, auth_token)

    def register_new_user_request(self, login: str, password: str) -> ServiceRequest:
        return self._request(methods.REGISTER_NEW_USER, login=login, password=password)

    def verify_registration_email_request(self, login: str) -> ServiceRequest:
        return self._request(methods.VERIFY_REGISTRATION_EMAIL, login=login)

    def get_account_info_request(self, auth_token: str) -> ServiceRequest:
        return self._request(methods.GET_ACCOUNT_INFO, auth_token)

    def get_server_time_request(self) -> ServiceRequest:
        return self._request(methods.GET_SERVER_TIME)

    def create_folder_request(
        self, auth_token: str, name: str, parent_id: int, is_shared: bool
    ) -> ServiceRequest:
        return self._request(
            methods.CREATE_FOLDER,
            auth_token,
            parent_id=parent_id,
            name=name,
            share=self._flag(is_shared),
        )

    def delete_request(
        self, auth_token: str, object_id: int, object_type: ObjectType
    ) -> ServiceRequest:
        return self._request(
            methods.DELETE,
            auth_token,
            target=object_type_to_string(object_type, methods.DELETE.name),
            target_id=object_id,
        )

    def rename_request(
        self,
        auth_token: str,
        object_id: int,
        object_type: ObjectType,
        new_name: str,
    ) -> ServiceRequest:
        return self._request(
            methods.RENAME,
            auth_token,
            target=object_type_to_string(object_type, methods.RENAME.name),
            target_id=object_id,
            new_name=new_name,
        )

    def move_request(
        self,
        auth_token: str,
        object_id: int,
        object_type: ObjectType,
        destination_folder_id: int,
    ) -> ServiceRequest:
        return self._request(
            methods.MOVE,
            auth_token,
            target=object_type_to_string(object_type, methods.MOVE.name),
            target_id=object_id,
            destination_id=destination_folder_id,
        )

    def copy_request(
        self,
        auth_token: str,
        object_id: int,
        object_type: ObjectType,
        destination_folder_id: int,
    ) -> ServiceRequest:
        return self._request(
            methods.COPY,
            auth_token,
            target=object_type_to_string(object_type, methods.COPY.name),
            target_id=object_id,
            destination_id=destination_folder_id,
        )

    def get_account_tree_request(
        self,
        auth_token: str,
        folder_id: int,
        options: RetrieveFolderStructureOptions,
    ) -> ServiceRequest:
        return self._request(
            methods.GET_ACCOUNT_TREE,
            auth_token,
            folder_id=folder_id,
            params=options.to_string_list(),
        )

    def export_tags_request(self, auth_token: str) -> ServiceRequest:
        return self._request(methods.EXPORT_TAGS, auth_token)

    def set_description_request(
        self,
        auth_token: str,
        object_id: int,
        object_type: ObjectType,
        description: str,
    ) -> ServiceRequest:
        return self._request(
            methods.SET_DESCRIPTION,
            auth_token,
            target=object_type_to_string(object_type, methods.SET_DESCRIPTION.name),
            target_id=object_id,
            description=description,
        )

    def _share_params(
        self,
        method: methods.WebMethod,
        object_id: int,
        object_type: ObjectType,
        password: Optional[str],
        message: Optional[str],
        emails: Optional[Iterable[str]],
        send_notification: bool,
    ) -> Dict[str, Any]:
        params: Dict[str, Any] = {
            "target": object_type_to_string(object_type, method.name),
            "target_id": object_id,
            "password": password,
            "message": message,
            "emails": list(emails or []),
            "notify": self._flag(send_notification),
        }
        return params

    def public_share_request(
        self,
        auth_token: str,
        object_id: int,
        object_type: ObjectType,
        password: Optional[str] = None,
        message: Optional[str] = None,
        emails: Optional[Iterable[str]] = None,
        send_notification: bool = False,
    ) -> ServiceRequest:
        return self._request(
            methods.PUBLIC_SHARE,
            auth_token,
            **self._share_params(
                methods.PUBLIC_SHARE,
                object_id,
                object_type,
                password,
                message,
                emails,
                send_notification,
            ),
        )

    def public_unshare_request(
        self, auth_token: str, object_id: int, object_type: ObjectType
    ) -> ServiceRequest:
        return self._request(
            methods.PUBLIC_UNSHARE,
            auth_token,
            target=object_type_to_string(object_type, methods.PUBLIC_UNSHARE.name),
            target_id=object_id,
        )

    def private_share_request(
        self,
        auth_token: str,
        object_id: int,
        object_type: ObjectType,
        password: Optional[str] = None,
        message: Optional[str] = None,
        emails: Optional[Iterable[str]] = None,
        send_notification: bool = False,
    ) -> ServiceRequest:
        return self._request(
            methods.PRIVATE_SHARE,
            auth_token,
            **self._share_params(
                methods.PRIVATE_SHARE,
                object_id,
                object_type,
                password,
                message,
                emails,
                send_notification,
            ),
        )

    def add_to_mybox_request(
        self,
        auth_token: str,
        folder_id: int,
        tags: str,
        file_id: Optional[int] = None,
        public_name: Optional[str] = None,
    ) -> ServiceRequest:
        return self._request(
            methods.ADD_TO_MYBOX,
            auth_token,
            file_id=file_id,
            public_name=public_name,
            folder_id=folder_id,
            tags=tags,
        )

    def add_comment_request(
        self,
        auth_token: str,
        object_id: int,
        object_type: ObjectType,
        message: str,
    ) -> ServiceRequest:
        return self._request(
            methods.ADD_COMMENT,
            auth_token,
            target=object_type_to_string(object_type, methods.ADD_COMMENT.name),
            target_id=object_id,
            message=message,
        )

    def get_file_info_request(self, auth_token: str, file_id: int) -> ServiceRequest:
        return self._request(methods.GET_FILE_INFO, auth_token, file_id=file_id)


    def get_updates_request(
        self,
        auth_token: str,
        begin_timestamp: int,
        end_timestamp: int,
        options: GetUpdatesOptions,
    ) -> ServiceRequest:
        """Timestamps are unix seconds, UTC"""
        return self._request(
            methods.GET_UPDATES,
            auth_token,
            begin_timestamp=begin_timestamp,
            end_timestamp=end_timestamp,
            params=options.to_string_list(),
        )
