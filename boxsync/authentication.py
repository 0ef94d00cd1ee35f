"""
Authentication state and the three step login.

Logging in to Box.NET is a chain of calls: a ticket is requested, the
login form belonging to that ticket is submitted with the user's
credentials, and the ticket is then traded for an authentication
token.  LoginProcess walks through these steps and reports its
progress to an optional status_update callable.
"""
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import Callable
from typing import Optional

from boxsync.objects import User
from boxsync.response import GetAuthenticationTokenResponse
from boxsync.response import GetTicketResponse
from boxsync.statuses import GetAuthenticationTokenStatus
from boxsync.statuses import GetTicketStatus

log = logging.getLogger("boxsync")

StatusUpdate = Callable[[str], None]


class LoginState(Enum):
    START = "Ready to start authorization..."
    TICKET_REQUESTED = "Retrieving ticket..."
    TICKET_OBTAINED = "Ticket retrieved..."
    TICKET_FAILED = "Failed to retrieve ticket..."
    CREDENTIALS_SUBMITTED = "Submiting login/password..."
    CREDENTIALS_FAILED = "Failed to submit login/password..."
    TOKEN_REQUESTED = "Retrieving authorization token..."
    AUTHENTICATED = "Authorization finished successfuly..."
    TOKEN_FAILED = "Failed to retrieve authorization token..."

    @property
    def is_final(self) -> bool:
        return self in (
            LoginState.AUTHENTICATED,
            LoginState.TICKET_FAILED,
            LoginState.CREDENTIALS_FAILED,
            LoginState.TOKEN_FAILED,
        )


class AuthenticationSession:
    """
    The ticket, token and user of the current session.

    Writes go through set_authenticated / clear, which hold the lock so
    that token and user are always changed together.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        user: Optional[User] = None,
        lock: Optional[threading.RLock] = None,
    ) -> None:
        self._lock = lock or threading.RLock()
        self.ticket: Optional[str] = None
        self.token = token
        self.user = user

    @property
    def is_authenticated(self) -> bool:
        return bool(self.token)

    def set_authenticated(self, token: str, user: Optional[User]) -> None:
        with self._lock:
            self.token = token
            self.user = user

    def clear(self) -> None:
        with self._lock:
            self.ticket = None
            self.token = None
            self.user = None

    def __repr__(self) -> str:
        return "AuthenticationSession(authenticated=%s, user=%r)" % (
            self.is_authenticated,
            self.user,
        )


class LoginProcess:
    """
    One login attempt.

    The collaborators are passed in as callables, so the process itself
    knows nothing about transports:

    * get_ticket() returns a GetTicketResponse
    * submit_credentials(ticket, login, password) returns the body of
      the login form reply
    * get_auth_token(ticket) returns a GetAuthenticationTokenResponse

    The credentials are submitted on a thread of their own which run()
    waits for, so that a login running inside the manager's worker pool
    never waits on a task queued behind itself.
    """

    def __init__(
        self,
        session: AuthenticationSession,
        get_ticket: Callable[[], GetTicketResponse],
        submit_credentials: Callable[[str, str, str], str],
        get_auth_token: Callable[[str], GetAuthenticationTokenResponse],
        status_update: Optional[StatusUpdate] = None,
    ) -> None:
        self.session = session
        self._get_ticket = get_ticket
        self._submit_credentials = submit_credentials
        self._get_auth_token = get_auth_token
        self._status_update = status_update
        self.state = LoginState.START
        self._enter(LoginState.START)

    def _enter(self, state: LoginState) -> None:
        self.state = state
        log.debug("login: %s" % state.value)
        if self._status_update is not None:
            self._status_update(state.value)

    def run(self, login: str, password: str) -> bool:
        self._enter(LoginState.TICKET_REQUESTED)
        ticket_response = self._get_ticket()
        ticket = ticket_response.result
        if ticket_response.status != GetTicketStatus.SUCCESSFUL or not ticket:
            self._enter(LoginState.TICKET_FAILED)
            return False
        self.session.ticket = ticket
        self._enter(LoginState.TICKET_OBTAINED)
        try:
            return self._authorize(ticket, login, password)
        finally:
            ## a ticket is good for one login attempt only
            self.session.ticket = None

    def _authorize(self, ticket: str, login: str, password: str) -> bool:
        self._enter(LoginState.CREDENTIALS_SUBMITTED)
        with ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="boxsync-login"
        ) as submitter:
            body = submitter.submit(
                self._submit_credentials, ticket, login, password
            ).result()
        if not body:
            self._enter(LoginState.CREDENTIALS_FAILED)
            return False

        self._enter(LoginState.TOKEN_REQUESTED)
        token_response = self._get_auth_token(ticket)
        auth = token_response.result
        if (
            token_response.status != GetAuthenticationTokenStatus.SUCCESSFUL
            or auth is None
            or not auth.token
        ):
            self._enter(LoginState.TOKEN_FAILED)
            return False

        self.session.set_authenticated(auth.token, auth.user)
        self._enter(LoginState.AUTHENTICATED)
        return True
