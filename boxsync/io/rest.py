"""
Transport talking to the Box.NET REST endpoints, using the requests library.
"""

import datetime
import logging
import os
import sys
import threading
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import requests

from boxsync import __version__
from boxsync.lib import error
from boxsync.lib.python_utilities import to_normal_str, to_wire
from boxsync.protocol.types import ServiceReply, ServiceRequest
from boxsync.protocol.xml_parsers import parse_service_reply

if sys.version_info < (3, 11):
    from typing_extensions import Self
else:
    from typing import Self

log = logging.getLogger("boxsync")

DEFAULT_SERVICE_URL = "https://www.box.net/api/1.0/rest"
DEFAULT_AUTH_URL = "https://www.box.net/api/1.0/auth"
## upload, overwrite and new_copy are path segments below this
DEFAULT_UPLOAD_URL = "https://upload.box.net/api/1.0"

UPLOAD_CHUNK_SIZE = 64 * 1024


class _CancellableReader:
    """File wrapper raising UploadCancelledError once the event is set"""

    def __init__(self, fileobj, cancel_event: Optional[threading.Event]):
        self._fileobj = fileobj
        self._cancel_event = cancel_event

    def _check(self) -> None:
        if self._cancel_event is not None and self._cancel_event.is_set():
            raise error.UploadCancelledError("upload", "cancelled by caller")

    def read(self, size: int = -1) -> bytes:
        self._check()
        if size is not None and size >= 0:
            return self._fileobj.read(size)
        chunks = []
        while True:
            self._check()
            chunk = self._fileobj.read(UPLOAD_CHUNK_SIZE)
            if not chunk:
                break
            chunks.append(chunk)
        return b"".join(chunks)


class RestTransport:
    """
    Synchronous transport using the requests library.

    Web method calls go out as GET requests with the method name in the
    action parameter.  List parameters are sent as arrays (name[]).
    Login credentials go to the authorization page of the ticket as a
    form POST, files to the upload url as multipart POST, with upload,
    overwrite or new_copy as first path segment.

    Example:
        with RestTransport(proxy="proxy.example.com") as transport:
            reply = transport.execute(protocol.get_ticket_request())
    """

    def __init__(
        self,
        url: str = DEFAULT_SERVICE_URL,
        auth_url: str = DEFAULT_AUTH_URL,
        upload_url: str = DEFAULT_UPLOAD_URL,
        proxy: Optional[str] = None,
        timeout: Optional[float] = None,
        ssl_verify_cert: bool = True,
        session: Optional[requests.Session] = None,
        huge_tree: bool = False,
    ) -> None:
        """
        Args:
          url: the REST endpoint
          auth_url: base of the ticket authorization pages
          upload_url: base of the upload endpoint
          proxy: A string defining a proxy server: `scheme://hostname:port`. Scheme defaults to http, port defaults to 8080.
          timeout and ssl_verify_cert are passed to requests.request.
          huge_tree: boolean, enable XMLParser huge_tree for big folder trees
        """
        self._owns_session = session is None
        self.session = session or requests.Session()
        self.url = url.rstrip("/")
        self.auth_url = auth_url.rstrip("/")
        self.upload_url = upload_url.rstrip("/")
        self.timeout = timeout
        self.ssl_verify_cert = ssl_verify_cert
        self.huge_tree = huge_tree
        self.headers = {"User-Agent": "python-boxsync/" + __version__}

        self.proxy = None
        if proxy is not None:
            _proxy = proxy
            # requests library expects the proxy url to have a scheme
            if "://" not in proxy:
                _proxy = "http://" + proxy
            # add a port is one is not specified
            p = _proxy.split(":")
            if len(p) == 2:
                _proxy += ":8080"
            log.debug("init - proxy: %s" % (_proxy))
            self.proxy = _proxy

    def _proxies(self, url: str) -> Optional[Dict[str, str]]:
        if self.proxy is None:
            return None
        return {urlparse(url).scheme: self.proxy}

    def _send(self, method: str, url: str, what: str, **kwargs: Any) -> requests.Response:
        log.debug("sending request - method=%s, url=%s, web method=%s" % (method, url, what))
        r = self.session.request(
            method,
            url,
            headers=self.headers,
            proxies=self._proxies(url),
            timeout=self.timeout,
            verify=self.ssl_verify_cert,
            **kwargs,
        )
        log.debug("server responded with %i %s" % (r.status_code, r.reason))

        if error.debug_dump_communication:
            self._dump_communication(method, url, kwargs, r)

        if r.status_code in (requests.codes.unauthorized, requests.codes.forbidden):
            raise error.AuthorizationError(what, r.reason or "None given")
        if r.status_code >= 400:
            raise error.ResponseError(what, f"{r.status_code} {r.reason}")
        return r

    def _dump_communication(
        self, method: str, url: str, kwargs: Dict[str, Any], r: requests.Response
    ) -> None:
        from tempfile import NamedTemporaryFile

        with NamedTemporaryFile(prefix="boxsynccomm", delete=False) as commlog:
            commlog.write(b"=" * 80 + b"\n")
            commlog.write(f"{datetime.datetime.now():%FT%H:%M:%S}".encode("utf-8"))
            commlog.write(b"\n====>\n")
            commlog.write(f"{method} {url}\n".encode("utf-8"))
            params = dict(kwargs.get("params") or {})
            if "password" in params:
                params["password"] = "***"
            commlog.write(to_wire(f"params: {params}\n"))
            commlog.write(b"<====\n")
            commlog.write(f"{r.status_code} {r.reason}\n".encode("utf-8"))
            commlog.write(
                b"\n".join(to_wire(f"{x}: {r.headers[x]}") for x in r.headers)
            )
            commlog.write(b"\n\n")
            commlog.write(to_wire(r.content) or b"")
            log.debug("communication dumped to %s" % commlog.name)

    @staticmethod
    def _query_params(request: ServiceRequest) -> Dict[str, Any]:
        params: Dict[str, Any] = {"action": request.method}
        for name, value in request.params.items():
            if isinstance(value, (list, tuple)):
                params[f"{name}[]"] = list(value)
            else:
                params[name] = value
        return params

    def execute(self, request: ServiceRequest) -> ServiceReply:
        r = self._send(
            "GET",
            self.url,
            request.method,
            params=self._query_params(request),
        )
        return parse_service_reply(r.content, request.method, self.huge_tree)

    def submit_credentials(self, ticket: str, login: str, password: str) -> str:
        url = f"{self.auth_url}/{ticket}"
        r = self._send(
            "POST",
            url,
            "submit_credentials",
            data={
                "login": login,
                "password": password,
                "dologin": "1",
                "__login": "1",
            },
        )
        return to_normal_str(r.content) or ""

    def upload_file(
        self,
        auth_token: str,
        target_id: int,
        path: str,
        cancel_event: Optional[threading.Event] = None,
        action: str = "upload",
    ) -> bytes:
        if cancel_event is not None and cancel_event.is_set():
            raise error.UploadCancelledError(action, "cancelled before start")
        url = f"{self.upload_url}/{action}/{auth_token}/{target_id}"
        with open(path, "rb") as f:
            reader = _CancellableReader(f, cancel_event)
            r = self._send(
                "POST",
                url,
                action,
                files={"new_file0": (os.path.basename(path), reader)},
            )
        if cancel_event is not None and cancel_event.is_set():
            raise error.UploadCancelledError(action, "cancelled during transfer")
        return r.content

    def close(self) -> None:
        """Close the session if we created it."""
        if self._owns_session and self.session:
            self.session.close()

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *args) -> None:
        self.close()
