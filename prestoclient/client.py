# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""

This module implements the Presto protocol to submit SQL statements, track
their state and retrieve their result as described in
https://prestodb.io/docs/current/develop/client-protocol.html

The outline of a query is:
- Send HTTP POST to the coordinator
- Retrieve HTTP response with ``nextUri``
- Get status of the query execution by sending a HTTP GET to ``nextUri``
  until the coordinator stops sending one

HTTP requests are managed by the ``PrestoRequest`` class. The lifecycle of
a query is driven by ``QueryExecutor``, which folds every page returned by
the coordinator into a :class:`prestoclient.session.Session`.

The main interface is :class:`QueryExecutor`: ::

    >> executor = QueryExecutor("http://coordinator:8080", catalog="hive")
    >> executor.submit("SELECT count(*) FROM hive.default.my_table")
    >> executor.poll_until_complete()
    >> rows = executor.get_result()
"""
from __future__ import annotations

import contextlib
import os
import threading
import time
from dataclasses import replace
from typing import Any
from typing import Dict
from typing import Iterator
from typing import List
from typing import Optional
from typing import Tuple
from typing import Type
from typing import Union

import requests
from requests import Response
from requests import Session as HttpSession
from requests.structures import CaseInsensitiveDict

import prestoclient.logging
from prestoclient import constants
from prestoclient import exceptions
from prestoclient._version import __version__
from prestoclient.session import QueryState
from prestoclient.session import ResultPage
from prestoclient.session import Session
from prestoclient.session import apply_result_page

__all__ = ["PrestoRequest", "QueryExecutor", "PROXIES"]

logger = prestoclient.logging.get_logger(__name__)

SOCKS_PROXY = os.environ.get("SOCKS_PROXY")
if SOCKS_PROXY:
    PROXIES = {"http": "socks5://" + SOCKS_PROXY, "https": "socks5://" + SOCKS_PROXY}
else:
    PROXIES = {}


class PrestoRequest:
    """
    Manage the HTTP requests sent to a Presto coordinator.

    :param endpoint: base URL of the coordinator, e.g.
                     ``http://coordinator:8080``.
    :param catalog: default catalog of the SQL statements. If *catalog* is
                    set to ``hive``, ``SELECT * FROM default.my_table``
                    queries ``hive.default.my_table``.
    :param user: sent as ``X-Presto-User``. It is useful for access control
                 and query scheduling.
    :param schema: default schema of the SQL statements.
    :param source: name of the client, sent in the ``User-Agent`` header.
    :param http_headers: additional HTTP headers sent with every request.
                         The identity headers cannot be overridden.
    :param http_session: ``requests.Session`` to use. A new one is created
                         if ``None``.
    :param request_timeout: how long (in seconds) to wait for the server to
                            send data before giving up, as a float or a
                            ``(connect timeout, read timeout)`` tuple.
    :param verify: verify the TLS certificate of the coordinator.

    Requests are never retried: a failed HTTP request is reported to the
    caller, who decides whether to submit the statement again.
    """

    http = requests

    def __init__(
        self,
        endpoint: str,
        catalog: Optional[str] = constants.DEFAULT_CATALOG,
        user: str = constants.DEFAULT_USER,
        schema: Optional[str] = constants.DEFAULT_SCHEMA,
        source: str = constants.DEFAULT_SOURCE,
        http_headers: Optional[Dict[str, str]] = None,
        http_session: Optional[HttpSession] = None,
        request_timeout: Union[float, Tuple[float, float]] = constants.DEFAULT_REQUEST_TIMEOUT,
        verify: bool = True,
    ) -> None:
        self._endpoint = endpoint.rstrip("/")
        self._catalog = catalog
        self._user = user
        self._schema = schema
        self._source = source
        self._headers = http_headers.copy() if http_headers is not None else {}

        if http_session is not None:
            self._http_session = http_session
        else:
            self._http_session = self.http.Session()
            self._http_session.verify = verify
        self._http_session.headers.update(self.http_headers)
        self._request_timeout = request_timeout

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def catalog(self) -> Optional[str]:
        return self._catalog

    @property
    def http_headers(self) -> CaseInsensitiveDict[str]:
        headers: CaseInsensitiveDict[str] = CaseInsensitiveDict()

        headers[constants.HEADER_USER] = self._user
        headers[constants.HEADER_CATALOG] = self._catalog
        headers[constants.HEADER_SCHEMA] = self._schema
        headers[constants.HEADER_USER_AGENT] = "{}/{}".format(self._source, __version__)

        # merge custom http headers
        for key in self._headers:
            if key in headers.keys():
                raise ValueError("cannot override reserved HTTP header {}".format(key))
        headers.update(self._headers)

        return headers

    def get_url(self, path: str) -> str:
        return "{endpoint}{path}".format(endpoint=self._endpoint, path=path)

    @property
    def statement_url(self) -> str:
        return self.get_url(constants.URL_STATEMENT_PATH)

    def query_url(self, query_id: str) -> str:
        return self.get_url(constants.URL_QUERY_PATH.format(query_id=query_id))

    def post(self, sql: str) -> Response:
        return self._http_session.post(
            self.statement_url,
            data=sql.encode("utf-8"),
            headers=self.http_headers,
            timeout=self._request_timeout,
            proxies=PROXIES,
        )

    def get(self, url: str) -> Response:
        return self._http_session.get(
            url,
            headers=self.http_headers,
            timeout=self._request_timeout,
            proxies=PROXIES,
        )

    def delete(self, url: str) -> Response:
        return self._http_session.delete(
            url,
            headers=self.http_headers,
            timeout=self._request_timeout,
            proxies=PROXIES,
        )

    @staticmethod
    def raise_response_error(http_response: Response) -> None:
        raise exceptions.TransportError(http_response.status_code, http_response.content)

    def process(self, http_response: Response) -> ResultPage:
        if http_response.status_code != requests.codes.ok:
            self.raise_response_error(http_response)

        http_response.encoding = "utf-8"
        response = http_response.json()
        logger.debug("HTTP %s: %s", http_response.status_code, response)
        return ResultPage.from_json(response)


class QueryExecutor:
    """
    Submit one SQL statement at a time to a Presto coordinator and buffer its
    complete result.

    :param endpoint: base URL of the coordinator.
    :param catalog: default catalog of the SQL statements.
    :param poll_interval: seconds to wait before following ``nextUri``.
    :param cancel_on_abort: send a best-effort cancel to the coordinator
                            when :meth:`poll_until_complete` is interrupted
                            by its timeout or its cancel event.
    :param request: :class:`PrestoRequest` to use. Built from the remaining
                    keyword arguments if ``None``.

    The other keyword arguments are passed to :class:`PrestoRequest`.

    An executor is not thread-safe, except for :meth:`cancel` and the
    ``cancel_event`` given to :meth:`poll_until_complete`, which can be
    used from another thread while polling.
    """

    def __init__(
        self,
        endpoint: str,
        catalog: Optional[str] = constants.DEFAULT_CATALOG,
        poll_interval: float = constants.DEFAULT_POLL_INTERVAL,
        cancel_on_abort: bool = True,
        request: Optional[PrestoRequest] = None,
        **kwargs: Any,
    ) -> None:
        self._request = request if request is not None else PrestoRequest(endpoint, catalog, **kwargs)
        self._poll_interval = poll_interval
        self._cancel_on_abort = cancel_on_abort
        self._session = self._new_session()
        self._last_page: Optional[ResultPage] = None

    def _new_session(self) -> Session:
        return Session(endpoint=self._request.endpoint, catalog=self._request.catalog)

    @property
    def session(self) -> Session:
        return self._session

    @property
    def query_id(self) -> Optional[str]:
        return self._session.query_id

    @property
    def state(self) -> QueryState:
        return self._session.state

    @property
    def columns(self) -> List[str]:
        return list(self._session.columns)

    @property
    def stats(self) -> Dict[str, Any]:
        return self._session.stats

    @property
    def warnings(self) -> List[Any]:
        return list(self._session.warnings)

    @property
    def error(self) -> Optional[Dict[str, Any]]:
        return self._session.error

    @property
    def info_uri(self) -> Optional[str]:
        return self._session.info_uri

    @property
    def partial_cancel_uri(self) -> Optional[str]:
        return self._session.partial_cancel_uri

    @property
    def is_running(self) -> bool:
        return self._session.state.is_active

    def reset(self) -> None:
        """Forget the current query

        Nothing is sent to the coordinator: call :meth:`cancel` first to
        stop a query that may still be running. Needed to submit a new
        query after the polling stopped on a non terminal state.
        """
        self._session = self._new_session()
        self._last_page = None

    def submit(self, query: str) -> bool:
        """Send the SQL statement to the coordinator

        This is the first HTTP request of a query. It starts a fresh result
        and sets the query id. Call :meth:`poll_until_complete` to follow
        the query until it completes.
        """
        if self.is_running:
            raise exceptions.AlreadyRunningError(
                "query {} is still running".format(self._session.query_id)
            )

        self.reset()

        try:
            response = self._request.post(query)
        except requests.exceptions.RequestException as e:
            raise exceptions.PrestoConnectionError("failed to execute: {}".format(e))
        page = self._request.process(response)

        self._session = replace(apply_result_page(self._session, page), state=QueryState.RUNNING)
        self._last_page = page
        logger.info("query submitted: %s", self._session.query_id)
        return True

    def step(self) -> Session:
        """Fetch ``nextUri`` once and apply the page it returns"""
        next_uri = self._session.next_uri
        if next_uri is None:
            return self._session

        try:
            response = self._request.get(next_uri)
        except requests.exceptions.RequestException as e:
            raise exceptions.PrestoConnectionError("failed to fetch: {}".format(e))
        page = self._request.process(response)
        self._last_page = page
        self._session = apply_result_page(self._session, page)
        logger.debug("%r", self._session)
        return self._session

    def steps(self) -> Iterator[Session]:
        """
        Follow the query one page at a time.

        The first session yielded reflects the last page received, the
        following ones each reflect one more GET on ``nextUri``. Nothing
        waits between two pages: the caller decides how long to wait
        before resuming the iteration. Once ``nextUri`` is exhausted, the
        iteration ends, or raises :class:`QueryFailedError` or
        :class:`IncoherentStateError` if the query did not finish.
        """
        if self._last_page is not None:
            # rows of the last page are already in the buffer
            self._session = apply_result_page(self._session, self._last_page.without_data())
        yield self._session

        while self._session.next_uri is not None:
            yield self.step()

        self._check_final_state()

    def poll_until_complete(
        self,
        timeout: Optional[float] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> bool:
        """Wait until the coordinator reports the end of the query

        Blocks the calling thread, waiting ``poll_interval`` seconds before
        each GET on ``nextUri``. Setting ``cancel_event`` from another
        thread or exceeding ``timeout`` seconds stops the polling.
        """
        if cancel_event is None:
            cancel_event = threading.Event()
        deadline = time.monotonic() + timeout if timeout is not None else None

        with contextlib.closing(self.steps()) as steps:
            for session in steps:
                if session.next_uri is not None:
                    self._wait(cancel_event, deadline)
        return True

    def _wait(self, cancel_event: threading.Event, deadline: Optional[float]) -> None:
        delay = self._poll_interval
        if deadline is not None:
            delay = min(delay, max(deadline - time.monotonic(), 0.0))
        if cancel_event.wait(delay):
            self._abort(exceptions.QueryCancelledError, "query cancelled")
        if deadline is not None and time.monotonic() >= deadline:
            self._abort(exceptions.QueryTimeoutError, "query timed out")

    def _abort(self, error: Type[exceptions.QueryCancelledError], message: str) -> None:
        query_id = self._session.query_id
        logger.info("%s: %s", message, query_id)
        if self._cancel_on_abort and query_id is not None:
            self.cancel(query_id)
        raise error("{}: {}".format(message, query_id), query_id)

    def _check_final_state(self) -> None:
        state = self._session.state
        if state is QueryState.FAILED:
            raise exceptions.QueryFailedError(self._session.error or {}, self._session.query_id)
        if state is not QueryState.FINISHED:
            raise exceptions.IncoherentStateError(state, self._session.query_id)
        logger.info("query finished: %s (%d rows)", self._session.query_id, len(self._session.rows))

    def get_result(self) -> Optional[List[Dict[Any, Any]]]:
        """Return the rows of the query if it is FINISHED, ``None`` otherwise"""
        if self._session.state is not QueryState.FINISHED:
            return None
        return list(self._session.rows)

    def get_info(self) -> Optional[str]:
        """
        Return the raw document served at ``infoUri``.

        The coordinator keeps this information for about 15 minutes after
        the end of the query.
        """
        if self._session.info_uri is None:
            return None
        try:
            response = self._request.get(self._session.info_uri)
        except requests.exceptions.RequestException as e:
            raise exceptions.PrestoConnectionError("failed to get query info: {}".format(e))
        return response.text

    def cancel(self, query_id: Optional[str] = None) -> bool:
        """Cancel a query, the current one by default

        Returns ``True`` only if the coordinator answered 204 No Content.
        The state of the session is left untouched, the next page fetched
        reports the effect of the cancellation.
        """
        if query_id is None:
            query_id = self._session.query_id
        if query_id is None:
            return False

        logger.debug("cancelling query: %s", query_id)
        try:
            response = self._request.delete(self._request.query_url(query_id))
        except requests.exceptions.RequestException as e:
            logger.warning("failed to cancel query %s: %s", query_id, e)
            return False
        if response.status_code == requests.codes.no_content:
            logger.debug("query cancelled: %s", query_id)
            return True

        logger.warning("failed to cancel query %s: HTTP %s", query_id, response.status_code)
        return False
