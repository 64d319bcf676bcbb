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

This module defines the exceptions raised while submitting a statement to
Presto and following it until it reaches a terminal state.
"""
from typing import Any, Dict, Optional


class PrestoError(Exception):
    pass


# client module errors
class HttpError(PrestoError):
    pass


class TransportError(HttpError):
    """The coordinator answered with an unexpected HTTP status code."""

    def __init__(self, status_code: int, content: Optional[bytes] = None) -> None:
        self.status_code = status_code
        self.content = content
        super().__init__(
            "error {}{}".format(status_code, ": {!r}".format(content) if content else "")
        )


class PrestoConnectionError(PrestoError):
    pass


class AlreadyRunningError(PrestoError):
    pass


class QueryCancelledError(PrestoError):
    def __init__(self, message: str, query_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.query_id = query_id


class QueryTimeoutError(QueryCancelledError):
    pass


class IncoherentStateError(PrestoError):
    """
    Presto stopped sending ``nextUri`` while the query was neither
    FINISHED nor FAILED.
    """

    def __init__(self, state: Any, query_id: Optional[str] = None) -> None:
        self.state = state
        self.query_id = query_id
        super().__init__(
            "incoherent state at end of query {}: {}".format(query_id, state)
        )


class PrestoQueryError(PrestoError):
    def __init__(self, error: Dict[str, Any], query_id: Optional[str] = None) -> None:
        self._error = error
        self._query_id = query_id

    @property
    def error_code(self) -> Optional[int]:
        return self._error.get("errorCode", None)

    @property
    def error_name(self) -> Optional[str]:
        return self._error.get("errorName", None)

    @property
    def error_type(self) -> Optional[str]:
        return self._error.get("errorType", None)

    @property
    def failure_info(self) -> Optional[Dict[str, Any]]:
        return self._error.get("failureInfo", None)

    @property
    def message(self) -> str:
        return self._error.get("message", "Presto did not return an error message")

    @property
    def query_id(self) -> Optional[str]:
        return self._query_id

    def __repr__(self) -> str:
        return '{}(name={}, code={}, message="{}", query_id={})'.format(
            self.__class__.__name__,
            self.error_name,
            self.error_code,
            self.message,
            self.query_id,
        )

    def __str__(self) -> str:
        return repr(self)


class QueryFailedError(PrestoQueryError):
    pass
