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

This module holds the state of a Presto query as seen by the client and
the transition applied to it for each page returned by the coordinator.

A page is one JSON document returned by ``POST /v1/statement`` or by a GET
on ``nextUri``. Every field of a page is optional: ``id``, ``infoUri`` and
``partialCancelUri`` are sticky, ``columns`` is usually only sent once and
``data`` holds rows positionally aligned to ``columns``.

:func:`apply_result_page` never mutates its input, so each transition can
be checked without a coordinator: ::

    >> session = Session(endpoint="http://coordinator:8080", catalog="hive")
    >> session = apply_result_page(session, ResultPage.from_json(response))
"""
from __future__ import annotations

from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace
from enum import Enum
from typing import Any
from typing import Dict
from typing import List
from typing import Optional
from typing import Sequence
from typing import Tuple
from typing import Union

import prestoclient.logging

__all__ = ["QueryState", "ResultPage", "Session", "apply_result_page", "build_row"]

logger = prestoclient.logging.get_logger(__name__)

Row = Dict[Union[str, int], Any]


class QueryState(Enum):
    UNINITIALIZED = "UNINITIALIZED"
    QUEUED = "QUEUED"
    RUNNING = "RUNNING"
    FINISHED = "FINISHED"
    FAILED = "FAILED"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def from_server(cls, state: Any) -> "QueryState":
        """Map the ``stats.state`` string sent by the coordinator."""
        if not isinstance(state, str):
            return cls.UNKNOWN
        return _SERVER_STATES.get(state.upper(), cls.UNKNOWN)

    @property
    def is_active(self) -> bool:
        """A submitted query that has not reached FINISHED or FAILED"""
        return self is not QueryState.UNINITIALIZED and not self.is_terminal

    @property
    def is_terminal(self) -> bool:
        return self in (QueryState.FINISHED, QueryState.FAILED)


_SERVER_STATES = {
    "QUEUED": QueryState.QUEUED,
    "WAITING_FOR_RESOURCES": QueryState.QUEUED,
    "DISPATCHING": QueryState.QUEUED,
    "PLANNING": QueryState.RUNNING,
    "STARTING": QueryState.RUNNING,
    "RUNNING": QueryState.RUNNING,
    "BLOCKED": QueryState.RUNNING,
    "FINISHING": QueryState.RUNNING,
    "FINISHED": QueryState.FINISHED,
    "FAILED": QueryState.FAILED,
}


@dataclass(frozen=True)
class ResultPage:
    id: Optional[str] = None
    next_uri: Optional[str] = None
    info_uri: Optional[str] = None
    partial_cancel_uri: Optional[str] = None
    columns: Optional[List[str]] = None
    data: Optional[List[List[Any]]] = None
    error: Optional[Dict[str, Any]] = None
    stats: Optional[Dict[str, Any]] = None
    warnings: Optional[List[Any]] = None

    @classmethod
    def from_json(cls, response: Optional[Dict[str, Any]]) -> "ResultPage":
        if not response:
            return cls()
        columns = response.get("columns")
        return cls(
            id=response.get("id"),
            next_uri=response.get("nextUri"),
            info_uri=response.get("infoUri"),
            partial_cancel_uri=response.get("partialCancelUri"),
            columns=[column["name"] for column in columns] if columns is not None else None,
            data=response.get("data"),
            error=response.get("error"),
            stats=response.get("stats"),
            warnings=response.get("warnings"),
        )

    def without_data(self) -> "ResultPage":
        return replace(self, data=None)

    def __repr__(self):
        return (
            "ResultPage("
            "id={}, next_uri={}, columns={}, rows=<count={}>, state={}"
            ")".format(
                self.id,
                self.next_uri,
                self.columns,
                len(self.data) if self.data else 0,
                self.stats.get("state") if self.stats else None,
            )
        )


@dataclass(frozen=True)
class Session:
    """
    Lifecycle of one query sent to ``endpoint``.

    ``next_uri`` being ``None`` after a page has been applied means the
    coordinator has nothing more to send. ``state`` is the coarse
    :class:`QueryState`, ``server_state`` the string last reported by the
    coordinator. ``rows`` only ever grows.
    """

    endpoint: str
    catalog: Optional[str] = None
    query_id: Optional[str] = None
    next_uri: Optional[str] = None
    info_uri: Optional[str] = None
    partial_cancel_uri: Optional[str] = None
    state: QueryState = QueryState.UNINITIALIZED
    server_state: Any = None
    error: Optional[Dict[str, Any]] = None
    stats: Dict[str, Any] = field(default_factory=dict)
    warnings: Tuple[Any, ...] = ()
    columns: Tuple[str, ...] = ()
    rows: Tuple[Row, ...] = ()

    def __repr__(self):
        return (
            "Session("
            "query_id={}, state={}, next_uri={}, columns={}, rows=<count={}>"
            ")".format(
                self.query_id,
                self.state.value,
                self.next_uri,
                list(self.columns),
                len(self.rows),
            )
        )


def build_row(columns: Sequence[str], values: Sequence[Any]) -> Row:
    """
    Zip ``values`` against ``columns``.

    A value without a column name, because no ``columns`` was received yet
    or because the value list is longer than the column list, is keyed by
    its position in ``values``, as is the value of a column whose name was
    already used by a previous column. Columns without a value are left out.
    """
    row: Row = {}
    for position, value in enumerate(values):
        key = columns[position] if position < len(columns) else position
        if key in row:
            key = position
        row[key] = value
    return row


def apply_result_page(session: Session, page: ResultPage) -> Session:
    changes: Dict[str, Any] = {"next_uri": page.next_uri}

    if page.id is not None:
        changes["query_id"] = page.id
    if page.info_uri is not None:
        changes["info_uri"] = page.info_uri
    if page.partial_cancel_uri is not None:
        changes["partial_cancel_uri"] = page.partial_cancel_uri
    if page.error is not None:
        changes["error"] = page.error
    if page.warnings:
        changes["warnings"] = tuple(page.warnings)

    columns = session.columns
    if page.columns is not None:
        columns = tuple(page.columns)
        changes["columns"] = columns

    if page.data:
        if not columns:
            logger.debug("query %s: rows received before columns", page.id or session.query_id)
        changes["rows"] = session.rows + tuple(build_row(columns, values) for values in page.data)

    if page.stats is not None:
        changes["stats"] = page.stats
        if "state" in page.stats:
            changes["server_state"] = page.stats["state"]
            changes["state"] = QueryState.from_server(page.stats["state"])

    return replace(session, **changes)
