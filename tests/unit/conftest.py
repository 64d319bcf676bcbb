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

import json
from unittest.mock import MagicMock, patch

import pytest
import requests

QUERY_ID = "20131104_172203_00002_vjcfg"
COORDINATOR = "http://coordinator:8080"


@pytest.fixture(scope="session")
def sample_post_response_data():
    """
    This is the response to the first HTTP request (a POST) from a Presto
    coordinator. Columns are not known yet and no row is returned.
    To get such responses, set logging level to DEBUG with
    ``logging.getLogger("prestoclient").setLevel(logging.DEBUG)``.
    """

    yield {
        "id": QUERY_ID,
        "infoUri": COORDINATOR + "/v1/query/" + QUERY_ID,
        "nextUri": COORDINATOR + "/v1/statement/" + QUERY_ID + "/1",
        "stats": {
            "state": "QUEUED",
            "scheduled": False,
            "nodes": 0,
            "totalSplits": 0,
            "queuedSplits": 0,
            "runningSplits": 0,
            "completedSplits": 0,
            "userTimeMillis": 0,
            "cpuTimeMillis": 0,
            "wallTimeMillis": 0,
            "processedRows": 0,
            "processedBytes": 0,
        },
    }


@pytest.fixture(scope="session")
def sample_get_response_data():
    """
    This is the response to the second HTTP request (a GET on ``nextUri``).
    It carries the columns and a first batch of rows.
    """
    yield {
        "id": QUERY_ID,
        "infoUri": COORDINATOR + "/v1/query/" + QUERY_ID,
        "partialCancelUri": COORDINATOR + "/v1/stage/" + QUERY_ID + ".0",
        "nextUri": COORDINATOR + "/v1/statement/" + QUERY_ID + "/2",
        "columns": [
            {"name": "node_id", "type": "varchar"},
            {"name": "http_uri", "type": "varchar"},
            {"name": "coordinator", "type": "boolean"},
        ],
        "data": [
            ["UUID-0", "http://worker0:8080", False],
            ["UUID-1", "http://worker1:8080", False],
        ],
        "stats": {
            "state": "RUNNING",
            "scheduled": True,
            "nodes": 2,
            "totalSplits": 2,
            "queuedSplits": 0,
            "runningSplits": 1,
            "completedSplits": 1,
            "processedRows": 2,
            "processedBytes": 880,
        },
    }


@pytest.fixture(scope="session")
def sample_get_final_response_data():
    """
    This is the last response of a query: no ``nextUri`` and no columns,
    the remaining rows and the FINISHED state.
    """
    yield {
        "id": QUERY_ID,
        "infoUri": COORDINATOR + "/v1/query/" + QUERY_ID,
        "data": [
            ["UUID-2", "http://coordinator:8080", True],
        ],
        "stats": {
            "state": "FINISHED",
            "scheduled": True,
            "nodes": 2,
            "totalSplits": 2,
            "queuedSplits": 0,
            "runningSplits": 0,
            "completedSplits": 2,
            "processedRows": 3,
            "processedBytes": 1044,
        },
    }


@pytest.fixture(scope="session")
def sample_get_error_response_data():
    yield {
        "id": QUERY_ID,
        "infoUri": COORDINATOR + "/v1/query/" + QUERY_ID,
        "error": {
            "errorCode": 1,
            "errorName": "SYNTAX_ERROR",
            "errorType": "USER_ERROR",
            "errorLocation": {"columnNumber": 15, "lineNumber": 1},
            "failureInfo": {
                "type": "com.facebook.presto.sql.analyzer.SemanticException",
                "message": "line 1:15: Schema must be specified when session schema is not set",
                "stack": [],
                "suppressed": [],
            },
            "message": "line 1:15: Schema must be specified when session schema is not set",
        },
        "stats": {
            "state": "FAILED",
            "scheduled": False,
            "nodes": 0,
            "totalSplits": 0,
            "processedRows": 0,
            "processedBytes": 0,
        },
    }


def make_http_response(status_code=200, body=None):
    http_response = requests.Response()
    http_response.status_code = status_code
    http_response._content = json.dumps(body).encode("utf-8") if body is not None else b""
    return http_response


@pytest.fixture
def http_response():
    return make_http_response


@pytest.fixture
def mock_http_session():
    post = MagicMock()
    get = MagicMock()
    delete = MagicMock()

    with patch("prestoclient.client.PrestoRequest.http") as mock_requests:
        mock_requests.Session.return_value.get = get
        mock_requests.Session.return_value.post = post
        mock_requests.Session.return_value.delete = delete

        yield get, post, delete
