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
import logging

import prestoclient.logging
from prestoclient import client


def test_root_logger_level():
    assert logging.getLogger("prestoclient").level == prestoclient.logging.LEVEL


def test_module_loggers_are_not_levelled():
    assert client.logger.name == "prestoclient.client"
    assert client.logger.level == logging.NOTSET
    assert client.logger.getEffectiveLevel() == prestoclient.logging.LEVEL


def test_get_logger_with_level(caplog):
    logger = prestoclient.logging.get_logger("prestoclient.test_logging", log_level=logging.DEBUG)
    with caplog.at_level(logging.DEBUG, logger="prestoclient.test_logging"):
        logger.debug("hello")
        logger.info("there")

    assert [record.levelno for record in caplog.records] == [logging.DEBUG, logging.INFO]
    assert [record.message for record in caplog.records] == ["hello", "there"]


def test_cancel_failure_is_logged(caplog, mock_http_session, http_response):
    _, _, delete = mock_http_session
    delete.return_value = http_response(404)

    executor = client.QueryExecutor("http://coordinator:8080", catalog="hive")
    with caplog.at_level(logging.WARNING, logger="prestoclient"):
        assert executor.cancel("fake_ID") is False

    assert "failed to cancel query fake_ID: HTTP 404" in caplog.text
