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

from typing import Optional

DEFAULT_SOURCE = "presto-query-client"
DEFAULT_USER = "presto"
DEFAULT_SCHEMA = "default"
DEFAULT_CATALOG: Optional[str] = None
DEFAULT_REQUEST_TIMEOUT: float = 30.0
# seconds between two polls of ``nextUri``
DEFAULT_POLL_INTERVAL: float = 0.5

URL_STATEMENT_PATH = "/v1/statement"
URL_QUERY_PATH = "/v1/query/{query_id}"

HEADER_CATALOG = "X-Presto-Catalog"
HEADER_SCHEMA = "X-Presto-Schema"
HEADER_USER = "X-Presto-User"
HEADER_USER_AGENT = "User-Agent"
