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

__title__ = "presto-query-client"
__description__ = "Client for submitting SQL statements to the Presto REST interface"
__url__ = "https://prestodb.io/docs/current/develop/client-protocol.html"
__version__ = "0.1.0"
__author__ = "presto-query-client contributors"
__author_email__ = ""
__license__ = "Apache 2.0"
