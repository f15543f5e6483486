# Copyright 2024 Michael Maillet, Damien Davison, Sacha Davison
#
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
Shared fixtures for the unit tests.
"""
import pytest
from runcontainer.MODELS.host_context import HostContext


@pytest.fixture
def make_host(tmp_path):
    """Builds a HostContext for a linux user 'me' working in /home/me/work/proj."""
    def factory(**overrides):
        values = dict(
            platform="linux",
            cwd="/home/me/work/proj",
            home="/home/me",
            username="me",
            temp_dir=str(tmp_path),
            uid=1000,
            gid=1000,
            environ={"FOO": "bar", "HOME": "/home/me", "PATH": "/usr/bin:/bin", "TERM": "xterm"},
            argv=["runcontainer", "--profile", "dev"],
        )
        values.update(overrides)
        return HostContext(**values)
    return factory
