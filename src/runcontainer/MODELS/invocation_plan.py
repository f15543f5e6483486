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
Model of a fully resolved docker invocation.
"""
from typing import Dict, List
from pydantic import BaseModel

RUNTIME_BINARY = "docker"


class InvocationPlan(BaseModel):
    """
    Everything needed to spawn the container.

    args holds the docker arguments from 'run' up to the last option,
    image and command follow them on the command line. environment is
    the overlay applied to the docker process only.
    """
    args: List[str]
    image: str
    command: List[str] = []
    environment: Dict[str, str] = {}
    launch_folder: str = ""

    @property
    def argv(self) -> List[str]:
        """Complete command line, binary included."""
        return [RUNTIME_BINARY, *self.args, self.image, *self.command]

    @property
    def command_line(self) -> str:
        return " ".join(self.argv)
