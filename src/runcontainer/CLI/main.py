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
Command Line Interface for runcontainer.
"""
import logging
import os
import sys

import click

from .. import __version__
from ..errors import RuncontainerError
from ..MANAGERS.prune_orchestrator import PruneOrchestrator
from ..MODELS.host_context import HostContext
from ..PARSERS.config_parser import CONFIG_FILE_NAME, ConfigParser, scaffold_profile_set
from ..RUNNERS.container_launcher import ContainerLauncher

LOGGER = logging.getLogger("runcontainer")
LOG_LEVEL_CHOICES = ("debug", "info", "warning", "error")


def configure_logging(level: str):
    """
    Sends runcontainer logs to stderr at the given level.
    """
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    LOGGER.handlers.clear()
    LOGGER.addHandler(handler)
    LOGGER.setLevel(getattr(logging, level.upper(), logging.WARNING))
    LOGGER.propagate = False


@click.group(invoke_without_command=True)
@click.option('--config', 'config_file', envvar='RUNCONTAINER_CONFIG', default=None,
              help="Config file (default is '$CWD/.runcontainer.json', then '$HOME/.runcontainer.json')")
@click.option('--profile', envvar='RUNCONTAINER_PROFILE', default=None,
              help="Profile to use (default is the file 'default-profile', then 'default')")
@click.option('--log-level', envvar='RUNCONTAINER_LOG_LEVEL', default='warning',
              type=click.Choice(LOG_LEVEL_CHOICES, case_sensitive=False), help='Log verbosity')
@click.version_option(__version__, prog_name='runcontainer')
@click.pass_context
def cli(ctx, config_file, profile, log_level):
    """
    Easily run container with volume and env variables mapped.

    Maps the current path and home directory into the container and
    forwards the host environment variables.
    """
    configure_logging(log_level)
    ctx.ensure_object(dict)
    ctx.obj['config_file'] = config_file
    ctx.obj['profile'] = profile

    if ctx.invoked_subcommand is None:
        try:
            config_path, name, selected = ConfigParser().load_profile(config_file, profile)
            LOGGER.info("Using config file: %s (profile %s)", config_path, name)
            code = ContainerLauncher().execute(selected, HostContext.detect())
        except RuncontainerError as e:
            raise click.ClickException(str(e)) from e
        ctx.exit(code)


@cli.command()
@click.option('--force', is_flag=True, help='Overwrite an existing config file')
def init(force):
    """Create runcontainer config."""
    if os.path.exists(CONFIG_FILE_NAME) and not force:
        raise click.ClickException(f"{CONFIG_FILE_NAME} already exists, use --force to overwrite it")

    try:
        with open(CONFIG_FILE_NAME, 'w') as f:
            f.write(ConfigParser.dump(scaffold_profile_set()))
    except OSError as e:
        raise click.ClickException(f"Unable to write {CONFIG_FILE_NAME}: {e}") from e
    click.echo(f"Created {CONFIG_FILE_NAME}")


@cli.command()
@click.argument('patterns', nargs=-1)
@click.pass_context
def prune(ctx, patterns):
    """
    Remove stale images, dangling images and stopped containers.

    Images matching PATTERNS whose version is older than the image of the
    profile are removed.
    """
    try:
        profile = None
        if patterns:
            _, _, profile = ConfigParser().load_profile(ctx.obj['config_file'], ctx.obj['profile'])
        PruneOrchestrator().prune(profile, patterns)
    except RuncontainerError as e:
        raise click.ClickException(str(e)) from e


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})


if __name__ == '__main__':
    main()
