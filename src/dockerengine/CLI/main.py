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
Command Line Interface for dockerengine.
"""
import logging
import sys

import click
from pydantic import ValidationError

from ..MANAGERS.credential_detector import CredentialHelperDetector
from ..MANAGERS.engine_inspector import EngineInspector
from ..MANAGERS.image_operations import ImageOperations
from ..MODELS.engine_config import EngineConfig
from ..MODELS.intents import BuildIntent, RunIntent
from ..RUNNERS.cancellation import Cancellation
from ..RUNNERS.command_runner import SubprocessRunner
from ..UTILS.platform import platform_string
from ..errors import DockerEngineError


def _parse_pairs(pairs, option):
    """Turns repeated KEY=VALUE options into a dict."""
    result = {}
    for pair in pairs:
        if "=" not in pair:
            raise click.BadParameter(f"expected KEY=VALUE, got {pair!r}", param_hint=option)
        key, value = pair.split("=", 1)
        result[key] = value
    return result


def _parse_ports(pairs):
    result = {}
    for pair in pairs:
        if ":" not in pair:
            raise click.BadParameter(f"expected HOST:CONTAINER, got {pair!r}", param_hint="--publish")
        host, container = pair.split(":", 1)
        result[host] = container
    return result


def _fail(e):
    click.echo(f"Error: {e}", err=True)
    sys.exit(1)


@click.group()
@click.option('--verbose', '-v', is_flag=True, help='Log the docker commands being run')
@click.option('--docker', default='docker', help='Container engine executable')
@click.pass_context
def cli(ctx, verbose, docker):
    """
    Build, push and run container images through the docker CLI.
    """
    logging.basicConfig(level=logging.DEBUG if verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")
    ctx.ensure_object(dict)
    config = ctx.obj.get('config') or EngineConfig.from_environment(executable=docker)
    runner = ctx.obj.get('runner') or SubprocessRunner()
    ctx.obj['config'] = config
    ctx.obj['images'] = ImageOperations(runner, config)
    ctx.obj['inspector'] = EngineInspector(runner, config)
    ctx.obj['detector'] = CredentialHelperDetector(config)


@cli.command()
@click.argument('uri')
@click.option('--tag', '-t', 'tags', multiple=True, required=True, help='Image tag, repeatable')
@click.option('--file', '-f', 'dockerfile', default='Dockerfile', help='Dockerfile path')
@click.option('--context', default=None, help='Build context, defaults to the Dockerfile directory')
@click.option('--target', default=None, help='Build stage')
@click.option('--cache-from', multiple=True, help='Cache source image, repeatable')
@click.option('--platform', default=None, help='Target platform as os/arch')
@click.option('--build-arg', multiple=True, help='KEY=VALUE, repeatable')
@click.option('--label', multiple=True, help='KEY=VALUE, repeatable')
@click.option('--timeout', type=float, default=None, help='Seconds before the build is stopped')
@click.pass_context
def build(ctx, uri, tags, dockerfile, context, target, cache_from, platform, build_arg, label, timeout):
    """Build an image and tag it into URI."""
    try:
        intent = BuildIntent(
            uri=uri,
            tags=list(tags),
            dockerfile=dockerfile,
            context=context,
            target=target,
            cache_from=list(cache_from),
            platform=platform,
            args=_parse_pairs(build_arg, '--build-arg'),
            labels=_parse_pairs(label, '--label'),
        )
    except ValidationError as e:
        raise click.BadParameter(str(e))
    try:
        ctx.obj['images'].build(intent, sys.stdout, cancel=Cancellation(timeout))
    except DockerEngineError as e:
        _fail(e)


@cli.command()
@click.argument('uri')
@click.option('--username', '-u', default='AWS', help='Registry user name')
@click.pass_context
def login(ctx, uri, username):
    """Log in to the registry at URI, reading the password from stdin."""
    password = sys.stdin.read().strip()
    try:
        ctx.obj['images'].login(uri, username, password)
    except DockerEngineError as e:
        _fail(e)
    click.echo("Login succeeded.")


@cli.command()
@click.argument('uri')
@click.argument('tags', nargs=-1, required=True)
@click.option('--timeout', type=float, default=None, help='Seconds before the push is stopped')
@click.pass_context
def push(ctx, uri, tags, timeout):
    """Push URI:TAG for every tag and print the image digest."""
    try:
        digest = ctx.obj['images'].push(uri, sys.stdout, *tags, cancel=Cancellation(timeout))
    except DockerEngineError as e:
        _fail(e)
    click.echo(digest)


@cli.command()
@click.argument('image')
@click.argument('command', nargs=-1)
@click.option('--name', default=None, help='Container name')
@click.option('--network', default=None, help='Container whose network to join')
@click.option('--publish', '-p', multiple=True, help='HOST:CONTAINER, repeatable')
@click.option('--env', '-e', multiple=True, help='KEY=VALUE, repeatable')
@click.option('--secret', multiple=True, help='KEY=VALUE passed as an environment variable, repeatable')
@click.pass_context
def run(ctx, image, command, name, network, publish, env, secret):
    """Run a single container from IMAGE."""
    try:
        intent = RunIntent(
            image_uri=image,
            container_name=name,
            container_ports=_parse_ports(publish),
            command=list(command),
            env_vars=_parse_pairs(env, '--env'),
            secrets=_parse_pairs(secret, '--secret'),
            container_network=network,
        )
    except ValidationError as e:
        raise click.BadParameter(str(e))
    try:
        ctx.obj['images'].run_container(intent)
    except DockerEngineError as e:
        _fail(e)


@cli.command()
@click.argument('name')
@click.pass_context
def ps(ctx, name):
    """Tell whether a container named NAME is running."""
    try:
        running = ctx.obj['images'].is_container_running(name)
    except DockerEngineError as e:
        _fail(e)
    click.echo("running" if running else "not running")


@cli.command()
@click.pass_context
def info(ctx):
    """Check that the docker daemon is up."""
    try:
        ctx.obj['inspector'].check_engine_running()
    except DockerEngineError as e:
        _fail(e)
    click.echo("Docker engine is running.")


@cli.command()
@click.pass_context
def platform(ctx):
    """Print the daemon's platform as os/arch."""
    try:
        os_name, arch = ctx.obj['inspector'].get_platform()
    except DockerEngineError as e:
        _fail(e)
    click.echo(platform_string(os_name, arch))


@cli.command('cred-helper')
@click.argument('uri')
@click.pass_context
def cred_helper(ctx, uri):
    """Tell whether the ECR credential helper handles URI."""
    result = ctx.obj['detector'].detect(uri)
    click.echo(f"{'enabled' if result.enabled else 'disabled'} ({result.reason})")


def main():
    """
    Main entry point for the CLI.
    """
    cli(obj={})

if __name__ == '__main__':
    main()
