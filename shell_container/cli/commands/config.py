"""Configuration commands for Shell Container."""

import click

from ..helpers import get_manager_config


@click.group()
def config():
    """Inspect manager configuration"""
    pass


@config.command()
@click.pass_context
def show(ctx):
    """Display the effective configuration"""
    manager_config = get_manager_config(ctx)
    click.echo(manager_config.model_dump_json(indent=2))
    click.echo(f"Image tag: {manager_config.image_tag}")
